from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

import pandas as pd


def parse_timestamp(value: Any) -> Optional[datetime]:
    # Accepts ISO-8601 strings (with or without offset); returns UTC-aware datetime.
    # Naive inputs are taken as UTC. None for anything unparsable.
    if value is None or value == "":
        return None
    try:
        ts = pd.Timestamp(value)
    except (TypeError, ValueError):
        return None
    if pd.isna(ts):
        return None
    ts = ts.tz_localize("UTC") if ts.tzinfo is None else ts.tz_convert("UTC")
    return ts.to_pydatetime()
