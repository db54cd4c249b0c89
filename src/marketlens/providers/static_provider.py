from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

from marketlens.errors import UpstreamUnavailableError
from marketlens.providers.base import MarketDataProvider

logger = logging.getLogger(__name__)

SAMPLE_BUNDLE_PATH = Path(__file__).resolve().parent.parent / "data" / "sample_markets.json"


@dataclass
class StaticMarketDataProvider(MarketDataProvider):
    """Secondary provider backed by a JSON file (the packaged sample by default)."""

    path: Optional[str] = None
    name: str = "static"

    @property
    def resolved_path(self) -> Path:
        return Path(self.path) if self.path else SAMPLE_BUNDLE_PATH

    def fetch_bundle(self) -> Mapping[str, Any]:
        path = self.resolved_path
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise UpstreamUnavailableError(f"Cannot read static bundle {path}: {exc}") from exc
        if not isinstance(payload, Mapping):
            raise UpstreamUnavailableError(f"Static bundle {path} is not a JSON object")
        logger.debug(f"Loaded static market bundle from {path}")
        return payload
