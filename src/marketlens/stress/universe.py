"""Instruments priced by the stress engine.

The live feed only carries some of the symbols the scenarios shock, so the
universe is a static reference table with live prices overlaid.
"""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Iterable, Optional, Sequence

import yaml

from marketlens.models import Instrument

logger = logging.getLogger(__name__)

DEFAULT_REFERENCE_PATH = Path(__file__).resolve().parent.parent / "data" / "reference_prices.yaml"


def load_reference_prices(path: Optional[Path | str] = None) -> list[Instrument]:
    """Load the reference price table from YAML.

    Expected YAML structure:
      instruments:
        - symbol: "COPPER"
          name: "Copper"
          category: "metals"
          currency: "USD"
          price: 8450.0
    """
    path = Path(path) if path is not None else DEFAULT_REFERENCE_PATH
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    instruments = []
    seen: set[str] = set()
    for row in data.get("instruments", []):
        symbol = str(row["symbol"])
        if symbol in seen:
            raise ValueError(f"Duplicate reference symbol: {symbol!r}")
        seen.add(symbol)
        price = float(row["price"])
        if not math.isfinite(price) or price <= 0:
            raise ValueError(f"Reference price for {symbol} must be positive, got {row['price']!r}")
        instruments.append(
            Instrument(
                symbol=symbol,
                name=row.get("name", symbol),
                category=row.get("category", ""),
                currency=row.get("currency", ""),
                price=price,
                change=0.0,
                change_percent=0.0,
                last_update=None,
            )
        )
    return instruments


def stress_universe(
    live: Iterable[Instrument], reference: Sequence[Instrument] = ()
) -> list[Instrument]:
    """Reference order with live instruments substituted by symbol.

    Live instruments missing from the reference table are appended in
    their own order.
    """
    live_by_symbol = {}
    for instrument in live:
        live_by_symbol.setdefault(instrument.symbol, instrument)

    fallback = [r.symbol for r in reference if r.symbol not in live_by_symbol]
    if fallback:
        logger.debug(f"Using reference prices for {fallback}")

    universe = [live_by_symbol.pop(r.symbol, r) for r in reference]
    universe.extend(live_by_symbol.values())
    return universe
