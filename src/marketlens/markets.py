"""Declarative table of known source markets.

Adding a market is a data change: one ``MarketDef`` entry keyed by the
source identifier used in the raw bundle.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Optional


@dataclass(frozen=True)
class MarketDef:
    symbol: str
    name: str
    category: str
    currency: str
    aliases: tuple[str, ...] = ()


DEFAULT_MARKETS: dict[str, MarketDef] = {
    "crude_oil": MarketDef(
        symbol="WTI",
        name="Crude Oil",
        category="energy",
        currency="USD",
        aliases=("CO", "CL1", "CL=F"),
    ),
    "sugar": MarketDef(
        symbol="SUGAR",
        name="Sugar",
        category="agriculture",
        currency="USD",
        aliases=("SB=F",),
    ),
    "usd_thb": MarketDef(
        symbol="USDTHB",
        name="USD/THB",
        category="currency",
        currency="THB",
        aliases=("THB=X",),
    ),
}


def build_market_table(
    extra: Optional[Mapping[str, MarketDef]] = None,
    base: Mapping[str, MarketDef] = DEFAULT_MARKETS,
) -> dict[str, MarketDef]:
    """Return ``base`` extended (or overridden) by ``extra``, keeping order."""
    table = dict(base)
    if extra:
        table.update(extra)
    symbols = [m.symbol for m in table.values()]
    dupes = sorted({s for s in symbols if symbols.count(s) > 1})
    if dupes:
        raise ValueError(f"Duplicate market symbols in table: {dupes}")
    return table


def resolve_market_key(
    symbol: str, markets: Mapping[str, MarketDef] = DEFAULT_MARKETS
) -> Optional[str]:
    """Map a symbol, alias or source key to its source key.

    Matching is case-insensitive. Unknown values return None.
    """
    if not symbol:
        return None
    wanted = symbol.strip().upper()
    for key, market in markets.items():
        candidates: Iterable[str] = (key, market.symbol, *market.aliases)
        if any(c.upper() == wanted for c in candidates):
            return key
    return None
