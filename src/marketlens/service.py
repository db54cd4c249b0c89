"""Read-only query facade over one market snapshot.

Rendering surfaces (cards, tables, search, quick-view, stress tester) call
these methods and receive canonical records.
"""

from __future__ import annotations

import logging
from typing import Literal, Mapping, Optional, Sequence

from marketlens.ingestion.forecast import DEFAULT_FORECAST_CONFIDENCE
from marketlens.ingestion.news import parse_news
from marketlens.ingestion.normalizer import market_breadth
from marketlens.markets import DEFAULT_MARKETS, MarketDef, resolve_market_key
from marketlens.models import ImpactOverview, Instrument, NewsItem, StressScenario
from marketlens.overview import build_impact_overview
from marketlens.stress.state import PlannerState, PlanResult, evaluate_plan
from marketlens.stress.universe import stress_universe
from marketlens.utils.records import ALL_CATEGORIES, latest_first, search, sort_by

logger = logging.getLogger(__name__)


class MarketService:
    def __init__(
        self,
        instruments: Sequence[Instrument],
        data: Mapping,
        scenarios: Sequence[StressScenario] = (),
        markets: Mapping[str, MarketDef] = DEFAULT_MARKETS,
        forecast_confidence: float = DEFAULT_FORECAST_CONFIDENCE,
        news_per_region: int = 3,
        reference: Sequence[Instrument] = (),
    ):
        self._instruments = tuple(instruments)
        self._data = data
        self.scenarios = tuple(scenarios)
        self.markets = markets
        self.forecast_confidence = forecast_confidence
        self.news_per_region = news_per_region
        # Reference-priced instruments for symbols the feed does not carry.
        self.reference = tuple(reference)

    @classmethod
    def from_snapshot(cls, snapshot, scenarios: Sequence[StressScenario] = (), **kwargs) -> "MarketService":
        return cls(snapshot.instruments, snapshot.data, scenarios, **kwargs)

    def instruments(self) -> list[Instrument]:
        return list(self._instruments)

    def breadth(self) -> dict[str, int]:
        return market_breadth(list(self._instruments))

    def table(self, sort_key: str = "name", direction: Literal["asc", "desc"] = "asc") -> list[Instrument]:
        return sort_by(self._instruments, sort_key, direction)

    def search(self, query: str = "", category: Optional[str] = ALL_CATEGORIES) -> list[Instrument]:
        return search(self._instruments, query, category)

    def instrument(self, symbol: str) -> Optional[Instrument]:
        key = resolve_market_key(symbol, self.markets)
        if key is None:
            return None
        return next((i for i in self._instruments if i.source_key == key), None)

    def impact_overview(self, symbol: str) -> Optional[ImpactOverview]:
        """Quick-view overview; None for unknown or unloaded instruments."""
        instrument = self.instrument(symbol)
        if instrument is None:
            logger.debug(f"No instrument loaded for {symbol!r}")
            return None
        return build_impact_overview(
            self._data.get(instrument.source_key),
            instrument,
            confidence=self.forecast_confidence,
            news_per_region=self.news_per_region,
        )

    def news(self, symbol: str) -> list[NewsItem]:
        """News for one instrument, newest first."""
        instrument = self.instrument(symbol)
        if instrument is None:
            return []
        raw = self._data.get(instrument.source_key)
        return latest_first(parse_news(raw)) if isinstance(raw, Mapping) else []

    def stress_universe(self) -> list[Instrument]:
        return stress_universe(self._instruments, self.reference)

    def canonical_symbol(self, symbol: str) -> Optional[str]:
        """Canonical symbol for a symbol, alias or source key; None if unknown."""
        key = resolve_market_key(symbol, self.markets)
        if key is not None:
            return self.markets[key].symbol
        wanted = (symbol or "").strip().upper()
        return next((i.symbol for i in self.stress_universe() if i.symbol.upper() == wanted), None)

    def stress(self, state: PlannerState) -> PlanResult:
        return evaluate_plan(state, self.scenarios, self.stress_universe())
