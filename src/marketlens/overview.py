"""Impact-Overview Converter."""

from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from marketlens.ingestion.forecast import DEFAULT_FORECAST_CONFIDENCE, map_forecasts
from marketlens.ingestion.regional import regional_analyses
from marketlens.models import ForecastPoint, ImpactOverview, Instrument, Region, RegionalAnalysis


def to_impact_overview(
    instrument: Instrument,
    regional: Mapping[Region, Optional[RegionalAnalysis]],
    forecasts: Sequence[ForecastPoint],
) -> ImpactOverview:
    """Assemble an ``ImpactOverview`` from already-computed parts.

    Every region key is present in the result (None when absent) and the
    forecast order is kept as given.
    """
    return ImpactOverview(
        symbol=instrument.symbol,
        name=instrument.name,
        market_name=instrument.market_name,
        currency=instrument.currency,
        current_price=instrument.price,
        regional={region: regional.get(region) for region in Region},
        forecasts=tuple(forecasts),
    )


def build_impact_overview(
    market_raw: Any,
    instrument: Instrument,
    *,
    confidence: float = DEFAULT_FORECAST_CONFIDENCE,
    news_per_region: int = 3,
) -> ImpactOverview:
    """Aggregate regions and forecasts of one raw market into an overview."""
    return to_impact_overview(
        instrument,
        regional_analyses(market_raw, news_limit=news_per_region),
        map_forecasts(market_raw, confidence=confidence),
    )
