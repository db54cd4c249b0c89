"""Raw feed ingestion.

This module handles:
- Normalizing the all-markets bundle into canonical instruments
- Looking up regional (global / asia / thailand) analyses
- Mapping display-string quarterly forecasts to numeric points
- Parsing scored news items
- Validating bundle completeness
"""

from .normalizer import normalize, read_bundle, bundle_generated_at, market_breadth  # noqa
from .regional import regional_analysis_for, regional_analyses  # noqa
from .forecast import (  # noqa
    DEFAULT_FORECAST_CONFIDENCE,
    lower_bound,
    map_forecast,
    map_forecasts,
    parse_price_range,
)
from .news import parse_news  # noqa
from .validation import validate_bundle, SourceValidationResult  # noqa

__all__ = [
    "normalize",
    "read_bundle",
    "bundle_generated_at",
    "market_breadth",
    "regional_analysis_for",
    "regional_analyses",
    "DEFAULT_FORECAST_CONFIDENCE",
    "lower_bound",
    "map_forecast",
    "map_forecasts",
    "parse_price_range",
    "parse_news",
    "validate_bundle",
    "SourceValidationResult",
]
