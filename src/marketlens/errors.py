"""Error taxonomy for market data handling.

Only ``UpstreamUnavailableError`` is meant to reach callers of the public
API. Malformed entries are recovered locally (skipped and logged), and
unknown references resolve to ``None`` or a documented default.
"""

from __future__ import annotations


class MarketDataError(Exception):
    """Base class for marketlens errors."""


class MalformedSourceError(MarketDataError):
    """A source entry is present but missing or mangling required fields."""


class UnreadableBundleError(MarketDataError):
    """The raw bundle as a whole is not structured data."""


class UpstreamUnavailableError(MarketDataError):
    """No data source could be fetched."""
