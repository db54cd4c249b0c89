"""Two-tier data source: try the primary provider, then the secondary.

The selection policy is explicit: a tier is used when it returns a readable
bundle that normalizes to at least one instrument. Only when every tier
fails is ``UpstreamUnavailableError`` raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from marketlens.errors import UnreadableBundleError, UpstreamUnavailableError
from marketlens.ingestion.normalizer import normalize, read_bundle
from marketlens.markets import DEFAULT_MARKETS, MarketDef
from marketlens.models import Instrument
from marketlens.providers.base import MarketDataProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchResult:
    data: Mapping[str, Any]  # source key -> raw market payload
    instruments: tuple[Instrument, ...]
    provider_name: str
    used_fallback: bool


class TieredMarketSource:
    def __init__(
        self,
        primary: Optional[MarketDataProvider],
        secondary: Optional[MarketDataProvider] = None,
        markets: Mapping[str, MarketDef] = DEFAULT_MARKETS,
    ):
        if primary is None and secondary is None:
            raise ValueError("At least one provider is required")
        self.primary = primary
        self.secondary = secondary
        self.markets = markets

    def _try(self, provider: MarketDataProvider) -> Optional[FetchResult]:
        try:
            bundle = provider.fetch_bundle()
            data = read_bundle(bundle)
        except (UpstreamUnavailableError, UnreadableBundleError) as exc:
            logger.warning(f"Provider {provider.name!r} unavailable: {exc}")
            return None
        instruments = normalize(bundle, self.markets)
        if not instruments:
            logger.warning(f"Provider {provider.name!r} returned no known markets")
            return None
        return FetchResult(
            data=data,
            instruments=tuple(instruments),
            provider_name=provider.name,
            # Only a secondary used after a configured primary counts as fallback.
            used_fallback=self.primary is not None and provider is not self.primary,
        )

    def fetch(self) -> FetchResult:
        for provider in (self.primary, self.secondary):
            if provider is None:
                continue
            result = self._try(provider)
            if result is not None:
                if result.used_fallback:
                    logger.info(f"Using fallback provider {provider.name!r}")
                return result
        raise UpstreamUnavailableError("No market data provider could supply data")
