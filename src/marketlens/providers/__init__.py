from __future__ import annotations

from marketlens.config import ProjectConfig
from marketlens.markets import build_market_table
from marketlens.providers.base import MarketDataProvider
from marketlens.providers.http_provider import HttpMarketDataProvider
from marketlens.providers.static_provider import StaticMarketDataProvider
from marketlens.providers.tiered import FetchResult, TieredMarketSource


def build_market_source(cfg: ProjectConfig) -> TieredMarketSource:
    primary = None
    if cfg.source.url:
        primary = HttpMarketDataProvider(
            url=cfg.source.url,
            max_retries=cfg.source.max_retries,
            timeout_sec=cfg.source.timeout_sec,
            verify_ssl=cfg.source.verify_ssl,
        )
    secondary = StaticMarketDataProvider(path=cfg.fallback.path) if cfg.fallback.enabled else None
    if primary is None and secondary is None:
        raise ValueError("Configure source.url or enable the fallback provider")

    return TieredMarketSource(primary, secondary, markets=build_market_table(cfg.extra_markets()))


__all__ = [
    "MarketDataProvider",
    "HttpMarketDataProvider",
    "StaticMarketDataProvider",
    "FetchResult",
    "TieredMarketSource",
    "build_market_source",
]
