from __future__ import annotations

from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from marketlens.markets import MarketDef


class SourceConfig(BaseModel):
    # Primary provider: the all-markets JSON feed.
    url: Optional[str] = None
    timeout_sec: float = 15.0
    max_retries: int = 3
    verify_ssl: bool = True


class FallbackConfig(BaseModel):
    enabled: bool = True
    # None means the sample bundle shipped with the package.
    path: Optional[str] = None


class PollingConfig(BaseModel):
    # Fixed interval between full re-fetches; no backoff.
    interval_sec: float = 60.0

    @field_validator("interval_sec")
    @classmethod
    def _positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("interval_sec must be positive")
        return v


class ForecastConfig(BaseModel):
    default_confidence: float = Field(default=70.0, ge=0.0, le=100.0)
    news_per_region: int = Field(default=3, ge=0)


class ScenarioTableConfig(BaseModel):
    # None means the scenario table shipped with the package.
    path: Optional[str] = None
    # None means the reference price table shipped with the package.
    reference_prices_path: Optional[str] = None


class MarketEntry(BaseModel):
    symbol: str
    name: str
    category: str
    currency: str
    aliases: list[str] = Field(default_factory=list)

    def to_market_def(self) -> MarketDef:
        return MarketDef(
            symbol=self.symbol,
            name=self.name,
            category=self.category,
            currency=self.currency,
            aliases=tuple(self.aliases),
        )


class ProjectConfig(BaseModel):
    source: SourceConfig = SourceConfig()
    fallback: FallbackConfig = FallbackConfig()
    polling: PollingConfig = PollingConfig()
    forecast: ForecastConfig = ForecastConfig()
    scenarios: ScenarioTableConfig = ScenarioTableConfig()
    # Extra source-key -> market entries appended to the built-in table.
    markets: dict[str, MarketEntry] = Field(default_factory=dict)

    def extra_markets(self) -> dict[str, MarketDef]:
        return {key: entry.to_market_def() for key, entry in self.markets.items()}


def load_config(path: str | Path | None = None) -> ProjectConfig:
    if path is None:
        return ProjectConfig()
    path = Path(path)
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    return ProjectConfig.model_validate(data)
