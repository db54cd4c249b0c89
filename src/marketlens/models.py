"""Canonical model types shared by every display surface.

All records are immutable; a refresh produces new instances. ``to_dict``
returns plain JSON-serializable data.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional


class Region(str, Enum):
    """Analysis scope. ``THAILAND`` is the local region."""
    GLOBAL = "global"
    ASIA = "asia"
    THAILAND = "thailand"

    @classmethod
    def parse(cls, value: Any) -> Optional["Region"]:
        if isinstance(value, Region):
            return value
        if not isinstance(value, str):
            return None
        tag = value.strip().lower()
        if tag == "local":
            return cls.THAILAND
        try:
            return cls(tag)
        except ValueError:
            return None


class Direction(str, Enum):
    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class Severity(str, Enum):
    """Scenario severity tier, ordered low < medium < high < extreme."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    EXTREME = "extreme"

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER.index(self)

    def __lt__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank >= other.rank


_SEVERITY_ORDER = [Severity.LOW, Severity.MEDIUM, Severity.HIGH, Severity.EXTREME]


def _plain(value: Any) -> Any:
    if isinstance(value, _Record):
        return value.to_dict()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {_plain(k): _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


class _Record:
    """Mixin giving dataclass records a JSON-ready ``to_dict``."""

    def to_dict(self) -> dict:
        return {
            f.name: _plain(getattr(self, f.name))
            for f in dataclasses.fields(self)  # type: ignore[arg-type]
        }


@dataclass(frozen=True)
class Instrument(_Record):
    """One tracked commodity or currency pair at a point in time."""
    symbol: str
    name: str
    category: str
    currency: str
    price: float
    change: float
    change_percent: float
    last_update: Optional[datetime]
    market_name: str = ""
    source_key: str = ""
    # None means the source did not report volume, not zero traded.
    volume: Optional[float] = None

    @property
    def reference_price(self) -> float:
        return self.price - self.change


def implied_change_percent(price: float, change: float) -> Optional[float]:
    """Percent change implied by price and absolute change.

    Returns None when the reference price (price - change) is zero.
    """
    reference = price - change
    if reference == 0:
        return None
    return change / reference * 100.0


@dataclass(frozen=True)
class KeySignal(_Record):
    title: str
    value: str


@dataclass(frozen=True)
class RegionalNews(_Record):
    """Short news entry attached to a regional analysis."""
    news_id: str
    title: str
    score: float
    reason: str = ""
    link: str = ""
    published_at: Optional[datetime] = None


@dataclass(frozen=True)
class RegionalAnalysis(_Record):
    region: Region
    daily_summary: str
    recommended_action: str
    competitor_strategy: str
    key_signals: tuple[KeySignal, ...] = ()
    news: tuple[RegionalNews, ...] = ()


@dataclass(frozen=True)
class PriceRange(_Record):
    """Parsed form of a display price such as ``"$70-75"``."""
    lower_bound: float
    upper_bound: Optional[float] = None

    @property
    def is_range(self) -> bool:
        return self.upper_bound is not None


@dataclass(frozen=True)
class ForecastPoint(_Record):
    period: str
    target_price: float
    confidence: float
    direction: Direction
    source: str
    price_range: Optional[PriceRange] = None


@dataclass(frozen=True)
class ImpactOverview(_Record):
    """Cross-region, cross-period quick-look summary for one instrument."""
    symbol: str
    name: str
    market_name: str
    currency: str
    current_price: float
    regional: Mapping[Region, Optional[RegionalAnalysis]]
    forecasts: tuple[ForecastPoint, ...] = ()

    def region(self, region: Region) -> Optional[RegionalAnalysis]:
        return self.regional.get(region)


@dataclass(frozen=True)
class NewsScore(_Record):
    region: Region
    score: float
    reason: str = ""


@dataclass(frozen=True)
class NewsItem(_Record):
    news_id: str
    title: str
    summary: str = ""
    link: str = ""
    image_url: str = ""
    published_at: Optional[datetime] = None
    scores: tuple[NewsScore, ...] = ()

    def score_for(self, region: Region) -> float:
        """Impact score for a region; unscored regions count as 0."""
        for s in self.scores:
            if s.region == region:
                return s.score
        return 0.0


@dataclass(frozen=True)
class StressScenario(_Record):
    id: str
    name: str
    severity: Severity
    factors: Mapping[str, float] = field(default_factory=dict)
    description: str = ""

    def factor_for(self, symbol: str) -> float:
        """Multiplicative shock for ``symbol``; uncovered symbols get 1.0."""
        return self.factors.get(symbol, 1.0)


@dataclass(frozen=True)
class CostImpact(_Record):
    symbol: str
    current_price: float
    stressed_price: float
    impact_percent: float
    cost_delta: float
    volume: float = 0.0
