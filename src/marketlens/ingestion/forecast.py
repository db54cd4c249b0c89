"""Quarterly Forecast Mapper.

Source forecasts carry their price as display text, e.g. ``"$70-75"`` or
``"$82.50"``. The text is parsed into a ``PriceRange`` and a named target
policy picks the numeric target. The default policy takes the lower bound
of a range; it does not average.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any, Callable, Mapping, Optional

from marketlens.errors import MalformedSourceError
from marketlens.models import Direction, ForecastPoint, PriceRange

logger = logging.getLogger(__name__)

# Confidence is not present in source forecasts.
DEFAULT_FORECAST_CONFIDENCE = 70.0

_CURRENCY_RE = re.compile(r"[$€£¥฿]|\b(?:USD|THB|EUR|CNY|US)\b", re.IGNORECASE)
_RANGE_SPLIT_RE = re.compile(r"\s*(?:-|–|—|\bto\b)\s*", re.IGNORECASE)
_NUM_RE = re.compile(r"\d+(?:\.\d+)?")

TargetPolicy = Callable[[PriceRange], float]


def _parse_number(segment: str) -> Optional[float]:
    match = _NUM_RE.fullmatch(segment.strip())
    if match is None:
        return None
    return float(match.group(0))


def parse_price_range(text: Any) -> PriceRange:
    """Parse a display price into a ``PriceRange``.

    Raises ``MalformedSourceError`` when no lower bound can be derived.
    A usable lower bound with a garbled upper bound yields
    ``upper_bound=None``.
    """
    if isinstance(text, bool):
        raise MalformedSourceError(f"Unusable forecast price: {text!r}")
    if isinstance(text, (int, float)):
        return PriceRange(lower_bound=float(text))
    if not isinstance(text, str):
        raise MalformedSourceError(f"Unusable forecast price: {text!r}")

    cleaned = _CURRENCY_RE.sub("", text).replace(",", "").strip()
    segments = _RANGE_SPLIT_RE.split(cleaned, maxsplit=1)
    lower = _parse_number(segments[0])
    if lower is None:
        raise MalformedSourceError(f"Unusable forecast price: {text!r}")
    upper = _parse_number(segments[1]) if len(segments) > 1 else None
    return PriceRange(lower_bound=lower, upper_bound=upper)


def lower_bound(price_range: PriceRange) -> float:
    """Default target policy: the lower bound of the range."""
    return price_range.lower_bound


def _direction_of(raw: Mapping, fallback: Direction) -> Direction:
    value = raw.get("direction")
    if isinstance(value, str):
        try:
            return Direction(value.strip().lower())
        except ValueError:
            pass
    return fallback


def map_forecast(
    raw: Any,
    *,
    direction: Direction = Direction.NEUTRAL,
    confidence: float = DEFAULT_FORECAST_CONFIDENCE,
    target_policy: TargetPolicy = lower_bound,
) -> ForecastPoint:
    """Convert one raw ``{quarter, price_forecast, source}`` record."""
    if not isinstance(raw, Mapping):
        raise MalformedSourceError(f"Forecast entry is not an object: {type(raw).__name__}")
    period = raw.get("quarter")
    if not isinstance(period, str) or not period.strip():
        raise MalformedSourceError("Forecast entry missing quarter")

    price_range = parse_price_range(raw.get("price_forecast"))
    target = float(target_policy(price_range))
    if not math.isfinite(target) or target <= 0:
        raise MalformedSourceError(f"Forecast target for {period} is not a positive price: {target}")

    return ForecastPoint(
        period=period,
        target_price=target,
        confidence=confidence,
        direction=_direction_of(raw, direction),
        source=str(raw.get("source") or ""),
        price_range=price_range,
    )


def _forecast_entries(raw: Any) -> list:
    # Accepts a whole market payload, its "forecasts" block, or the bare list.
    if isinstance(raw, list):
        return raw
    if not isinstance(raw, Mapping):
        return []
    block = raw.get("forecasts", raw)
    if isinstance(block, list):
        return block
    if isinstance(block, Mapping) and isinstance(block.get("forecasts"), list):
        return block["forecasts"]
    return []


def map_forecasts(
    raw: Any,
    *,
    direction: Direction = Direction.NEUTRAL,
    confidence: float = DEFAULT_FORECAST_CONFIDENCE,
    target_policy: TargetPolicy = lower_bound,
) -> list[ForecastPoint]:
    """Map every forecast row in source order, skipping malformed rows."""
    points: list[ForecastPoint] = []
    for entry in _forecast_entries(raw):
        try:
            points.append(
                map_forecast(
                    entry,
                    direction=direction,
                    confidence=confidence,
                    target_policy=target_policy,
                )
            )
        except MalformedSourceError as exc:
            logger.warning(f"Skipping forecast row: {exc}")
    return points
