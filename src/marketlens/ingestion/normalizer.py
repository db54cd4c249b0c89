"""Market Data Normalizer.

Maps the raw all-markets bundle (source key -> heterogeneous payload) onto
canonical ``Instrument`` records using the declarative market table.
"""

from __future__ import annotations

import json
import logging
import math
from datetime import datetime
from typing import Any, Mapping, Optional

from marketlens.errors import MalformedSourceError, UnreadableBundleError
from marketlens.markets import DEFAULT_MARKETS, MarketDef
from marketlens.models import Instrument, implied_change_percent
from marketlens.utils.dates import parse_timestamp

logger = logging.getLogger(__name__)

# Absolute tolerance, in percentage points, between source and implied % change.
CHANGE_PERCENT_TOLERANCE = 1e-2

POPUP_NUMERIC_FIELDS = ("currentPrice", "priceChange", "priceChangePercent")


def _decode(bundle: Any) -> Mapping:
    if isinstance(bundle, (bytes, bytearray)):
        try:
            bundle = bundle.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise UnreadableBundleError(f"Bundle is not UTF-8 text: {exc}") from exc
    if isinstance(bundle, str):
        try:
            bundle = json.loads(bundle)
        except json.JSONDecodeError as exc:
            raise UnreadableBundleError(f"Bundle is not valid JSON: {exc}") from exc
    if not isinstance(bundle, Mapping):
        raise UnreadableBundleError(f"Bundle must be an object, got {type(bundle).__name__}")

    return bundle


def _unwrap(bundle: Mapping) -> tuple[dict[str, Any], Any]:
    # The feed wrapper carries a bundle-level generatedAt next to "data".
    data = bundle.get("data")
    if isinstance(data, Mapping):
        return dict(data), bundle.get("generatedAt")
    return dict(bundle), None


def read_bundle(bundle: Any) -> dict[str, Any]:
    """Return the source-key -> payload mapping of a raw bundle.

    Accepts a mapping, JSON text/bytes, or the ``{"generatedAt", "data"}``
    wrapper of the all-markets feed. Raises ``UnreadableBundleError`` for
    anything that is not structured data.
    """
    return _unwrap(_decode(bundle))[0]


def bundle_generated_at(bundle: Any) -> Optional[datetime]:
    """Bundle-level timestamp of the feed wrapper, if any."""
    return parse_timestamp(_unwrap(_decode(bundle))[1])


def _number(popup: Mapping, name: str) -> float:
    value = popup.get(name)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedSourceError(f"popup.{name} is not numeric: {value!r}")
    value = float(value)
    if not math.isfinite(value):
        raise MalformedSourceError(f"popup.{name} is not finite")
    return value


def build_instrument(
    source_key: str,
    market: MarketDef,
    raw: Any,
    default_timestamp: Optional[datetime] = None,
) -> Instrument:
    """Build one ``Instrument``; raises ``MalformedSourceError`` on a bad popup.

    ``default_timestamp`` is used when the payload has no ``generatedAt``.
    """
    if not isinstance(raw, Mapping):
        raise MalformedSourceError(f"{source_key}: payload is not an object")
    popup = raw.get("popup")
    if not isinstance(popup, Mapping):
        raise MalformedSourceError(f"{source_key}: missing popup block")

    price, change, change_pct = (_number(popup, f) for f in POPUP_NUMERIC_FIELDS)
    if price <= 0:
        raise MalformedSourceError(f"{source_key}: non-positive currentPrice {price}")

    implied = implied_change_percent(price, change)
    if implied is not None and abs(implied - change_pct) > CHANGE_PERCENT_TOLERANCE:
        logger.warning(
            f"{source_key}: priceChangePercent {change_pct:.4f} disagrees with "
            f"implied {implied:.4f}; keeping source value"
        )

    market_name = raw.get("marketNameLocalized") or raw.get("marketNameTh") or market.name
    return Instrument(
        symbol=market.symbol,
        name=market.name,
        category=market.category,
        currency=market.currency,
        price=price,
        change=change,
        change_percent=change_pct,
        last_update=parse_timestamp(raw.get("generatedAt")) or default_timestamp,
        market_name=str(market_name),
        source_key=source_key,
    )


def normalize(
    bundle: Any, markets: Mapping[str, MarketDef] = DEFAULT_MARKETS
) -> list[Instrument]:
    """Normalize a raw bundle into instruments, in market-table order.

    Unknown source keys are ignored; a malformed payload skips only that
    instrument. Payloads without their own ``generatedAt`` take the
    bundle-level one.
    """
    data, generated_at = _unwrap(_decode(bundle))
    default_timestamp = parse_timestamp(generated_at)

    instruments: list[Instrument] = []
    for source_key, market in markets.items():
        if source_key not in data:
            continue
        try:
            instruments.append(
                build_instrument(source_key, market, data[source_key], default_timestamp)
            )
        except MalformedSourceError as exc:
            logger.warning(f"Skipping instrument: {exc}")

    unknown = [k for k in data if k not in markets]
    if unknown:
        logger.debug(f"Ignoring unknown source keys: {unknown}")
    logger.info(f"Normalized {len(instruments)} instrument(s) from {len(data)} source key(s)")
    return instruments


def market_breadth(instruments: list[Instrument]) -> dict[str, int]:
    """Counts of total, gainers, losers and unchanged instruments."""
    return {
        "total": len(instruments),
        "gainers": sum(1 for i in instruments if i.change > 0),
        "losers": sum(1 for i in instruments if i.change < 0),
        "unchanged": sum(1 for i in instruments if i.change == 0),
    }
