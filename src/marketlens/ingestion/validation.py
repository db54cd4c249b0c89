"""Data validation and quality checks for raw market bundles."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional

from marketlens.errors import MalformedSourceError
from marketlens.ingestion.forecast import map_forecast
from marketlens.ingestion.normalizer import (
    CHANGE_PERCENT_TOLERANCE,
    build_instrument,
    bundle_generated_at,
    read_bundle,
)
from marketlens.markets import DEFAULT_MARKETS, MarketDef
from marketlens.models import Region, implied_change_percent

logger = logging.getLogger(__name__)


def _nested_list(raw: Mapping, name: str) -> list:
    # "forecasts": {"forecasts": [...]} and "news": {"news": [...]} share this shape.
    block = raw.get(name)
    items = block.get(name) if isinstance(block, Mapping) else None
    return items if isinstance(items, list) else []


@dataclass
class SourceValidationResult:
    """Results of validating one source market payload."""

    source_key: str
    symbol: str = ""
    is_valid: bool = True
    regions_present: list[str] = field(default_factory=list)
    forecast_rows: int = 0
    news_items: int = 0
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    summary: str = ""

    def __str__(self) -> str:
        status = "✓ VALID" if self.is_valid else "✗ INVALID"
        lines = [
            f"{status} | {self.source_key} ({self.symbol or '?'})",
            f"  Regions: {', '.join(self.regions_present) or 'none'}",
            f"  Forecast rows: {self.forecast_rows} | News items: {self.news_items}",
        ]
        if self.warnings:
            lines.append(f"  ⚠ Warnings ({len(self.warnings)}):")
            for w in self.warnings:
                lines.append(f"    - {w}")
        if self.errors:
            lines.append(f"  ✗ Errors ({len(self.errors)}):")
            for e in self.errors:
                lines.append(f"    - {e}")
        return "\n".join(lines)


def validate_market(
    source_key: str,
    market: MarketDef,
    raw: Any,
    default_timestamp: Optional[datetime] = None,
) -> SourceValidationResult:
    """Validate one market payload for completeness.

    Checks:
    - popup block usable (numeric, positive price)
    - priceChangePercent consistent with priceChange
    - generatedAt parseable (or a bundle-level default given)
    - all three regional analyses present
    - forecast rows parse
    """
    result = SourceValidationResult(source_key=source_key, symbol=market.symbol)

    try:
        instrument = build_instrument(source_key, market, raw, default_timestamp)
    except MalformedSourceError as exc:
        result.errors.append(str(exc))
        result.is_valid = False
        result.summary = "Unusable popup"
        return result

    implied = implied_change_percent(instrument.price, instrument.change)
    if implied is not None and abs(implied - instrument.change_percent) > CHANGE_PERCENT_TOLERANCE:
        result.warnings.append(
            f"priceChangePercent {instrument.change_percent:.4f} vs implied {implied:.4f}"
        )

    if instrument.last_update is None:
        result.warnings.append("generatedAt missing or unparsable")

    entries = raw["popup"].get("regionalAnalysis")
    if not isinstance(entries, list):
        entries = []
    tags = [Region.parse(e.get("region")) for e in entries if isinstance(e, Mapping)]
    result.regions_present = [r.value for r in Region if r in tags]
    for region in Region:
        count = tags.count(region)
        if count == 0:
            result.warnings.append(f"No {region.value} analysis")
        elif count > 1:
            result.warnings.append(f"{count} {region.value} analyses; first one is used")

    for row in _nested_list(raw, "forecasts"):
        try:
            map_forecast(row)
            result.forecast_rows += 1
        except MalformedSourceError as exc:
            result.warnings.append(f"Forecast row skipped: {exc}")

    result.news_items = len(_nested_list(raw, "news"))

    if result.warnings:
        result.summary = f"Valid with {len(result.warnings)} warning(s)"
    else:
        result.summary = "All checks passed"
    return result


def validate_bundle(
    bundle: Any, markets: Mapping[str, MarketDef] = DEFAULT_MARKETS
) -> dict[str, SourceValidationResult]:
    """Validate every known market present in ``bundle``.

    Raises ``UnreadableBundleError`` when the bundle itself is unreadable.
    """
    data = read_bundle(bundle)
    generated_at = bundle_generated_at(bundle)
    results = {}
    for source_key, market in markets.items():
        if source_key in data:
            results[source_key] = validate_market(source_key, market, data[source_key], generated_at)
    return results


def format_validation_report(results: dict[str, SourceValidationResult]) -> str:
    lines = ["=" * 90, "MARKET BUNDLE VALIDATION REPORT", "=" * 90]
    for result in results.values():
        lines.append(f"\n{result}")
    lines.append("\n" + "=" * 90)
    invalid = sum(1 for r in results.values() if not r.is_valid)
    if invalid:
        lines.append(f"✗ {invalid}/{len(results)} markets have validation errors")
    else:
        lines.append(f"✓ All {len(results)} markets validated successfully")
    lines.append("=" * 90)
    return "\n".join(lines)
