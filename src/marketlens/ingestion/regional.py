"""Regional Aggregator.

Looks up the region-scoped analysis block (global / asia / thailand) inside
a raw market payload and exposes it as a ``RegionalAnalysis``. Missing
regions are normal: lookups return None instead of raising.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional

from marketlens.errors import MalformedSourceError
from marketlens.ingestion.news import parse_news
from marketlens.models import KeySignal, NewsItem, Region, RegionalAnalysis, RegionalNews

logger = logging.getLogger(__name__)

REQUIRED_TEXT_FIELDS = ("dailySummary", "ourRecommendedAction", "competitorStrategy")


def _regional_entries(market_raw: Any) -> list:
    popup = market_raw.get("popup") if isinstance(market_raw, Mapping) else None
    entries = popup.get("regionalAnalysis") if isinstance(popup, Mapping) else None
    return entries if isinstance(entries, list) else []


def _key_signals(raw: Any) -> tuple[KeySignal, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise MalformedSourceError(f"keySignals is not a list: {type(raw).__name__}")
    signals = []
    for entry in raw:
        if not isinstance(entry, Mapping) or "title" not in entry:
            continue
        signals.append(KeySignal(title=str(entry["title"]), value=str(entry.get("value", ""))))
    return tuple(signals)


def _build_analysis(
    region: Region, entry: Mapping, news: tuple[RegionalNews, ...] = ()
) -> RegionalAnalysis:
    missing = [f for f in REQUIRED_TEXT_FIELDS if not isinstance(entry.get(f), str)]
    if missing:
        raise MalformedSourceError(f"Regional entry {region.value!r} missing {missing}")
    return RegionalAnalysis(
        region=region,
        daily_summary=entry["dailySummary"],
        recommended_action=entry["ourRecommendedAction"],
        competitor_strategy=entry["competitorStrategy"],
        key_signals=_key_signals(entry.get("keySignals")),
        news=news,
    )


def _find_entry(market_raw: Any, region: Region) -> Optional[Mapping]:
    matches = [
        e for e in _regional_entries(market_raw)
        if isinstance(e, Mapping) and Region.parse(e.get("region")) == region
    ]
    if len(matches) > 1:
        logger.debug(f"{len(matches)} analyses tagged {region.value!r}; using the first")
    return matches[0] if matches else None


def regional_analysis_for(
    market_raw: Any,
    region: Region | str,
    news: tuple[RegionalNews, ...] = (),
) -> Optional[RegionalAnalysis]:
    """Return the analysis for ``region`` or None.

    The first entry tagged with the region wins. Unknown region tags and
    malformed entries also resolve to None.
    """
    tag = Region.parse(region)
    if tag is None:
        return None
    entry = _find_entry(market_raw, tag)
    if entry is None:
        return None
    try:
        return _build_analysis(tag, entry, news)
    except MalformedSourceError as exc:
        logger.warning(f"Skipping regional analysis: {exc}")
        return None


def news_digest(
    items: Iterable[NewsItem], region: Region, limit: int = 3
) -> tuple[RegionalNews, ...]:
    """Top ``limit`` items scored for ``region``, highest score first.

    Ties keep source order.
    """
    scored = []
    for item in items:
        for s in item.scores:
            if s.region == region:
                scored.append(
                    RegionalNews(
                        news_id=item.news_id,
                        title=item.title,
                        score=s.score,
                        reason=s.reason,
                        link=item.link,
                        published_at=item.published_at,
                    )
                )
                break
    scored.sort(key=lambda n: -n.score)
    return tuple(scored[: max(0, limit)])


def regional_analyses(
    market_raw: Any, news_limit: int = 3
) -> dict[Region, Optional[RegionalAnalysis]]:
    """All three regions for one market; absent regions map to None."""
    items = parse_news(market_raw) if isinstance(market_raw, Mapping) else []
    return {
        region: regional_analysis_for(
            market_raw, region, news=news_digest(items, region, news_limit)
        )
        for region in Region
    }
