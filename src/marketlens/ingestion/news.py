"""News item parsing from a raw market payload."""

from __future__ import annotations

import logging
import math
from typing import Any, Mapping, Optional

from marketlens.errors import MalformedSourceError
from marketlens.models import NewsItem, NewsScore, Region
from marketlens.utils.dates import parse_timestamp

logger = logging.getLogger(__name__)


def _parse_score(raw: Any) -> Optional[NewsScore]:
    if not isinstance(raw, Mapping):
        return None
    region = Region.parse(raw.get("region"))
    try:
        score = float(raw.get("score"))
    except (TypeError, ValueError):
        return None
    if region is None or not math.isfinite(score) or not 0.0 <= score <= 100.0:
        return None
    return NewsScore(region=region, score=score, reason=str(raw.get("reason") or ""))


def parse_news_item(raw: Any) -> NewsItem:
    """Build a ``NewsItem``; raises ``MalformedSourceError`` without id/title."""
    if not isinstance(raw, Mapping):
        raise MalformedSourceError(f"News entry is not an object: {type(raw).__name__}")
    news_id = raw.get("newsId")
    title = raw.get("title")
    if not news_id or not title:
        raise MalformedSourceError("News entry missing newsId or title")

    raw_scores = raw.get("scores")
    if raw_scores is None:
        raw_scores = []
    elif not isinstance(raw_scores, list):
        raise MalformedSourceError(f"News entry {news_id} scores is not a list")

    scores = []
    for entry in raw_scores:
        score = _parse_score(entry)
        if score is None:
            logger.debug(f"Dropping malformed score on news {news_id}: {entry!r}")
            continue
        scores.append(score)

    return NewsItem(
        news_id=str(news_id),
        title=str(title),
        summary=str(raw.get("summary") or ""),
        link=str(raw.get("link") or ""),
        image_url=str(raw.get("imageUrl") or ""),
        published_at=parse_timestamp(raw.get("publishedDate")),
        scores=tuple(scores),
    )


def parse_news(market_raw: Mapping) -> list[NewsItem]:
    """Parse ``news.news`` of one market, skipping malformed entries."""
    block = market_raw.get("news") if isinstance(market_raw, Mapping) else None
    entries = block.get("news") if isinstance(block, Mapping) else None
    if not isinstance(entries, list):
        return []

    items: list[NewsItem] = []
    for raw in entries:
        try:
            items.append(parse_news_item(raw))
        except MalformedSourceError as exc:
            logger.warning(f"Skipping news entry: {exc}")
    return items
