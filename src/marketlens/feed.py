"""Polling refresh of market snapshots.

Each refresh re-fetches the whole bundle (no partial retry) and is stamped
with an increasing generation number. A snapshot only replaces the current
one if its generation is newer, so results of a superseded fetch are
discarded.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional

from marketlens.errors import UpstreamUnavailableError
from marketlens.models import Instrument
from marketlens.providers.tiered import TieredMarketSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MarketSnapshot:
    generation: int
    instruments: tuple[Instrument, ...]
    data: Mapping[str, Any]  # source key -> raw payload, for regional/forecast lookups
    provider_name: str
    used_fallback: bool
    fetched_at: datetime


class MarketFeed:
    def __init__(
        self,
        source: TieredMarketSource,
        interval_sec: float = 60.0,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.source = source
        self.interval_sec = interval_sec
        self.clock = clock
        self._issued = 0
        self._current: Optional[MarketSnapshot] = None

    @property
    def current(self) -> Optional[MarketSnapshot]:
        return self._current

    def next_generation(self) -> int:
        self._issued += 1
        return self._issued

    def offer(self, snapshot: MarketSnapshot) -> bool:
        """Install ``snapshot`` if it is newer than the current one."""
        if self._current is not None and snapshot.generation <= self._current.generation:
            logger.debug(
                f"Discarding stale snapshot generation {snapshot.generation} "
                f"(current {self._current.generation})"
            )
            return False
        self._current = snapshot
        return True

    def refresh(self) -> MarketSnapshot:
        """Fetch a new snapshot; raises ``UpstreamUnavailableError`` if no tier works."""
        generation = self.next_generation()
        result = self.source.fetch()
        snapshot = MarketSnapshot(
            generation=generation,
            instruments=result.instruments,
            data=result.data,
            provider_name=result.provider_name,
            used_fallback=result.used_fallback,
            fetched_at=self.clock(),
        )
        self.offer(snapshot)
        return snapshot

    def poll(
        self,
        iterations: Optional[int] = None,
        sleep: Callable[[float], None] = time.sleep,
        on_update: Optional[Callable[[MarketSnapshot], None]] = None,
    ) -> Optional[MarketSnapshot]:
        """Refresh every ``interval_sec``; ``iterations=None`` runs forever.

        A failed refresh is logged and the previous snapshot kept.
        """
        count = 0
        while iterations is None or count < iterations:
            if count:
                sleep(self.interval_sec)
            count += 1
            try:
                snapshot = self.refresh()
            except UpstreamUnavailableError as exc:
                logger.error(f"Market refresh failed, keeping previous snapshot: {exc}")
                continue
            logger.info(
                f"Snapshot {snapshot.generation}: {len(snapshot.instruments)} instrument(s) "
                f"from {snapshot.provider_name}"
            )
            if on_update is not None and self._current is snapshot:
                on_update(snapshot)
        return self._current
