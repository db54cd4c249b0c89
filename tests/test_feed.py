from datetime import datetime, timezone

import pytest

from marketlens.errors import UpstreamUnavailableError
from marketlens.feed import MarketFeed, MarketSnapshot
from marketlens.providers.tiered import FetchResult

CLOCK = datetime(2025, 1, 15, 8, 0, tzinfo=timezone.utc)


class ScriptedSource:
    """Returns queued results; an exception in the queue is raised instead."""

    def __init__(self, *results):
        self.results = list(results)

    def fetch(self):
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


def _result(instruments, provider="http", used_fallback=False):
    return FetchResult(data={}, instruments=tuple(instruments), provider_name=provider, used_fallback=used_fallback)


def _snapshot(generation):
    return MarketSnapshot(generation, (), {}, "http", False, CLOCK)


def test_refresh_installs_snapshot(instruments):
    feed = MarketFeed(ScriptedSource(_result(instruments)), clock=lambda: CLOCK)
    snapshot = feed.refresh()

    assert feed.current is snapshot
    assert snapshot.generation == 1
    assert snapshot.fetched_at == CLOCK
    assert [i.symbol for i in snapshot.instruments] == ["WTI", "SUGAR"]


def test_stale_snapshot_is_discarded():
    feed = MarketFeed(ScriptedSource())
    newer, older = _snapshot(2), _snapshot(1)

    assert feed.offer(newer) is True
    assert feed.offer(older) is False
    assert feed.offer(_snapshot(2)) is False
    assert feed.current is newer


def test_generations_increase_even_when_refresh_fails(instruments):
    feed = MarketFeed(ScriptedSource(UpstreamUnavailableError("down"), _result(instruments)))

    with pytest.raises(UpstreamUnavailableError):
        feed.refresh()
    assert feed.current is None
    assert feed.refresh().generation == 2


def test_poll_sleeps_between_refreshes(instruments):
    sleeps = []
    updates = []
    feed = MarketFeed(
        ScriptedSource(_result(instruments), _result(instruments[:1], "static", True)),
        interval_sec=30,
    )

    last = feed.poll(iterations=2, sleep=sleeps.append, on_update=updates.append)

    assert sleeps == [30]
    assert [s.generation for s in updates] == [1, 2]
    assert last.used_fallback is True
    assert len(last.instruments) == 1


def test_poll_failure_keeps_previous_snapshot(instruments):
    feed = MarketFeed(ScriptedSource(_result(instruments), UpstreamUnavailableError("down")))

    last = feed.poll(iterations=2, sleep=lambda _: None)

    assert last.generation == 1
    assert feed.current is last
