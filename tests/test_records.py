from datetime import datetime, timezone

import pytest

from conftest import make_instrument
from marketlens.models import NewsItem, Severity
from marketlens.stress import load_scenarios
from marketlens.utils.records import (
    all_of,
    category_is,
    filter_records,
    latest_first,
    search,
    sort_by,
    text_query,
)


@pytest.fixture
def table():
    return [
        make_instrument("WTI", 80.0, change=1.0, name="Crude Oil", market_name="น้ำมันดิบ"),
        make_instrument("SUGAR", 20.0, change=-0.5, category="agriculture", name="sugar"),
        make_instrument("USDTHB", 35.0, change=1.0, category="currency", name="USD/THB"),
        make_instrument("COPPER", 8450.0, change=0.0, category="metals", name="Copper"),
    ]


def symbols(records):
    return [r.symbol for r in records]


def test_text_sort_is_case_insensitive(table):
    assert symbols(sort_by(table, "name")) == ["COPPER", "WTI", "SUGAR", "USDTHB"]
    assert symbols(sort_by(table, "name", "desc")) == ["USDTHB", "SUGAR", "WTI", "COPPER"]


def test_numeric_sort(table):
    assert symbols(sort_by(table, "price")) == ["SUGAR", "USDTHB", "WTI", "COPPER"]


def test_sort_is_stable_both_directions(table):
    # WTI and USDTHB tie on change.
    assert symbols(sort_by(table, "change")) == ["SUGAR", "COPPER", "WTI", "USDTHB"]
    assert symbols(sort_by(table, "change", "desc")) == ["WTI", "USDTHB", "COPPER", "SUGAR"]


def test_sort_returns_new_list(table):
    before = list(table)
    result = sort_by(table, "price", "desc")

    assert table == before
    assert result is not table


def test_sort_idempotent(table):
    once = sort_by(table, "change")
    assert sort_by(once, "change") == once


def test_resort_restores_order_up_to_ties(table):
    original = sort_by(table, "price")
    shuffled = sort_by(sort_by(original, "name"), "change", "desc")
    assert sort_by(shuffled, "price") == original


def test_sort_mappings_and_none_last():
    rows = [{"k": None, "id": 1}, {"k": "b", "id": 2}, {"k": "A", "id": 3}]
    assert [r["id"] for r in sort_by(rows, "k")] == [3, 2, 1]
    assert [r["id"] for r in sort_by(rows, "k", "desc")] == [2, 3, 1]


def test_sort_with_callable_and_bad_direction(table):
    assert symbols(sort_by(table, lambda r: len(r.symbol))) == ["WTI", "SUGAR", "USDTHB", "COPPER"]
    with pytest.raises(ValueError):
        sort_by(table, "price", "sideways")


def test_all_category_and_empty_query_return_everything(table):
    assert search(table, "", "all") == table
    assert filter_records(table, all_of(text_query(""), category_is("all"))) == table


@pytest.mark.parametrize(
    "query,expected",
    [("wti", ["WTI"]), ("crude", ["WTI"]), ("THB", ["USDTHB"]), ("น้ำมัน", ["WTI"]), ("zzz", [])],
)
def test_text_query(table, query, expected):
    assert symbols(filter_records(table, text_query(query))) == expected


def test_category_filter_preserves_order(table):
    assert symbols(search(table, category="Currency")) == ["USDTHB"]
    assert symbols(search(table, "o", "all")) == ["WTI", "COPPER"]
    assert search(table, category="bonds") == []


def test_latest_first():
    def item(news_id, day):
        published = datetime(2025, 1, day, tzinfo=timezone.utc) if day else None
        return NewsItem(news_id=news_id, title=news_id, published_at=published)

    items = [item("a", 10), item("b", None), item("c", 14), item("d", 12)]
    assert [n.news_id for n in latest_first(items)] == ["c", "d", "a", "b"]


def test_severity_sorts_by_tier_not_name():
    scenarios = load_scenarios()

    ascending = sort_by(scenarios, "severity")
    assert [s.severity for s in ascending] == [Severity.MEDIUM, Severity.HIGH, Severity.HIGH, Severity.EXTREME]
    # Equal tiers keep table order.
    assert [s.id for s in ascending[1:3]] == ["pandemic", "supply_shock"]
    assert sort_by(scenarios, "severity", "desc")[0].id == "geopolitical"
