import pytest

from marketlens.ingestion.regional import regional_analyses, regional_analysis_for
from marketlens.models import KeySignal, Region


def test_lookup_present_region(raw_market):
    analysis = regional_analysis_for(raw_market, Region.GLOBAL)

    assert analysis.region is Region.GLOBAL
    assert analysis.daily_summary == "Global supply tight."
    assert analysis.recommended_action == "Hedge Q2."
    assert analysis.competitor_strategy == "Competitors extend hedges."
    assert analysis.key_signals == (KeySignal("OPEC", "Cut"), KeySignal("Inventories", "Draw"))


@pytest.mark.parametrize("region", [Region.THAILAND, "local", "mars", None])
def test_absent_or_unknown_region_returns_none(raw_market, region):
    assert regional_analysis_for(raw_market, region) is None


@pytest.mark.parametrize("raw", [None, {}, {"popup": None}, {"popup": {"regionalAnalysis": "x"}}, []])
def test_missing_structure_returns_none(raw):
    assert regional_analysis_for(raw, "global") is None


def test_first_duplicate_wins(raw_market):
    dup = dict(raw_market["popup"]["regionalAnalysis"][0], dailySummary="Second copy")
    raw_market["popup"]["regionalAnalysis"].append(dup)

    assert regional_analysis_for(raw_market, "global").daily_summary == "Global supply tight."


def test_malformed_entry_degrades_to_none(raw_market):
    del raw_market["popup"]["regionalAnalysis"][1]["dailySummary"]
    assert regional_analysis_for(raw_market, "asia") is None


def test_regional_analyses_has_all_keys_and_news_digest(raw_market):
    result = regional_analyses(raw_market, news_limit=3)

    assert set(result) == set(Region)
    assert result[Region.THAILAND] is None
    # Highest score first for the region.
    assert [n.news_id for n in result[Region.GLOBAL].news] == ["n2", "n1"]
    assert [n.score for n in result[Region.ASIA].news] == [90.0]


def test_news_limit(raw_market):
    result = regional_analyses(raw_market, news_limit=1)
    assert [n.news_id for n in result[Region.GLOBAL].news] == ["n2"]


def test_non_list_key_signals_drops_only_that_region(raw_market):
    raw_market["popup"]["regionalAnalysis"][0]["keySignals"] = 7

    result = regional_analyses(raw_market)

    assert result[Region.GLOBAL] is None
    assert result[Region.ASIA].daily_summary == "Asia demand recovering."


def test_missing_key_signals_is_empty(raw_market):
    del raw_market["popup"]["regionalAnalysis"][0]["keySignals"]
    assert regional_analysis_for(raw_market, "global").key_signals == ()


def test_non_list_scores_drops_only_that_news_item(raw_market):
    raw_market["news"]["news"][0]["scores"] = 5

    result = regional_analyses(raw_market)

    assert [n.news_id for n in result[Region.GLOBAL].news] == ["n2"]
    assert result[Region.ASIA].news == ()
