import pytest

from conftest import make_instrument
from marketlens.ingestion.normalizer import normalize
from marketlens.providers import StaticMarketDataProvider
from marketlens.stress import (
    DEFAULT_MONTHLY_VOLUMES,
    apply_scenario,
    load_reference_prices,
    load_scenarios,
    stress_universe,
)


def test_packaged_reference_prices():
    reference = load_reference_prices()

    assert [i.symbol for i in reference] == ["WTI", "SUGAR", "COPPER", "USDTHB", "EURTHB", "CNYTHB"]
    copper = reference[2]
    assert (copper.price, copper.currency, copper.category) == (8450.0, "USD", "metals")
    assert all(i.last_update is None for i in reference)


def test_every_scenario_symbol_is_priced():
    live = normalize(StaticMarketDataProvider().fetch_bundle())
    universe = {i.symbol for i in stress_universe(live, load_reference_prices())}

    for scenario in load_scenarios():
        assert set(scenario.factors) <= universe, scenario.id
    assert set(DEFAULT_MONTHLY_VOLUMES) <= universe


def test_live_prices_replace_reference_in_reference_order():
    reference = load_reference_prices()
    live = [
        make_instrument("GOLD", 2000.0, category="metals"),
        make_instrument("SUGAR", 30.0, category="agriculture"),
    ]

    universe = stress_universe(live, reference)

    assert [i.symbol for i in universe] == ["WTI", "SUGAR", "COPPER", "USDTHB", "EURTHB", "CNYTHB", "GOLD"]
    assert universe[1].price == 30.0
    assert universe[0].price == 85.5


def test_without_reference_the_universe_is_the_live_set(instruments):
    assert stress_universe(instruments) == instruments


def test_reference_only_symbols_are_shocked():
    geo = next(s for s in load_scenarios() if s.id == "geopolitical")
    impacts = apply_scenario(geo, stress_universe([], load_reference_prices()), {"COPPER": 10})

    copper = next(i for i in impacts if i.symbol == "COPPER")
    assert copper.cost_delta == pytest.approx(8450.0 * 0.12 * 10)


@pytest.mark.parametrize(
    "body",
    [
        "instruments:\n  - {symbol: X, price: 0}\n",
        "instruments:\n  - {symbol: X, price: 1}\n  - {symbol: X, price: 2}\n",
    ],
)
def test_bad_reference_table(tmp_path, body):
    path = tmp_path / "prices.yaml"
    path.write_text(body, encoding="utf-8")
    with pytest.raises(ValueError):
        load_reference_prices(path)
