import copy
from datetime import datetime, timezone

import pytest

from marketlens.models import Instrument, Severity, StressScenario

RAW_MARKET = {
    "generatedAt": "2025-01-15T08:00:00Z",
    "marketNameLocalized": "น้ำมันดิบ",
    "popup": {
        "currentPrice": 80.0,
        "priceChange": 2.0,
        "priceChangePercent": 2.5641,
        "regionalAnalysis": [
            {
                "region": "global",
                "dailySummary": "Global supply tight.",
                "ourRecommendedAction": "Hedge Q2.",
                "competitorStrategy": "Competitors extend hedges.",
                "keySignals": [
                    {"title": "OPEC", "value": "Cut"},
                    {"title": "Inventories", "value": "Draw"},
                ],
            },
            {
                "region": "asia",
                "dailySummary": "Asia demand recovering.",
                "ourRecommendedAction": "Wait.",
                "competitorStrategy": "Spot buying.",
                "keySignals": [],
            },
        ],
    },
    "forecasts": {
        "forecasts": [
            {"quarter": "Q1 2025", "price_forecast": "$70-75", "source": "EIA"},
            {"quarter": "Q2 2025", "price_forecast": "$82.50", "source": "Consensus"},
        ]
    },
    "news": {
        "news": [
            {
                "newsId": "n1",
                "title": "Older headline",
                "summary": "",
                "link": "https://example.com/n1",
                "imageUrl": "",
                "publishedDate": "2025-01-10T00:00:00Z",
                "scores": [
                    {"region": "global", "score": 40, "reason": "minor"},
                    {"region": "asia", "score": 90, "reason": "major"},
                ],
            },
            {
                "newsId": "n2",
                "title": "Newer headline",
                "summary": "",
                "link": "https://example.com/n2",
                "imageUrl": "",
                "publishedDate": "2025-01-14T00:00:00Z",
                "scores": [{"region": "global", "score": 75, "reason": "supply"}],
            },
        ]
    },
}


def _sugar():
    raw = copy.deepcopy(RAW_MARKET)
    raw["marketNameLocalized"] = "น้ำตาล"
    raw["popup"].update({"currentPrice": 20.0, "priceChange": -0.5, "priceChangePercent": -2.439})
    raw["popup"]["regionalAnalysis"] = []
    raw["news"]["news"] = []
    return raw


@pytest.fixture
def raw_market():
    return copy.deepcopy(RAW_MARKET)


@pytest.fixture
def raw_bundle():
    return {
        "generatedAt": "2025-01-15T08:00:00Z",
        "data": {
            "sugar": _sugar(),
            "crude_oil": copy.deepcopy(RAW_MARKET),
        },
    }


def make_instrument(symbol, price, change=0.0, category="energy", name=None, **kwargs):
    return Instrument(
        symbol=symbol,
        name=name or symbol.title(),
        category=category,
        currency=kwargs.pop("currency", "USD"),
        price=price,
        change=change,
        change_percent=kwargs.pop("change_percent", 0.0),
        last_update=datetime(2025, 1, 15, tzinfo=timezone.utc),
        **kwargs,
    )


@pytest.fixture
def instruments():
    return [
        make_instrument("WTI", 80.0, name="Crude Oil"),
        make_instrument("SUGAR", 20.0, category="agriculture", name="Sugar"),
    ]


@pytest.fixture
def wti_shock():
    return StressScenario(
        id="oil_spike",
        name="Oil spike",
        severity=Severity.HIGH,
        factors={"WTI": 1.25},
    )
