"""Stress scenario table and lookup.

Scenario schema:
  - id: unique identifier used for selection
  - name / description: human labels
  - severity: low | medium | high | extreme
  - factors: mapping of instrument symbol -> positive multiplicative shock
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import Iterable, Optional

import yaml

from marketlens.models import Severity, StressScenario

DEFAULT_SCENARIOS_PATH = Path(__file__).resolve().parent.parent / "data" / "scenarios.yaml"


def _parse_factors(scenario_id: str, raw: dict) -> dict[str, float]:
    factors = {}
    for symbol, value in (raw or {}).items():
        factor = float(value)
        if not math.isfinite(factor) or factor <= 0:
            raise ValueError(
                f"Scenario {scenario_id!r}: factor for {symbol} must be positive, got {value!r}"
            )
        factors[str(symbol)] = factor
    return factors


def load_scenarios(path: Optional[Path | str] = None) -> list[StressScenario]:
    """Load the stress scenario table from YAML.

    Expected YAML structure:
      scenarios:
        - id: "geopolitical"
          name: "Geopolitical Crisis"
          description: "Regional conflict affecting major supply routes"
          severity: "extreme"
          factors:
            WTI: 1.25
            EURTHB: 0.88
    """
    path = Path(path) if path is not None else DEFAULT_SCENARIOS_PATH
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    scenarios = []
    seen: set[str] = set()
    for s in data.get("scenarios", []):
        scenario_id = str(s["id"])
        if scenario_id in seen:
            raise ValueError(f"Duplicate scenario id: {scenario_id!r}")
        seen.add(scenario_id)
        scenarios.append(
            StressScenario(
                id=scenario_id,
                name=s.get("name", scenario_id),
                severity=Severity(s.get("severity", "medium")),
                factors=_parse_factors(scenario_id, s.get("factors")),
                description=s.get("description", ""),
            )
        )
    return scenarios


def select_scenario(
    scenarios: Iterable[StressScenario], scenario_id: Optional[str]
) -> Optional[StressScenario]:
    """Lookup by id; unknown or empty ids mean no scenario is selected."""
    if not scenario_id:
        return None
    return next((s for s in scenarios if s.id == scenario_id), None)


def rank_by_severity(scenarios: Iterable[StressScenario]) -> list[StressScenario]:
    """Most severe first; equal tiers keep table order."""
    return sorted(scenarios, key=lambda s: -s.severity.rank)
