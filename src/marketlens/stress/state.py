"""Planner state passed between a stress-testing surface and the engine.

The engine stays stateless: callers hold a ``PlannerState`` and get a new
one back from every ``with_*`` update.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional, Sequence

from marketlens.models import CostImpact, Instrument, Region, StressScenario
from marketlens.stress.engine import aggregate_cost, apply_scenario
from marketlens.stress.scenarios import select_scenario

# Default monthly procurement volumes, in each instrument's trading unit.
DEFAULT_MONTHLY_VOLUMES: dict[str, float] = {
    "WTI": 1000,  # barrels
    "SUGAR": 500,  # tons
    "COPPER": 100,  # tons
    "USDTHB": 50000,  # USD
    "EURTHB": 30000,  # EUR
    "CNYTHB": 200000,  # CNY
}


@dataclass(frozen=True)
class PlannerState:
    selected_scenario_id: Optional[str] = None
    selected_region: Region = Region.GLOBAL
    volumes: Mapping[str, float] = field(default_factory=lambda: dict(DEFAULT_MONTHLY_VOLUMES))

    def with_scenario(self, scenario_id: Optional[str]) -> "PlannerState":
        return dataclasses.replace(self, selected_scenario_id=scenario_id)

    def with_region(self, region: Region | str) -> "PlannerState":
        # Unknown region tags leave the selection unchanged.
        parsed = Region.parse(region)
        if parsed is None:
            return self
        return dataclasses.replace(self, selected_region=parsed)

    def with_volume(self, symbol: str, volume: float) -> "PlannerState":
        volumes = dict(self.volumes)
        volumes[symbol] = float(volume)
        return dataclasses.replace(self, volumes=volumes)


@dataclass(frozen=True)
class PlanResult:
    scenario: Optional[StressScenario]
    impacts: tuple[CostImpact, ...] = ()
    total_cost: float = 0.0


def evaluate_plan(
    state: PlannerState,
    scenarios: Iterable[StressScenario],
    instruments: Sequence[Instrument],
) -> PlanResult:
    """Apply the selected scenario; no selection gives an empty result."""
    scenario = select_scenario(scenarios, state.selected_scenario_id)
    if scenario is None:
        return PlanResult(scenario=None)
    impacts = apply_scenario(scenario, instruments, state.volumes)
    return PlanResult(scenario=scenario, impacts=tuple(impacts), total_cost=aggregate_cost(impacts))
