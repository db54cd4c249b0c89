"""Stress scenario planning.

Applies named multiplicative shock scenarios to the tracked instruments and
prices the cost impact for a procurement volume vector.

Design:
- Scenario table is static YAML, loaded once.
- Instruments the live feed lacks are priced from a static reference table.
- Engine functions are pure: same inputs, bit-identical outputs.
- Selection and volume inputs live in an explicit ``PlannerState``.
"""

from .engine import (  # noqa
    aggregate_cost,
    apply_scenario,
    budget_buffer,
    cost_impact_frame,
    factor_sweep,
    run_scenarios,
)
from .scenarios import load_scenarios, rank_by_severity, select_scenario  # noqa
from .universe import load_reference_prices, stress_universe  # noqa
from .state import DEFAULT_MONTHLY_VOLUMES, PlannerState, PlanResult, evaluate_plan  # noqa

__all__ = [
    "aggregate_cost",
    "apply_scenario",
    "budget_buffer",
    "cost_impact_frame",
    "factor_sweep",
    "run_scenarios",
    "load_scenarios",
    "rank_by_severity",
    "select_scenario",
    "load_reference_prices",
    "stress_universe",
    "DEFAULT_MONTHLY_VOLUMES",
    "PlannerState",
    "PlanResult",
    "evaluate_plan",
]
