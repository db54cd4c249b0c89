"""Stress scenario engine.

Given current instrument prices and monthly procurement volumes, compute the
cost impact of a multiplicative price shock:

  stressed_price = current_price * factor
  impact_percent = (factor - 1) * 100
  cost_delta     = (stressed_price - current_price) * volume

Instruments missing from a scenario's factor map get factor 1.0 and
instruments without a volume get volume 0. Negative volumes (short / sell
positions) flip the sign of the delta.
"""

from __future__ import annotations

from typing import Iterable, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from marketlens.models import CostImpact, Instrument, StressScenario


def _volume_for(volumes: Mapping[str, float], symbol: str) -> float:
    value = volumes.get(symbol)
    return float(value) if value is not None else 0.0


def cost_impact(instrument: Instrument, factor: float, volume: float) -> CostImpact:
    stressed_price = instrument.price * factor
    return CostImpact(
        symbol=instrument.symbol,
        current_price=instrument.price,
        stressed_price=stressed_price,
        impact_percent=(factor - 1.0) * 100.0,
        cost_delta=(stressed_price - instrument.price) * volume,
        volume=volume,
    )


def apply_scenario(
    scenario: StressScenario,
    instruments: Iterable[Instrument],
    volumes: Mapping[str, float],
) -> list[CostImpact]:
    """One ``CostImpact`` per tracked instrument, in input order."""
    return [
        cost_impact(i, scenario.factor_for(i.symbol), _volume_for(volumes, i.symbol))
        for i in instruments
    ]


def aggregate_cost(impacts: Iterable[CostImpact]) -> float:
    """Total cost delta; 0.0 for no impacts."""
    total = 0.0
    for impact in impacts:
        total += impact.cost_delta
    return total


def budget_buffer(total_cost: float, months: int = 3) -> float:
    """Budget to set aside to cover ``months`` of the monthly cost impact."""
    return abs(total_cost) * months


def cost_impact_frame(impacts: Sequence[CostImpact]) -> pd.DataFrame:
    """Tabular form of a scenario result."""
    columns = ["symbol", "current_price", "stressed_price", "impact_percent", "volume", "cost_delta"]
    return pd.DataFrame([i.to_dict() for i in impacts], columns=columns)


def run_scenarios(
    scenarios: Sequence[StressScenario],
    instruments: Sequence[Instrument],
    volumes: Mapping[str, float],
) -> pd.DataFrame:
    """Run several scenarios and return a comparison table."""
    rows = []
    for scenario in scenarios:
        impacts = apply_scenario(scenario, instruments, volumes)
        worst: Optional[CostImpact] = max(impacts, key=lambda i: i.cost_delta, default=None)
        rows.append(
            {
                "scenario": scenario.id,
                "name": scenario.name,
                "severity": scenario.severity.value,
                "total_cost_delta": aggregate_cost(impacts),
                "worst_symbol": worst.symbol if worst is not None else None,
                "worst_cost_delta": worst.cost_delta if worst is not None else 0.0,
            }
        )
    return pd.DataFrame(
        rows,
        columns=[
            "scenario",
            "name",
            "severity",
            "total_cost_delta",
            "worst_symbol",
            "worst_cost_delta",
        ],
    )


def factor_sweep(
    instrument: Instrument,
    volume: float,
    low: float = 0.8,
    high: float = 1.2,
    steps: int = 9,
) -> pd.DataFrame:
    """1-way sensitivity: vary the shock factor for one instrument.

    Args:
        instrument: instrument to shock
        volume: monthly volume
        low, high: factor bounds (both positive)
        steps: number of evenly spaced factors, bounds included

    Returns:
        DataFrame with one row per factor.
    """
    if low <= 0 or high <= 0:
        raise ValueError("Factor bounds must be positive")
    if steps < 2:
        raise ValueError("steps must be at least 2")

    rows = []
    for factor in np.linspace(low, high, steps):
        impact = cost_impact(instrument, float(factor), volume)
        rows.append(
            {
                "symbol": instrument.symbol,
                "factor": float(factor),
                "stressed_price": impact.stressed_price,
                "impact_percent": impact.impact_percent,
                "cost_delta": impact.cost_delta,
            }
        )
    return pd.DataFrame(rows)
