"""Market feed normalization and procurement stress planning.

Raw per-market feeds are normalized into canonical records (instruments,
regional analyses, forecast points, impact overviews) and a deterministic
multiplicative shock engine prices scenario cost impacts.
"""

from .config import load_config, ProjectConfig
from .ingestion import normalize, regional_analysis_for, map_forecast
from .overview import to_impact_overview
from .stress import aggregate_cost, apply_scenario, load_scenarios, select_scenario
