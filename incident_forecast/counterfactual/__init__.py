"""Counterfactual comparison of forecast and observed counts."""

from __future__ import annotations

from incident_forecast.counterfactual.comparison import (
    CounterfactualComparison,
    compare_forecast_to_actual,
)

__all__ = [
    "CounterfactualComparison",
    "compare_forecast_to_actual",
]
