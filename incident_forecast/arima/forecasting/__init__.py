"""Counterfactual forecasting module."""

from __future__ import annotations

from .forecasting import FORECAST_COLUMNS, ForecastResult, forecast_counterfactual

__all__ = [
    "FORECAST_COLUMNS",
    "ForecastResult",
    "forecast_counterfactual",
]
