"""Seasonal ARIMA package wrapper.

This package exposes submodules under `incident_forecast.arima.*`. Import from
specific subpackages, e.g.:

    from incident_forecast.arima.stationarity_check import analyze_stationarity
    from incident_forecast.arima.model_selection import select_best_model

"""

from __future__ import annotations

__all__: list[str] = []
