"""Counterfactual forecasting of monthly incident counts.

Stages live in sub-packages (``data_cleaning``, ``imputation``,
``aggregation``, ``arima.*``, ``counterfactual``); :mod:`incident_forecast.pipeline`
chains them and :mod:`incident_forecast.main` is the command line entry point.
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
