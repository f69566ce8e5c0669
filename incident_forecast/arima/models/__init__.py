"""Seasonal ARIMA model creation module."""

from __future__ import annotations

from .arima_model import CandidateOrder, FittedModel, fit_sarima_model, training_series

__all__ = [
    "CandidateOrder",
    "FittedModel",
    "fit_sarima_model",
    "training_series",
]
