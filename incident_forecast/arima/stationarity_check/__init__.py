"""Stationarity (ADF/KPSS, ACF/PACF, differencing) analysis."""

from __future__ import annotations

from .stationarity_check import (
    Correlogram,
    StationarityReport,
    StationarityTestResult,
    _determine_stationarity,
    adf_test,
    analyze_stationarity,
    compute_correlogram,
    correlogram_lags,
    kpss_test,
    recommend_differencing,
    recommend_seasonal_differencing,
    seasonal_strength,
)

__all__ = [
    "Correlogram",
    "StationarityReport",
    "StationarityTestResult",
    "_determine_stationarity",
    "adf_test",
    "analyze_stationarity",
    "compute_correlogram",
    "correlogram_lags",
    "kpss_test",
    "recommend_differencing",
    "recommend_seasonal_differencing",
    "seasonal_strength",
]
