"""Constants for the incident forecasting project."""

from __future__ import annotations

# Re-export paths for convenience
from incident_forecast.path import (  # noqa: F401
    COUNTERFACTUAL_REPORT_FILE,
    DATA_DIR,
    INCIDENTS_FILE,
    PROJECT_ROOT,
    RESULTS_DIR,
)

# ============================================================================
# RAW RECORDS & CLEANING
# ============================================================================

# Raw dates are published as MM/DD/YYYY
DATE_FORMAT: str = "%m/%d/%Y"
DATE_COLUMN: str = "occur_date"
SEVERITY_COLUMN: str = "murder_flag"

# Columns with no use after cleaning (time of day, free text, coordinates)
DROPPED_COLUMNS: tuple[str, ...] = (
    "occur_time",
    "location_desc",
    "x_coord",
    "y_coord",
    "latitude",
    "longitude",
)

# Raw markers that stand for "no value"
NULL_MARKERS: frozenset[str] = frozenset({"", "(NULL)", "NULL", "NAN", "NONE"})

TRUE_MARKERS: frozenset[str] = frozenset({"TRUE", "Y", "YES", "1", "T"})
FALSE_MARKERS: frozenset[str] = frozenset({"FALSE", "N", "NO", "0", "F"})

# ============================================================================
# IMPUTATION
# ============================================================================

IMPUTATION_TARGET_COLUMN: str = "perp_race"
IMPUTATION_SEX_COLUMN: str = "perp_sex"
IMPUTATION_AGE_COLUMN: str = "perp_age_group"
IMPUTATION_TOP_AGE_GROUPS: int = 2

# Categories treated as "not observed" besides real missing values
UNKNOWN_CATEGORIES: frozenset[str] = frozenset({"UNKNOWN", "U"})

IMPUTATION_BIAS_NOTE: str = (
    "Missing perpetrator race was replaced by a single modal category; "
    "this over-represents that category in any breakdown by race."
)

# ============================================================================
# AGGREGATION
# ============================================================================

# Shock date separating the fitted window from the withheld window
DEFAULT_CUTOFF_DATE: str = "2020-01-01"
SEASONAL_PERIOD: int = 12
MONTHLY_FREQ: str = "M"

# ============================================================================
# STATIONARITY
# ============================================================================

STATIONARITY_DEFAULT_ALPHA: float = 0.05
ACF_PACF_DEFAULT_LAGS: int = 24
ACF_PACF_MIN_LAGS: int = 1
# Below four seasonal cycles unit-root tests have little power
STATIONARITY_LOW_POWER_NOBS: int = 4 * SEASONAL_PERIOD
STATIONARITY_MAX_D: int = 2
STATIONARITY_MAX_SEASONAL_D: int = 1
# Seasonal strength above which one seasonal difference is taken
SEASONAL_STRENGTH_THRESHOLD: float = 0.64

# ============================================================================
# MODEL SELECTION (stepwise SARIMA search)
# ============================================================================

ARIMA_MAX_P: int = 5
ARIMA_MAX_Q: int = 5
ARIMA_MAX_SEASONAL_P: int = 2
ARIMA_MAX_SEASONAL_Q: int = 2
ARIMA_MAX_TOTAL_ORDER: int = 6
ARIMA_MAX_STEPS: int = 94
ARIMA_FIT_MAXITER: int = 200
ARIMA_AIC_TIE_TOLERANCE: float = 1e-9
ARIMA_SEARCH_PROGRESS_INTERVAL: int = 10

ARIMA_EMPTY_TRAINING_SERIES_MSG: str = "Training series is empty"

# ============================================================================
# FORECASTING & DIAGNOSTICS
# ============================================================================

FORECAST_HORIZON: int = 12
FORECAST_CONFIDENCE_LEVEL: float = 0.95

LJUNG_BOX_LAGS: tuple[int, ...] = (5, 10, 15, 20, 30)
LJUNG_BOX_ALPHA: float = 0.05
