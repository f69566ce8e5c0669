"""Utility functions for validation, I/O, logging and statsmodels handling.

This package provides modular utilities organized by functionality:
- validation: DataFrame, file, and series validation
- io: File I/O operations (CSV, JSON)
- logging_utils: Logging of series summaries
- statsmodels_utils: Warning suppression during SARIMA fitting
"""

from __future__ import annotations

# Import get_logger from config_logging so modules need a single import
from incident_forecast.config_logging import get_logger

# I/O utilities
from incident_forecast.utils.io import (
    ensure_output_dir,
    load_csv_file,
    save_json_pretty,
)

# Logging utilities
from incident_forecast.utils.logging_utils import log_series_summary

# Statsmodels utilities
from incident_forecast.utils.statsmodels_utils import suppress_statsmodels_warnings

# Validation utilities
from incident_forecast.utils.validation import (
    validate_dataframe_not_empty,
    validate_file_exists,
    validate_required_columns,
    validate_series,
)

__all__ = [
    "get_logger",
    # Validation
    "validate_dataframe_not_empty",
    "validate_file_exists",
    "validate_required_columns",
    "validate_series",
    # I/O
    "ensure_output_dir",
    "load_csv_file",
    "save_json_pretty",
    # Logging
    "log_series_summary",
    # Statsmodels
    "suppress_statsmodels_warnings",
]
