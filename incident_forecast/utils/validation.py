"""Validation utilities for DataFrames, files, and series.

This module provides validation functions for:
- DataFrame validation (non-empty, required columns)
- File existence validation
- Series validation before modeling
"""

from __future__ import annotations

from pathlib import Path

import pandas as pd

__all__ = [
    "validate_dataframe_not_empty",
    "validate_required_columns",
    "validate_file_exists",
    "validate_series",
]


def validate_file_exists(file_path: Path, file_name: str | None = None) -> None:
    """Validate that a file exists.

    Args:
        file_path: Path to the file to check.
        file_name: Optional name of the file for error message.
            If None, uses the file path.

    Raises:
        FileNotFoundError: If file doesn't exist.
    """
    if not file_path.exists():
        if file_name is None:
            file_name = str(file_path)
        msg = f"{file_name} not found: {file_path}"
        raise FileNotFoundError(msg)


def validate_dataframe_not_empty(df: pd.DataFrame, name: str = "DataFrame") -> None:
    """Validate that DataFrame is not empty.

    Args:
        df: DataFrame to validate.
        name: Name of the DataFrame for error messages. Default is 'DataFrame'.

    Raises:
        ValueError: If DataFrame is empty.
    """
    if df.empty:
        msg = f"{name} DataFrame is empty"
        raise ValueError(msg)


def validate_required_columns(
    df: pd.DataFrame,
    required_columns: set[str] | list[str],
    df_name: str = "DataFrame",
) -> None:
    """Validate that DataFrame contains required columns.

    Args:
        df: DataFrame to validate.
        required_columns: Set or list of required column names.
        df_name: Name of the DataFrame for error messages. Default is 'DataFrame'.

    Raises:
        KeyError: If any required column is missing.
    """
    missing_columns = set(required_columns) - set(df.columns)
    if missing_columns:
        msg = f"Missing required columns in {df_name}: {sorted(missing_columns)}"
        raise KeyError(msg)


def validate_series(series: pd.Series, name: str = "series") -> pd.Series:
    """Return a clean float Series ready for statistical tests.

    Args:
        series: Input time series.
        name: Name used in error messages.

    Returns:
        Series with NaN values removed and converted to float.

    Raises:
        ValueError: If series is None or empty after dropna.
        TypeError: If series is not numeric.
    """
    if series is None:
        raise ValueError(f"{name} is None")
    if not pd.api.types.is_numeric_dtype(series):
        raise TypeError(f"{name} must be numeric.")
    cleaned = series.dropna().astype(float)
    if cleaned.empty:
        raise ValueError(f"{name} is empty after dropping NaN values")
    return cleaned
