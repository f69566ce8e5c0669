"""I/O utilities for loading and saving data files.

This module provides functions for:
- Loading the local CSV export of incident records
- JSON file operations
- File system utilities (ensure directories exist)
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pandas as pd

from incident_forecast.config_logging import get_logger
from incident_forecast.utils.validation import (
    validate_dataframe_not_empty,
    validate_file_exists,
    validate_required_columns,
)

__all__ = [
    "ensure_output_dir",
    "load_csv_file",
    "save_json_pretty",
]


def ensure_output_dir(path: Path) -> None:
    """Ensure parent directory exists for a given path.

    Args:
        path: File path whose parent directory should be created.
    """
    path.parent.mkdir(parents=True, exist_ok=True)


def load_csv_file(
    csv_path: Path | str,
    *,
    required_columns: list[str] | set[str] | None = None,
) -> pd.DataFrame:
    """Load a CSV export with every column read as text.

    Type coercion is left to the cleaning stage so that malformed values
    surface there with a proper error instead of being guessed by pandas.

    Args:
        csv_path: Path to CSV file.
        required_columns: Columns that must exist (checked case-insensitively).

    Returns:
        DataFrame of strings (missing cells are NaN).

    Raises:
        FileNotFoundError: If file does not exist.
        KeyError: If required columns are missing.
        ValueError: If dataset is empty.
    """
    logger = get_logger(__name__)
    path_obj = Path(csv_path)
    validate_file_exists(path_obj, "Data file")

    logger.info(f"Loading dataset from {path_obj}")
    try:
        df = pd.read_csv(path_obj, dtype=str, keep_default_na=True)
    except pd.errors.EmptyDataError as e:
        raise ValueError(f"Dataset is empty: {path_obj}") from e

    validate_dataframe_not_empty(df, f"Data from {path_obj.name}")
    if required_columns is not None:
        lowered = df.rename(columns=str.lower)
        validate_required_columns(
            lowered, {c.lower() for c in required_columns}, df_name=path_obj.name
        )
    return df


def save_json_pretty(
    data: dict | list,
    output_path: Path | str,
    *,
    indent: int = 2,
    sort_keys: bool = False,
) -> None:
    """Save JSON with pretty formatting and automatic directory creation.

    Non-JSON scalars (numpy numbers, pandas periods and timestamps) are
    converted to their string form.

    Args:
        data: Dictionary or list to save as JSON.
        output_path: Path to save JSON file.
        indent: Indentation level for pretty printing.
        sort_keys: If True, sort dictionary keys alphabetically.

    Examples:
        >>> save_json_pretty(
        ...     {"forecast_total": 854.0, "actual_total": 1942},
        ...     "results/counterfactual_report.json"
        ... )
    """
    path_obj = Path(output_path)
    ensure_output_dir(path_obj)

    with open(path_obj, "w") as f:
        json.dump(data, f, indent=indent, sort_keys=sort_keys, default=_json_default)


def _json_default(value: Any) -> Any:
    """Fallback serializer for numpy / pandas scalars."""
    if hasattr(value, "item"):
        return value.item()
    return str(value)
