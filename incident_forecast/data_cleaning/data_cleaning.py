"""Cleaning of raw incident records.

One entry point, :func:`clean_incidents`, applies the static
:data:`~incident_forecast.data_cleaning.schema.CLEANING_SCHEMA`:

- parse ``occur_date`` with the fixed ``MM/DD/YYYY`` pattern (fatal on mismatch),
- coerce categorical and code fields onto a categorical domain,
- coerce the severity flag to bool,
- drop the fields nothing downstream uses.

No row is ever filtered out and the input is never modified.
"""

from __future__ import annotations

from typing import Any, Sequence

import numpy as np
import pandas as pd

from incident_forecast.constants import (
    DATE_COLUMN,
    DATE_FORMAT,
    DROPPED_COLUMNS,
    FALSE_MARKERS,
    NULL_MARKERS,
    SEVERITY_COLUMN,
    TRUE_MARKERS,
)
from incident_forecast.data_cleaning.records import IncidentRecord, to_raw_frame
from incident_forecast.data_cleaning.schema import CATEGORY_DOMAINS, CLEANING_SCHEMA, kept_columns
from incident_forecast.exceptions import ParseError
from incident_forecast.utils import get_logger

logger = get_logger(__name__)

__all__ = ["clean_incidents"]

_MAX_REPORTED_ROWS = 5


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and np.isnan(value):
        return True
    return str(value).strip().upper() in NULL_MARKERS


def _format_bad_rows(raw: pd.Series, mask: pd.Series) -> str:
    """Describe the first offending rows for an error message."""
    bad = raw[mask]
    shown = ", ".join(f"row {idx}: {value!r}" for idx, value in bad.head(_MAX_REPORTED_ROWS).items())
    more = f" (+{len(bad) - _MAX_REPORTED_ROWS} more)" if len(bad) > _MAX_REPORTED_ROWS else ""
    return shown + more


def _parse_dates(raw: pd.Series) -> pd.Series:
    """Parse raw dates with the fixed pattern.

    Raises:
        ParseError: If any value is missing or does not match ``DATE_FORMAT``.
    """
    text = raw.map(lambda v: None if _is_missing(v) else str(v).strip())
    parsed = pd.to_datetime(text, format=DATE_FORMAT, errors="coerce")
    bad = parsed.isna()
    if bad.any():
        msg = (
            f"{int(bad.sum())} value(s) in '{DATE_COLUMN}' do not match {DATE_FORMAT}: "
            f"{_format_bad_rows(raw, bad)}"
        )
        logger.error(msg)
        raise ParseError(msg)
    return parsed


def _parse_flag(value: Any) -> bool | None:
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    if _is_missing(value):
        return None
    text = str(value).strip().upper()
    if text in TRUE_MARKERS:
        return True
    if text in FALSE_MARKERS:
        return False
    return None


def _parse_flags(raw: pd.Series) -> pd.Series:
    """Coerce the severity flag to bool.

    Raises:
        ParseError: If a value is missing or not a recognised boolean marker.
    """
    parsed = raw.map(_parse_flag)
    bad = parsed.isna()
    if bad.any():
        msg = (
            f"{int(bad.sum())} value(s) in '{SEVERITY_COLUMN}' are not booleans: "
            f"{_format_bad_rows(raw, bad)}"
        )
        logger.error(msg)
        raise ParseError(msg)
    return parsed.astype(bool)


def _normalize_label(value: Any) -> str | None:
    if _is_missing(value):
        return None
    return " ".join(str(value).split()).upper()


def _normalize_code(value: Any) -> str | None:
    """Render numeric codes in integer form ("75.0" and 75 both become "75")."""
    label = _normalize_label(value)
    if label is None:
        return None
    try:
        number = float(label)
    except ValueError:
        return label
    return str(int(number)) if number.is_integer() else label


def _code_sort_key(label: str) -> tuple[int, int, str]:
    return (0, int(label), label) if label.isdigit() else (1, 0, label)


def _to_categorical(values: pd.Series, column: str, kind: str) -> pd.Series:
    """Build a categorical with the known domain first, unseen values appended."""
    observed = set(values.dropna().unique())
    if kind == "code":
        categories = sorted(observed, key=_code_sort_key)
    else:
        domain = CATEGORY_DOMAINS.get(column, ())
        unseen = sorted(observed - set(domain))
        if unseen and domain:
            logger.info(f"New categories in '{column}': {unseen}")
        categories = list(domain) + unseen
    return pd.Series(
        pd.Categorical(values, categories=categories), index=values.index, name=column
    )


def _coerce_categoricals(raw: pd.DataFrame) -> dict[str, pd.Series]:
    coerced: dict[str, pd.Series] = {}
    for column, kind in CLEANING_SCHEMA.items():
        if kind not in ("category", "code"):
            continue
        normalizer = _normalize_code if kind == "code" else _normalize_label
        coerced[column] = _to_categorical(raw[column].map(normalizer), column, kind)
    return coerced


def _ensure_schema_columns(raw: pd.DataFrame) -> pd.DataFrame:
    """Add schema fields absent from the input as all-missing columns."""
    missing = [column for column in CLEANING_SCHEMA if column not in raw.columns]
    if missing:
        logger.debug(f"Adding empty columns for absent fields: {missing}")
        raw = raw.assign(**{column: None for column in missing})
    return raw


def clean_incidents(records: Sequence[IncidentRecord] | pd.DataFrame) -> pd.DataFrame:
    """Clean raw incident records into a typed DataFrame.

    Args:
        records: Raw incident records, or the equivalent raw table.

    Returns:
        New DataFrame with one row per input record (same order), columns
        from :func:`~incident_forecast.data_cleaning.schema.kept_columns`:
        a ``datetime64`` date, categorical attributes and a bool severity flag.

    Raises:
        ParseError: If a date or severity flag cannot be parsed.
        ValueError: If there are no records.
    """
    raw = _ensure_schema_columns(to_raw_frame(records)).reset_index(drop=True)
    if raw.empty:
        raise ValueError("No incident records to clean")

    logger.info(f"Cleaning {len(raw)} incident records")

    cleaned: dict[str, pd.Series] = {
        DATE_COLUMN: _parse_dates(raw[DATE_COLUMN]),
        SEVERITY_COLUMN: _parse_flags(raw[SEVERITY_COLUMN]),
        "incident_key": raw["incident_key"].map(
            lambda v: None if _is_missing(v) else str(v).strip()
        ),
    }
    cleaned.update(_coerce_categoricals(raw))

    df = pd.DataFrame(cleaned)[kept_columns()]
    logger.info(
        "Cleaned %d records (%s → %s), dropped columns: %s",
        len(df),
        df[DATE_COLUMN].min().date(),
        df[DATE_COLUMN].max().date(),
        list(DROPPED_COLUMNS),
    )
    return df
