"""Raw incident records as handed over by the ingestion side.

``IncidentRecord`` mirrors one row of the published incident table with every
field still in its raw text form. Conversion helpers move between a sequence
of records and the raw DataFrame the cleaning stage works on.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Iterable, Sequence

import numpy as np
import pandas as pd

from incident_forecast.utils import get_logger

logger = get_logger(__name__)

__all__ = [
    "IncidentRecord",
    "RAW_COLUMN_ALIASES",
    "frame_to_records",
    "records_to_frame",
    "to_raw_frame",
]


@dataclass(frozen=True)
class IncidentRecord:
    """One incident, fields as published (strings, possibly missing)."""

    occur_date: str
    murder_flag: str | bool
    incident_key: str | None = None
    occur_time: str | None = None
    boro: str | None = None
    precinct: str | int | None = None
    jurisdiction_code: str | int | None = None
    location_desc: str | None = None
    perp_age_group: str | None = None
    perp_sex: str | None = None
    perp_race: str | None = None
    vic_age_group: str | None = None
    vic_sex: str | None = None
    vic_race: str | None = None
    x_coord: str | float | None = None
    y_coord: str | float | None = None
    latitude: str | float | None = None
    longitude: str | float | None = None


# Published column names -> record field names
RAW_COLUMN_ALIASES: dict[str, str] = {
    "statistical_murder_flag": "murder_flag",
    "x_coord_cd": "x_coord",
    "y_coord_cd": "y_coord",
}

_RECORD_FIELDS: tuple[str, ...] = tuple(f.name for f in fields(IncidentRecord))


def records_to_frame(records: Iterable[IncidentRecord]) -> pd.DataFrame:
    """Convert records to a raw DataFrame (one column per record field).

    Args:
        records: Incident records.

    Returns:
        DataFrame with columns in field declaration order.
    """
    rows = [asdict(record) for record in records]
    return pd.DataFrame(rows, columns=list(_RECORD_FIELDS))


def _normalize_column_name(name: str) -> str:
    lowered = str(name).strip().lower()
    return RAW_COLUMN_ALIASES.get(lowered, lowered)


def _to_optional(value: object) -> object:
    if value is None:
        return None
    if isinstance(value, float) and np.isnan(value):
        return None
    return value


def frame_to_records(df: pd.DataFrame) -> list[IncidentRecord]:
    """Read a raw table (e.g. the CSV export) into incident records.

    Column names are matched case-insensitively and published names such as
    ``STATISTICAL_MURDER_FLAG`` are mapped onto record fields. Columns with
    no matching field (``Lon_Lat`` for instance) are ignored.

    Args:
        df: Raw table.

    Returns:
        List of records in row order.

    Raises:
        KeyError: If the date or severity column is missing.
    """
    renamed = df.rename(columns=_normalize_column_name)
    missing = {"occur_date", "murder_flag"} - set(renamed.columns)
    if missing:
        raise KeyError(f"Missing required columns in incident table: {sorted(missing)}")

    ignored = sorted(set(renamed.columns) - set(_RECORD_FIELDS))
    if ignored:
        logger.debug(f"Ignoring columns without a record field: {ignored}")

    present = [name for name in _RECORD_FIELDS if name in renamed.columns]
    records: list[IncidentRecord] = []
    for row in renamed[present].itertuples(index=False, name=None):
        values = {name: _to_optional(value) for name, value in zip(present, row)}
        records.append(IncidentRecord(**values))
    return records


def to_raw_frame(records: Sequence[IncidentRecord] | pd.DataFrame) -> pd.DataFrame:
    """Return the raw frame for either accepted input shape."""
    if isinstance(records, pd.DataFrame):
        return records.rename(columns=_normalize_column_name).copy()
    return records_to_frame(records)
