"""Static cleaning schema: target semantic type of every incident field."""

from __future__ import annotations

from typing import Literal

from incident_forecast.constants import DROPPED_COLUMNS

__all__ = [
    "CATEGORY_DOMAINS",
    "CLEANING_SCHEMA",
    "FieldKind",
    "categorical_columns",
    "kept_columns",
]

FieldKind = Literal["identifier", "date", "category", "code", "flag", "dropped"]

# "code" fields are numeric identifiers used as categories (precinct 75 -> "75")
CLEANING_SCHEMA: dict[str, FieldKind] = {
    "incident_key": "identifier",
    "occur_date": "date",
    "occur_time": "dropped",
    "boro": "category",
    "precinct": "code",
    "jurisdiction_code": "code",
    "location_desc": "dropped",
    "murder_flag": "flag",
    "perp_age_group": "category",
    "perp_sex": "category",
    "perp_race": "category",
    "vic_age_group": "category",
    "vic_sex": "category",
    "vic_race": "category",
    "x_coord": "dropped",
    "y_coord": "dropped",
    "latitude": "dropped",
    "longitude": "dropped",
}

if {name for name, kind in CLEANING_SCHEMA.items() if kind == "dropped"} != set(DROPPED_COLUMNS):
    raise RuntimeError("CLEANING_SCHEMA and DROPPED_COLUMNS disagree")

_RACES: tuple[str, ...] = (
    "AMERICAN INDIAN/ALASKAN NATIVE",
    "ASIAN / PACIFIC ISLANDER",
    "BLACK",
    "BLACK HISPANIC",
    "WHITE",
    "WHITE HISPANIC",
    "UNKNOWN",
)
_AGE_GROUPS: tuple[str, ...] = ("<18", "18-24", "25-44", "45-64", "65+", "UNKNOWN")
_SEXES: tuple[str, ...] = ("F", "M", "U")

# Known domain per categorical field; the order is the enumeration order used
# to break ties. Values seen in the data but not listed here are appended in
# sorted order.
CATEGORY_DOMAINS: dict[str, tuple[str, ...]] = {
    "boro": ("BRONX", "BROOKLYN", "MANHATTAN", "QUEENS", "STATEN ISLAND"),
    "perp_age_group": _AGE_GROUPS,
    "perp_sex": _SEXES,
    "perp_race": _RACES,
    "vic_age_group": _AGE_GROUPS,
    "vic_sex": _SEXES,
    "vic_race": _RACES,
}


def categorical_columns() -> list[str]:
    """Fields stored as pandas categoricals after cleaning."""
    return [name for name, kind in CLEANING_SCHEMA.items() if kind in ("category", "code")]


def kept_columns() -> list[str]:
    """Fields present in the cleaned frame, in schema order."""
    return [name for name, kind in CLEANING_SCHEMA.items() if kind != "dropped"]
