"""Data cleaning module for raw incident records."""

from __future__ import annotations

from incident_forecast.data_cleaning.data_cleaning import clean_incidents
from incident_forecast.data_cleaning.records import (
    IncidentRecord,
    frame_to_records,
    records_to_frame,
)
from incident_forecast.data_cleaning.schema import CLEANING_SCHEMA

__all__ = [
    "CLEANING_SCHEMA",
    "IncidentRecord",
    "clean_incidents",
    "frame_to_records",
    "records_to_frame",
]
