"""Monthly aggregation of incidents around the cutoff."""

from __future__ import annotations

from incident_forecast.aggregation.aggregation import (
    SeriesSplit,
    aggregate_monthly_counts,
    build_monthly_series,
    count_by_category,
)
from incident_forecast.aggregation.time_series import MonthlyCount, MonthlySeries

__all__ = [
    "MonthlyCount",
    "MonthlySeries",
    "SeriesSplit",
    "aggregate_monthly_counts",
    "build_monthly_series",
    "count_by_category",
]
