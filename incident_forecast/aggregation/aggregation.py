"""Aggregation of imputed incidents into monthly count series.

Records are split at the cutoff date into a historical window (strictly
before) and an actual window (from the cutoff on). Each window is counted per
calendar month and every month of the window is present, with 0 where no
record falls. A plain group-by would omit empty months and shift the seasonal
alignment of everything after them.
"""

from __future__ import annotations

from dataclasses import dataclass

import pandas as pd

from incident_forecast.aggregation.time_series import MonthlySeries
from incident_forecast.constants import (
    DATE_COLUMN,
    DEFAULT_CUTOFF_DATE,
    MONTHLY_FREQ,
    SEASONAL_PERIOD,
    SEVERITY_COLUMN,
)
from incident_forecast.exceptions import ValidationError
from incident_forecast.utils import get_logger, log_series_summary, validate_required_columns

logger = get_logger(__name__)

__all__ = [
    "SeriesSplit",
    "aggregate_monthly_counts",
    "build_monthly_series",
    "count_by_category",
]


@dataclass(frozen=True)
class SeriesSplit:
    """Historical and actual windows around the cutoff."""

    historical: MonthlySeries
    actual: MonthlySeries
    cutoff: pd.Timestamp


def aggregate_monthly_counts(
    dates: pd.Series,
    *,
    start: pd.Period | None = None,
    end: pd.Period | None = None,
    name: str = "incidents",
) -> MonthlySeries:
    """Count dates per calendar month, zero-filling every month in range.

    Args:
        dates: Incident dates (datetime64).
        start: First month of the output. Defaults to the earliest date's month.
        end: Last month of the output. Defaults to the latest date's month.
        name: Series name.

    Returns:
        MonthlySeries covering ``start..end``.

    Raises:
        ValidationError: If there are no dates and no explicit range, or if
            some dates fall outside ``start..end``.
    """
    months = dates.dt.to_period(MONTHLY_FREQ)
    if months.empty and (start is None or end is None):
        raise ValidationError(f"{name}: no records to aggregate")

    start = start if start is not None else months.min()
    end = end if end is not None else months.max()
    index = pd.period_range(start, end, freq=MONTHLY_FREQ)

    counts = months.value_counts().reindex(index, fill_value=0).astype("int64")
    if int(counts.sum()) != len(months):
        outside = len(months) - int(counts.sum())
        raise ValidationError(f"{name}: {outside} record(s) fall outside {start}..{end}")

    n_empty = int((counts == 0).sum())
    if n_empty:
        logger.info(f"{name}: {n_empty} month(s) without records kept as zero counts")
    return MonthlySeries(counts, frequency=SEASONAL_PERIOD, name=name)


def _parse_cutoff(cutoff: str | pd.Timestamp) -> pd.Timestamp:
    ts = pd.Timestamp(cutoff)
    if ts != ts.normalize() or ts.day != 1:
        raise ValidationError(f"cutoff must be the first day of a month, got {ts}")
    return ts


def build_monthly_series(
    df: pd.DataFrame,
    cutoff: str | pd.Timestamp = DEFAULT_CUTOFF_DATE,
    *,
    severity_only: bool = False,
) -> SeriesSplit:
    """Split incidents at the cutoff and count both windows per month.

    The historical window runs from the month of the first record up to the
    month before the cutoff; the actual window from the cutoff month up to
    the month of the last record. Together they form one contiguous range.

    Args:
        df: Imputed incident frame.
        cutoff: First day of the post-shock window.
        severity_only: Count only records with the severity flag set.

    Returns:
        SeriesSplit with the two monthly series.

    Raises:
        ValidationError: If the cutoff is not a month start or either window
            has no records.
    """
    validate_required_columns(df, [DATE_COLUMN, SEVERITY_COLUMN], df_name="Imputed incidents")
    cutoff_ts = _parse_cutoff(cutoff)
    cutoff_month = cutoff_ts.to_period(MONTHLY_FREQ)

    dates = df[DATE_COLUMN]
    if severity_only:
        dates = dates[df[SEVERITY_COLUMN].astype(bool)]
        logger.info(f"Counting {len(dates)} records with the severity flag set")

    before = dates[dates < cutoff_ts]
    after = dates[dates >= cutoff_ts]
    if before.empty:
        raise ValidationError(f"No records before the cutoff {cutoff_ts.date()}")
    if after.empty:
        raise ValidationError(f"No records on or after the cutoff {cutoff_ts.date()}")

    historical = aggregate_monthly_counts(
        before,
        start=before.min().to_period(MONTHLY_FREQ),
        end=cutoff_month - 1,
        name="historical",
    )
    actual = aggregate_monthly_counts(
        after,
        start=cutoff_month,
        end=after.max().to_period(MONTHLY_FREQ),
        name="actual",
    )
    log_series_summary(historical.counts, actual.counts, logger_instance=logger)
    return SeriesSplit(historical=historical, actual=actual, cutoff=cutoff_ts)


def count_by_category(df: pd.DataFrame, column: str) -> pd.DataFrame:
    """Counts and shares per category of ``column`` (missing values included).

    Args:
        df: Incident frame.
        column: Categorical column to break down.

    Returns:
        DataFrame indexed by category with ``count`` and ``share``, largest first.
    """
    validate_required_columns(df, [column], df_name="Incidents")
    counts = df[column].value_counts(dropna=False).sort_values(ascending=False, kind="mergesort")
    total = int(counts.sum())
    return pd.DataFrame(
        {
            "count": counts.astype("int64"),
            "share": counts / total if total else counts.astype(float),
        }
    )
