"""Comparison of the counterfactual forecast with the observed counts."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
import pandas as pd

from incident_forecast.aggregation.time_series import MonthlySeries
from incident_forecast.arima.forecasting.forecasting import FORECAST_COLUMNS, ForecastResult
from incident_forecast.exceptions import ValidationError
from incident_forecast.utils import get_logger, validate_required_columns

logger = get_logger(__name__)

__all__ = [
    "CounterfactualComparison",
    "compare_forecast_to_actual",
]


@dataclass(frozen=True)
class CounterfactualComparison:
    """Totals of forecast and observed counts over their common months.

    Attributes:
        months: Months present in both the forecast and the actual series.
        forecast_total: Sum of the point forecasts.
        actual_total: Sum of the observed counts.
        difference: Signed ``actual_total - forecast_total``.
        absolute_difference: ``abs(difference)``.
        relative_ratio: ``actual_total / forecast_total`` (NaN if the forecast
            total is not positive).
        relative_change: ``relative_ratio - 1``.
        lower_total: Sum of the lower interval bounds (a rough band, not an
            interval for the total).
        upper_total: Sum of the upper interval bounds.
        per_month: Month-indexed forecast, bounds, actual and difference.
    """

    months: list[pd.Period]
    forecast_total: float
    actual_total: int
    difference: float
    absolute_difference: float
    relative_ratio: float
    relative_change: float
    lower_total: float
    upper_total: float
    per_month: pd.DataFrame = field(compare=False, repr=False)

    @property
    def actual_outside_band(self) -> bool:
        return not self.lower_total <= self.actual_total <= self.upper_total


def _forecast_frame(forecast: ForecastResult | pd.DataFrame) -> pd.DataFrame:
    frame = forecast.frame if isinstance(forecast, ForecastResult) else forecast
    validate_required_columns(frame, FORECAST_COLUMNS, df_name="Forecast")
    return frame


def _actual_series(actual: MonthlySeries | pd.Series) -> pd.Series:
    return actual.counts if isinstance(actual, MonthlySeries) else actual


def compare_forecast_to_actual(
    forecast: ForecastResult | pd.DataFrame,
    actual: MonthlySeries | pd.Series,
) -> CounterfactualComparison:
    """Sum forecast and observed counts over the months both cover.

    Args:
        forecast: Forecast result (or its month-indexed frame).
        actual: Observed monthly counts from the cutoff on.

    Returns:
        CounterfactualComparison of the totals.

    Raises:
        ValidationError: If forecast and actual share no month.
    """
    frame = _forecast_frame(forecast)
    observed = _actual_series(actual)

    common = frame.index.intersection(observed.index)
    if len(common) == 0:
        raise ValidationError(
            "Forecast and actual series share no month "
            f"(forecast {frame.index.min()}..{frame.index.max()}, "
            f"actual {observed.index.min()}..{observed.index.max()})"
        )
    if len(common) < len(frame):
        logger.warning(
            "Only %d of %d forecast months have observed counts", len(common), len(frame)
        )

    per_month = frame.loc[common, FORECAST_COLUMNS].copy()
    per_month["actual"] = observed.loc[common].astype("int64")
    per_month["difference"] = per_month["actual"] - per_month["forecast"]

    forecast_total = float(per_month["forecast"].sum())
    actual_total = int(per_month["actual"].sum())
    if forecast_total > 0:
        ratio = actual_total / forecast_total
    else:
        logger.warning("Forecast total %.2f is not positive; ratio undefined", forecast_total)
        ratio = float(np.nan)

    comparison = CounterfactualComparison(
        months=list(common),
        forecast_total=forecast_total,
        actual_total=actual_total,
        difference=actual_total - forecast_total,
        absolute_difference=abs(actual_total - forecast_total),
        relative_ratio=float(ratio),
        relative_change=float(ratio - 1),
        lower_total=float(per_month["lower"].sum()),
        upper_total=float(per_month["upper"].sum()),
        per_month=per_month,
    )
    logger.info(
        "Over %d months: forecast %.1f, actual %d, difference %+.1f, ratio %.2f",
        len(common),
        comparison.forecast_total,
        comparison.actual_total,
        comparison.difference,
        comparison.relative_ratio,
    )
    return comparison
