"""Logging utilities for the project.

Provides helpers that log summaries of the monthly series around the cutoff.
"""

from __future__ import annotations

import logging

import pandas as pd

from incident_forecast.config_logging import get_logger

__all__ = [
    "log_series_summary",
]


def _log_period_range(series: pd.Series, label: str, logger_instance: logging.Logger) -> None:
    """Log first and last month of a series with a PeriodIndex."""
    if series.empty or not isinstance(series.index, pd.PeriodIndex):
        return
    logger_instance.info(f"{label} period: {series.index[0]} → {series.index[-1]}")


def _log_series_statistics(series: pd.Series, label: str, logger_instance: logging.Logger) -> None:
    """Log basic statistics for a count series."""
    if series.empty:
        return
    logger_instance.info(
        f"{label} statistics - Total: {int(series.sum())}, "
        f"Mean: {series.mean():.2f}, "
        f"Min: {series.min()}, "
        f"Max: {series.max()}"
    )


def log_series_summary(
    historical: pd.Series,
    actual: pd.Series,
    *,
    logger_instance: logging.Logger | None = None,
) -> None:
    """Log summary statistics for the historical and actual monthly counts.

    Args:
        historical: Monthly counts before the cutoff.
        actual: Monthly counts from the cutoff onward.
        logger_instance: Optional logger instance. If None, uses get_logger().
    """
    if logger_instance is None:
        logger_instance = get_logger(__name__)

    logger_instance.info(f"Historical window: {len(historical)} months")
    _log_period_range(historical, "Historical", logger_instance)
    _log_series_statistics(historical, "Historical", logger_instance)

    logger_instance.info(f"Actual window: {len(actual)} months")
    _log_period_range(actual, "Actual", logger_instance)
    _log_series_statistics(actual, "Actual", logger_instance)
