"""End-to-end counterfactual pipeline.

Cleaner -> Imputer -> Aggregator -> StationarityAnalyzer -> ModelSelector ->
Forecaster -> ResidualValidator -> Comparator, run once on an in-memory record
sequence. Every stage consumes the previous stage's output and returns a new
value; diagnostic problems are collected as warning strings.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Sequence

import pandas as pd

from incident_forecast.aggregation import SeriesSplit, build_monthly_series
from incident_forecast.arima.forecasting import ForecastResult, forecast_counterfactual
from incident_forecast.arima.model_selection import (
    SearchConfig,
    SelectionResult,
    select_best_model,
)
from incident_forecast.arima.residual_diagnostics import validate_residuals
from incident_forecast.arima.stationarity_check import StationarityReport, analyze_stationarity
from incident_forecast.constants import (
    DEFAULT_CUTOFF_DATE,
    FORECAST_CONFIDENCE_LEVEL,
    FORECAST_HORIZON,
    LJUNG_BOX_LAGS,
)
from incident_forecast.counterfactual import CounterfactualComparison, compare_forecast_to_actual
from incident_forecast.data_cleaning import IncidentRecord, clean_incidents
from incident_forecast.imputation import (
    ImputationStrategy,
    ImputationSummary,
    impute_perpetrator_race,
)
from incident_forecast.utils import get_logger

logger = get_logger(__name__)

__all__ = [
    "PipelineResult",
    "run_counterfactual_pipeline",
]


@dataclass(frozen=True)
class PipelineResult:
    """Every stage output of one pipeline run."""

    imputed: pd.DataFrame = field(repr=False)
    imputation: ImputationSummary
    split: SeriesSplit
    stationarity: StationarityReport
    selection: SelectionResult
    forecast: ForecastResult
    comparison: CounterfactualComparison
    warnings: list[str] = field(default_factory=list)

    def to_report(self) -> dict[str, Any]:
        """JSON-serialisable summary of the run."""
        best = self.selection.best
        forecast = self.forecast
        comparison = self.comparison
        return {
            "cutoff": str(self.split.cutoff.date()),
            "n_records": int(len(self.imputed)),
            "imputation": asdict(self.imputation),
            "series": {
                name: {
                    "start": str(series.start),
                    "end": str(series.end),
                    "n_months": len(series),
                    "total": series.total,
                }
                for name, series in (
                    ("historical", self.split.historical),
                    ("actual", self.split.actual),
                )
            },
            "stationarity": asdict(self.stationarity),
            "model": {
                "order": str(best.candidate),
                "trend": best.trend,
                "aic": best.aic,
                "bic": best.bic,
                "params": best.params,
                "converged": best.converged,
                "n_steps": self.selection.n_steps,
                "timed_out": self.selection.timed_out,
            },
            "forecast": [
                {"month": str(month), **{k: float(v) for k, v in row.items()}}
                for month, row in forecast.frame.iterrows()
            ],
            "confidence_level": forecast.confidence_level,
            "residuals": {
                "ljung_box": asdict(forecast.ljung_box) if forecast.ljung_box else None,
                "white_noise": forecast.residuals_white_noise,
                "normality": forecast.normality,
            },
            "comparison": {
                "months": [str(m) for m in comparison.months],
                "forecast_total": comparison.forecast_total,
                "actual_total": comparison.actual_total,
                "difference": comparison.difference,
                "absolute_difference": comparison.absolute_difference,
                "relative_ratio": comparison.relative_ratio,
                "relative_change": comparison.relative_change,
                "lower_total": comparison.lower_total,
                "upper_total": comparison.upper_total,
            },
            "warnings": list(self.warnings),
        }


def _collect_warnings(
    stationarity: StationarityReport,
    selection: SelectionResult,
    forecast: ForecastResult,
    comparison: CounterfactualComparison,
) -> list[str]:
    warnings: list[str] = []
    if stationarity.skipped_tests:
        warnings.append(
            f"Stationarity tests skipped on {stationarity.nobs} monthly observations: "
            f"{', '.join(stationarity.skipped_tests)}; differencing defaults to d=0, D=0"
        )
    if stationarity.low_power:
        warnings.append(
            f"Low power: stationarity tests ran on only {stationarity.nobs} monthly observations"
        )
    if selection.timed_out:
        warnings.append(
            f"Order search stopped by its time budget after {selection.n_steps} fits"
        )
    if not selection.best.converged:
        warnings.append(f"Optimiser did not converge for {selection.best.candidate}")
    report = forecast.ljung_box
    if report is not None:
        if report.skipped_lags:
            warnings.append(f"Ljung-Box lags {report.skipped_lags} skipped (too few residuals)")
        if not forecast.residuals_white_noise:
            warnings.append(
                f"Residuals of {forecast.candidate} are not white noise "
                f"(Ljung-Box p-values {[round(p, 4) for p in report.p_values]})"
            )
    if len(comparison.months) < forecast.horizon:
        warnings.append(
            f"Only {len(comparison.months)} of {forecast.horizon} forecast months were observed"
        )
    return warnings


def run_counterfactual_pipeline(
    records: Sequence[IncidentRecord] | pd.DataFrame,
    *,
    cutoff: str | pd.Timestamp = DEFAULT_CUTOFF_DATE,
    horizon: int = FORECAST_HORIZON,
    level: float = FORECAST_CONFIDENCE_LEVEL,
    severity_only: bool = False,
    imputation_strategy: ImputationStrategy | None = None,
    search_config: SearchConfig | None = None,
    d: int | None = None,
    D: int | None = None,
    ljung_box_lags: Sequence[int] = LJUNG_BOX_LAGS,
) -> PipelineResult:
    """Run every stage on the given records.

    Args:
        records: Raw incident records (or the equivalent raw table).
        cutoff: First day of the post-shock window.
        horizon: Months to forecast.
        level: Forecast interval coverage.
        severity_only: Model only records with the severity flag set.
        imputation_strategy: Race imputation policy (default modal).
        search_config: Order search bounds and budgets.
        d: Non-seasonal differencing; defaults to the stationarity recommendation.
        D: Seasonal differencing; defaults to the stationarity recommendation.
        ljung_box_lags: Lags of the residual test.

    Returns:
        PipelineResult with every stage output and the diagnostic warnings.

    Raises:
        ParseError: If a raw date or flag is malformed.
        ValidationError: If the split or comparison has nothing to work on.
        ModelFitError: If no candidate order can be fitted.
    """
    logger.info("=" * 60)
    logger.info("COUNTERFACTUAL PIPELINE (cutoff %s, horizon %d)", cutoff, horizon)
    logger.info("=" * 60)

    cleaned = clean_incidents(records)
    imputed, imputation = impute_perpetrator_race(cleaned, imputation_strategy)
    split = build_monthly_series(imputed, cutoff, severity_only=severity_only)

    stationarity = analyze_stationarity(split.historical)
    d = stationarity.recommended_d if d is None else d
    D = stationarity.recommended_seasonal_d if D is None else D

    selection = select_best_model(split.historical, d, D, search_config)
    forecast = forecast_counterfactual(selection.best, horizon=horizon, level=level)
    forecast = validate_residuals(forecast, ljung_box_lags)
    comparison = compare_forecast_to_actual(forecast, split.actual)

    warnings = _collect_warnings(stationarity, selection, forecast, comparison)
    for message in warnings:
        logger.warning(message)

    logger.info("Pipeline finished with %d warning(s)", len(warnings))
    return PipelineResult(
        imputed=imputed,
        imputation=imputation,
        split=split,
        stationarity=stationarity,
        selection=selection,
        forecast=forecast,
        comparison=comparison,
        warnings=warnings,
    )
