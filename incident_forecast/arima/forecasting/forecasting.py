"""Counterfactual forecast of the post-cutoff window."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING
import warnings

import pandas as pd

from incident_forecast.arima.models.arima_model import CandidateOrder, FittedModel
from incident_forecast.constants import FORECAST_CONFIDENCE_LEVEL, FORECAST_HORIZON
from incident_forecast.utils import get_logger, suppress_statsmodels_warnings

if TYPE_CHECKING:
    from incident_forecast.arima.residual_diagnostics.residual_diagnostics import (
        LjungBoxReport,
        NormalityResult,
    )

logger = get_logger(__name__)

__all__ = [
    "FORECAST_COLUMNS",
    "ForecastResult",
    "forecast_counterfactual",
]

FORECAST_COLUMNS: list[str] = ["forecast", "lower", "upper"]


@dataclass(frozen=True)
class ForecastResult:
    """Point forecasts and interval bounds per month.

    Attributes:
        frame: Month-indexed DataFrame with ``forecast``, ``lower``, ``upper``.
        confidence_level: Nominal coverage of the interval.
        candidate: Orders of the model that produced the forecast.
        residuals: In-sample residuals of that model (burn-in excluded).
        ljung_box: Residual autocorrelation report, once validated.
        residuals_white_noise: Quality flag set with ``ljung_box``.
        normality: Jarque-Bera test on the residuals, once validated.
    """

    frame: pd.DataFrame
    confidence_level: float
    candidate: CandidateOrder
    residuals: pd.Series
    ljung_box: LjungBoxReport | None = None
    residuals_white_noise: bool | None = None
    normality: NormalityResult | None = None

    @property
    def horizon(self) -> int:
        return len(self.frame)


def forecast_counterfactual(
    model: FittedModel,
    horizon: int = FORECAST_HORIZON,
    level: float = FORECAST_CONFIDENCE_LEVEL,
) -> ForecastResult:
    """Forecast ``horizon`` months past the end of the training window.

    Args:
        model: Model chosen by the order search.
        horizon: Number of months to forecast.
        level: Interval coverage, strictly between 0 and 1.

    Returns:
        ForecastResult indexed by the forecast months.

    Raises:
        ValueError: If horizon < 1 or level is outside (0, 1).
    """
    if horizon < 1:
        raise ValueError(f"horizon must be >= 1, got {horizon}")
    if not 0 < level < 1:
        raise ValueError(f"level must be in (0, 1), got {level}")

    with warnings.catch_warnings():
        suppress_statsmodels_warnings()
        prediction = model.results.get_forecast(steps=horizon)
        summary = prediction.summary_frame(alpha=1 - level)

    frame = pd.DataFrame(
        {
            "forecast": summary["mean"].astype(float),
            "lower": summary["mean_ci_lower"].astype(float),
            "upper": summary["mean_ci_upper"].astype(float),
        },
        index=summary.index,
    )
    frame.index.name = "month"

    if (frame["forecast"] < 0).any():
        logger.warning(
            "%d forecast month(s) below zero; counts are modelled on a linear scale",
            int((frame["forecast"] < 0).sum()),
        )
    logger.info(
        "Forecast %d months with %s: total %.1f (%.0f%% band %.1f to %.1f)",
        horizon,
        model.candidate,
        frame["forecast"].sum(),
        level * 100,
        frame["lower"].sum(),
        frame["upper"].sum(),
    )
    return ForecastResult(
        frame=frame,
        confidence_level=float(level),
        candidate=model.candidate,
        residuals=model.effective_residuals,
    )
