"""Residual diagnostics for the fitted counterfactual model.

Residual autocorrelation (Ljung–Box) and normality (Jarque–Bera) are quality
flags: a failed test is logged and attached to the forecast, never raised.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Sequence, TypedDict

import numpy as np
from scipy import stats
from statsmodels.stats.diagnostic import acorr_ljungbox

from incident_forecast.arima.forecasting.forecasting import ForecastResult
from incident_forecast.constants import LJUNG_BOX_ALPHA, LJUNG_BOX_LAGS
from incident_forecast.utils import get_logger

logger = get_logger(__name__)

__all__ = [
    "LjungBoxReport",
    "NormalityResult",
    "jarque_bera_test",
    "ljung_box_test",
    "validate_residuals",
]


@dataclass(frozen=True)
class LjungBoxReport:
    """Ljung–Box statistics and p-values per tested lag."""

    lags: list[int]
    q_stat: list[float]
    p_values: list[float]
    reject_5pct: list[bool]
    n: int
    alpha: float
    white_noise: bool
    skipped_lags: list[int]


class NormalityResult(TypedDict):
    """Jarque–Bera statistic with the sample moments it is built from."""

    statistic: float
    p_value: float
    skewness: float
    kurtosis: float
    n: int


def _finite(residuals: Iterable[float]) -> np.ndarray:
    res = np.asarray(list(residuals), dtype=float)
    return res[np.isfinite(res)]


def ljung_box_test(
    residuals: Iterable[float],
    lags: Sequence[int] = LJUNG_BOX_LAGS,
    *,
    model_df: int = 0,
    alpha: float = LJUNG_BOX_ALPHA,
) -> LjungBoxReport:
    """Run Ljung–Box on residuals at each requested lag.

    Lags that are not smaller than the number of residuals, or not larger
    than ``model_df``, are skipped with a warning.

    Args:
        residuals: Model residuals (non-finite values are dropped).
        lags: Lags to test.
        model_df: Degrees of freedom consumed by the model.
        alpha: Significance level of the white-noise verdict.

    Returns:
        LjungBoxReport; ``white_noise`` is True when every p-value exceeds alpha
        and at least one lag was tested.
    """
    res = _finite(residuals)
    n = int(res.size)
    requested = sorted({int(lag) for lag in lags})
    usable = [lag for lag in requested if model_df < lag < n]
    skipped = [lag for lag in requested if lag not in usable]
    if skipped:
        logger.warning(
            "Ljung-Box lags %s skipped: %d residuals, %d model degrees of freedom",
            skipped,
            n,
            model_df,
        )
    if not usable:
        logger.warning("No Ljung-Box lag could be tested on %d residuals", n)
        return LjungBoxReport(
            lags=[],
            q_stat=[],
            p_values=[],
            reject_5pct=[],
            n=n,
            alpha=float(alpha),
            white_noise=False,
            skipped_lags=skipped,
        )

    lb = acorr_ljungbox(res, lags=usable, model_df=model_df, return_df=True)
    q_stat = [float(v) for v in lb["lb_stat"].to_numpy()]
    p_values = [float(v) for v in lb["lb_pvalue"].to_numpy()]
    return LjungBoxReport(
        lags=usable,
        q_stat=q_stat,
        p_values=p_values,
        reject_5pct=[p < 0.05 for p in p_values],
        n=n,
        alpha=float(alpha),
        white_noise=all(p > alpha for p in p_values),
        skipped_lags=skipped,
    )


def jarque_bera_test(residuals: Iterable[float]) -> NormalityResult | None:
    """Jarque–Bera test for normality of residuals.

    H0: residuals are normally distributed. Returns None with fewer than
    three finite residuals.
    """
    res = _finite(residuals)
    if res.size < 3:
        return None
    jb = stats.jarque_bera(res)
    return {
        "statistic": float(jb.statistic),
        "p_value": float(jb.pvalue),
        "skewness": float(stats.skew(res)),
        "kurtosis": float(stats.kurtosis(res, fisher=True)),
        "n": int(res.size),
    }


def validate_residuals(
    forecast: ForecastResult,
    lags: Sequence[int] = LJUNG_BOX_LAGS,
    *,
    model_df: int = 0,
    alpha: float = LJUNG_BOX_ALPHA,
) -> ForecastResult:
    """Attach residual diagnostics to a forecast.

    Args:
        forecast: Forecast whose residuals are tested.
        lags: Ljung–Box lags.
        model_df: Degrees of freedom consumed by the model.
        alpha: Significance level.

    Returns:
        New ForecastResult carrying the Ljung–Box report, the white-noise
        flag and the normality test.
    """
    report = ljung_box_test(forecast.residuals, lags, model_df=model_df, alpha=alpha)
    normality = jarque_bera_test(forecast.residuals)

    if report.white_noise:
        logger.info(
            "Residuals of %s look like white noise (Ljung-Box p-values %s)",
            forecast.candidate,
            [round(p, 4) for p in report.p_values],
        )
    else:
        rejected = [lag for lag, p in zip(report.lags, report.p_values) if p <= alpha]
        logger.warning(
            "Residuals of %s are autocorrelated at lags %s (alpha=%.2f); "
            "forecast intervals may be too narrow",
            forecast.candidate,
            rejected or "n/a",
            alpha,
        )
    if normality is not None and normality["p_value"] < alpha:
        logger.info(
            "Residuals depart from normality (Jarque-Bera p=%.4f, skew=%.2f, kurtosis=%.2f)",
            normality["p_value"],
            normality["skewness"],
            normality["kurtosis"],
        )

    return replace(
        forecast,
        ljung_box=report,
        residuals_white_noise=report.white_noise,
        normality=normality,
    )
