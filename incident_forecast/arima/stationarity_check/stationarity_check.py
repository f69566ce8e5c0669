"""Stationarity analysis of the historical monthly series.

This module provides small, focused helpers to:
- run ADF and KPSS on a pandas Series and combine them into a single verdict
- compute ACF / PACF with confidence bounds
- recommend non-seasonal (KPSS on successive differences) and seasonal
  (STL seasonal strength) differencing orders

Short or constant series make the tests weak or undefined. That is reported
through the ``low_power`` flag and ``skipped_tests``, never raised: a test
that cannot run yields NaN statistics and the differencing advice falls back
to d = D = 0.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Literal, TypedDict
import warnings

import numpy as np
import pandas as pd
from scipy import stats
from statsmodels.tools.sm_exceptions import InterpolationWarning
from statsmodels.tsa.seasonal import STL
from statsmodels.tsa.stattools import acf, adfuller, kpss, pacf

from incident_forecast.aggregation.time_series import MonthlySeries
from incident_forecast.constants import (
    ACF_PACF_DEFAULT_LAGS,
    ACF_PACF_MIN_LAGS,
    SEASONAL_PERIOD,
    SEASONAL_STRENGTH_THRESHOLD,
    STATIONARITY_DEFAULT_ALPHA,
    STATIONARITY_LOW_POWER_NOBS,
    STATIONARITY_MAX_D,
    STATIONARITY_MAX_SEASONAL_D,
)
from incident_forecast.utils import get_logger, validate_series

logger = get_logger(__name__)


class StationarityTestResult(TypedDict):
    """Typed structure for a single stationarity test result."""

    statistic: float
    p_value: float
    lags: int | None
    nobs: int | None
    critical_values: dict[str, float] | None


@dataclass(frozen=True)
class Correlogram:
    """ACF / PACF values for lags 1..n with a symmetric confidence bound."""

    lags: list[int]
    acf: list[float]
    pacf: list[float]
    bound: float
    confidence: float

    def significant_acf_lags(self) -> list[int]:
        return [lag for lag, value in zip(self.lags, self.acf) if abs(value) > self.bound]

    def significant_pacf_lags(self) -> list[int]:
        return [lag for lag, value in zip(self.lags, self.pacf) if abs(value) > self.bound]


@dataclass(frozen=True)
class StationarityReport:
    """Combined ADF + KPSS verdict, correlogram and differencing advice."""

    stationary: bool
    alpha: float
    adf: StationarityTestResult
    kpss: StationarityTestResult
    correlogram: Correlogram
    recommended_d: int
    recommended_seasonal_d: int
    seasonal_strength: float
    nobs: int
    low_power: bool
    skipped_tests: list[str] = field(default_factory=list)


def _convert_test_result(
    stat: float,
    pval: float,
    lags: int | None,
    nobs: int | None,
    crit: dict[str, float] | None,
) -> StationarityTestResult:
    """Convert raw test outputs to a StationarityTestResult mapping."""
    return {
        "statistic": float(stat),
        "p_value": float(pval),
        "lags": int(lags) if lags is not None else None,
        "nobs": int(nobs) if nobs is not None else None,
        "critical_values": (
            {str(k): float(v) for k, v in crit.items()} if crit is not None else None
        ),
    }


def _as_series(series: MonthlySeries | pd.Series) -> pd.Series:
    if isinstance(series, MonthlySeries):
        return series.as_float()
    return series


def adf_test(series: pd.Series, *, autolag: str = "AIC") -> StationarityTestResult:
    """Run Augmented Dickey–Fuller test.

    The number of lags is automatically selected based on the specified criterion
    (default: AIC).

    Args:
        series: Input time series.
        autolag: Criterion for lag selection ("AIC", "BIC", "t-stat", or None).

    Returns:
        StationarityTestResult with statistic, p-value, lags (auto-selected),
        nobs, and critical values.
    """
    s = validate_series(series)
    result = adfuller(s, autolag=autolag)
    # First five entries are (adfstat, pvalue, usedlag, nobs, criticalvalues)
    stat, pval, lags, nobs, crit = result[0], result[1], result[2], result[3], result[4]  # type: ignore[misc]
    lags_int = int(lags) if isinstance(lags, (int, np.integer)) else None
    nobs_int = int(nobs) if isinstance(nobs, (int, np.integer)) else None
    crit_dict = {str(k): float(v) for k, v in crit.items()} if isinstance(crit, dict) else None
    return _convert_test_result(float(stat), float(pval), lags_int, nobs_int, crit_dict)


def kpss_test(
    series: pd.Series,
    *,
    regression: Literal["c", "ct"] = "c",
) -> StationarityTestResult:
    """Run KPSS test for (trend-)stationarity.

    The number of lags uses the Newey–West bandwidth. Reported p-values are
    interpolated from a table and therefore clipped to [0.01, 0.1].

    Args:
        series: Input time series.
        regression: "c" (level) or "ct" (trend).

    Returns:
        StationarityTestResult with statistic, p-value, lags, nobs and critical values.
    """
    s = validate_series(series)
    with warnings.catch_warnings():
        warnings.filterwarnings("ignore", category=InterpolationWarning)
        stat, pval, lags, crit = kpss(s, regression=regression, nlags="auto")
    return _convert_test_result(stat, pval, lags, s.size, crit)


def _determine_stationarity(
    adf_res: StationarityTestResult,
    kpss_res: StationarityTestResult,
    alpha: float,
) -> bool:
    """Determine stationarity verdict from ADF and KPSS test results.

    Rule of thumb:
    - ADF p < alpha (reject unit root)
    - KPSS p > alpha (do not reject stationarity)

    ⇒ stationary = True, otherwise False.
    """
    adf_rejects_unit_root = adf_res["p_value"] < alpha
    kpss_p = kpss_res["p_value"]
    kpss_accepts_stationarity = np.isnan(kpss_p) or kpss_p > alpha
    return bool(adf_rejects_unit_root and kpss_accepts_stationarity)


# Failures statsmodels raises on short or degenerate input
_TEST_ERRORS = (ValueError, ZeroDivisionError, np.linalg.LinAlgError)


def _unavailable_result(nobs: int) -> StationarityTestResult:
    """NaN result recorded for a test that could not run."""
    return _convert_test_result(float("nan"), float("nan"), None, nobs, None)


def _run_test(
    name: str,
    test: Callable[[pd.Series], StationarityTestResult],
    series: pd.Series,
    skipped: list[str],
) -> StationarityTestResult:
    """Run one stationarity test, recording it as skipped if statsmodels rejects the input."""
    try:
        return test(series)
    except _TEST_ERRORS as e:
        logger.warning("%s skipped on %d observations: %s", name, series.size, e)
        skipped.append(name)
        return _unavailable_result(int(series.size))


def correlogram_lags(nobs: int, max_lags: int = ACF_PACF_DEFAULT_LAGS) -> int:
    """Number of ACF / PACF lags usable on ``nobs`` observations."""
    return max(0, min(max_lags, nobs // 2 - 1))


def compute_correlogram(
    series: pd.Series,
    *,
    max_lags: int = ACF_PACF_DEFAULT_LAGS,
    alpha: float = STATIONARITY_DEFAULT_ALPHA,
) -> Correlogram:
    """Compute ACF and PACF for lags 1..min(max_lags, n//2 - 1).

    The bound is the large-sample white-noise band ``z_{1-alpha/2} / sqrt(n)``.
    A series too short for a single lag, or a constant one, gives an empty
    correlogram.
    """
    s = validate_series(series)
    nlags = correlogram_lags(s.size, max_lags)
    bound = float(stats.norm.ppf(1 - alpha / 2) / np.sqrt(s.size))
    if nlags < ACF_PACF_MIN_LAGS or s.nunique() == 1:
        logger.warning("ACF/PACF undefined on %d observations (constant or too short)", s.size)
        return Correlogram(lags=[], acf=[], pacf=[], bound=bound, confidence=1 - alpha)

    values = s.to_numpy()
    acf_values = acf(values, nlags=nlags, fft=True)
    pacf_values = pacf(values, nlags=nlags, method="ywm")
    return Correlogram(
        lags=list(range(1, nlags + 1)),
        acf=[float(v) for v in acf_values[1:]],
        pacf=[float(v) for v in pacf_values[1:]],
        bound=bound,
        confidence=1 - alpha,
    )


def seasonal_strength(series: pd.Series, *, period: int = SEASONAL_PERIOD) -> float:
    """STL seasonal strength ``max(0, 1 - Var(R) / Var(S + R))``.

    Returns 0.0 when fewer than two full cycles are available or the series
    is constant.
    """
    s = validate_series(series)
    if s.size < 2 * period or s.nunique() == 1:
        return 0.0
    result = STL(s.to_numpy(), period=period).fit()
    remainder = np.asarray(result.resid)
    detrended = np.asarray(result.seasonal) + remainder
    denominator = float(np.var(detrended))
    if denominator <= 0:
        return 0.0
    return max(0.0, 1.0 - float(np.var(remainder)) / denominator)


def recommend_seasonal_differencing(
    series: pd.Series,
    *,
    period: int = SEASONAL_PERIOD,
    threshold: float = SEASONAL_STRENGTH_THRESHOLD,
    max_seasonal_d: int = STATIONARITY_MAX_SEASONAL_D,
) -> tuple[int, float]:
    """Return (D, strength): one seasonal difference when the strength exceeds the threshold."""
    strength = seasonal_strength(series, period=period)
    seasonal_d = 1 if strength > threshold and max_seasonal_d >= 1 else 0
    return seasonal_d, strength


def recommend_differencing(
    series: pd.Series,
    *,
    alpha: float = STATIONARITY_DEFAULT_ALPHA,
    max_d: int = STATIONARITY_MAX_D,
) -> int:
    """Smallest d for which KPSS no longer rejects level stationarity.

    Differencing stops at ``max_d``, when too few observations remain or
    when KPSS cannot run on what is left.
    """
    s = validate_series(series)
    d = 0
    while d < max_d:
        if s.size < 3 or s.nunique() == 1:
            break
        try:
            p_value = kpss_test(s)["p_value"]
        except _TEST_ERRORS as e:
            logger.warning("KPSS failed at d=%d, stopping there: %s", d, e)
            break
        if p_value > alpha:
            break
        s = s.diff().dropna()
        d += 1
    return d


def analyze_stationarity(
    series: MonthlySeries | pd.Series,
    *,
    alpha: float = STATIONARITY_DEFAULT_ALPHA,
    period: int = SEASONAL_PERIOD,
    max_lags: int = ACF_PACF_DEFAULT_LAGS,
    max_d: int = STATIONARITY_MAX_D,
) -> StationarityReport:
    """Run ADF, KPSS, ACF/PACF and differencing recommendations on a series.

    Rule: ADF p < alpha AND KPSS p > alpha ⇒ stationary = True.

    The seasonal order D is chosen first; d is then chosen on the seasonally
    differenced series. On a constant series, or one too short for a test,
    the affected tests are listed in ``skipped_tests`` with NaN results,
    ``low_power`` is set and the recommendation falls back to d = D = 0.

    Args:
        series: Historical monthly counts.
        alpha: Significance level (must be between 0 and 1).
        period: Seasonal period.
        max_lags: Upper bound on ACF / PACF lags.
        max_d: Upper bound on the recommended non-seasonal differencing order.

    Returns:
        StationarityReport with combined verdict and test results.

    Raises:
        ValueError: If alpha is not in (0, 1).
    """
    if not 0 < alpha < 1:
        raise ValueError(f"alpha must be in (0, 1), got {alpha}")

    s = validate_series(_as_series(series), name="historical series")
    nobs = int(s.size)
    skipped: list[str] = []

    if s.nunique() == 1:
        logger.warning(
            "Historical series is constant (%g); ADF, KPSS and STL are undefined", s.iloc[0]
        )
        skipped.extend(["adf", "kpss", "stl"])
        adf_res = _unavailable_result(nobs)
        kpss_res = _unavailable_result(nobs)
    else:
        adf_res = _run_test("adf", adf_test, s, skipped)
        kpss_res = _run_test("kpss", kpss_test, s, skipped)

    stationary = _determine_stationarity(adf_res, kpss_res, alpha)
    correlogram = compute_correlogram(s, max_lags=max_lags, alpha=alpha)
    if not correlogram.lags:
        skipped.append("correlogram")

    if skipped:
        seasonal_d, strength, d = 0, 0.0, 0
    else:
        seasonal_d, strength = recommend_seasonal_differencing(s, period=period)
        base = s.diff(period).dropna() if seasonal_d else s
        d = recommend_differencing(base, alpha=alpha, max_d=max_d)

    low_power = nobs < STATIONARITY_LOW_POWER_NOBS or bool(skipped)
    if low_power:
        logger.warning(
            "Stationarity tests have low power on %d monthly observations (skipped: %s)",
            nobs,
            skipped or "none",
        )

    logger.info(
        "Stationary=%s (alpha=%.3f, ADF p=%.4f, KPSS p=%.4f); recommended d=%d, D=%d "
        "(seasonal strength %.2f)",
        stationary,
        alpha,
        adf_res["p_value"],
        kpss_res["p_value"],
        d,
        seasonal_d,
        strength,
    )
    return StationarityReport(
        stationary=stationary,
        alpha=float(alpha),
        adf=adf_res,
        kpss=kpss_res,
        correlogram=correlogram,
        recommended_d=d,
        recommended_seasonal_d=seasonal_d,
        seasonal_strength=float(strength),
        nobs=nobs,
        low_power=low_power,
        skipped_tests=skipped,
    )
