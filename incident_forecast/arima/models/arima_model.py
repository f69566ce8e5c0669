"""Seasonal ARIMA model creation and fitting functions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
import warnings

import numpy as np
import pandas as pd
from statsmodels.tsa.statespace.sarimax import SARIMAX

from incident_forecast.aggregation.time_series import MonthlySeries
from incident_forecast.constants import (
    ARIMA_EMPTY_TRAINING_SERIES_MSG,
    ARIMA_FIT_MAXITER,
    SEASONAL_PERIOD,
)
from incident_forecast.exceptions import ModelFitError
from incident_forecast.utils import get_logger, suppress_statsmodels_warnings

logger = get_logger(__name__)

# Type alias for the statsmodels results object (SARIMAXResults)
SarimaxResults = Any


@dataclass(frozen=True)
class CandidateOrder:
    """Orders of a seasonal ARIMA model (p, d, q)(P, D, Q)[s]."""

    p: int
    d: int
    q: int
    P: int = 0
    D: int = 0
    Q: int = 0
    s: int = SEASONAL_PERIOD

    def __post_init__(self) -> None:
        for name in ("p", "d", "q", "P", "D", "Q"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative, got {getattr(self, name)}")
        if self.s < 0:
            raise ValueError(f"s must be non-negative, got {self.s}")

    @property
    def order(self) -> tuple[int, int, int]:
        return (self.p, self.d, self.q)

    @property
    def seasonal_order(self) -> tuple[int, int, int, int]:
        return (self.P, self.D, self.Q, self.s)

    @property
    def total_order(self) -> int:
        """p + q + P + Q, the complexity used to break AIC ties."""
        return self.p + self.q + self.P + self.Q

    @property
    def trend(self) -> str:
        """Constant only when the model is not differenced."""
        return "c" if self.d + self.D == 0 else "n"

    def __str__(self) -> str:
        return f"ARIMA({self.p},{self.d},{self.q})({self.P},{self.D},{self.Q})[{self.s}]"


@dataclass(frozen=True)
class FittedModel:
    """A fitted candidate: estimated coefficients, residuals and scores."""

    candidate: CandidateOrder
    trend: str
    params: dict[str, float]
    residuals: pd.Series = field(compare=False, repr=False)
    aic: float
    bic: float
    llf: float
    converged: bool
    nobs: int
    burn: int
    results: SarimaxResults = field(compare=False, repr=False)

    @property
    def effective_residuals(self) -> pd.Series:
        """Residuals after the likelihood burn-in of differenced models."""
        return self.residuals.iloc[self.burn :]


def training_series(series: MonthlySeries | pd.Series) -> pd.Series:
    """Float series suitable for SARIMAX.

    Raises:
        ValueError: If the series is empty.
    """
    y = series.as_float() if isinstance(series, MonthlySeries) else series.astype(float)
    if y.empty:
        raise ValueError(ARIMA_EMPTY_TRAINING_SERIES_MSG)
    return y


def _check_model_convergence(results: SarimaxResults, candidate: CandidateOrder) -> bool:
    """Check if the fitted model converged and log a warning if not."""
    converged = True
    if hasattr(results, "mle_retvals") and results.mle_retvals is not None:
        converged = bool(results.mle_retvals.get("converged", False))
    if not converged:
        logger.warning(
            "%s did not converge; AIC/BIC values may be unreliable",
            candidate,
        )
    return converged


def _create_and_fit_model(
    y: pd.Series,
    candidate: CandidateOrder,
    maxiter: int,
) -> SarimaxResults:
    """Create and fit a SARIMAX model for the candidate.

    Raises:
        ModelFitError: If statsmodels fails to build or fit the model.
    """
    with warnings.catch_warnings():
        suppress_statsmodels_warnings()
        try:
            model = SARIMAX(
                y,
                order=candidate.order,
                seasonal_order=candidate.seasonal_order,
                trend=candidate.trend,
                enforce_stationarity=True,
                enforce_invertibility=True,
            )
            # disp=False suppresses the L-BFGS-B optimisation output
            return model.fit(disp=False, maxiter=maxiter)
        except Exception as e:
            msg = f"Failed to fit {candidate}: {e}"
            logger.debug(msg)
            raise ModelFitError(msg, [str(candidate)]) from e


def fit_sarima_model(
    series: MonthlySeries | pd.Series,
    candidate: CandidateOrder,
    *,
    maxiter: int = ARIMA_FIT_MAXITER,
) -> FittedModel:
    """Fit a seasonal ARIMA model by maximum likelihood.

    Args:
        series: Training series (historical monthly counts).
        candidate: Orders to fit.
        maxiter: Maximum optimiser iterations.

    Returns:
        FittedModel with coefficients, residuals, AIC/BIC and the results object.

    Raises:
        ValueError: If the series is empty.
        ModelFitError: If fitting fails.
    """
    y = training_series(series)
    logger.debug(f"Fitting {candidate} (trend={candidate.trend}) on {len(y)} observations")

    results = _create_and_fit_model(y, candidate, maxiter)
    converged = _check_model_convergence(results, candidate)

    aic = float(results.aic)
    if np.isfinite(aic):
        logger.debug(f"{candidate} fitted - AIC: {aic:.2f}")

    params = results.params
    return FittedModel(
        candidate=candidate,
        trend=candidate.trend,
        params={str(k): float(v) for k, v in params.items()},
        residuals=pd.Series(np.asarray(results.resid, dtype=float), index=y.index, name="residuals"),
        aic=aic,
        bic=float(results.bic),
        llf=float(results.llf),
        converged=converged,
        nobs=int(results.nobs),
        burn=int(getattr(results, "loglikelihood_burn", 0)),
        results=results,
    )
