"""Stepwise seasonal ARIMA order selection.

Hyndman–Khandakar style search: fit a small set of seed models, then keep
fitting the neighbours of the best model found so far until a round brings no
improvement, the step budget is used up or the wall-clock budget runs out.

Candidates are scored by AIC. Ties (within ``ARIMA_AIC_TIE_TOLERANCE``) go to
the lower total order p + q + P + Q, then to the candidate discovered first.
A round may be fitted by a process pool; results are always reduced in
discovery order, so the outcome does not depend on ``n_jobs``.
"""

from __future__ import annotations

from concurrent.futures import (
    Future,
    ProcessPoolExecutor,
    TimeoutError as FutureTimeoutError,
    as_completed,
)
from dataclasses import dataclass, replace
from typing import Literal, Sequence
import time

import numpy as np
import pandas as pd

from incident_forecast.aggregation.time_series import MonthlySeries
from incident_forecast.arima.model_selection.search_space import (
    SearchConfig,
    neighbour_orders,
    seed_orders,
)
from incident_forecast.arima.models.arima_model import (
    CandidateOrder,
    FittedModel,
    fit_sarima_model,
    training_series,
)
from incident_forecast.constants import ARIMA_AIC_TIE_TOLERANCE, ARIMA_SEARCH_PROGRESS_INTERVAL
from incident_forecast.exceptions import ModelFitError, SearchTimeoutError
from incident_forecast.utils import get_logger

logger = get_logger(__name__)

__all__ = [
    "CandidateScore",
    "SelectionResult",
    "select_best_model",
    "select_from_candidates",
]

CandidateStatus = Literal["ok", "not_converged", "failed"]

EVALUATED_COLUMNS: list[str] = [
    "order",
    "p",
    "d",
    "q",
    "P",
    "D",
    "Q",
    "s",
    "total_order",
    "aic",
    "status",
    "message",
]


@dataclass(frozen=True)
class CandidateScore:
    """Outcome of fitting one candidate during the search."""

    candidate: CandidateOrder
    aic: float
    status: CandidateStatus
    discovery: int
    message: str = ""

    @property
    def valid(self) -> bool:
        return self.status != "failed" and bool(np.isfinite(self.aic))


@dataclass(frozen=True)
class SelectionResult:
    """Chosen model and the record of every attempted order.

    Attributes:
        best: Winning model, refitted in the calling process.
        evaluated: One row per attempted order in discovery order.
        n_steps: Number of fitted candidates.
        timed_out: Whether the wall-clock budget stopped the search.
    """

    best: FittedModel
    evaluated: pd.DataFrame
    n_steps: int
    timed_out: bool = False


def _score_candidate(
    y: pd.Series,
    candidate: CandidateOrder,
    maxiter: int,
) -> tuple[float, CandidateStatus, str]:
    """Fit one candidate and return (aic, status, message).

    Top-level so it can run in worker processes. A failed fit or a non
    finite AIC makes the candidate invalid; non-convergence does not.
    """
    try:
        fitted = fit_sarima_model(y, candidate, maxiter=maxiter)
    except Exception as e:
        return float("nan"), "failed", str(e)
    if not np.isfinite(fitted.aic):
        return float("nan"), "failed", "non-finite AIC"
    return fitted.aic, ("ok" if fitted.converged else "not_converged"), ""


def _is_better(challenger: CandidateScore, incumbent: CandidateScore | None) -> bool:
    """Lower AIC wins; ties go to the lower total order, then earlier discovery."""
    if not challenger.valid:
        return False
    if incumbent is None:
        return True
    if challenger.aic < incumbent.aic - ARIMA_AIC_TIE_TOLERANCE:
        return True
    if abs(challenger.aic - incumbent.aic) <= ARIMA_AIC_TIE_TOLERANCE:
        if challenger.candidate.total_order != incumbent.candidate.total_order:
            return challenger.candidate.total_order < incumbent.candidate.total_order
        return challenger.discovery < incumbent.discovery
    return False


class _CandidateSearch:
    """Bookkeeping shared by the stepwise and explicit-list searches."""

    def __init__(
        self,
        y: pd.Series,
        config: SearchConfig,
        executor: ProcessPoolExecutor | None = None,
    ) -> None:
        self.y = y
        self.config = config
        self.scores: dict[CandidateOrder, CandidateScore] = {}
        self.best: CandidateScore | None = None
        self.timed_out = False
        self._executor = executor
        self._deadline = (
            None if config.time_budget is None else time.monotonic() + config.time_budget
        )

    @property
    def n_steps(self) -> int:
        return len(self.scores)

    def _remaining_time(self) -> float | None:
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def _out_of_time(self) -> bool:
        remaining = self._remaining_time()
        if remaining is not None and remaining <= 0:
            self.timed_out = True
        return self.timed_out

    def exhausted(self) -> bool:
        return self.n_steps >= self.config.max_steps or self._out_of_time()

    def _run_sequential(
        self, pending: list[CandidateOrder]
    ) -> dict[CandidateOrder, tuple[float, CandidateStatus, str]]:
        results: dict[CandidateOrder, tuple[float, CandidateStatus, str]] = {}
        for candidate in pending:
            if self._out_of_time():
                break
            results[candidate] = _score_candidate(self.y, candidate, self.config.maxiter)
        return results

    def _run_parallel(
        self, pending: list[CandidateOrder], executor: ProcessPoolExecutor
    ) -> dict[CandidateOrder, tuple[float, CandidateStatus, str]]:
        results: dict[CandidateOrder, tuple[float, CandidateStatus, str]] = {}
        if self._out_of_time():
            return results
        future_to_candidate: dict[Future, CandidateOrder] = {
            executor.submit(_score_candidate, self.y, candidate, self.config.maxiter): candidate
            for candidate in pending
        }
        try:
            for future in as_completed(future_to_candidate, timeout=self._remaining_time()):
                candidate = future_to_candidate[future]
                try:
                    results[candidate] = future.result()
                except Exception as e:
                    logger.debug(f"Worker failed on {candidate}: {e}")
                    results[candidate] = (float("nan"), "failed", str(e))
        except FutureTimeoutError:
            self.timed_out = True
            for future in future_to_candidate:
                future.cancel()
        return results

    def evaluate(self, candidates: Sequence[CandidateOrder]) -> None:
        """Fit the not yet seen candidates, within the remaining step budget."""
        pending = [c for c in dict.fromkeys(candidates) if c not in self.scores]
        pending = pending[: max(0, self.config.max_steps - self.n_steps)]
        if not pending:
            return

        if self._executor is not None:
            results = self._run_parallel(pending, self._executor)
        else:
            results = self._run_sequential(pending)

        # Reduce in discovery order regardless of completion order
        for candidate in pending:
            if candidate not in results:
                continue
            aic, status, message = results[candidate]
            score = CandidateScore(candidate, aic, status, self.n_steps, message)
            self.scores[candidate] = score
            if status == "failed":
                logger.debug(f"{candidate} rejected: {message}")
            if _is_better(score, self.best):
                self.best = score
            if self.n_steps % ARIMA_SEARCH_PROGRESS_INTERVAL == 0:
                logger.info(
                    f"Progress: {self.n_steps} models fitted, best so far "
                    f"{self.best.candidate if self.best else None}"
                )

    def evaluated_frame(self) -> pd.DataFrame:
        rows = [
            {
                "order": str(score.candidate),
                "p": score.candidate.p,
                "d": score.candidate.d,
                "q": score.candidate.q,
                "P": score.candidate.P,
                "D": score.candidate.D,
                "Q": score.candidate.Q,
                "s": score.candidate.s,
                "total_order": score.candidate.total_order,
                "aic": score.aic,
                "status": score.status,
                "message": score.message,
            }
            for score in self.scores.values()
        ]
        return pd.DataFrame(rows, columns=EVALUATED_COLUMNS)

    def finish(self) -> SelectionResult:
        """Refit the winner or raise when nothing valid was found.

        Raises:
            SearchTimeoutError: If the time budget ran out before a valid fit.
            ModelFitError: If no attempted candidate produced a valid fit.
        """
        attempted = [str(candidate) for candidate in self.scores]
        if self.best is None:
            if self.timed_out:
                msg = (
                    f"Time budget of {self.config.time_budget}s exhausted before any "
                    "candidate produced a valid fit"
                )
                logger.error(msg)
                raise SearchTimeoutError(msg, attempted)
            msg = f"No candidate order produced a valid fit after {self.n_steps} attempts"
            logger.error(msg)
            raise ModelFitError(msg, attempted)

        if self.timed_out:
            logger.warning(
                "Time budget of %ss exhausted after %d fits; keeping best so far %s",
                self.config.time_budget,
                self.n_steps,
                self.best.candidate,
            )

        best = fit_sarima_model(self.y, self.best.candidate, maxiter=self.config.maxiter)
        logger.info(
            "Selected %s (AIC=%.2f) after %d fits",
            best.candidate,
            best.aic,
            self.n_steps,
        )
        return SelectionResult(
            best=best,
            evaluated=self.evaluated_frame(),
            n_steps=self.n_steps,
            timed_out=self.timed_out,
        )


def _create_executor(config: SearchConfig) -> ProcessPoolExecutor | None:
    if config.n_jobs > 1:
        return ProcessPoolExecutor(max_workers=config.n_jobs)
    return None


def _shutdown_executor(executor: ProcessPoolExecutor | None, timed_out: bool) -> None:
    """Release the worker pool.

    After a timeout the pool is not joined: queued fits are cancelled and fits
    already running in a worker are abandoned, so the caller returns within
    the time budget.
    """
    if executor is None:
        return
    if timed_out:
        logger.warning("Abandoning fits still running in worker processes")
    executor.shutdown(wait=not timed_out, cancel_futures=True)


def select_best_model(
    series: MonthlySeries | pd.Series,
    d: int = 0,
    D: int = 0,
    config: SearchConfig | None = None,
) -> SelectionResult:
    """Stepwise search for the seasonal ARIMA order with the lowest AIC.

    Args:
        series: Historical monthly counts.
        d: Non-seasonal differencing order (e.g. from the stationarity report).
        D: Seasonal differencing order.
        config: Bounds and budgets. Defaults to :class:`SearchConfig()`.

    Returns:
        SelectionResult with the refitted best model and every attempted order.

    Raises:
        ValueError: If the series is empty or d / D is negative.
        ModelFitError: If no candidate produced a valid fit.
        SearchTimeoutError: If the time budget ran out before a valid fit.
    """
    if d < 0 or D < 0:
        raise ValueError(f"Differencing orders must be non-negative, got d={d}, D={D}")
    config = config if config is not None else SearchConfig()
    y = training_series(series)
    seeds = seed_orders(d, D, config)

    logger.info(
        "Stepwise search from %d seeds (d=%d, D=%d, s=%d) on %d observations, "
        "max %d fits, n_jobs=%d",
        len(seeds),
        d,
        D,
        config.period,
        len(y),
        config.max_steps,
        config.n_jobs,
    )

    executor = _create_executor(config)
    search = _CandidateSearch(y, config, executor)
    try:
        search.evaluate(seeds)
        while search.best is not None and not search.exhausted():
            incumbent = search.best
            search.evaluate(neighbour_orders(incumbent.candidate, config))
            if search.best is incumbent:
                break
    finally:
        _shutdown_executor(executor, search.timed_out)

    return search.finish()


def select_from_candidates(
    series: MonthlySeries | pd.Series,
    candidates: Sequence[CandidateOrder],
    config: SearchConfig | None = None,
) -> SelectionResult:
    """Score an explicit list of orders with the same AIC rule and tie-break.

    Order bounds and the step budget of ``config`` do not apply; every
    distinct candidate is fitted unless the time budget runs out.

    Raises:
        ValueError: If ``candidates`` is empty.
        ModelFitError: If no candidate produced a valid fit.
    """
    unique = list(dict.fromkeys(candidates))
    if not unique:
        raise ValueError("No candidate orders given")
    config = replace(config if config is not None else SearchConfig(), max_steps=len(unique))
    y = training_series(series)

    logger.info(f"Scoring {len(unique)} explicit candidate orders on {len(y)} observations")
    executor = _create_executor(config)
    search = _CandidateSearch(y, config, executor)
    try:
        search.evaluate(unique)
    finally:
        _shutdown_executor(executor, search.timed_out)
    return search.finish()
