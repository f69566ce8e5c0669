"""Candidate order space for the stepwise seasonal ARIMA search."""

from __future__ import annotations

from dataclasses import dataclass

from incident_forecast.arima.models.arima_model import CandidateOrder
from incident_forecast.constants import (
    ARIMA_FIT_MAXITER,
    ARIMA_MAX_P,
    ARIMA_MAX_Q,
    ARIMA_MAX_SEASONAL_P,
    ARIMA_MAX_SEASONAL_Q,
    ARIMA_MAX_STEPS,
    ARIMA_MAX_TOTAL_ORDER,
    SEASONAL_PERIOD,
)

__all__ = [
    "NEIGHBOUR_STEPS",
    "SEED_ORDERS",
    "SearchConfig",
    "neighbour_orders",
    "seed_orders",
    "within_bounds",
]

# (p, q, P, Q) of the starting models, in evaluation order
SEED_ORDERS: tuple[tuple[int, int, int, int], ...] = (
    (2, 2, 1, 1),
    (0, 0, 0, 0),
    (1, 0, 1, 0),
    (0, 1, 0, 1),
)

# (dp, dq, dP, dQ) moves from the incumbent, in discovery order
NEIGHBOUR_STEPS: tuple[tuple[int, int, int, int], ...] = (
    (-1, 0, 0, 0),
    (1, 0, 0, 0),
    (0, -1, 0, 0),
    (0, 1, 0, 0),
    (0, 0, -1, 0),
    (0, 0, 1, 0),
    (0, 0, 0, -1),
    (0, 0, 0, 1),
    (-1, -1, 0, 0),
    (1, 1, 0, 0),
    (0, 0, -1, -1),
    (0, 0, 1, 1),
)


@dataclass(frozen=True)
class SearchConfig:
    """Bounds and budgets of the stepwise search.

    Attributes:
        max_p: Upper bound on the AR order.
        max_q: Upper bound on the MA order.
        max_P: Upper bound on the seasonal AR order.
        max_Q: Upper bound on the seasonal MA order.
        max_order: Upper bound on p + q + P + Q.
        max_steps: Maximum number of fitted candidates.
        time_budget: Wall-clock budget in seconds, None for unbounded. It is
            checked between fits; a sequential fit in progress runs to its end,
            and with a process pool the fits still running at expiry are
            abandoned in their workers rather than interrupted.
        n_jobs: Worker processes used per round; 1 runs sequentially.
        period: Seasonal period.
        maxiter: Optimiser iterations per fit.
    """

    max_p: int = ARIMA_MAX_P
    max_q: int = ARIMA_MAX_Q
    max_P: int = ARIMA_MAX_SEASONAL_P
    max_Q: int = ARIMA_MAX_SEASONAL_Q
    max_order: int = ARIMA_MAX_TOTAL_ORDER
    max_steps: int = ARIMA_MAX_STEPS
    time_budget: float | None = None
    n_jobs: int = 1
    period: int = SEASONAL_PERIOD
    maxiter: int = ARIMA_FIT_MAXITER

    def __post_init__(self) -> None:
        for name in ("max_p", "max_q", "max_P", "max_Q", "max_order"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative, got {getattr(self, name)}")
        if self.max_steps < 1:
            raise ValueError(f"max_steps must be >= 1, got {self.max_steps}")
        if self.time_budget is not None and self.time_budget <= 0:
            raise ValueError(f"time_budget must be positive, got {self.time_budget}")
        if self.n_jobs < 1:
            raise ValueError(f"n_jobs must be >= 1, got {self.n_jobs}")
        if self.period < 2:
            raise ValueError(f"period must be >= 2, got {self.period}")
        if self.maxiter < 1:
            raise ValueError(f"maxiter must be >= 1, got {self.maxiter}")


def within_bounds(candidate: CandidateOrder, config: SearchConfig) -> bool:
    """Whether the candidate respects every order bound of the config."""
    return (
        candidate.p <= config.max_p
        and candidate.q <= config.max_q
        and candidate.P <= config.max_P
        and candidate.Q <= config.max_Q
        and candidate.total_order <= config.max_order
    )


def seed_orders(d: int, D: int, config: SearchConfig) -> list[CandidateOrder]:
    """Starting models (2,d,2)(1,D,1), (0,d,0)(0,D,0), (1,d,0)(1,D,0), (0,d,1)(0,D,1).

    Seeds outside the bounds are dropped.
    """
    seeds: list[CandidateOrder] = []
    for p, q, P, Q in SEED_ORDERS:
        candidate = CandidateOrder(p, d, q, P, D, Q, config.period)
        if within_bounds(candidate, config) and candidate not in seeds:
            seeds.append(candidate)
    return seeds


def neighbour_orders(candidate: CandidateOrder, config: SearchConfig) -> list[CandidateOrder]:
    """Orders one step away from ``candidate`` that stay within bounds."""
    neighbours: list[CandidateOrder] = []
    for dp, dq, dP, dQ in NEIGHBOUR_STEPS:
        p, q = candidate.p + dp, candidate.q + dq
        P, Q = candidate.P + dP, candidate.Q + dQ
        if min(p, q, P, Q) < 0:
            continue
        neighbour = CandidateOrder(p, candidate.d, q, P, candidate.D, Q, candidate.s)
        if within_bounds(neighbour, config):
            neighbours.append(neighbour)
    return neighbours
