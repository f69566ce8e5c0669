"""Seasonal ARIMA order selection (stepwise AIC search)."""

from __future__ import annotations

from .model_selection import (
    CandidateScore,
    SelectionResult,
    select_best_model,
    select_from_candidates,
)
from .search_space import SearchConfig, neighbour_orders, seed_orders, within_bounds

__all__ = [
    "CandidateScore",
    "SearchConfig",
    "SelectionResult",
    "neighbour_orders",
    "seed_orders",
    "select_best_model",
    "select_from_candidates",
    "within_bounds",
]
