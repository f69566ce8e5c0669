"""Error types raised by the counterfactual pipeline.

All of them are fatal for a run. Diagnostic problems (residual autocorrelation,
low power of the unit-root tests) are reported as flags, not raised.
"""

from __future__ import annotations

from typing import Sequence

__all__ = [
    "ParseError",
    "ValidationError",
    "ModelFitError",
    "SearchTimeoutError",
]


class ParseError(ValueError):
    """A raw field (date, flag) could not be parsed during cleaning."""


class ValidationError(ValueError):
    """A stage produced data no model can be built on.

    Raised for empty partitions, gaps in the monthly index, negative counts,
    a cutoff that is not a month boundary, or nothing left to compare.
    """


class ModelFitError(RuntimeError):
    """No candidate seasonal ARIMA order produced a valid likelihood."""

    def __init__(self, message: str, attempted_orders: Sequence[str] = ()) -> None:
        self.attempted_orders = list(attempted_orders)
        if self.attempted_orders:
            message = f"{message} (attempted: {', '.join(self.attempted_orders)})"
        super().__init__(message)


class SearchTimeoutError(ModelFitError):
    """The wall-clock budget ran out before any candidate converged."""
