"""Residual diagnostics (Ljung–Box, Jarque–Bera)."""

from __future__ import annotations

from .residual_diagnostics import (
    LjungBoxReport,
    NormalityResult,
    jarque_bera_test,
    ljung_box_test,
    validate_residuals,
)

__all__ = [
    "LjungBoxReport",
    "NormalityResult",
    "jarque_bera_test",
    "ljung_box_test",
    "validate_residuals",
]
