"""Imputation of missing categorical fields in cleaned incidents."""

from __future__ import annotations

from incident_forecast.imputation.imputation import (
    ImputationStrategy,
    ImputationSummary,
    ModalImputation,
    ProportionalImputation,
    impute_perpetrator_race,
)

__all__ = [
    "ImputationStrategy",
    "ImputationSummary",
    "ModalImputation",
    "ProportionalImputation",
    "impute_perpetrator_race",
]
