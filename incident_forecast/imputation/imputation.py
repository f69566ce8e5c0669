"""Imputation of missing perpetrator race.

Statistics are computed exactly once from the pre-imputation frame and then
applied to every row whose race is missing or tagged unknown. Strategies are
pluggable through :class:`ImputationStrategy`:

- :class:`ModalImputation` (default): modal race among records of the modal
  sex in the two largest age brackets.
- :class:`ProportionalImputation`: seeded draws from the observed race
  distribution.

Ties between equally frequent categories go to the category listed first in
the column's category order (see ``CATEGORY_DOMAINS``).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, ClassVar

import numpy as np
import pandas as pd

from incident_forecast.constants import (
    IMPUTATION_AGE_COLUMN,
    IMPUTATION_BIAS_NOTE,
    IMPUTATION_SEX_COLUMN,
    IMPUTATION_TARGET_COLUMN,
    IMPUTATION_TOP_AGE_GROUPS,
    UNKNOWN_CATEGORIES,
)
from incident_forecast.exceptions import ValidationError
from incident_forecast.utils import get_logger, validate_required_columns

logger = get_logger(__name__)

__all__ = [
    "ImputationStrategy",
    "ImputationSummary",
    "ModalImputation",
    "ProportionalImputation",
    "impute_perpetrator_race",
    "unknown_mask",
]


@dataclass(frozen=True)
class ImputationSummary:
    """What was imputed and from which statistics."""

    strategy: str
    column: str
    n_records: int
    n_imputed: int
    statistics: dict[str, Any] = field(default_factory=dict)
    bias_note: str = IMPUTATION_BIAS_NOTE


def unknown_mask(values: pd.Series) -> pd.Series:
    """Rows whose value is missing or one of the unknown markers."""
    return values.isna() | values.astype("object").isin(sorted(UNKNOWN_CATEGORIES))


def _category_order(values: pd.Series) -> list[Any]:
    if isinstance(values.dtype, pd.CategoricalDtype):
        return list(values.cat.categories)
    return sorted(values.dropna().unique())


def _known_counts(values: pd.Series) -> pd.Series:
    """Counts of known categories, in category order (zero counts removed)."""
    order = [c for c in _category_order(values) if c not in UNKNOWN_CATEGORIES]
    counts = values[~unknown_mask(values)].value_counts().reindex(order, fill_value=0)
    return counts[counts > 0]


def _modal_category(values: pd.Series) -> str | None:
    """Most frequent known category; ties go to the first in category order."""
    counts = _known_counts(values)
    if counts.empty:
        return None
    return str(counts.idxmax())


def _largest_categories(values: pd.Series, n: int) -> list[str]:
    """The ``n`` most frequent known categories, ties in category order."""
    counts = _known_counts(values).sort_values(ascending=False, kind="mergesort")
    return [str(c) for c in counts.index[:n]]


class ImputationStrategy(ABC):
    """Computes replacement values for rows flagged as missing."""

    name: ClassVar[str] = "base"

    @abstractmethod
    def replacements(
        self, df: pd.DataFrame, missing: pd.Series
    ) -> tuple[pd.Series, dict[str, Any]]:
        """Return replacement values for the ``missing`` rows and the statistics used.

        Args:
            df: Pre-imputation frame (read only).
            missing: Boolean mask of rows to fill.

        Returns:
            Tuple of (values indexed like ``df[missing]``, statistics dict).
        """


class ModalImputation(ImputationStrategy):
    """Fill with the modal race of the dominant sex / age-bracket subgroup."""

    name = "modal"

    def __init__(self, top_age_groups: int = IMPUTATION_TOP_AGE_GROUPS) -> None:
        if top_age_groups < 1:
            raise ValueError(f"top_age_groups must be >= 1, got {top_age_groups}")
        self.top_age_groups = top_age_groups

    def _subgroup(self, df: pd.DataFrame) -> tuple[pd.Series, str | None, list[str]]:
        modal_sex = _modal_category(df[IMPUTATION_SEX_COLUMN])
        if modal_sex is None:
            return df[IMPUTATION_TARGET_COLUMN].iloc[0:0], None, []

        same_sex = df[df[IMPUTATION_SEX_COLUMN].astype("object") == modal_sex]
        age_groups = _largest_categories(same_sex[IMPUTATION_AGE_COLUMN], self.top_age_groups)
        in_ages = same_sex[IMPUTATION_AGE_COLUMN].astype("object").isin(age_groups)
        return same_sex.loc[in_ages, IMPUTATION_TARGET_COLUMN], modal_sex, age_groups

    def replacements(
        self, df: pd.DataFrame, missing: pd.Series
    ) -> tuple[pd.Series, dict[str, Any]]:
        subgroup, modal_sex, age_groups = self._subgroup(df)
        value = _modal_category(subgroup)
        if value is None:
            logger.warning(
                "No known %s in the %s/%s subgroup; falling back to the overall mode",
                IMPUTATION_TARGET_COLUMN,
                modal_sex,
                age_groups,
            )
            value = _modal_category(df[IMPUTATION_TARGET_COLUMN])
        if value is None:
            raise ValidationError(f"No known values in '{IMPUTATION_TARGET_COLUMN}' to impute from")

        stats = {
            "modal_sex": modal_sex,
            "age_groups": age_groups,
            "subgroup_size": int(len(subgroup)),
            "replacement": value,
        }
        return pd.Series(value, index=df.index[missing.to_numpy()], dtype="object"), stats


class ProportionalImputation(ImputationStrategy):
    """Draw replacements from the observed distribution of known values."""

    name = "proportional"

    def __init__(self, seed: int = 42) -> None:
        self.seed = seed

    def replacements(
        self, df: pd.DataFrame, missing: pd.Series
    ) -> tuple[pd.Series, dict[str, Any]]:
        counts = _known_counts(df[IMPUTATION_TARGET_COLUMN])
        if counts.empty:
            raise ValidationError(f"No known values in '{IMPUTATION_TARGET_COLUMN}' to impute from")

        shares = counts / counts.sum()
        rng = np.random.default_rng(self.seed)
        draws = rng.choice(
            np.asarray(shares.index, dtype=object), size=int(missing.sum()), p=shares.to_numpy()
        )
        stats = {
            "seed": self.seed,
            "distribution": {str(k): float(v) for k, v in shares.items()},
        }
        return pd.Series(draws, index=df.index[missing.to_numpy()], dtype="object"), stats


def impute_perpetrator_race(
    df: pd.DataFrame,
    strategy: ImputationStrategy | None = None,
) -> tuple[pd.DataFrame, ImputationSummary]:
    """Replace missing / unknown perpetrator race.

    Args:
        df: Cleaned incident frame (left untouched).
        strategy: Imputation policy. Defaults to :class:`ModalImputation`.

    Returns:
        Tuple of (new frame with the same rows, summary of the substitution).

    Raises:
        KeyError: If the race, sex or age-bracket column is missing.
        ValidationError: If no known race exists to impute from.
    """
    validate_required_columns(
        df,
        [IMPUTATION_TARGET_COLUMN, IMPUTATION_SEX_COLUMN, IMPUTATION_AGE_COLUMN],
        df_name="Cleaned incidents",
    )
    strategy = strategy if strategy is not None else ModalImputation()

    missing = unknown_mask(df[IMPUTATION_TARGET_COLUMN])
    n_missing = int(missing.sum())
    imputed = df.copy()

    stats: dict[str, Any] = {}
    if n_missing:
        values, stats = strategy.replacements(df, missing)
        target = imputed[IMPUTATION_TARGET_COLUMN].astype("object")
        target.loc[values.index] = values
        if isinstance(df[IMPUTATION_TARGET_COLUMN].dtype, pd.CategoricalDtype):
            target = pd.Series(
                pd.Categorical(target, categories=_category_order(df[IMPUTATION_TARGET_COLUMN])),
                index=target.index,
            )
        imputed[IMPUTATION_TARGET_COLUMN] = target

    summary = ImputationSummary(
        strategy=strategy.name,
        column=IMPUTATION_TARGET_COLUMN,
        n_records=int(len(df)),
        n_imputed=n_missing,
        statistics=stats,
    )
    logger.info(
        "Imputed %d/%d '%s' values with the %s strategy %s",
        n_missing,
        len(df),
        IMPUTATION_TARGET_COLUMN,
        strategy.name,
        stats,
    )
    if n_missing:
        logger.info(summary.bias_note)
    return imputed, summary
