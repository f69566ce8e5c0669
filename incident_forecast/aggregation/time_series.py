"""Monthly count series with enforced contiguity."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import pandas as pd

from incident_forecast.constants import MONTHLY_FREQ, SEASONAL_PERIOD
from incident_forecast.exceptions import ValidationError

__all__ = [
    "MonthlyCount",
    "MonthlySeries",
]


@dataclass(frozen=True)
class MonthlyCount:
    """Number of incidents in one calendar month."""

    month: pd.Period
    count: int


def _validate_counts(counts: pd.Series, name: str) -> None:
    """Check the invariants of a monthly count series.

    Raises:
        ValidationError: If the series is empty, not monthly, has gaps,
            duplicate or unordered months, or non integer / negative counts.
    """
    if counts.empty:
        raise ValidationError(f"{name}: monthly series is empty")

    index = counts.index
    if not isinstance(index, pd.PeriodIndex) or index.freqstr != MONTHLY_FREQ:
        raise ValidationError(f"{name}: index must be a monthly PeriodIndex, got {type(index).__name__}")

    if not (index.is_unique and index.is_monotonic_increasing):
        raise ValidationError(f"{name}: months must be strictly increasing")

    expected = pd.period_range(index[0], index[-1], freq=MONTHLY_FREQ)
    if len(expected) != len(index):
        missing = expected.difference(index)
        raise ValidationError(
            f"{name}: {len(missing)} month(s) missing between {index[0]} and {index[-1]}, "
            f"first: {list(map(str, missing[:5]))}"
        )

    if not pd.api.types.is_integer_dtype(counts):
        raise ValidationError(f"{name}: counts must be integers, got dtype {counts.dtype}")
    if (counts < 0).any():
        raise ValidationError(f"{name}: counts must be non-negative")


@dataclass(frozen=True)
class MonthlySeries:
    """Contiguous monthly incident counts with a declared seasonal frequency.

    The wrapped Series is copied on construction; treat ``counts`` as read only.
    """

    counts: pd.Series
    frequency: int = SEASONAL_PERIOD
    name: str = "incidents"

    def __post_init__(self) -> None:
        _validate_counts(self.counts, self.name)
        if self.frequency < 1:
            raise ValidationError(f"{self.name}: frequency must be >= 1, got {self.frequency}")
        object.__setattr__(self, "counts", self.counts.astype("int64").rename(self.name))

    @classmethod
    def from_monthly_counts(
        cls,
        monthly_counts: Sequence[MonthlyCount],
        *,
        frequency: int = SEASONAL_PERIOD,
        name: str = "incidents",
    ) -> MonthlySeries:
        """Build a series from (month, count) pairs given in month order."""
        if not monthly_counts:
            raise ValidationError(f"{name}: monthly series is empty")
        index = pd.PeriodIndex([mc.month for mc in monthly_counts], freq=MONTHLY_FREQ)
        values = [mc.count for mc in monthly_counts]
        return cls(pd.Series(values, index=index, dtype="int64"), frequency=frequency, name=name)

    def to_monthly_counts(self) -> list[MonthlyCount]:
        """Return the (month, count) pairs in month order."""
        return [MonthlyCount(month, int(count)) for month, count in self.counts.items()]

    @property
    def start(self) -> pd.Period:
        return self.counts.index[0]

    @property
    def end(self) -> pd.Period:
        return self.counts.index[-1]

    @property
    def total(self) -> int:
        return int(self.counts.sum())

    def __len__(self) -> int:
        return len(self.counts)

    def as_float(self) -> pd.Series:
        """Counts as float, the form statsmodels estimators expect."""
        return self.counts.astype(float)
