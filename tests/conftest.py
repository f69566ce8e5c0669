"""Shared fixtures for incident_forecast tests.

Synthetic data only: incident records are generated from monthly counts with
a fixed seed, so every test is deterministic and runs without the real
incident export.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable

# Add project root to Python path for direct execution
_script_dir = Path(__file__).parent
_project_root = _script_dir.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import numpy as np  # noqa: E402
import pandas as pd  # noqa: E402
import pytest  # noqa: E402

from incident_forecast.data_cleaning import IncidentRecord  # noqa: E402

BOROS = ["BRONX", "BROOKLYN", "MANHATTAN", "QUEENS", "STATEN ISLAND"]
AGE_GROUPS = ["<18", "18-24", "25-44", "45-64"]
RACES = ["BLACK", "WHITE HISPANIC", "BLACK HISPANIC", "WHITE", "UNKNOWN"]


def make_record(
    occur_date: str = "01/15/2019",
    murder_flag: str = "false",
    **overrides: object,
) -> IncidentRecord:
    """Build one raw record with plausible defaults."""
    values: dict[str, object] = {
        "incident_key": "1",
        "occur_time": "12:00:00",
        "boro": "BRONX",
        "precinct": "40",
        "jurisdiction_code": "0",
        "location_desc": "(null)",
        "perp_age_group": "25-44",
        "perp_sex": "M",
        "perp_race": "BLACK",
        "vic_age_group": "25-44",
        "vic_sex": "M",
        "vic_race": "BLACK",
        "x_coord": "1000000",
        "y_coord": "200000",
        "latitude": "40.8",
        "longitude": "-73.9",
    }
    values.update(overrides)
    return IncidentRecord(occur_date=occur_date, murder_flag=murder_flag, **values)


def seasonal_counts(
    start: str = "2012-01",
    n_months: int = 96,
    *,
    base: float = 30.0,
    amplitude: float = 10.0,
    seed: int = 7,
) -> pd.Series:
    """Poisson monthly counts with a summer peak, on a monthly PeriodIndex."""
    rng = np.random.default_rng(seed)
    index = pd.period_range(start, periods=n_months, freq="M")
    months = np.asarray(index.month)
    mean = base + amplitude * np.sin(2 * np.pi * (months - 4) / 12)
    return pd.Series(rng.poisson(mean), index=index, dtype="int64")


def records_from_counts(counts: pd.Series, *, seed: int = 11) -> list[IncidentRecord]:
    """Expand monthly counts into individual records with random attributes."""
    rng = np.random.default_rng(seed)
    records: list[IncidentRecord] = []
    key = 0
    for month, count in counts.items():
        for _ in range(int(count)):
            key += 1
            day = int(rng.integers(1, month.days_in_month + 1))
            records.append(
                make_record(
                    occur_date=f"{month.month:02d}/{day:02d}/{month.year}",
                    murder_flag="true" if rng.random() < 0.2 else "false",
                    incident_key=str(key),
                    boro=str(rng.choice(BOROS)),
                    precinct=str(int(rng.integers(1, 124))),
                    perp_age_group=str(rng.choice(AGE_GROUPS, p=[0.1, 0.4, 0.4, 0.1])),
                    perp_sex=str(rng.choice(["M", "F", "U"], p=[0.8, 0.1, 0.1])),
                    perp_race=str(rng.choice(RACES, p=[0.4, 0.2, 0.1, 0.05, 0.25])),
                )
            )
    return records


@pytest.fixture
def record_factory() -> Callable[..., IncidentRecord]:
    return make_record


@pytest.fixture
def historical_counts() -> pd.Series:
    """Eight years of seasonal monthly counts ending December 2019."""
    return seasonal_counts("2012-01", 96)


@pytest.fixture(scope="session")
def incident_records() -> list[IncidentRecord]:
    """Records for 2012-2019 plus a 2020 window with roughly doubled counts."""
    before = seasonal_counts("2012-01", 96, seed=7)
    after = seasonal_counts("2020-01", 12, base=60.0, amplitude=20.0, seed=8)
    return records_from_counts(pd.concat([before, after]))


@pytest.fixture
def ar1_series() -> pd.Series:
    """AR(1) process with phi = 0.8 on a monthly PeriodIndex (120 months)."""
    rng = np.random.default_rng(2024)
    n = 120
    eps = rng.normal(0.0, 1.0, size=n + 50)
    y = np.zeros(n + 50)
    for t in range(1, n + 50):
        y[t] = 0.8 * y[t - 1] + eps[t]
    index = pd.period_range("2010-01", periods=n, freq="M")
    return pd.Series(10.0 + y[50:], index=index)


@pytest.fixture
def counts_builder() -> Callable[..., pd.Series]:
    return seasonal_counts


@pytest.fixture
def records_builder() -> Callable[..., list[IncidentRecord]]:
    return records_from_counts
