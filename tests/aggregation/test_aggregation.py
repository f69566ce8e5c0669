"""Unit tests for monthly aggregation and the cutoff split."""

from __future__ import annotations

import sys
from pathlib import Path

# Add project root to Python path for direct execution
_script_dir = Path(__file__).parent
_project_root = _script_dir.parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import numpy as np  # noqa: E402
import pandas as pd  # noqa: E402
import pytest  # noqa: E402

from incident_forecast.aggregation import (  # noqa: E402
    MonthlyCount,
    MonthlySeries,
    aggregate_monthly_counts,
    build_monthly_series,
    count_by_category,
)
from incident_forecast.exceptions import ValidationError  # noqa: E402


def _incidents(dates: list[str], flags: list[bool] | None = None) -> pd.DataFrame:
    flags = flags if flags is not None else [False] * len(dates)
    return pd.DataFrame({"occur_date": pd.to_datetime(dates), "murder_flag": flags})


class TestAggregateMonthlyCounts:
    """Tests for aggregate_monthly_counts."""

    def test_empty_months_are_zero_filled(self) -> None:
        dates = pd.Series(pd.to_datetime(["2019-01-03", "2019-01-20", "2019-03-11"]))
        series = aggregate_monthly_counts(dates)

        assert len(series) == 3
        assert series.counts.tolist() == [2, 0, 1]
        assert str(series.start) == "2019-01"
        assert str(series.end) == "2019-03"

    def test_explicit_range_extends_with_zeros(self) -> None:
        dates = pd.Series(pd.to_datetime(["2019-02-14"]))
        series = aggregate_monthly_counts(
            dates, start=pd.Period("2018-12", "M"), end=pd.Period("2019-03", "M")
        )

        assert series.counts.tolist() == [0, 0, 1, 0]

    def test_dates_outside_range_raise(self) -> None:
        dates = pd.Series(pd.to_datetime(["2019-02-14", "2019-05-01"]))

        with pytest.raises(ValidationError, match="outside"):
            aggregate_monthly_counts(
                dates, start=pd.Period("2019-01", "M"), end=pd.Period("2019-03", "M")
            )

    def test_no_dates_without_range_raise(self) -> None:
        with pytest.raises(ValidationError, match="no records"):
            aggregate_monthly_counts(pd.Series(pd.to_datetime([])))


class TestBuildMonthlySeries:
    """Tests for build_monthly_series."""

    def test_gap_month_kept_with_zero(self) -> None:
        df = _incidents(["2019-01-05", "2019-03-09", "2019-03-10", "2019-04-02"])
        split = build_monthly_series(df, cutoff="2019-04-01")

        assert split.historical.counts.tolist() == [1, 0, 2]
        assert split.actual.counts.tolist() == [1]
        assert split.cutoff == pd.Timestamp("2019-04-01")

    def test_windows_are_contiguous_and_complete(
        self, incident_records: list, historical_counts: pd.Series
    ) -> None:
        df = pd.DataFrame(
            {
                "occur_date": pd.to_datetime([r.occur_date for r in incident_records], format="%m/%d/%Y"),
                "murder_flag": [r.murder_flag == "true" for r in incident_records],
            }
        )
        split = build_monthly_series(df, cutoff="2020-01-01")

        assert split.historical.total + split.actual.total == len(df)
        assert split.historical.end + 1 == split.actual.start
        assert len(split.historical) == 96
        assert len(split.actual) == 12
        assert split.historical.counts.tolist() == historical_counts.tolist()

    def test_historical_window_ends_before_cutoff(self) -> None:
        df = _incidents(["2019-06-15", "2020-03-01"])
        split = build_monthly_series(df, cutoff="2020-01-01")

        assert str(split.historical.end) == "2019-12"
        assert split.historical.counts.iloc[-1] == 0
        assert str(split.actual.start) == "2020-01"
        assert split.actual.counts.tolist() == [0, 0, 1]

    def test_severity_only_counts_flagged_records(self) -> None:
        df = _incidents(
            ["2019-01-01", "2019-01-02", "2019-02-01", "2019-03-05"],
            flags=[True, False, True, True],
        )
        split = build_monthly_series(df, cutoff="2019-03-01", severity_only=True)

        assert split.historical.counts.tolist() == [1, 1]
        assert split.actual.total == 1

    @pytest.mark.parametrize("cutoff", ["2020-01-15", "2020-01-01 06:00"])
    def test_cutoff_must_be_month_start(self, cutoff: str) -> None:
        df = _incidents(["2019-06-15", "2020-03-01"])

        with pytest.raises(ValidationError, match="first day of a month"):
            build_monthly_series(df, cutoff=cutoff)

    def test_no_records_before_cutoff(self) -> None:
        with pytest.raises(ValidationError, match="before the cutoff"):
            build_monthly_series(_incidents(["2020-02-01"]), cutoff="2020-01-01")

    def test_no_records_after_cutoff(self) -> None:
        with pytest.raises(ValidationError, match="after the cutoff"):
            build_monthly_series(_incidents(["2019-02-01"]), cutoff="2020-01-01")

    def test_missing_date_column(self) -> None:
        with pytest.raises(KeyError):
            build_monthly_series(pd.DataFrame({"murder_flag": [True]}))


class TestMonthlySeries:
    """Tests for the MonthlySeries invariants."""

    def test_monthly_counts_round_trip(self) -> None:
        pairs = [
            MonthlyCount(pd.Period("2019-11", "M"), 4),
            MonthlyCount(pd.Period("2019-12", "M"), 0),
            MonthlyCount(pd.Period("2020-01", "M"), 7),
        ]
        series = MonthlySeries.from_monthly_counts(pairs, name="x")

        assert series.to_monthly_counts() == pairs
        assert series.total == 11
        assert series.frequency == 12
        assert series.counts.name == "x"

    def test_as_float(self) -> None:
        index = pd.period_range("2020-01", periods=3, freq="M")
        series = MonthlySeries(pd.Series([1, 2, 3], index=index))

        assert series.as_float().dtype == np.float64

    def test_gap_raises(self) -> None:
        index = pd.PeriodIndex(["2020-01", "2020-03"], freq="M")

        with pytest.raises(ValidationError, match="missing"):
            MonthlySeries(pd.Series([1, 2], index=index))

    def test_duplicate_months_raise(self) -> None:
        index = pd.PeriodIndex(["2020-01", "2020-01"], freq="M")

        with pytest.raises(ValidationError, match="strictly increasing"):
            MonthlySeries(pd.Series([1, 2], index=index))

    def test_negative_counts_raise(self) -> None:
        index = pd.period_range("2020-01", periods=2, freq="M")

        with pytest.raises(ValidationError, match="non-negative"):
            MonthlySeries(pd.Series([1, -2], index=index))

    def test_float_counts_raise(self) -> None:
        index = pd.period_range("2020-01", periods=2, freq="M")

        with pytest.raises(ValidationError, match="integers"):
            MonthlySeries(pd.Series([1.5, 2.0], index=index))

    def test_non_period_index_raises(self) -> None:
        with pytest.raises(ValidationError, match="PeriodIndex"):
            MonthlySeries(pd.Series([1, 2]))

    def test_empty_raises(self) -> None:
        with pytest.raises(ValidationError, match="empty"):
            MonthlySeries.from_monthly_counts([])


def test_count_by_category_includes_missing() -> None:
    df = pd.DataFrame({"boro": ["BRONX", "QUEENS", "BRONX", None]})
    table = count_by_category(df, "boro")

    assert table["count"].iloc[0] == 2
    assert table.index[0] == "BRONX"
    assert table["count"].sum() == 4
    assert table["share"].sum() == pytest.approx(1.0)
