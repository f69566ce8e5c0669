"""Tests for the command line entry point."""

from __future__ import annotations

import sys
from pathlib import Path

# Add project root to Python path for direct execution
_script_dir = Path(__file__).parent
_project_root = _script_dir.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import json  # noqa: E402
from unittest.mock import MagicMock, patch  # noqa: E402

import pytest  # noqa: E402

from incident_forecast.exceptions import ModelFitError  # noqa: E402
from incident_forecast.imputation import ModalImputation, ProportionalImputation  # noqa: E402
from incident_forecast.main import main, parse_args  # noqa: E402
from incident_forecast.path import (  # noqa: E402
    COUNTERFACTUAL_REPORT_FILE,
    INCIDENTS_FILE,
    PIPELINE_LOG_FILE,
)

_CSV_HEADER = "INCIDENT_KEY,OCCUR_DATE,BORO,STATISTICAL_MURDER_FLAG,PERP_SEX,PERP_AGE_GROUP,PERP_RACE"


def _write_csv(path: Path, rows: list[str]) -> Path:
    path.write_text("\n".join([_CSV_HEADER, *rows]) + "\n")
    return path


def _fake_result() -> MagicMock:
    result = MagicMock()
    result.selection.best.candidate = "ARIMA(1,0,0)(0,0,0)[12]"
    result.selection.best.aic = 123.4
    result.comparison.forecast_total = 854.0
    result.comparison.lower_total = 700.0
    result.comparison.upper_total = 1000.0
    result.comparison.actual_total = 1942
    result.comparison.difference = 1088.0
    result.comparison.absolute_difference = 1088.0
    result.comparison.relative_ratio = 2.27
    result.to_report.return_value = {"cutoff": "2020-01-01", "warnings": []}
    return result


class TestParseArgs:
    """Tests for parse_args."""

    def test_defaults(self) -> None:
        args = parse_args([])

        assert args.data_file == INCIDENTS_FILE
        assert args.cutoff == "2020-01-01"
        assert args.horizon == 12
        assert args.level == 0.95
        assert args.imputation == "modal"
        assert args.n_jobs == 1
        assert args.time_budget is None
        assert args.report is None
        assert args.log_file is None

    def test_report_without_path_uses_default(self) -> None:
        assert parse_args(["--report"]).report == COUNTERFACTUAL_REPORT_FILE

    def test_log_file_without_path_uses_default(self) -> None:
        assert parse_args(["--log-file"]).log_file == PIPELINE_LOG_FILE

    def test_invalid_imputation_choice(self) -> None:
        with pytest.raises(SystemExit):
            parse_args(["--imputation", "mean"])


class TestMain:
    """Tests for main."""

    def test_missing_file_returns_error(self, tmp_path: Path) -> None:
        assert main(["--data-file", str(tmp_path / "absent.csv")]) == 1

    def test_malformed_date_returns_error(self, tmp_path: Path) -> None:
        csv = _write_csv(tmp_path / "bad.csv", ["1,2019-01-15,BRONX,false,M,25-44,BLACK"])

        assert main(["--data-file", str(csv)]) == 1

    def test_missing_date_column_returns_error(self, tmp_path: Path) -> None:
        csv = tmp_path / "no_date.csv"
        csv.write_text("INCIDENT_KEY,BORO\n1,BRONX\n")

        assert main(["--data-file", str(csv)]) == 1

    def test_success_writes_report(self, tmp_path: Path) -> None:
        csv = _write_csv(
            tmp_path / "incidents.csv",
            ["1,01/15/2019,BRONX,false,M,25-44,BLACK", "2,02/03/2020,QUEENS,true,F,18-24,"],
        )
        report = tmp_path / "out" / "report.json"

        with patch(
            "incident_forecast.main.run_counterfactual_pipeline", return_value=_fake_result()
        ) as mock_run:
            code = main(
                [
                    "--data-file",
                    str(csv),
                    "--imputation",
                    "proportional",
                    "--seed",
                    "7",
                    "--n-jobs",
                    "2",
                    "--time-budget",
                    "30",
                    "--report",
                    str(report),
                ]
            )

        assert code == 0
        assert json.loads(report.read_text())["cutoff"] == "2020-01-01"
        records = mock_run.call_args.args[0]
        assert len(records) == 2
        assert records[1].perp_race is None
        kwargs = mock_run.call_args.kwargs
        assert isinstance(kwargs["imputation_strategy"], ProportionalImputation)
        assert kwargs["imputation_strategy"].seed == 7
        assert kwargs["search_config"].n_jobs == 2
        assert kwargs["search_config"].time_budget == 30.0

    def test_model_fit_error_returns_error(self, tmp_path: Path) -> None:
        csv = _write_csv(tmp_path / "incidents.csv", ["1,01/15/2019,BRONX,false,M,25-44,BLACK"])

        with patch(
            "incident_forecast.main.run_counterfactual_pipeline",
            side_effect=ModelFitError("no valid fit", ["ARIMA(0,0,0)(0,0,0)[12]"]),
        ):
            assert main(["--data-file", str(csv)]) == 1

    def test_default_strategy_is_modal(self, tmp_path: Path) -> None:
        csv = _write_csv(tmp_path / "incidents.csv", ["1,01/15/2019,BRONX,false,M,25-44,BLACK"])

        with patch(
            "incident_forecast.main.run_counterfactual_pipeline", return_value=_fake_result()
        ) as mock_run:
            assert main(["--data-file", str(csv)]) == 0

        assert isinstance(mock_run.call_args.kwargs["imputation_strategy"], ModalImputation)
