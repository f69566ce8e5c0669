"""Tests for the logging configuration."""

from __future__ import annotations

import sys
from pathlib import Path

# Add project root to Python path for direct execution
_script_dir = Path(__file__).parent
_project_root = _script_dir.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import logging  # noqa: E402
from typing import Iterator  # noqa: E402
from unittest.mock import MagicMock, patch  # noqa: E402

import pytest  # noqa: E402

from incident_forecast.config_logging import get_logger, setup_logging  # noqa: E402
from incident_forecast.main import main  # noqa: E402


@pytest.fixture
def restore_root_logging() -> Iterator[logging.Logger]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_level_applied(self, restore_root_logging: logging.Logger) -> None:
        setup_logging(logging.WARNING)

        assert restore_root_logging.level == logging.WARNING
        assert len(restore_root_logging.handlers) == 1

    def test_reconfigure_after_loggers_exist(self, restore_root_logging: logging.Logger) -> None:
        module_logger = get_logger("incident_forecast.some_module")
        setup_logging(logging.INFO)
        assert not module_logger.isEnabledFor(logging.DEBUG)

        setup_logging(logging.DEBUG)

        assert module_logger.isEnabledFor(logging.DEBUG)
        assert len(restore_root_logging.handlers) == 1

    def test_log_file_receives_records(
        self, restore_root_logging: logging.Logger, tmp_path: Path
    ) -> None:
        log_file = tmp_path / "logs" / "run.log"
        setup_logging(logging.INFO, log_file=log_file)

        get_logger("incident_forecast.pipeline").info("Pipeline finished with 0 warning(s)")
        for handler in restore_root_logging.handlers:
            handler.flush()

        text = log_file.read_text(encoding="utf-8")
        assert "incident_forecast.pipeline - INFO - Pipeline finished" in text
        assert any(isinstance(h, logging.FileHandler) for h in restore_root_logging.handlers)


class TestGetLogger:
    """Tests for get_logger."""

    def test_keeps_existing_configuration(self, restore_root_logging: logging.Logger) -> None:
        setup_logging(logging.ERROR)
        handlers = list(restore_root_logging.handlers)

        get_logger("incident_forecast.other_module")

        assert restore_root_logging.handlers == handlers
        assert restore_root_logging.level == logging.ERROR

    def test_configures_unconfigured_root(self, restore_root_logging: logging.Logger) -> None:
        with patch("incident_forecast.config_logging.setup_logging") as mock_setup:
            with patch.object(restore_root_logging, "handlers", []):
                get_logger("incident_forecast.fresh")

        mock_setup.assert_called_once_with()


class TestCommandLineLogging:
    """Tests for --verbose and --log-file on the entry point."""

    def test_verbose_run_logged_to_file(
        self, restore_root_logging: logging.Logger, tmp_path: Path
    ) -> None:
        csv = tmp_path / "incidents.csv"
        csv.write_text("INCIDENT_KEY,OCCUR_DATE,STATISTICAL_MURDER_FLAG\n1,01/15/2019,false\n")
        log_file = tmp_path / "run.log"

        result = MagicMock()
        result.selection.best.candidate = "ARIMA(0,0,0)(0,0,0)[12]"
        result.selection.best.aic = 10.0
        result.comparison.forecast_total = 12.0
        result.comparison.lower_total = 8.0
        result.comparison.upper_total = 16.0
        result.comparison.actual_total = 20
        result.comparison.difference = 8.0
        result.comparison.relative_ratio = 1.67
        with patch("incident_forecast.main.run_counterfactual_pipeline", return_value=result):
            code = main(["--data-file", str(csv), "--verbose", "--log-file", str(log_file)])

        assert code == 0
        assert restore_root_logging.level == logging.DEBUG
        for handler in restore_root_logging.handlers:
            handler.flush()
        text = log_file.read_text(encoding="utf-8")
        assert "Loaded 1 records" in text
        assert "difference +8.0" in text
