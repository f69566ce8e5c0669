"""Unit tests for seasonal ARIMA model fitting."""

from __future__ import annotations

import sys
from pathlib import Path

# Add project root to Python path for direct execution
_script_dir = Path(__file__).parent
_project_root = _script_dir.parent.parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from unittest.mock import MagicMock, patch  # noqa: E402

import numpy as np  # noqa: E402
import pandas as pd  # noqa: E402
import pytest  # noqa: E402

from incident_forecast.aggregation import MonthlySeries  # noqa: E402
from incident_forecast.arima.models import (  # noqa: E402
    CandidateOrder,
    FittedModel,
    fit_sarima_model,
    training_series,
)
from incident_forecast.arima.models.arima_model import _check_model_convergence  # noqa: E402
from incident_forecast.exceptions import ModelFitError  # noqa: E402


class TestCandidateOrder:
    """Tests for CandidateOrder."""

    def test_orders_and_string(self) -> None:
        candidate = CandidateOrder(2, 1, 1, 1, 0, 1)

        assert candidate.order == (2, 1, 1)
        assert candidate.seasonal_order == (1, 0, 1, 12)
        assert candidate.total_order == 5
        assert str(candidate) == "ARIMA(2,1,1)(1,0,1)[12]"

    @pytest.mark.parametrize(
        ("d", "D", "trend"),
        [(0, 0, "c"), (1, 0, "n"), (0, 1, "n"), (1, 1, "n")],
    )
    def test_constant_only_without_differencing(self, d: int, D: int, trend: str) -> None:
        assert CandidateOrder(1, d, 0, 0, D, 0).trend == trend

    @pytest.mark.parametrize("field_name", ["p", "d", "q", "P", "D", "Q"])
    def test_negative_order_raises(self, field_name: str) -> None:
        orders = {"p": 0, "d": 0, "q": 0, "P": 0, "D": 0, "Q": 0}
        orders[field_name] = -1

        with pytest.raises(ValueError, match=field_name):
            CandidateOrder(**orders)

    def test_hashable_and_comparable(self) -> None:
        assert {CandidateOrder(1, 0, 1), CandidateOrder(1, 0, 1)} == {CandidateOrder(1, 0, 1)}


class TestFitSarimaModel:
    """Tests for fit_sarima_model."""

    def test_fits_ar1(self, ar1_series: pd.Series) -> None:
        model = fit_sarima_model(ar1_series, CandidateOrder(1, 0, 0))

        assert isinstance(model, FittedModel)
        assert model.trend == "c"
        assert model.params["ar.L1"] == pytest.approx(0.8, abs=0.15)
        assert "intercept" in model.params
        assert np.isfinite(model.aic)
        assert model.nobs == 120
        assert len(model.residuals) == 120
        assert model.residuals.index.equals(ar1_series.index)

    def test_accepts_monthly_series(self, historical_counts: pd.Series) -> None:
        model = fit_sarima_model(MonthlySeries(historical_counts), CandidateOrder(0, 0, 0, 1, 0, 0))

        assert model.nobs == 96
        assert "ar.S.L12" in model.params

    def test_differenced_model_has_no_constant(self, historical_counts: pd.Series) -> None:
        model = fit_sarima_model(historical_counts, CandidateOrder(0, 1, 1, 0, 1, 1))

        assert model.trend == "n"
        assert "intercept" not in model.params
        assert model.burn >= 0
        assert len(model.effective_residuals) == len(historical_counts) - model.burn

    def test_empty_series_raises(self) -> None:
        empty = pd.Series([], dtype=float)

        with pytest.raises(ValueError, match="empty"):
            fit_sarima_model(empty, CandidateOrder(1, 0, 0))

    def test_failure_raises_model_fit_error(self, ar1_series: pd.Series) -> None:
        candidate = CandidateOrder(1, 0, 0)
        with patch(
            "incident_forecast.arima.models.arima_model.SARIMAX",
            side_effect=np.linalg.LinAlgError("singular"),
        ):
            with pytest.raises(ModelFitError) as exc_info:
                fit_sarima_model(ar1_series, candidate)

        assert exc_info.value.attempted_orders == [str(candidate)]
        assert "singular" in str(exc_info.value)


def test_training_series_converts_counts(historical_counts: pd.Series) -> None:
    y = training_series(MonthlySeries(historical_counts))

    assert y.dtype == np.float64
    assert len(y) == 96


@pytest.mark.parametrize(("retvals", "expected"), [({"converged": True}, True), ({"converged": False}, False)])
def test_check_model_convergence(retvals: dict, expected: bool) -> None:
    results = MagicMock()
    results.mle_retvals = retvals

    with patch("incident_forecast.arima.models.arima_model.logger") as mock_logger:
        converged = _check_model_convergence(results, CandidateOrder(1, 0, 0))

    assert converged is expected
    assert mock_logger.warning.called is (not expected)
