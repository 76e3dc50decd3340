# tests/test_forecast_runner.py
import numpy as np
import pandas as pd
import pytest

from sales_forecasting import forecast_runner
from sales_forecasting.evaluators.scoring import build_result_table
from sales_forecasting.models.base import ForecastOutcome, clip_negative, run_fit_predict_clip


class _ConstantForecaster:
    def __init__(self, values):
        self.values = values

    def fit(self, train):
        return self

    def predict(self, future):
        return self.values


def _frames(horizon=5):
    idx = pd.date_range("2023-01-02", periods=10 + horizon, freq="W-MON")
    train = pd.DataFrame({"units_sold": np.arange(10.0)}, index=idx[:10])
    future = pd.DataFrame(index=idx[10:])
    return train, future


def test_clip_negative():
    np.testing.assert_array_equal(clip_negative([-1.5, 0.0, 2.0]), [0.0, 0.0, 2.0])


def test_run_fit_predict_clip_never_returns_negatives():
    train, future = _frames()
    out = run_fit_predict_clip(_ConstantForecaster([-4.0, -0.1, 0.0, 3.0, 7.5]), train, future)

    assert (out >= 0).all()
    np.testing.assert_array_equal(out, [0.0, 0.0, 0.0, 3.0, 7.5])


def test_run_fit_predict_clip_checks_step_count():
    train, future = _frames()
    with pytest.raises(ValueError, match="steps"):
        run_fit_predict_clip(_ConstantForecaster([1.0, 2.0]), train, future)


def test_run_fit_predict_clip_rejects_non_finite():
    train, future = _frames()
    with pytest.raises(ValueError, match="non-finite"):
        run_fit_predict_clip(_ConstantForecaster([1.0, np.nan, 1.0, 1.0, 1.0]), train, future)


def test_unknown_method_is_rejected():
    with pytest.raises(ValueError):
        forecast_runner.validate_methods(["lstm"])


@pytest.mark.parametrize("method", ["hierarchical", "arimax", "prophet"])
def test_short_history_fails_per_product_without_aborting(merged, method):
    cfg = {"min_train_weeks": 100}
    prepared = forecast_runner.prepare_inputs(merged, [method], cfg)

    outcomes = forecast_runner.run_method(method, prepared, ["P1", "P2"], cfg)

    assert set(outcomes) == {"P1", "P2"}
    assert all(o.status == "failed" for o in outcomes.values())
    assert all("Training window" in o.error for o in outcomes.values())


def test_unknown_product_surfaces_as_failed_row(merged):
    prepared = forecast_runner.prepare_inputs(merged, ["arimax"], {"min_train_weeks": 100})
    outcome = forecast_runner.forecast_product("arimax", "NOPE", prepared, {"min_train_weeks": 100})

    assert not outcome.ok
    assert outcome.error.startswith("KeyError")


def test_failed_outcomes_keep_a_nan_row():
    outcomes = {
        "P1": ForecastOutcome(
            product_id="P1", method="arimax", forecast=np.array([1.0, 2.0, 3.0, 4.0, 5.0]),
            actuals=np.array([1.0, 2.0, 3.0, 4.0, 6.0]), train_values=np.arange(10.0),
        ),
        "P2": ForecastOutcome.failed("P2", "arimax", "ValueError: boom"),
    }
    table = build_result_table(outcomes, horizon=5, season_length=52)

    assert list(table.columns[:6]) == ["product_id"] + [f"week_{i}_sales" for i in range(1, 6)]
    assert len(table) == 2
    ok_row = table.set_index("product_id").loc["P1"]
    assert ok_row["rmse"] == pytest.approx(np.sqrt(1 / 5))
    assert ok_row["mae"] == pytest.approx(0.2)
    assert ok_row["mase"] == pytest.approx(0.2)
    failed = table.set_index("product_id").loc["P2"]
    assert failed["status"] == "failed"
    assert np.isnan(failed["week_1_sales"]) and np.isnan(failed["rmse"])


def test_result_table_rejects_wrong_horizon():
    outcomes = {
        "P1": ForecastOutcome(
            product_id="P1", method="arimax", forecast=np.array([1.0, 2.0]),
            actuals=np.array([1.0, 2.0]), train_values=np.arange(10.0),
        ),
    }
    with pytest.raises(ValueError):
        build_result_table(outcomes, horizon=5)
