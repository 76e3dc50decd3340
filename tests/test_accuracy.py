# tests/test_accuracy.py
import numpy as np
import pytest

from sales_forecasting.evaluators import accuracy


def test_rmse_and_mae():
    actuals = np.array([1.0, 2.0, 3.0])
    preds = np.array([1.0, 2.0, 5.0])

    assert accuracy.calculate_rmse(actuals, preds) == pytest.approx(np.sqrt(4 / 3))
    assert accuracy.calculate_mae(actuals, preds) == pytest.approx(2 / 3)


def test_mase_falls_back_to_lag_one_for_short_history():
    train = np.array([1.0, 2.0, 3.0, 4.0])
    actuals = np.array([1.0, 2.0, 3.0])
    preds = np.array([1.0, 2.0, 5.0])

    assert accuracy.seasonal_lag(train, m=52) == 1
    assert accuracy.mase_scale(train, m=52) == pytest.approx(1.0)
    assert accuracy.calculate_mase(actuals, preds, train, m=52) == pytest.approx(2 / 3)


def test_mase_uses_seasonal_lag_when_history_allows():
    train = np.array([1.0, 5.0, 2.0, 6.0, 3.0, 7.0])

    assert accuracy.seasonal_lag(train, m=2) == 2
    # seasonal naive errors are all 1
    assert accuracy.mase_scale(train, m=2) == pytest.approx(1.0)


def test_mase_is_nan_for_flat_history():
    train = np.full(10, 4.0)
    result = accuracy.calculate_mase(np.array([4.0, 5.0]), np.array([4.0, 4.0]), train, m=52)

    assert np.isnan(result)


def test_mase_is_nan_without_naive_errors():
    assert np.isnan(accuracy.mase_scale(np.array([3.0]), m=52))
