#////////////////////////////////////////////////////////////////////////////////#
# File:         accuracy.py                                                      #
# Author:       Douglas Nyberg                                                   #
# Email:        douglas1.nyberg@gmail.com                                        #
# Date:         2025-07-08                                                       #
#////////////////////////////////////////////////////////////////////////////////#

"""
Point forecast accuracy metrics: RMSE, MAE and MASE.
"""
import numpy as np

from sktime.performance_metrics.forecasting import (
    mean_absolute_error,
    mean_squared_error,
    mean_absolute_scaled_error
)

from sales_forecasting.config import FORECAST_CONFIG

SEASON_LENGTH = FORECAST_CONFIG["season_length"]


def _align(actuals, predictions):
    # ensure arrays have same length
    actuals = np.asarray(actuals, dtype=float)
    predictions = np.asarray(predictions, dtype=float)
    n = min(len(actuals), len(predictions))
    return actuals[:n], predictions[:n]


def calculate_rmse(actuals: np.ndarray, predictions: np.ndarray) -> float:
    """calculate rmse using sktime"""
    actuals, predictions = _align(actuals, predictions)
    return float(np.sqrt(mean_squared_error(actuals, predictions)))


def calculate_mae(actuals: np.ndarray, predictions: np.ndarray) -> float:
    """calculate mae using sktime"""
    actuals, predictions = _align(actuals, predictions)
    return float(mean_absolute_error(actuals, predictions))


def seasonal_lag(train_series: np.ndarray, m: int = SEASON_LENGTH) -> int:
    """seasonal naive lag when the history covers it, otherwise the plain naive lag"""
    return m if len(train_series) > m else 1


def mase_scale(train_series: np.ndarray, m: int = SEASON_LENGTH) -> float:
    """
    Mean absolute error of the seasonal naive forecast y(t) = y(t - m) in the
    training window. NaN when the window is too short to have a single error.
    """
    train_series = np.asarray(train_series, dtype=float)
    lag = seasonal_lag(train_series, m)
    if len(train_series) <= lag:
        return np.nan
    return float(np.mean(np.abs(train_series[lag:] - train_series[:-lag])))


def calculate_mase(actuals: np.ndarray, predictions: np.ndarray, train_series: np.ndarray,
                   m: int = SEASON_LENGTH) -> float:
    """
    calculate mase using sktime.

    A flat training window gives the naive benchmark zero error, so the scaled
    error is undefined and NaN is returned instead of inf.
    """
    actuals, predictions = _align(actuals, predictions)
    train_series = np.asarray(train_series, dtype=float)

    scale = mase_scale(train_series, m)
    if not np.isfinite(scale) or scale < 1e-10:
        return np.nan

    lag = seasonal_lag(train_series, m)
    return float(mean_absolute_scaled_error(actuals, predictions, y_train=train_series, sp=lag))
