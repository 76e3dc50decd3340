#////////////////////////////////////////////////////////////////////////////////#
# File:         base.py                                                          #
# Author:       Douglas Nyberg                                                   #
# Email:        douglas1.nyberg@gmail.com                                        #
# Date:         2025-07-05                                                       #
# Description:  Shared fit -> predict -> clip contract for the forecasting       #
#               methods.                                                         #
#////////////////////////////////////////////////////////////////////////////////#
"""shared contract for the three forecasting methods"""
from dataclasses import dataclass, field
from typing import List, Optional, Protocol

import numpy as np
import pandas as pd


class Forecaster(Protocol):
    """
    Anything that can be fitted on a weekly training frame and then produce a
    point forecast for the rows of a future frame (one row per week ahead).
    """

    def fit(self, train: pd.DataFrame) -> "Forecaster":
        ...

    def predict(self, future: pd.DataFrame) -> np.ndarray:
        ...


def clip_negative(values) -> np.ndarray:
    """units sold cannot be negative"""
    return np.clip(np.asarray(values, dtype=float), 0.0, None)


def run_fit_predict_clip(forecaster: Forecaster, train: pd.DataFrame, future: pd.DataFrame) -> np.ndarray:
    """
    Fit, predict len(future) steps, clip negatives to zero.

    Raises:
        ValueError: if the model returns the wrong number of steps or non-finite values
    """
    fitted = forecaster.fit(train)
    raw = np.asarray(fitted.predict(future), dtype=float).ravel()

    if len(raw) != len(future):
        raise ValueError(f"Model returned {len(raw)} steps, expected {len(future)}")
    if not np.all(np.isfinite(raw)):
        raise ValueError("Model returned non-finite forecasts")

    return clip_negative(raw)


@dataclass
class ForecastOutcome:
    """result (or failure) of forecasting one product with one method"""
    product_id: str
    method: str
    status: str = "ok"  # 'ok' or 'failed'
    forecast: Optional[np.ndarray] = None
    actuals: Optional[np.ndarray] = None
    train_values: Optional[np.ndarray] = None
    test_dates: List[pd.Timestamp] = field(default_factory=list)
    train_dates: List[pd.Timestamp] = field(default_factory=list)
    exog_used: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @classmethod
    def failed(cls, product_id: str, method: str, error: str) -> "ForecastOutcome":
        return cls(product_id=product_id, method=method, status="failed", error=error)
