#////////////////////////////////////////////////////////////////////////////////#
# File:         classical.py                                                     #
# Author:       Douglas Nyberg                                                   #
# Email:        douglas1.nyberg@gmail.com                                        #
# Date:         2025-07-05                                                       #
# Description:  AutoARIMA wrapper around statsforecast, with optional external   #
#               regressors (ARIMAX).                                             #
#////////////////////////////////////////////////////////////////////////////////#
"""wrapper for the statsforecast AutoARIMA model"""
import logging
import warnings
from typing import List, Optional

import numpy as np
import pandas as pd

from statsforecast import StatsForecast
from statsforecast.models import AutoARIMA as SF_AutoARIMA

from sales_forecasting import config

logger = logging.getLogger(__name__)


def effective_season_length(n_obs: int, season_length: int) -> int:
    """
    Seasonal period the model can actually use.

    Seasonal differencing needs at least two full seasons; with less history the
    model falls back to a non-seasonal fit.
    """
    if season_length > 1 and n_obs >= 2 * season_length:
        return season_length
    return 1


class AutoARIMAForecaster:
    """
    Automatic order-selection ARIMA for one weekly series.

    With `exog_cols` the model is an ARIMAX: the training frame must carry the
    regressor columns and `predict` needs their values for every future week.
    """

    def __init__(self, season_length: Optional[int] = None, exog_cols: Optional[List[str]] = None,
                 freq: Optional[str] = None):
        self.season_length = season_length or config.FORECAST_CONFIG["season_length"]
        self.exog_cols = list(exog_cols or [])
        self.freq = freq or config.FORECAST_CONFIG["weekly_rule"]
        self.sf = None
        self.fitted = False
        self._last_train_data = None

    def _to_sf_frame(self, frame: pd.DataFrame, with_target: bool) -> pd.DataFrame:
        # statsforecast wants long format: unique_id, ds, [y], exog...
        df = pd.DataFrame({
            'unique_id': 1,
            'ds': pd.DatetimeIndex(frame.index),
        })
        if with_target:
            df['y'] = np.asarray(frame[config.TARGET_COL], dtype=float)
        for col in self.exog_cols:
            df[col] = np.asarray(frame[col], dtype=float)
        return df

    def fit(self, train: pd.DataFrame) -> 'AutoARIMAForecaster':
        missing = [c for c in [config.TARGET_COL] + self.exog_cols if c not in train.columns]
        if missing:
            raise KeyError(f"Training frame is missing columns: {missing}")

        df = self._to_sf_frame(train, with_target=True)
        season = effective_season_length(len(df), self.season_length)

        self._last_train_data = df
        self.sf = StatsForecast(
            models=[SF_AutoARIMA(season_length=season)],
            freq=self.freq,
            n_jobs=1
        )
        self.fitted = True
        logger.debug(f"AutoARIMA fit on {len(df)} weeks (season {season}, exog {self.exog_cols})")
        return self

    def predict(self, future: pd.DataFrame) -> np.ndarray:
        # get point forecasts, one per row of `future`
        if not self.fitted:
            raise ValueError("model must be fitted before predicton")

        h = len(future)
        X_df = None
        if self.exog_cols:
            X_df = self._to_sf_frame(future, with_target=False)

        with warnings.catch_warnings():
            warnings.simplefilter('ignore')
            forecasts_df = self.sf.forecast(df=self._last_train_data, h=h, X_df=X_df)

        # extract forecast values - column name is model alias
        forecast_cols = [col for col in forecasts_df.columns if col not in ['unique_id', 'ds']]
        if not forecast_cols:
            raise ValueError("no forecast column found")
        return forecasts_df[forecast_cols[0]].to_numpy(dtype=float)
