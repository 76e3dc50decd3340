#////////////////////////////////////////////////////////////////////////////////#
# File:         additive.py                                                      #
# Author:       Douglas Nyberg                                                   #
# Email:        douglas1.nyberg@gmail.com                                        #
# Date:         2025-07-06                                                       #
# Description:  Prophet wrapper with logistic growth and external regressors.    #
#////////////////////////////////////////////////////////////////////////////////#
"""prophet with saturating (logistic) growth and price/promotion regressors"""
import logging
from typing import List, Optional

import numpy as np
import pandas as pd
from prophet import Prophet

from sales_forecasting import config

logger = logging.getLogger(__name__)

# stan backend chatter on every fit
for _name in ("cmdstanpy", "prophet"):
    logging.getLogger(_name).setLevel(logging.WARNING)


class ProphetForecaster:
    """
    Additive Bayesian regression forecaster.

    Frames passed to `fit` and `predict` must carry `cap` and `floor` columns
    (attached by the additive reshaping path) and every column in `exog_cols`.
    """

    def __init__(self, exog_cols: Optional[List[str]] = None, yearly_seasonality="auto",
                 changepoint_prior_scale: float = 0.05):
        self.exog_cols = list(exog_cols or [])
        self.yearly_seasonality = yearly_seasonality
        self.changepoint_prior_scale = changepoint_prior_scale
        self.model = None

    def _to_prophet_frame(self, frame: pd.DataFrame, with_target: bool) -> pd.DataFrame:
        fc = config.FORECAST_CONFIG
        df = pd.DataFrame({'ds': pd.DatetimeIndex(frame.index)})
        if with_target:
            df['y'] = np.asarray(frame[config.TARGET_COL], dtype=float)
        df['cap'] = np.asarray(frame['cap'], dtype=float) if 'cap' in frame else float(fc["logistic_cap"])
        df['floor'] = np.asarray(frame['floor'], dtype=float) if 'floor' in frame else float(fc["logistic_floor"])
        for col in self.exog_cols:
            df[col] = np.asarray(frame[col], dtype=float)
        return df

    def fit(self, train: pd.DataFrame) -> 'ProphetForecaster':
        df = self._to_prophet_frame(train, with_target=True)

        self.model = Prophet(
            growth='logistic',
            yearly_seasonality=self.yearly_seasonality,
            weekly_seasonality=False,  # weekly buckets, no intra-week pattern
            daily_seasonality=False,
            changepoint_prior_scale=self.changepoint_prior_scale,
        )
        for regressor in self.exog_cols:
            self.model.add_regressor(regressor)

        self.model.fit(df)
        return self

    def predict(self, future: pd.DataFrame) -> np.ndarray:
        if self.model is None:
            raise ValueError("model must be fitted before predicton")
        forecast = self.model.predict(self._to_prophet_frame(future, with_target=False))
        return forecast['yhat'].to_numpy(dtype=float)
