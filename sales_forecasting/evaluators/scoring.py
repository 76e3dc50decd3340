#////////////////////////////////////////////////////////////////////////////////#
# File:         scoring.py                                                       #
# Author:       Douglas Nyberg                                                   #
# Email:        douglas1.nyberg@gmail.com                                        #
# Date:         2025-07-08                                                       #
#////////////////////////////////////////////////////////////////////////////////#
"""
Turns per-product forecast outcomes into one result table per method.
"""
import logging
from typing import Dict, List, Optional

import numpy as np
import pandas as pd

from sales_forecasting import config
from sales_forecasting.models.base import ForecastOutcome
from .accuracy import calculate_mae, calculate_mase, calculate_rmse

logger = logging.getLogger(__name__)

METRIC_COLUMNS = ["rmse", "mae", "mase"]


def forecast_columns(horizon: int) -> List[str]:
    return [f"week_{i}_sales" for i in range(1, horizon + 1)]


def score_outcome(outcome: ForecastOutcome, season_length: Optional[int] = None) -> Dict[str, float]:
    """
    rmse/mae/mase of one product's forecast against its own test weeks.

    MASE is scaled by the seasonal naive error of the same method's training
    series, never by another method's.
    """
    if not outcome.ok:
        return {metric: np.nan for metric in METRIC_COLUMNS}

    if season_length is None:
        season_length = config.FORECAST_CONFIG["season_length"]

    return {
        "rmse": calculate_rmse(outcome.actuals, outcome.forecast),
        "mae": calculate_mae(outcome.actuals, outcome.forecast),
        "mase": calculate_mase(outcome.actuals, outcome.forecast, outcome.train_values, m=season_length),
    }


def build_result_table(
    outcomes: Dict[str, ForecastOutcome],
    horizon: Optional[int] = None,
    season_length: Optional[int] = None
) -> pd.DataFrame:
    """
    One row per product: forecasts for each test week, error metrics and status.

    Failed products keep their row with NaN forecasts and metrics.
    """
    if horizon is None:
        horizon = config.FORECAST_CONFIG["horizon"]
    week_cols = forecast_columns(horizon)

    rows = []
    for product_id in sorted(outcomes):
        outcome = outcomes[product_id]
        row = {config.PRODUCT_ID_COL: product_id}

        values = np.full(horizon, np.nan)
        if outcome.ok:
            forecast = np.asarray(outcome.forecast, dtype=float)
            if len(forecast) != horizon:
                raise ValueError(
                    f"{outcome.method} forecast for '{product_id}' has {len(forecast)} weeks, expected {horizon}"
                )
            values = forecast
        row.update(dict(zip(week_cols, values)))
        row.update(score_outcome(outcome, season_length))
        row["status"] = outcome.status
        row["error"] = outcome.error
        rows.append(row)

    columns = [config.PRODUCT_ID_COL] + week_cols + METRIC_COLUMNS + ["status", "error"]
    table = pd.DataFrame(rows, columns=columns)

    n_nan_mase = int((table["status"].eq("ok") & table["mase"].isna()).sum())
    if n_nan_mase:
        logger.info(f"{n_nan_mase} products have an undefined MASE (flat training history)")
    return table
