#////////////////////////////////////////////////////////////////////////////////#
# File:         forecast_runner.py                                               #
# Author:       Douglas Nyberg                                                   #
# Email:        douglas1.nyberg@gmail.com                                        #
# Date:         2025-07-07                                                       #
# Description:  Per-product fit/predict/clip loop for each compared method.      #
#////////////////////////////////////////////////////////////////////////////////#
"""
Runs the three forecasting methods product by product.

Each product is an independent record: it is split into train/test weeks,
fitted, forecast `horizon` weeks ahead and clipped. A failure for one product is
logged and returned as a failed ForecastOutcome, it never stops the batch.
"""
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

import pandas as pd
from tqdm import tqdm

from sales_forecasting import config
from sales_forecasting import reshaping
from sales_forecasting.models.additive import ProphetForecaster
from sales_forecasting.models.base import ForecastOutcome, run_fit_predict_clip
from sales_forecasting.models.classical import AutoARIMAForecaster
from sales_forecasting.models.hierarchical import HierarchicalForecaster

logger = logging.getLogger(__name__)


@dataclass
class PreparedInputs:
    """method specific reshaped inputs built from one merged table"""
    hierarchical_wide: Optional[pd.DataFrame] = None
    hierarchy: Optional[reshaping.HierarchySpec] = None
    regression: Optional[pd.DataFrame] = None
    additive: Optional[pd.DataFrame] = None


def validate_methods(methods: Optional[List[str]]) -> List[str]:
    if methods is None:
        return list(config.METHODS)
    unknown = [m for m in methods if m not in config.METHODS]
    if unknown:
        raise ValueError(f"Unknown methods: {unknown}. Supported: {list(config.METHODS)}")
    return list(methods)


def prepare_inputs(merged: pd.DataFrame, methods: Optional[List[str]] = None,
                   cfg: Optional[Dict] = None) -> PreparedInputs:
    """run only the reshaping paths the requested methods need"""
    methods = validate_methods(methods)
    cfg = config.get_forecast_config(cfg)
    rule = cfg["weekly_rule"]

    prepared = PreparedInputs()
    if "hierarchical" in methods:
        prepared.hierarchical_wide, prepared.hierarchy = reshaping.pivot_hierarchical_wide(
            merged, rule=rule, season_length=cfg["season_length"]
        )
    if "arimax" in methods:
        prepared.regression = reshaping.build_regression_frame(merged, rule=rule)
    if "prophet" in methods:
        prepared.additive = reshaping.build_additive_frame(
            merged,
            rule=rule,
            cap=cfg["logistic_cap"],
            floor=cfg["logistic_floor"],
            factor=cfg["daily_to_weekly_factor"],
        )
    return prepared


def _check_train_length(train: pd.DataFrame, cfg: Dict) -> None:
    if len(train) < cfg["min_train_weeks"]:
        raise ValueError(
            f"Training window has {len(train)} weeks, need at least {cfg['min_train_weeks']}"
        )


def _split(frame: pd.DataFrame, cfg: Dict):
    train, test = reshaping.split_train_test(
        frame, horizon=cfg["horizon"], cutoff_date=cfg["cutoff_date"], rule=cfg["weekly_rule"]
    )
    _check_train_length(train, cfg)
    return train, test


def _forecast_hierarchical(product_id: str, prepared: PreparedInputs, cfg: Dict) -> ForecastOutcome:
    leaves = reshaping.product_keys(prepared.hierarchy, product_id)
    if not leaves:
        raise KeyError(f"Product '{product_id}' has no hierarchy leaves")

    train, test = _split(prepared.hierarchical_wide[leaves], cfg)
    forecaster = HierarchicalForecaster(
        season_length=cfg["season_length"],
        reconciliation_method=cfg["reconciliation_method"],
        freq=cfg["weekly_rule"],
    )
    forecast = run_fit_predict_clip(forecaster, train, test)

    return ForecastOutcome(
        product_id=product_id,
        method="hierarchical",
        forecast=forecast,
        actuals=test.sum(axis=1).to_numpy(dtype=float),
        train_values=train.sum(axis=1).to_numpy(dtype=float),
        test_dates=list(test.index),
        train_dates=list(train.index),
    )


def _forecast_with_regressors(method: str, product_id: str, frame: pd.DataFrame, cfg: Dict) -> ForecastOutcome:
    weekly = reshaping.product_frame(frame, product_id)
    train, test = _split(weekly, cfg)

    exog = reshaping.regressor_columns(frame)
    _, _, kept = reshaping.drop_zero_variance_columns(train[exog], test[exog])

    if method == "arimax":
        forecaster = AutoARIMAForecaster(
            season_length=cfg["season_length"], exog_cols=kept, freq=cfg["weekly_rule"]
        )
    else:
        forecaster = ProphetForecaster(exog_cols=kept)

    forecast = run_fit_predict_clip(forecaster, train, test)

    return ForecastOutcome(
        product_id=product_id,
        method=method,
        forecast=forecast,
        actuals=test[config.TARGET_COL].to_numpy(dtype=float),
        train_values=train[config.TARGET_COL].to_numpy(dtype=float),
        test_dates=list(test.index),
        train_dates=list(train.index),
        exog_used=kept,
    )


def forecast_product(method: str, product_id: str, prepared: PreparedInputs,
                     cfg: Optional[Dict] = None) -> ForecastOutcome:
    """
    Fit -> predict -> clip for one product and one method.

    Returns:
        ForecastOutcome; status 'failed' with the error text if anything went wrong
    """
    validate_methods([method])
    cfg = config.get_forecast_config(cfg)
    product_id = str(product_id)
    try:
        if method == "hierarchical":
            return _forecast_hierarchical(product_id, prepared, cfg)
        frame = prepared.regression if method == "arimax" else prepared.additive
        return _forecast_with_regressors(method, product_id, frame, cfg)
    except Exception as e:
        logger.warning(f"Error forecasting {method} for '{product_id}': {str(e)}")
        return ForecastOutcome.failed(product_id, method, f"{type(e).__name__}: {e}")


def run_method(method: str, prepared: PreparedInputs, products: List[str],
               cfg: Optional[Dict] = None) -> Dict[str, ForecastOutcome]:
    """
    Forecast every product with one method.

    Returns:
        Dict product_id -> ForecastOutcome
    """
    validate_methods([method])
    cfg = config.get_forecast_config(cfg)
    logger.info(f"Running {config.METHOD_LABELS[method]} on {len(products)} products")

    outcomes = {}
    for product_id in tqdm(products, desc=f"{method} forecasts"):
        outcomes[str(product_id)] = forecast_product(method, product_id, prepared, cfg)

    n_failed = sum(1 for o in outcomes.values() if not o.ok)
    if n_failed:
        logger.warning(f"{method}: {n_failed}/{len(outcomes)} products failed")
    else:
        logger.info(f"{method}: all {len(outcomes)} products forecast")
    return outcomes
