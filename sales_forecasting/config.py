#////////////////////////////////////////////////////////////////////////////////#
# File:         config.py                                                        #
# Author:       Douglas Nyberg                                                   #
# Email:        douglas1.nyberg@gmail.com                                        #
# Date:         2025-07-02                                                       #
# Description:  Configuration settings for the weekly sales forecasting          #
#               comparison.                                                      #
#////////////////////////////////////////////////////////////////////////////////#




"""
Configuration settings for the retail weekly sales forecasting comparison.
"""
import os
from pathlib import Path

# Project directory structure
PROJECT_ROOT = Path(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
DATA_DIR = PROJECT_ROOT / "data"
RAW_DATA_DIR = DATA_DIR / "raw"
RESULTS_DIR = PROJECT_ROOT / "results"
LOGS_DIR = PROJECT_ROOT / "logs"

# Sales schema
PRODUCT_ID_COL = "product_id"
MARKET_COL = "website"
DATE_COL = "date"
TARGET_COL = "units_sold"
PRICE_COL = "selling_price"
PROMOTION_COLS = ["promotion_dummy_1", "promotion_dummy_2"]
SALES_REQUIRED_COLUMNS = [PRODUCT_ID_COL, MARKET_COL, DATE_COL, TARGET_COL, PRICE_COL] + PROMOTION_COLS

# Data file configuration
DATA_CONFIG = {
    "products_file_name": "products.csv",
    "sales_file_name": "sales.csv",
    "categorical_product_cols": None,  # None = every product column
    "min_match_rate": 0.5,  # fraction of sales rows that must find a product
}

# Forecast settings
FORECAST_CONFIG = {
    "horizon": 5,  # test window, weekly periods
    "season_length": 52,  # weekly periods per year
    "weekly_rule": "W-MON",  # weeks labelled by their monday start
    "cutoff_date": None,  # None = start of the last `horizon` weeks
    "min_train_weeks": 8,
    "logistic_cap": 1000.0,
    "logistic_floor": 0.0,
    "daily_to_weekly_factor": 7,
    "reconciliation_method": "ols",  # 'ols', 'wls_struct' or 'bottom_up'
}

# The closed set of compared methods
METHODS = ("hierarchical", "arimax", "prophet")

METHOD_LABELS = {
    "hierarchical": "HTS (AutoARIMA + reconciliation)",
    "arimax": "ARIMAX (AutoARIMA + regressors)",
    "prophet": "Prophet (logistic growth + regressors)",
}

# Evaluation settings
SIGNIFICANCE_LEVEL = 0.05
MIN_PRODUCTS_FOR_TESTS = 6  # paired tests need a few products to mean anything

# Logging
LOGGING_CONFIG = {
    "level": "INFO",
    "format": "%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(lineno)d - %(message)s",
    "log_file": str(LOGS_DIR / "forecast_comparison.log"),
}


def get_forecast_config(overrides: dict = None) -> dict:
    """merge overrides into a copy of FORECAST_CONFIG and validate it"""
    cfg = dict(FORECAST_CONFIG)
    if overrides:
        unknown = set(overrides) - set(cfg)
        if unknown:
            raise ValueError(f"Unknown forecast config keys: {sorted(unknown)}")
        cfg.update(overrides)

    if int(cfg["horizon"]) <= 0:
        raise ValueError(f"horizon must be positive, got {cfg['horizon']}")
    if int(cfg["season_length"]) < 1:
        raise ValueError(f"season_length must be >= 1, got {cfg['season_length']}")
    if cfg["logistic_cap"] <= cfg["logistic_floor"]:
        raise ValueError("logistic_cap must be greater than logistic_floor")
    if cfg["reconciliation_method"] not in ("ols", "wls_struct", "bottom_up"):
        raise ValueError(f"Unknown reconciliation method: {cfg['reconciliation_method']}")
    return cfg
