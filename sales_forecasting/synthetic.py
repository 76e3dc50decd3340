#////////////////////////////////////////////////////////////////////////////////#
# File:         synthetic.py                                                     #
# Author:       Douglas Nyberg                                                   #
# Email:        douglas1.nyberg@gmail.com                                        #
# Date:         2025-07-10                                                       #
# Description:  Synthetic product catalog and daily sales records with the same  #
#               schema as the real input files.                                  #
#////////////////////////////////////////////////////////////////////////////////#

"""
Synthetic retail data for smoke runs and tests.

Each (product, market) pair gets a poisson demand around its own base level,
with a mild yearly cycle. One promotion flag is switched on for a block of weeks
in every market and lifts demand while it is active; the second flag stays off.
"""
from pathlib import Path
from typing import Sequence, Tuple

import numpy as np
import pandas as pd

from sales_forecasting import config

PRODUCT_ATTRIBUTES = {
    "category": ["apparel", "footwear", "accessories"],
    "brand": ["north", "summit", "coast"],
    "color": ["black", "white", "red", "blue"],
}


def generate_synthetic_sales(
    n_products: int = 2,
    markets: Sequence[str] = ("A", "B", "C"),
    n_weeks: int = 20,
    start_date: str = "2023-01-02",
    promo_weeks: Tuple[int, int] = (8, 10),
    promo_lift: float = 1.5,
    seed: int = 42
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Build a (products, sales) pair.

    Args:
        n_products: Number of products
        markets: Market (website) ids
        n_weeks: Length of the daily history in weeks
        start_date: First day, a monday keeps weeks aligned with the weekly rule
        promo_weeks: [first, last) week index with promotion_dummy_1 active
        promo_lift: Demand multiplier while the promotion runs
        seed: Random seed

    Returns:
        Tuple of (products DataFrame, sales DataFrame)
    """
    rng = np.random.default_rng(seed)
    product_ids = [f"P{i + 1}" for i in range(n_products)]

    products = pd.DataFrame({config.PRODUCT_ID_COL: product_ids})
    for attribute, levels in PRODUCT_ATTRIBUTES.items():
        products[attribute] = rng.choice(levels, size=n_products)

    dates = pd.date_range(start_date, periods=n_weeks * 7, freq="D")
    day_index = np.arange(len(dates))
    week_index = day_index // 7
    promo_active = ((week_index >= promo_weeks[0]) & (week_index < promo_weeks[1])).astype(int)
    cycle = 1.0 + 0.2 * np.sin(2 * np.pi * day_index / 365.25)

    frames = []
    for product_id in product_ids:
        for market in markets:
            base = rng.uniform(5, 30)
            rate = base * cycle * np.where(promo_active == 1, promo_lift, 1.0)
            base_price = rng.uniform(10, 60)
            frames.append(pd.DataFrame({
                config.PRODUCT_ID_COL: product_id,
                config.MARKET_COL: market,
                config.DATE_COL: dates,
                config.TARGET_COL: rng.poisson(rate),
                config.PRICE_COL: np.round(base_price + rng.normal(0, 0.5, len(dates)), 2),
                config.PROMOTION_COLS[0]: promo_active,
                config.PROMOTION_COLS[1]: 0,
            }))

    sales = pd.concat(frames, ignore_index=True)
    return products, sales


def write_synthetic_sales(output_dir, **kwargs) -> Tuple[str, str]:
    """generate and write products.csv / sales.csv, returns both paths"""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    products, sales = generate_synthetic_sales(**kwargs)

    products_path = output_dir / config.DATA_CONFIG["products_file_name"]
    sales_path = output_dir / config.DATA_CONFIG["sales_file_name"]
    products.to_csv(products_path, index=False)
    sales.to_csv(sales_path, index=False)
    return str(products_path), str(sales_path)
