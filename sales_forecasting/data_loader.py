#////////////////////////////////////////////////////////////////////////////////#
# File:         data_loader.py                                                   #
# Author:       Douglas Nyberg                                                   #
# Email:        douglas1.nyberg@gmail.com                                        #
# Date:         2025-07-02                                                       #
# Description:  Loading and merging of the product catalog and daily sales       #
#               files.                                                           #
#////////////////////////////////////////////////////////////////////////////////#
"""
Data loading functions for the product catalog and the daily sales records.
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import numpy as np
import pandas as pd

from sales_forecasting import config

logger = logging.getLogger(__name__)


class DataQualityError(ValueError):
    """Raised when the merged table is too incomplete to trust."""


@dataclass
class MergeReport:
    """bookkeeping for the product/sales inner join"""
    sales_rows: int
    matched_rows: int
    unmatched_sales_rows: int
    unmatched_sales_products: List[str]
    products_without_sales: List[str]

    @property
    def match_rate(self) -> float:
        if self.sales_rows == 0:
            return 0.0
        return self.matched_rows / self.sales_rows

    def to_dict(self) -> Dict:
        return {
            "sales_rows": self.sales_rows,
            "matched_rows": self.matched_rows,
            "unmatched_sales_rows": self.unmatched_sales_rows,
            "unmatched_sales_products": self.unmatched_sales_products,
            "products_without_sales": self.products_without_sales,
            "match_rate": self.match_rate,
        }


def _ensure_required_columns(df: pd.DataFrame, required: List[str], source: str) -> None:
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise KeyError(f"Missing required columns in {source}: {missing}")


def load_products(
    path: Union[str, Path],
    categorical_cols: Optional[List[str]] = None
) -> pd.DataFrame:
    """
    Load the product catalog.

    Every attribute is an unordered categorical factor. The product id is read
    as a string first so ids like '007' keep their leading zeros.

    Args:
        path: CSV file with a product_id column plus attribute columns
        categorical_cols: Columns to coerce to category (default: all columns)

    Returns:
        DataFrame with one row per product
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Products file not found at {path}")

    products = pd.read_csv(path, dtype={config.PRODUCT_ID_COL: str})
    _ensure_required_columns(products, [config.PRODUCT_ID_COL], "products")

    if categorical_cols is None:
        categorical_cols = config.DATA_CONFIG["categorical_product_cols"] or list(products.columns)

    for col in categorical_cols:
        if col not in products.columns:
            raise KeyError(f"Categorical column '{col}' not found in products")
        products[col] = products[col].astype("category")

    n_dupes = products[config.PRODUCT_ID_COL].duplicated().sum()
    if n_dupes:
        logger.warning(f"Products file has {n_dupes} duplicated product ids, keeping first")
        products = products.drop_duplicates(subset=[config.PRODUCT_ID_COL], keep="first")

    logger.info(f"Loaded {len(products)} products with {products.shape[1] - 1} attributes")
    return products.reset_index(drop=True)


def load_sales(path: Union[str, Path]) -> pd.DataFrame:
    """
    Load daily sales records, one row per product/market/day.

    Numeric fields that fail to parse become NaN; they are filled with zero
    after weekly aggregation, not here.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Sales file not found at {path}")

    sales = pd.read_csv(
        path,
        dtype={config.PRODUCT_ID_COL: str, config.MARKET_COL: str},
        parse_dates=[config.DATE_COL],
    )
    _ensure_required_columns(sales, config.SALES_REQUIRED_COLUMNS, "sales")

    sales[config.DATE_COL] = pd.to_datetime(sales[config.DATE_COL], errors="coerce")
    bad_dates = sales[config.DATE_COL].isna().sum()
    if bad_dates:
        logger.warning(f"Dropping {bad_dates} sales rows with unparseable dates")
        sales = sales[sales[config.DATE_COL].notna()]

    for col in [config.TARGET_COL, config.PRICE_COL]:
        sales[col] = pd.to_numeric(sales[col], errors="coerce")

    # promotion dummies are binary; anything truthy counts as active
    for col in config.PROMOTION_COLS:
        flag = pd.to_numeric(sales[col], errors="coerce").fillna(0)
        sales[col] = (flag > 0).astype(float)

    logger.info(
        f"Loaded {len(sales)} sales rows: {sales[config.PRODUCT_ID_COL].nunique()} products, "
        f"{sales[config.MARKET_COL].nunique()} markets, "
        f"{sales[config.DATE_COL].min()} to {sales[config.DATE_COL].max()}"
    )
    return sales.reset_index(drop=True)


def merge_products_sales(
    products: pd.DataFrame,
    sales: pd.DataFrame,
    min_match_rate: Optional[float] = None
) -> Tuple[pd.DataFrame, MergeReport]:
    """
    Inner join sales records with product attributes on product_id.

    Rows without a partner on either side are dropped and counted. A match rate
    below `min_match_rate` means the two files do not belong together, so this
    raises instead of returning a quietly truncated table.

    Returns:
        Tuple of (merged DataFrame, MergeReport)
    """
    if min_match_rate is None:
        min_match_rate = config.DATA_CONFIG["min_match_rate"]

    key = config.PRODUCT_ID_COL
    sales_ids = sales[key].astype(str)
    product_ids = products[key].astype(str)

    matched_mask = sales_ids.isin(set(product_ids))
    report = MergeReport(
        sales_rows=len(sales),
        matched_rows=int(matched_mask.sum()),
        unmatched_sales_rows=int((~matched_mask).sum()),
        unmatched_sales_products=sorted(sales_ids[~matched_mask].unique().tolist()),
        products_without_sales=sorted(set(product_ids) - set(sales_ids)),
    )

    if report.unmatched_sales_rows:
        logger.warning(
            f"{report.unmatched_sales_rows} sales rows have no product entry "
            f"(product ids: {report.unmatched_sales_products[:10]})"
        )
    if report.products_without_sales:
        logger.info(f"{len(report.products_without_sales)} products have no sales rows")

    if report.match_rate < min_match_rate:
        raise DataQualityError(
            f"Only {report.match_rate:.1%} of sales rows matched a product "
            f"(minimum {min_match_rate:.1%}); check that the files belong together"
        )

    left = sales.assign(**{key: sales_ids})
    right = products.assign(**{key: product_ids})
    merged = left.merge(right, on=key, how="inner")
    merged[key] = merged[key].astype("category")
    merged = merged.sort_values([key, config.MARKET_COL, config.DATE_COL]).reset_index(drop=True)

    logger.info(f"Merged table: {merged.shape} (match rate {report.match_rate:.1%})")
    return merged, report


def load_and_merge(
    products_path: Union[str, Path],
    sales_path: Union[str, Path],
    min_match_rate: Optional[float] = None
) -> Tuple[pd.DataFrame, MergeReport]:
    """load both files and return the merged table with its merge report"""
    products = load_products(products_path)
    sales = load_sales(sales_path)
    return merge_products_sales(products, sales, min_match_rate=min_match_rate)


def list_products(merged: pd.DataFrame) -> List[str]:
    """product ids present in the merged table, in sorted order"""
    ids = merged[config.PRODUCT_ID_COL].astype(str).unique()
    return sorted(np.asarray(ids).tolist())
