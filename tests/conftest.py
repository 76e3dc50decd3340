# tests/conftest.py
import sys
from pathlib import Path

import pytest

# project root on sys.path so `sales_forecasting` imports without an install
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from sales_forecasting import data_loader
from sales_forecasting.synthetic import generate_synthetic_sales, write_synthetic_sales

N_PRODUCTS = 2
MARKETS = ("A", "B", "C")
N_WEEKS = 20
PROMO_WEEKS = (8, 10)


@pytest.fixture
def synthetic_frames():
    """2 products x 3 markets x 20 weeks of daily sales, promotion 1 on for weeks 8-9"""
    return generate_synthetic_sales(
        n_products=N_PRODUCTS, markets=MARKETS, n_weeks=N_WEEKS, promo_weeks=PROMO_WEEKS, seed=7
    )


@pytest.fixture
def synthetic_files(tmp_path):
    return write_synthetic_sales(
        tmp_path / "raw",
        n_products=N_PRODUCTS, markets=MARKETS, n_weeks=N_WEEKS, promo_weeks=PROMO_WEEKS, seed=7
    )


@pytest.fixture
def merged(synthetic_files):
    products_path, sales_path = synthetic_files
    merged, _ = data_loader.load_and_merge(products_path, sales_path)
    return merged
