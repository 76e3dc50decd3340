# tests/test_data_loader.py
import pandas as pd
import pytest

from sales_forecasting import config, data_loader


def test_load_products_coerces_every_column_to_category(synthetic_files):
    products_path, _ = synthetic_files
    products = data_loader.load_products(products_path)

    assert len(products) == 2
    assert all(str(dtype) == "category" for dtype in products.dtypes)


def test_load_products_unknown_categorical_column(synthetic_files):
    products_path, _ = synthetic_files
    with pytest.raises(KeyError):
        data_loader.load_products(products_path, categorical_cols=["not_a_column"])


def test_load_sales_parses_schema(synthetic_files):
    _, sales_path = synthetic_files
    sales = data_loader.load_sales(sales_path)

    assert pd.api.types.is_datetime64_any_dtype(sales[config.DATE_COL])
    assert set(sales[config.PROMOTION_COLS[0]].unique()) <= {0.0, 1.0}
    assert sales[config.MARKET_COL].map(type).eq(str).all()


def test_unparseable_dates_are_dropped(synthetic_files, tmp_path):
    _, sales_path = synthetic_files
    raw = pd.read_csv(sales_path, dtype=str)
    raw.loc[3, config.DATE_COL] = "not-a-date"
    broken = tmp_path / "broken_sales.csv"
    raw.to_csv(broken, index=False)

    sales = data_loader.load_sales(broken)

    assert len(sales) == len(raw) - 1
    assert sales[config.DATE_COL].notna().all()


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        data_loader.load_sales(tmp_path / "nope.csv")


def test_missing_sales_columns_raise(tmp_path):
    path = tmp_path / "sales.csv"
    pd.DataFrame({"product_id": ["P1"], "date": ["2023-01-02"]}).to_csv(path, index=False)
    with pytest.raises(KeyError, match="units_sold"):
        data_loader.load_sales(path)


def test_merge_is_inner_join_with_report(synthetic_frames):
    products, sales = synthetic_frames
    extra = sales.iloc[:10].copy()
    extra[config.PRODUCT_ID_COL] = "GHOST"
    sales = pd.concat([sales, extra], ignore_index=True)
    products = pd.concat(
        [products, pd.DataFrame({config.PRODUCT_ID_COL: ["UNSOLD"], "category": ["apparel"],
                                 "brand": ["north"], "color": ["red"]})],
        ignore_index=True,
    )

    merged, report = data_loader.merge_products_sales(products, sales)

    assert report.unmatched_sales_rows == 10
    assert report.unmatched_sales_products == ["GHOST"]
    assert report.products_without_sales == ["UNSOLD"]
    assert len(merged) == len(sales) - 10
    assert "GHOST" not in set(merged[config.PRODUCT_ID_COL].astype(str))
    assert "category" in merged.columns


def test_low_match_rate_raises(synthetic_frames):
    products, sales = synthetic_frames
    products = products.assign(**{config.PRODUCT_ID_COL: ["X1", "X2"]})

    with pytest.raises(data_loader.DataQualityError):
        data_loader.merge_products_sales(products, sales)


def test_list_products(merged):
    assert data_loader.list_products(merged) == ["P1", "P2"]
