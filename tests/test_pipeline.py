# tests/test_pipeline.py
import json

import numpy as np
import pytest

pytest.importorskip("statsforecast")
pytest.importorskip("prophet")

from sales_forecasting import config
from sales_forecasting.evaluators.scoring import forecast_columns
from sales_forecasting.pipeline import run_comparison

HORIZON = config.FORECAST_CONFIG["horizon"]


@pytest.fixture(scope="module")
def comparison(tmp_path_factory):
    from sales_forecasting.synthetic import write_synthetic_sales

    root = tmp_path_factory.mktemp("comparison")
    products_path, sales_path = write_synthetic_sales(
        root / "raw", n_products=2, markets=("A", "B", "C"), n_weeks=20, promo_weeks=(8, 10), seed=7
    )
    output_dir = root / "results"
    results = run_comparison(products_path, sales_path, output_dir)
    return results, output_dir


def test_one_row_per_product_per_method(comparison):
    results, _ = comparison

    assert set(results.result_tables) == set(config.METHODS)
    for method, table in results.result_tables.items():
        assert len(table) == 2, method
        assert list(table["product_id"]) == ["P1", "P2"]
        assert (table["status"] == "ok").all(), table["error"].tolist()


def test_forecasts_are_never_negative(comparison):
    results, _ = comparison

    for table in results.result_tables.values():
        values = table[forecast_columns(HORIZON)].to_numpy(dtype=float)
        assert np.isfinite(values).all()
        assert (values >= 0).all()


def test_test_window_is_five_weeks_after_train(comparison):
    results, _ = comparison

    for outcomes in results.outcomes.values():
        for outcome in outcomes.values():
            assert len(outcome.test_dates) == HORIZON
            steps = np.diff([outcome.train_dates[-1]] + outcome.test_dates)
            assert all(step.days == 7 for step in steps)


def test_zero_variance_regressors_never_reach_the_model(comparison):
    results, _ = comparison

    for method in ("arimax", "prophet"):
        for outcome in results.outcomes[method].values():
            # the second promotion flag never fires in the synthetic data
            assert "promotion_dummy_2" not in outcome.exog_used
            assert "promotion_dummy_1" in outcome.exog_used


def test_every_product_has_a_winner(comparison):
    results, _ = comparison
    winners = results.winners.set_index("product_id")

    assert len(winners) == 2
    assert (winners["n_winners"] >= 1).all()
    for product_id, row in winners.iterrows():
        rmse = {m: t.set_index("product_id").loc[product_id, "rmse"] for m, t in results.result_tables.items()}
        assert row["min_rmse"] == pytest.approx(min(rmse.values()))
    assert results.win_counts["wins"].sum() == winners["n_winners"].sum()


def test_outputs_written(comparison):
    _, output_dir = comparison

    for method in config.METHODS:
        assert (output_dir / f"{method}_results.csv").exists()
    for name in ("mase_summary.csv", "winners.csv", "win_counts.csv", "paired_tests.csv"):
        assert (output_dir / name).exists()
    assert (output_dir / "plots" / "weekly_sales_histogram.png").exists()
    assert list((output_dir / "plots").glob("forecast_*.png"))

    with open(output_dir / "comparison_summary.json") as f:
        summary = json.load(f, parse_constant=lambda name: pytest.fail(f"bare {name} in summary"))
    assert summary["n_products"] == 2
    assert summary["merge_report"]["match_rate"] == 1.0
