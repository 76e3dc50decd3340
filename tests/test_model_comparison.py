# tests/test_model_comparison.py
import numpy as np
import pandas as pd
import pytest

from sales_forecasting.evaluators import model_comparison


def _table(rmse, mase):
    return pd.DataFrame({
        "product_id": [f"P{i + 1}" for i in range(len(rmse))],
        "rmse": rmse,
        "mase": mase,
    })


@pytest.fixture
def result_tables():
    return {
        "hierarchical": _table([1.0, 2.0, 3.0, np.nan], [0.5, 1.0, 1.5, np.nan]),
        "arimax": _table([2.0, 2.0, 1.0, np.nan], [1.0, 1.0, 0.5, np.nan]),
        "prophet": _table([3.0, 5.0, 4.0, np.nan], [2.0, np.nan, 3.0, np.nan]),
    }


def test_summarize_mase(result_tables):
    summary = model_comparison.summarize_mase(result_tables).set_index("method")

    assert summary.loc["hierarchical", "mean"] == pytest.approx(1.0)
    assert summary.loc["hierarchical", "median"] == pytest.approx(1.0)
    assert summary.loc["hierarchical", "variance"] == pytest.approx(0.25)
    assert summary.loc["prophet", "n_scored"] == 2
    assert summary.loc["prophet", "n_missing"] == 2


def test_winners_count_every_tied_method(result_tables):
    winners = model_comparison.determine_winners(result_tables).set_index("product_id")

    assert winners.loc["P1", "winners"] == ["hierarchical"]
    assert winners.loc["P2", "winners"] == ["hierarchical", "arimax"]
    assert winners.loc["P3", "winners"] == ["arimax"]
    assert winners.loc["P2", "min_rmse"] == 2.0
    assert winners.loc["P4", "winners"] == []


def test_count_wins(result_tables):
    winners = model_comparison.determine_winners(result_tables)
    counts = model_comparison.count_wins(winners, ["hierarchical", "arimax", "prophet"]).set_index("method")

    assert counts.loc["hierarchical", "wins"] == 2
    assert counts.loc["arimax", "wins"] == 2
    assert counts.loc["prophet", "wins"] == 0


def test_paired_tests_need_enough_products(result_tables):
    tests = model_comparison.paired_method_tests(result_tables, min_samples=6)

    assert len(tests) == 3
    assert tests["t_pvalue"].isna().all()
    assert tests["wilcoxon_pvalue_holm"].isna().all()
    assert not tests["significant_t"].any()


def test_paired_tests_with_enough_products():
    rng = np.random.default_rng(0)
    good = rng.uniform(1, 2, 12)
    tables = {
        "arimax": _table(good, good),
        "prophet": _table(good + rng.uniform(1, 2, 12), good),
    }
    tests = model_comparison.paired_method_tests(tables, min_samples=6)
    row = tests.iloc[0]

    assert row["n_products"] == 12
    assert row["mean_difference"] < 0
    assert row["t_pvalue"] < 0.05
    assert bool(row["significant_t"])
    assert row["wilcoxon_pvalue_holm"] < 0.05
    assert bool(row["significant"])


def test_missing_metric_column(result_tables):
    with pytest.raises(KeyError):
        model_comparison.summarize_mase(result_tables, metric="smape")
