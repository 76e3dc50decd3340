#////////////////////////////////////////////////////////////////////////////////#
# File:         model_comparison.py                                              #
# Author:       Douglas Nyberg                                                   #
# Email:        douglas1.nyberg@gmail.com                                        #
# Date:         2025-07-09                                                       #
#////////////////////////////////////////////////////////////////////////////////#





"""
Comparison of the forecasting methods across products.

Works on the per-method result tables from `scoring.build_result_table`:
metric distributions per method, the per-product winner by minimum error and
paired significance tests between methods.
"""

import itertools
import logging
from typing import Dict, List, Optional

import numpy as np
import pandas as pd
from scipy import stats
from statsmodels.stats.multitest import multipletests

from sales_forecasting import config

logger = logging.getLogger(__name__)


def _metric_by_product(table: pd.DataFrame, metric: str) -> pd.Series:
    if metric not in table.columns:
        raise KeyError(f"Result table has no '{metric}' column")
    return table.set_index(config.PRODUCT_ID_COL)[metric].astype(float)


def summarize_mase(result_tables: Dict[str, pd.DataFrame], metric: str = "mase") -> pd.DataFrame:
    """
    Mean, median and variance of a metric per method.

    NaN rows (failed products, undefined MASE) are left out and counted in
    `n_missing`.
    """
    summary_data = []
    for method, table in result_tables.items():
        values = _metric_by_product(table, metric)
        scored = values.dropna()
        summary_data.append({
            "method": method,
            "mean": scored.mean() if len(scored) else np.nan,
            "median": scored.median() if len(scored) else np.nan,
            "variance": scored.var(ddof=1) if len(scored) > 1 else np.nan,
            "n_scored": len(scored),
            "n_missing": int(values.isna().sum()),
        })
    return pd.DataFrame(summary_data, columns=["method", "mean", "median", "variance", "n_scored", "n_missing"])


def determine_winners(result_tables: Dict[str, pd.DataFrame], metric: str = "rmse") -> pd.DataFrame:
    """
    Per product, the method(s) with the lowest error.

    Ties are not broken: every method reaching the minimum is listed. Products
    where no method produced a score get an empty winner list.
    """
    wide = pd.DataFrame({
        method: _metric_by_product(table, metric) for method, table in result_tables.items()
    })

    rows = []
    for product_id, scores in wide.iterrows():
        best = scores.min(skipna=True)
        if pd.isna(best):
            winners = []
        else:
            winners = [method for method, value in scores.items() if value == best]
        rows.append({
            config.PRODUCT_ID_COL: product_id,
            f"min_{metric}": best,
            "winners": winners,
            "n_winners": len(winners),
        })

    return pd.DataFrame(rows, columns=[config.PRODUCT_ID_COL, f"min_{metric}", "winners", "n_winners"])


def count_wins(winners: pd.DataFrame, methods: Optional[List[str]] = None) -> pd.DataFrame:
    """number of products each method won (ties count for every tied method)"""
    if methods is None:
        methods = sorted({m for ws in winners["winners"] for m in ws})

    counts = {method: 0 for method in methods}
    for ws in winners["winners"]:
        for method in ws:
            counts[method] = counts.get(method, 0) + 1

    return pd.DataFrame(
        [{"method": method, "wins": wins} for method, wins in counts.items()],
        columns=["method", "wins"]
    )


def paired_test(m1_values: np.ndarray, m2_values: np.ndarray, significance_level: float = None,
                min_samples: int = None) -> Dict[str, float]:
    """
    Paired t-test and Wilcoxon signed-rank test on per-product metrics.

    Uses both parametric (paired t-test) and non-parametric (Wilcoxon signed-rank) tests.
    Fewer than `min_samples` pairs gives NaN statistics.
    `significant_t` flags an uncorrected t-test p-value below `significance_level`.
    """
    if significance_level is None:
        significance_level = config.SIGNIFICANCE_LEVEL
    if min_samples is None:
        min_samples = config.MIN_PRODUCTS_FOR_TESTS

    differences = m1_values - m2_values
    n = len(differences)
    result = {
        "n_products": n,
        "mean_difference": float(np.mean(differences)) if n else np.nan,
        "t_statistic": np.nan,
        "t_pvalue": np.nan,
        "wilcoxon_statistic": np.nan,
        "wilcoxon_pvalue": np.nan,
        "cohens_d": np.nan,
        "significant_t": False,
    }
    if n < min_samples:
        return result

    t_stat, t_pvalue = stats.ttest_rel(m1_values, m2_values)
    result["t_statistic"] = float(t_stat)
    result["t_pvalue"] = float(t_pvalue)
    result["significant_t"] = bool(np.isfinite(t_pvalue) and t_pvalue < significance_level)

    # wilcoxon is undefined when every difference is zero
    if np.any(differences != 0):
        w_stat, w_pvalue = stats.wilcoxon(differences)
        result["wilcoxon_statistic"] = float(w_stat)
        result["wilcoxon_pvalue"] = float(w_pvalue)

    # Effect size (Cohen's d for paired samples)
    result["cohens_d"] = float(np.mean(differences) / (np.std(differences, ddof=1) + 1e-10))
    return result


def paired_method_tests(result_tables: Dict[str, pd.DataFrame], metric: str = "rmse",
                        significance_level: float = None, min_samples: int = None) -> pd.DataFrame:
    """
    Pairwise tests between all methods on the products both scored.

    Wilcoxon p-values are Holm corrected across the method pairs.
    """
    if significance_level is None:
        significance_level = config.SIGNIFICANCE_LEVEL

    rows = []
    for method1, method2 in itertools.combinations(result_tables, 2):
        s1 = _metric_by_product(result_tables[method1], metric).dropna()
        s2 = _metric_by_product(result_tables[method2], metric).dropna()
        common = s1.index.intersection(s2.index)

        row = {"method1": method1, "method2": method2}
        row.update(paired_test(s1.loc[common].to_numpy(), s2.loc[common].to_numpy(),
                               significance_level, min_samples))
        rows.append(row)

    tests = pd.DataFrame(rows)
    if tests.empty:
        return tests

    tests["wilcoxon_pvalue_holm"] = np.nan
    valid = tests["wilcoxon_pvalue"].notna()
    if valid.any():
        _, corrected, _, _ = multipletests(tests.loc[valid, "wilcoxon_pvalue"], method="holm")
        tests.loc[valid, "wilcoxon_pvalue_holm"] = corrected
    tests["significant"] = tests["wilcoxon_pvalue_holm"] < significance_level

    logger.info(f"Ran {len(tests)} paired {metric} comparisons")
    return tests
