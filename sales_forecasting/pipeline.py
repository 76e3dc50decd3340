#////////////////////////////////////////////////////////////////////////////////#
# File:         pipeline.py                                                      #
# Author:       Douglas Nyberg                                                   #
# Email:        douglas1.nyberg@gmail.com                                        #
# Date:         2025-07-11                                                       #
# Description:  End-to-end comparison: load, reshape, forecast, score, compare.  #
#////////////////////////////////////////////////////////////////////////////////#
"""
End-to-end weekly sales method comparison.

Main Steps:
1. Load the product catalog and daily sales, inner join on product_id
2. Reshape the merged table for each method
3. Forecast every product with every method (fit -> predict -> clip)
4. Score each method's forecasts (rmse, mae, mase)
5. Compare methods: MASE summary, per-product winners, paired tests
6. Save result tables and charts
"""
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

import pandas as pd

from sales_forecasting import config
from sales_forecasting import data_loader
from sales_forecasting import reshaping
from sales_forecasting import visualization
from sales_forecasting.evaluators.model_comparison import (
    count_wins,
    determine_winners,
    paired_method_tests,
    summarize_mase
)
from sales_forecasting.evaluators.scoring import build_result_table
from sales_forecasting.forecast_runner import prepare_inputs, run_method, validate_methods
from sales_forecasting.models.base import ForecastOutcome
from sales_forecasting.utils import create_directory, format_time, save_json, sanitize_for_path

logger = logging.getLogger(__name__)


@dataclass
class ComparisonResults:
    """everything the comparison produces, keyed by method where it applies"""
    merged: pd.DataFrame
    outcomes: Dict[str, Dict[str, ForecastOutcome]] = field(default_factory=dict)
    result_tables: Dict[str, pd.DataFrame] = field(default_factory=dict)
    mase_summary: Optional[pd.DataFrame] = None
    winners: Optional[pd.DataFrame] = None
    win_counts: Optional[pd.DataFrame] = None
    paired_tests: Optional[pd.DataFrame] = None
    merge_report: Optional[data_loader.MergeReport] = None
    forecast_config: Dict = field(default_factory=dict)

    def to_summary_dict(self) -> Dict:
        summary = {
            "forecast_config": self.forecast_config,
            "n_products": len(self.winners) if self.winners is not None else 0,
            "methods": list(self.result_tables),
            "failed_products": {
                method: table.loc[table["status"] != "ok", config.PRODUCT_ID_COL].tolist()
                for method, table in self.result_tables.items()
            },
        }
        if self.merge_report is not None:
            summary["merge_report"] = self.merge_report.to_dict()
        if self.mase_summary is not None:
            summary["mase_summary"] = self.mase_summary.to_dict(orient="records")
        if self.win_counts is not None:
            summary["win_counts"] = dict(zip(self.win_counts["method"], self.win_counts["wins"]))
        return summary


def compare_methods(
    merged: pd.DataFrame,
    forecast_config: Optional[Dict] = None,
    methods: Optional[List[str]] = None,
    limit_products: Optional[int] = None
) -> ComparisonResults:
    """
    Run every method on an already merged table and compare them.

    Args:
        merged: Output of data_loader.merge_products_sales
        forecast_config: Overrides for config.FORECAST_CONFIG
        methods: Subset of config.METHODS (default all)
        limit_products: Only use the first N products (sorted by id)

    Returns:
        ComparisonResults
    """
    methods = validate_methods(methods)
    cfg = config.get_forecast_config(forecast_config)

    products = data_loader.list_products(merged)
    if limit_products is not None:
        products = products[:limit_products]
        merged = merged[merged[config.PRODUCT_ID_COL].astype(str).isin(products)]
    logger.info(f"Comparing {methods} on {len(products)} products")

    prepared = prepare_inputs(merged, methods, cfg)

    results = ComparisonResults(merged=merged, forecast_config=cfg)
    for method in methods:
        logger.info("=" * 60)
        start = time.time()
        outcomes = run_method(method, prepared, products, cfg)
        results.outcomes[method] = outcomes
        results.result_tables[method] = build_result_table(
            outcomes, horizon=cfg["horizon"], season_length=cfg["season_length"]
        )
        logger.info(f"{method} finished in {format_time(time.time() - start)}")

    logger.info("=" * 60)
    results.mase_summary = summarize_mase(results.result_tables)
    results.winners = determine_winners(results.result_tables, metric="rmse")
    results.win_counts = count_wins(results.winners, methods)
    results.paired_tests = paired_method_tests(results.result_tables, metric="rmse")

    logger.info(f"MASE summary:\n{results.mase_summary.to_string(index=False)}")
    logger.info(f"Wins by minimum RMSE:\n{results.win_counts.to_string(index=False)}")
    return results


def save_results(results: ComparisonResults, output_dir: Union[str, Path], make_plots: bool = True) -> Path:
    """write result tables, comparison tables and (optionally) charts"""
    output_dir = Path(output_dir)
    create_directory(output_dir)

    for method, table in results.result_tables.items():
        table.to_csv(output_dir / f"{method}_results.csv", index=False)

    results.mase_summary.to_csv(output_dir / "mase_summary.csv", index=False)
    winners = results.winners.copy()
    winners["winners"] = winners["winners"].map(lambda ws: ",".join(ws))
    winners.to_csv(output_dir / "winners.csv", index=False)
    results.win_counts.to_csv(output_dir / "win_counts.csv", index=False)
    results.paired_tests.to_csv(output_dir / "paired_tests.csv", index=False)
    save_json(results.to_summary_dict(), output_dir / "comparison_summary.json")

    if make_plots:
        plots_dir = output_dir / "plots"
        weekly_totals = reshaping.weekly_product_totals(
            results.merged, rule=results.forecast_config.get("weekly_rule")
        )
        visualization.plot_sales_histogram(weekly_totals, plots_dir / "weekly_sales_histogram.png")

        # one example forecast: first product the first method forecast successfully
        example = next(
            (o for outcomes in results.outcomes.values() for o in outcomes.values() if o.ok), None
        )
        if example is not None:
            visualization.plot_forecast_vs_actual(
                example,
                plots_dir / f"forecast_{example.method}_{sanitize_for_path(example.product_id)}.png"
            )
        else:
            logger.warning("No successful forecast to plot")

        visualization.plot_metric_distributions(results.result_tables, "mase", plots_dir / "mase_distribution.png")

    logger.info(f"Saved comparison outputs to {output_dir}")
    return output_dir


def run_comparison(
    products_path: Union[str, Path],
    sales_path: Union[str, Path],
    output_dir: Union[str, Path],
    forecast_config: Optional[Dict] = None,
    methods: Optional[List[str]] = None,
    make_plots: bool = True,
    limit_products: Optional[int] = None,
    min_match_rate: Optional[float] = None
) -> ComparisonResults:
    """load both input files, compare the methods and save everything to output_dir"""
    merged, report = data_loader.load_and_merge(products_path, sales_path, min_match_rate=min_match_rate)
    results = compare_methods(merged, forecast_config, methods, limit_products)
    results.merge_report = report
    save_results(results, output_dir, make_plots=make_plots)
    return results
