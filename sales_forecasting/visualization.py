#////////////////////////////////////////////////////////////////////////////////#
# File:         visualization.py                                                 #
# Author:       Douglas Nyberg                                                   #
# Email:        douglas1.nyberg@gmail.com                                        #
# Date:         2025-07-10                                                       #
#////////////////////////////////////////////////////////////////////////////////#
"""descriptive charts; they read computed tables and only write image files"""
import logging
from pathlib import Path
from typing import Dict, Union

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

from sales_forecasting import config
from sales_forecasting.models.base import ForecastOutcome

logger = logging.getLogger(__name__)


def plot_sales_histogram(weekly_totals: pd.DataFrame, output_path: Union[str, Path], bins: int = 30) -> Path:
    """histogram of weekly units sold per product"""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    plt.figure(figsize=(10, 6))
    sns.histplot(weekly_totals[config.TARGET_COL], bins=bins)
    plt.title('Weekly Units Sold per Product')
    plt.xlabel('Units sold per week')
    plt.ylabel('Count')
    plt.tight_layout()
    plt.savefig(output_path, dpi=300)
    plt.close()

    logger.info(f"Saved sales histogram to {output_path}")
    return output_path


def plot_forecast_vs_actual(outcome: ForecastOutcome, output_path: Union[str, Path]) -> Path:
    """training history, actual test weeks and forecast for one product"""
    if not outcome.ok:
        raise ValueError(f"Cannot plot failed forecast for '{outcome.product_id}': {outcome.error}")

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    fig, ax = plt.subplots(figsize=(12, 6))
    ax.plot(outcome.train_dates, outcome.train_values, label='Train', color='tab:gray')
    ax.plot(outcome.test_dates, outcome.actuals, label='Actual', color='tab:blue', marker='o')
    ax.plot(outcome.test_dates, outcome.forecast, label='Forecast', color='tab:orange',
            marker='o', linestyle='--')
    ax.set_title(f"{config.METHOD_LABELS.get(outcome.method, outcome.method)}: product {outcome.product_id}")
    ax.set_xlabel('Week')
    ax.set_ylabel('Units sold')
    ax.legend()
    fig.autofmt_xdate()
    plt.tight_layout()
    plt.savefig(output_path, dpi=300)
    plt.close(fig)

    logger.info(f"Saved forecast plot to {output_path}")
    return output_path


def plot_metric_distributions(result_tables: Dict[str, pd.DataFrame], metric: str,
                              output_path: Union[str, Path]) -> Path:
    """boxplot of a per-product metric for each method"""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    df_plot = pd.concat(
        [pd.DataFrame({'Method': method, metric.upper(): table[metric]}) for method, table in result_tables.items()],
        ignore_index=True
    ).dropna()

    plt.figure(figsize=(10, 6))
    sns.boxplot(x='Method', y=metric.upper(), data=df_plot)
    plt.title(f'{metric.upper()} Distribution by Method')
    plt.ylabel(metric.upper())
    plt.tight_layout()
    plt.savefig(output_path, dpi=300)
    plt.close()

    logger.info(f"Saved {metric} distribution plot to {output_path}")
    return output_path
