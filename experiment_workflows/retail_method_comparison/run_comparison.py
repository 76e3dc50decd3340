#////////////////////////////////////////////////////////////////////////////////#
# File:         run_comparison.py                                                #
# Author:       Douglas Nyberg                                                   #
# Email:        douglas1.nyberg@gmail.com                                        #
# Date:         2025-07-11                                                       #
#////////////////////////////////////////////////////////////////////////////////#
#!/usr/bin/env python3
"""
Compare HTS, ARIMAX and Prophet on weekly unit sales per product.

Main Steps:
1. Load products.csv and sales.csv from the data directory and merge them
2. Build the weekly inputs for each method
3. Forecast the last 5 weeks of every product with every method
4. Score the forecasts and compare the methods
5. Save result tables, comparison tables and charts
"""

import argparse
import logging
import sys
import time
from datetime import datetime
from pathlib import Path

SCRIPT_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = SCRIPT_DIR.parent.parent
sys.path.append(str(PROJECT_ROOT))

from sales_forecasting import config
from sales_forecasting.data_loader import DataQualityError
from sales_forecasting.pipeline import run_comparison
from sales_forecasting.utils import format_time, set_random_seed

config.LOGS_DIR.mkdir(parents=True, exist_ok=True)

for handler in logging.root.handlers[:]:
    logging.root.removeHandler(handler)

logging.basicConfig(
    level=getattr(logging, config.LOGGING_CONFIG["level"]),
    format=config.LOGGING_CONFIG["format"],
    handlers=[
        logging.FileHandler(str(config.LOGGING_CONFIG["log_file"]), mode='a'),
        logging.StreamHandler(sys.stdout)
    ]
)

logger = logging.getLogger(__name__)


def parse_arguments() -> argparse.Namespace:
    """
    Parse command-line arguments for the comparison run.

    Returns:
        argparse.Namespace: Parsed command-line arguments
    """
    parser = argparse.ArgumentParser(
        description="Compare HTS, ARIMAX and Prophet weekly sales forecasts",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    parser.add_argument(
        "--data-dir", type=str,
        default=str(config.RAW_DATA_DIR),
        help="Directory containing products.csv and sales.csv"
    )

    parser.add_argument(
        "--output-dir", type=str,
        default=str(config.RESULTS_DIR / "retail_method_comparison"),
        help="Directory to save result tables and charts"
    )

    parser.add_argument(
        "--methods", nargs="+",
        default=list(config.METHODS),
        choices=list(config.METHODS),
        help="Methods to compare"
    )

    parser.add_argument(
        "--limit-products", type=int, default=None,
        help="Only forecast the first N products (for quick runs)"
    )

    parser.add_argument(
        "--cutoff-date", type=str, default=None,
        help="First test week (YYYY-MM-DD); default is the start of the last 5 weeks"
    )

    parser.add_argument(
        "--reconciliation", type=str, default=config.FORECAST_CONFIG["reconciliation_method"],
        choices=["ols", "wls_struct", "bottom_up"],
        help="Hierarchical reconciliation method"
    )

    parser.add_argument(
        "--no-plots", action="store_true",
        help="Skip the descriptive charts"
    )

    return parser.parse_args()


def main():
    """Main workflow for the method comparison."""
    args = parse_arguments()
    set_random_seed()

    logger.info("=" * 60)
    logger.info("STARTING WEEKLY SALES METHOD COMPARISON")
    logger.info("=" * 60)
    logger.info(f"Timestamp: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    logger.info(f"Methods: {args.methods}")
    logger.info(f"Data directory: {args.data_dir}")
    logger.info(f"Output directory: {args.output_dir}")
    logger.info(f"Product limit: {args.limit_products}")

    data_dir = Path(args.data_dir)
    overrides = {
        "cutoff_date": args.cutoff_date,
        "reconciliation_method": args.reconciliation,
    }

    start_time = time.time()
    try:
        results = run_comparison(
            products_path=data_dir / config.DATA_CONFIG["products_file_name"],
            sales_path=data_dir / config.DATA_CONFIG["sales_file_name"],
            output_dir=args.output_dir,
            forecast_config=overrides,
            methods=args.methods,
            make_plots=not args.no_plots,
            limit_products=args.limit_products,
        )
    except (FileNotFoundError, KeyError, DataQualityError) as e:
        logger.error(str(e))
        sys.exit(1)

    logger.info("=" * 60)
    logger.info("COMPARISON COMPLETE")
    logger.info("=" * 60)
    for _, row in results.win_counts.iterrows():
        logger.info(f"  {config.METHOD_LABELS[row['method']]}: {row['wins']} wins")
    logger.info(f"Total runtime: {format_time(time.time() - start_time)}")


if __name__ == "__main__":
    main()
