#////////////////////////////////////////////////////////////////////////////////#
# File:         generate_synthetic_sales.py                                      #
# Author:       Douglas Nyberg                                                   #
# Email:        douglas1.nyberg@gmail.com                                        #
# Date:         2025-07-10                                                       #
# Description:  Write a synthetic products.csv / sales.csv pair.                 #
#////////////////////////////////////////////////////////////////////////////////#

"""
Generate a synthetic product catalog and daily sales file.

Handy for a smoke run of the comparison workflow without the real data.
"""

import argparse
import sys
from pathlib import Path

# add project root so we can import stuff
script_dir = Path(__file__).resolve().parent
project_root = script_dir.parent
sys.path.append(str(project_root))

from sales_forecasting import config
from sales_forecasting.synthetic import write_synthetic_sales


def main():
    parser = argparse.ArgumentParser(description="Generate synthetic retail sales data")
    parser.add_argument("--output-dir", type=str, default=str(config.RAW_DATA_DIR),
                        help="where products.csv and sales.csv are written")
    parser.add_argument("--n-products", type=int, default=10)
    parser.add_argument("--markets", nargs="+", default=["A", "B", "C"])
    parser.add_argument("--n-weeks", type=int, default=60)
    parser.add_argument("--seed", type=int, default=42)
    args = parser.parse_args()

    products_path, sales_path = write_synthetic_sales(
        args.output_dir,
        n_products=args.n_products,
        markets=tuple(args.markets),
        n_weeks=args.n_weeks,
        seed=args.seed,
    )
    print(f"wrote {products_path}")
    print(f"wrote {sales_path}")


if __name__ == "__main__":
    main()
