#////////////////////////////////////////////////////////////////////////////////#
# File:         __init__.py                                                      #
# Author:       Douglas Nyberg                                                   #
# Email:        douglas1.nyberg@gmail.com                                        #
# Date:         2025-07-08                                                       #
# Description:  Evaluators package initialization for scoring and comparison.    #
#////////////////////////////////////////////////////////////////////////////////#

# Point forecast metrics from accuracy.py
from .accuracy import (
    calculate_rmse,
    calculate_mae,
    calculate_mase,
    mase_scale,
    seasonal_lag
)

# Per-method result tables from scoring.py
from .scoring import (
    build_result_table,
    forecast_columns,
    score_outcome,
    METRIC_COLUMNS
)

# Cross-method comparison from model_comparison.py
from .model_comparison import (
    summarize_mase,
    determine_winners,
    count_wins,
    paired_test,
    paired_method_tests
)

__all__ = [
    # Point metrics
    'calculate_rmse',
    'calculate_mae',
    'calculate_mase',
    'mase_scale',
    'seasonal_lag',
    # Result tables
    'build_result_table',
    'forecast_columns',
    'score_outcome',
    'METRIC_COLUMNS',
    # Comparison
    'summarize_mase',
    'determine_winners',
    'count_wins',
    'paired_test',
    'paired_method_tests'
]
