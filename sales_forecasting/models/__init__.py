#////////////////////////////////////////////////////////////////////////////////#
# File:         __init__.py                                                      #
# Author:       Douglas Nyberg                                                   #
# Email:        douglas1.nyberg@gmail.com                                        #
# Date:         2025-07-05                                                       #
# Description:  Models package initialization for the compared forecasters.      #
#////////////////////////////////////////////////////////////////////////////////#

"""
Forecasting models compared in the weekly sales study.

All three follow the same fit -> predict -> clip contract from `base`.
"""

from .base import (
    Forecaster,
    ForecastOutcome,
    clip_negative,
    run_fit_predict_clip
)

from .classical import AutoARIMAForecaster, effective_season_length

from .hierarchical import (
    HierarchicalForecaster,
    BottomUp,
    MinTrace,
    get_reconciler,
    summing_matrix,
    check_coherence
)

from .additive import ProphetForecaster

__all__ = [
    # shared contract
    'Forecaster',
    'ForecastOutcome',
    'clip_negative',
    'run_fit_predict_clip',
    # ARIMA / ARIMAX
    'AutoARIMAForecaster',
    'effective_season_length',
    # hierarchical
    'HierarchicalForecaster',
    'BottomUp',
    'MinTrace',
    'get_reconciler',
    'summing_matrix',
    'check_coherence',
    # additive regression
    'ProphetForecaster'
]
