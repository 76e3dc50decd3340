#////////////////////////////////////////////////////////////////////////////////#
# File:         hierarchical.py                                                  #
# Author:       Douglas Nyberg                                                   #
# Email:        douglas1.nyberg@gmail.com                                        #
# Date:         2025-07-06                                                       #
# Description:  Hierarchical (product -> market) forecasting with AutoARIMA base #
#               forecasts and bottom-up / MinTrace reconciliation.               #
#////////////////////////////////////////////////////////////////////////////////#
"""
Hierarchical time series forecasting for one product.

Every node of the product subtree (the product total plus one leaf per market)
gets its own AutoARIMA base forecast. The base forecasts are then reconciled so
the market leaves add up to the product total:

    reconciled = S @ G @ base

with S the summing matrix and G depending on the reconciliation method.
"""
import logging
from typing import List, Optional

import numpy as np
import pandas as pd

from sales_forecasting import config
from sales_forecasting.models.base import clip_negative
from sales_forecasting.models.classical import AutoARIMAForecaster

logger = logging.getLogger(__name__)

COHERENCE_TOLERANCE = 1e-6


def summing_matrix(n_leaves: int) -> np.ndarray:
    """S for a two level tree: one total row on top of an identity block"""
    if n_leaves < 1:
        raise ValueError("Hierarchy needs at least one leaf")
    return np.vstack([np.ones((1, n_leaves)), np.eye(n_leaves)])


class BottomUp:
    """ignore the total forecast, add up the leaves"""

    name = "bottom_up"

    def reconcile(self, S: np.ndarray, base: np.ndarray) -> np.ndarray:
        n_leaves = S.shape[1]
        return S @ base[-n_leaves:]


class MinTrace:
    """
    Trace minimisation reconciliation.

    'ols' weights every node equally; 'wls_struct' weights each node by the
    number of leaves it aggregates.
    """

    def __init__(self, method: str = "ols"):
        if method not in ("ols", "wls_struct"):
            raise ValueError(f"Unknown MinTrace method: {method}")
        self.method = method
        self.name = method

    def reconcile(self, S: np.ndarray, base: np.ndarray) -> np.ndarray:
        if self.method == "ols":
            W_inv = np.eye(S.shape[0])
        else:
            W_inv = np.diag(1.0 / S.sum(axis=1))
        G = np.linalg.pinv(S.T @ W_inv @ S) @ S.T @ W_inv
        return S @ G @ base


def get_reconciler(method: Optional[str] = None):
    method = method or config.FORECAST_CONFIG["reconciliation_method"]
    if method == "bottom_up":
        return BottomUp()
    if method in ("ols", "wls_struct"):
        return MinTrace(method)
    raise ValueError(f"Unknown reconciliation method: {method}")


def check_coherence(S: np.ndarray, reconciled: np.ndarray, tol: float = COHERENCE_TOLERANCE) -> float:
    """largest gap between aggregate nodes and the sum of their leaves"""
    n_leaves = S.shape[1]
    gap = np.abs(S @ reconciled[-n_leaves:] - reconciled)
    max_gap = float(gap.max()) if gap.size else 0.0
    if max_gap > tol:
        logger.warning(f"Reconciled forecasts are not coherent, max error: {max_gap:.6f}")
    return max_gap


class HierarchicalForecaster:
    """
    Forecasts one product's market leaves and their total.

    `fit` takes a weekly wide frame with one column per market leaf (compound
    keys). `predict` returns the coherent product total; the reconciled and
    clipped leaves are kept on `leaf_forecasts_`.
    """

    def __init__(self, season_length: Optional[int] = None, reconciliation_method: Optional[str] = None,
                 freq: Optional[str] = None):
        self.season_length = season_length or config.FORECAST_CONFIG["season_length"]
        self.reconciler = get_reconciler(reconciliation_method)
        self.freq = freq
        self.leaves: List[str] = []
        self.S = None
        self._node_models = []
        self.base_forecasts_ = None
        self.leaf_forecasts_ = None

    def _node_frames(self, train: pd.DataFrame) -> List[pd.DataFrame]:
        # total first, then leaves, same row order as S
        total = train[self.leaves].sum(axis=1)
        nodes = [total] + [train[leaf] for leaf in self.leaves]
        return [node.rename(config.TARGET_COL).to_frame() for node in nodes]

    def fit(self, train: pd.DataFrame) -> 'HierarchicalForecaster':
        self.leaves = list(train.columns)
        self.S = summing_matrix(len(self.leaves))
        self._node_models = [
            AutoARIMAForecaster(season_length=self.season_length, freq=self.freq).fit(frame)
            for frame in self._node_frames(train)
        ]
        return self

    def predict(self, future: pd.DataFrame) -> np.ndarray:
        if not self._node_models:
            raise ValueError("model must be fitted before predicton")

        base = np.vstack([model.predict(future) for model in self._node_models])
        self.base_forecasts_ = base
        reconciled = self.reconciler.reconcile(self.S, base)
        check_coherence(self.S, reconciled)

        # clip at the leaves and re-aggregate so the total stays coherent
        leaves = clip_negative(reconciled[-len(self.leaves):])
        self.leaf_forecasts_ = pd.DataFrame(leaves.T, columns=self.leaves, index=future.index)
        return leaves.sum(axis=0)
