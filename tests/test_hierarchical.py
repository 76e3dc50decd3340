# tests/test_hierarchical.py
import numpy as np
import pandas as pd
import pytest

from sales_forecasting.models import hierarchical


def _incoherent_base():
    # total forecast disagrees with the sum of the three leaves
    return np.array([
        [12.0, 20.0],
        [2.0, 5.0],
        [3.0, 5.0],
        [4.0, 5.0],
    ])


def test_summing_matrix_shape():
    S = hierarchical.summing_matrix(3)

    assert S.shape == (4, 3)
    np.testing.assert_array_equal(S[0], np.ones(3))
    np.testing.assert_array_equal(S[1:], np.eye(3))


@pytest.mark.parametrize("method", ["ols", "wls_struct", "bottom_up"])
def test_reconciled_forecasts_are_coherent(method):
    S = hierarchical.summing_matrix(3)
    reconciled = hierarchical.get_reconciler(method).reconcile(S, _incoherent_base())

    np.testing.assert_allclose(reconciled[0], reconciled[1:].sum(axis=0))
    assert hierarchical.check_coherence(S, reconciled) < 1e-8


def test_bottom_up_keeps_leaves():
    S = hierarchical.summing_matrix(3)
    base = _incoherent_base()
    reconciled = hierarchical.BottomUp().reconcile(S, base)

    np.testing.assert_allclose(reconciled[1:], base[1:])
    np.testing.assert_allclose(reconciled[0], [9.0, 15.0])


def test_ols_leaves_coherent_forecasts_alone():
    S = hierarchical.summing_matrix(2)
    base = np.array([[5.0], [2.0], [3.0]])
    reconciled = hierarchical.MinTrace("ols").reconcile(S, base)

    np.testing.assert_allclose(reconciled, base)


def test_unknown_reconciler():
    with pytest.raises(ValueError):
        hierarchical.get_reconciler("top_down")
    with pytest.raises(ValueError):
        hierarchical.MinTrace("mint_shrink")


class _FixedForecaster:
    """stands in for AutoARIMA: returns preset values per fitted series"""

    values = {}

    def __init__(self, season_length=None, freq=None):
        self.key = None

    def fit(self, train):
        self.key = round(float(train.iloc[:, 0].sum()), 6)
        return self

    def predict(self, future):
        return np.asarray(self.values[self.key], dtype=float)


def test_hierarchical_forecaster_clips_leaves_and_stays_coherent(monkeypatch):
    idx = pd.date_range("2023-01-02", periods=4, freq="W-MON")
    train = pd.DataFrame({"P1A": [1.0, 1.0, 1.0, 1.0], "P1B": [2.0, 2.0, 2.0, 2.0]}, index=idx)
    future = pd.DataFrame(index=pd.date_range("2023-01-30", periods=2, freq="W-MON"))

    _FixedForecaster.values = {
        12.0: [1.0, 1.0],  # total
        4.0: [-3.0, -3.0],  # leaf A goes negative
        8.0: [2.0, 2.0],  # leaf B
    }
    monkeypatch.setattr(hierarchical, "AutoARIMAForecaster", _FixedForecaster)

    model = hierarchical.HierarchicalForecaster(reconciliation_method="bottom_up").fit(train)
    total = model.predict(future)

    assert (model.leaf_forecasts_.to_numpy() >= 0).all()
    np.testing.assert_allclose(total, model.leaf_forecasts_.sum(axis=1).to_numpy())
    np.testing.assert_allclose(total, [2.0, 2.0])
