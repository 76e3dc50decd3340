# tests/test_utils.py
import json

import numpy as np
import pandas as pd
import pytest

from sales_forecasting.utils import sanitize_for_path, save_json


def _reject_constant(name):
    raise ValueError(f"non-standard JSON constant {name}")


def test_save_json_writes_nan_as_null(tmp_path):
    path = tmp_path / "summary.json"
    save_json({
        "plain_nan": float("nan"),
        "numpy_nan": np.float64("nan"),
        "nested": {"values": [1.5, np.nan, np.inf]},
        "array": np.array([np.nan, 2.0]),
        "count": np.int64(3),
        "when": pd.Timestamp("2023-01-02"),
    }, path)

    with open(path) as f:
        loaded = json.load(f, parse_constant=_reject_constant)

    assert loaded["plain_nan"] is None
    assert loaded["numpy_nan"] is None
    assert loaded["nested"]["values"] == [1.5, None, None]
    assert loaded["array"] == [None, 2.0]
    assert loaded["count"] == 3
    assert loaded["when"].startswith("2023-01-02")


@pytest.mark.parametrize("name, expected", [("P-1", "P-1"), ("a/b c", "a_b_c"), ("///", "unnamed")])
def test_sanitize_for_path(name, expected):
    assert sanitize_for_path(name) == expected
