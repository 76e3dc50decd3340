#////////////////////////////////////////////////////////////////////////////////#
# File:         utils.py                                                         #
# Author:       Douglas Nyberg                                                   #
# Email:        douglas1.nyberg@gmail.com                                        #
# Date:         2025-07-02                                                       #
#////////////////////////////////////////////////////////////////////////////////#
"""
Utility functions for the sales forecasting comparison.
"""
import json
import random
import re
from pathlib import Path
from typing import Dict, Union

import numpy as np

RANDOM_SEED = 42


def create_directory(directory: Union[str, Path]) -> None:
    """create directory if it doesnt exsit"""
    Path(directory).mkdir(parents=True, exist_ok=True)


def _json_default(obj):
    # numpy scalars/arrays and timestamps show up in summaries
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, np.floating):
        return None if np.isnan(obj) else float(obj)
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if hasattr(obj, "isoformat"):
        return obj.isoformat()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def _replace_nan(obj):
    # np.float64 subclasses float, so json.dump never hands NaN to _json_default
    if isinstance(obj, dict):
        return {key: _replace_nan(value) for key, value in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_replace_nan(value) for value in obj]
    if isinstance(obj, np.ndarray):
        return _replace_nan(obj.tolist())
    if isinstance(obj, float) and not np.isfinite(obj):
        return None
    return obj


def save_json(data: Dict, filepath: Union[str, Path]) -> None:
    """Save dict to JSON, NaN and inf written as null."""
    with open(filepath, 'w') as f:
        json.dump(_replace_nan(data), f, indent=4, default=_json_default, allow_nan=False)


def set_random_seed(seed: int = None) -> None:
    """set random seed for reproducability"""
    if seed is None:
        seed = RANDOM_SEED
    random.seed(seed)
    np.random.seed(seed)


def format_time(seconds: float) -> str:
    """format seconds as h/m/s string"""
    hours, rem = divmod(int(seconds), 3600)
    minutes, secs = divmod(rem, 60)
    if hours:
        return f"{hours}h {minutes}m {secs}s"
    if minutes:
        return f"{minutes}m {secs}s"
    return f"{seconds:.1f}s"


def sanitize_for_path(name: str) -> str:
    """make a product id safe to use in a file name"""
    cleaned = re.sub(r'[^A-Za-z0-9_.-]+', '_', str(name)).strip('_')
    return cleaned or "unnamed"
