#////////////////////////////////////////////////////////////////////////////////#
# File:         reshaping.py                                                     #
# Author:       Douglas Nyberg                                                   #
# Email:        douglas1.nyberg@gmail.com                                        #
# Date:         2025-07-03                                                       #
# Description:  Reshapes the merged sales table into the weekly inputs each      #
#               forecasting method needs.                                        #
#////////////////////////////////////////////////////////////////////////////////#
"""
Reshaping of the merged daily sales table into per-method weekly inputs.

Three independent paths:
- hierarchical: compound (product x market) keys pivoted wide, weekly sums
- regression: share-weighted promotion regressors + per-market prices, weekly means
- additive: same regressors, units as weekly mean of daily totals times 7, plus
  logistic cap/floor columns
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

import numpy as np
import pandas as pd
from pandas.tseries.frequencies import to_offset

from sales_forecasting import config

logger = logging.getLogger(__name__)

PRICE_PREFIX = f"{config.PRICE_COL}_"


# ----------------------------------------------------------------------------
# common helpers
# ----------------------------------------------------------------------------

def to_weekly(
    frame: Union[pd.DataFrame, pd.Series],
    how: str = "sum",
    rule: Optional[str] = None
) -> Union[pd.DataFrame, pd.Series]:
    """
    Bin a date-indexed frame into weeks labelled by their start date.

    Weeks with no observations are filled with zero. Aggregating a frame that is
    already weekly (on the same rule) returns it unchanged.
    """
    if rule is None:
        rule = config.FORECAST_CONFIG["weekly_rule"]
    if how not in ("sum", "mean"):
        raise ValueError(f"Unsupported weekly aggregation: {how}")

    resampler = frame.sort_index().resample(rule, label="left", closed="left")
    if how == "sum":
        weekly = resampler.sum(min_count=1)
    else:
        weekly = resampler.mean()
    return weekly.fillna(0.0)


def drop_zero_variance_columns(
    train_X: pd.DataFrame,
    future_X: Optional[pd.DataFrame] = None
) -> Tuple[pd.DataFrame, Optional[pd.DataFrame], List[str]]:
    """
    Drop regressors that are constant over the training window.

    A constant column is collinear with the intercept and makes the design
    matrix singular, so it is removed from the future frame too.
    """
    kept = [c for c in train_X.columns if train_X[c].nunique(dropna=False) > 1]
    dropped = [c for c in train_X.columns if c not in kept]
    if dropped:
        logger.debug(f"Dropping zero-variance regressors: {dropped}")

    future_kept = future_X[kept] if future_X is not None else None
    return train_X[kept], future_kept, kept


def split_train_test(
    weekly: Union[pd.DataFrame, pd.Series],
    horizon: Optional[int] = None,
    cutoff_date: Optional[Union[str, pd.Timestamp]] = None,
    rule: Optional[str] = None
) -> Tuple[Union[pd.DataFrame, pd.Series], Union[pd.DataFrame, pd.Series]]:
    """
    Split a weekly series at a calendar cutoff.

    Everything before the cutoff is train; the test window is exactly `horizon`
    consecutive weeks starting at the cutoff and directly after the last train
    week. Without an explicit cutoff the last `horizon` weeks are the test set.

    Raises:
        ValueError: if the window cannot satisfy those conditions
    """
    if horizon is None:
        horizon = config.FORECAST_CONFIG["horizon"]
    if rule is None:
        rule = config.FORECAST_CONFIG["weekly_rule"]
    step = to_offset(rule)

    weekly = weekly.sort_index()
    if len(weekly) <= horizon:
        raise ValueError(f"Need more than {horizon} weekly periods, have {len(weekly)}")

    if cutoff_date is None:
        cutoff = weekly.index[-horizon]
    else:
        cutoff = pd.Timestamp(cutoff_date)
        candidates = weekly.index[weekly.index >= cutoff]
        if len(candidates) == 0:
            raise ValueError(f"Cutoff {cutoff.date()} is after the last observed week")
        cutoff = candidates[0]

    train = weekly[weekly.index < cutoff]
    test = weekly[weekly.index >= cutoff].iloc[:horizon]

    if len(train) == 0:
        raise ValueError(f"No training weeks before cutoff {cutoff.date()}")
    if len(test) != horizon:
        raise ValueError(f"Test window has {len(test)} weeks, expected {horizon}")

    expected = pd.date_range(train.index[-1] + step, periods=horizon, freq=step)
    if not test.index.equals(expected):
        raise ValueError("Test weeks are not consecutive with the end of the training window")

    return train, test


# ----------------------------------------------------------------------------
# hierarchical path
# ----------------------------------------------------------------------------

@dataclass
class HierarchySpec:
    """
    Grouping metadata for compound product x market keys.

    `characters` gives how many leading characters of a key belong to each
    hierarchy level, outermost first.
    """
    characters: Tuple[int, int]
    key_map: Dict[str, Tuple[str, str]] = field(default_factory=dict)
    frequency: int = config.FORECAST_CONFIG["season_length"]

    @property
    def keys(self) -> List[str]:
        return sorted(self.key_map)

    @property
    def products(self) -> List[str]:
        return sorted({product for product, _ in self.key_map.values()})

    def product_segment(self, key: str) -> str:
        return key[:self.characters[0]]


def product_keys(spec: HierarchySpec, product_id: str) -> List[str]:
    """compound keys (market leaves) belonging to one product"""
    return [k for k in spec.keys if spec.key_map[k][0] == str(product_id)]


def _pad(value: str, width: int) -> str:
    # one fill character for every id, so "7" and "07" stay distinct
    return value.ljust(width, "_")


def build_compound_keys(merged: pd.DataFrame) -> Tuple[pd.DataFrame, HierarchySpec]:
    """
    Encode (product, market) membership into fixed-width compound keys.

    Returns:
        Tuple of (copy of merged with a 'series_key' column, HierarchySpec)
    """
    products = merged[config.PRODUCT_ID_COL].astype(str)
    markets = merged[config.MARKET_COL].astype(str)

    product_width = int(products.str.len().max())
    market_width = int(markets.str.len().max())

    pairs = pd.DataFrame({"product": products, "market": markets}).drop_duplicates()
    key_map = {}
    for product, market in pairs.itertuples(index=False):
        key = _pad(product, product_width) + _pad(market, market_width)
        key_map[key] = (product, market)

    if len(key_map) != len(pairs):
        raise ValueError(
            f"Compound keys collide: {len(pairs)} product/market pairs map to {len(key_map)} keys; "
            f"ids differing only by trailing '_' cannot share a hierarchy"
        )

    lookup = {pair: key for key, pair in key_map.items()}
    out = merged.copy()
    out["series_key"] = [lookup[(p, m)] for p, m in zip(products, markets)]

    spec = HierarchySpec(
        characters=(product_width, market_width),
        key_map=key_map,
        frequency=int(config.FORECAST_CONFIG["season_length"]),
    )
    logger.info(
        f"Built {len(key_map)} compound keys for {len(spec.products)} products "
        f"(characters per level: {spec.characters})"
    )
    return out, spec


def pivot_hierarchical_wide(
    merged: pd.DataFrame,
    spec: Optional[HierarchySpec] = None,
    rule: Optional[str] = None,
    season_length: Optional[int] = None
) -> Tuple[pd.DataFrame, HierarchySpec]:
    """
    Pivot to one column per compound key and sum into weeks.

    Returns:
        Tuple of (weekly wide frame indexed by week start, HierarchySpec)
    """
    if spec is None or "series_key" not in merged.columns:
        merged, spec = build_compound_keys(merged)
    if season_length is not None:
        spec.frequency = int(season_length)

    daily = merged.pivot_table(
        index=config.DATE_COL,
        columns="series_key",
        values=config.TARGET_COL,
        aggfunc="sum",
    )
    daily.columns = daily.columns.astype(str)
    daily.columns.name = None

    wide = to_weekly(daily, how="sum", rule=rule)
    wide = wide.reindex(columns=spec.keys, fill_value=0.0)
    return wide, spec


def wide_to_long(wide: pd.DataFrame, spec: HierarchySpec) -> pd.DataFrame:
    """inverse of pivot_hierarchical_wide: back to (product, market, week, units) rows"""
    long = wide.rename_axis(config.DATE_COL).reset_index().melt(
        id_vars=config.DATE_COL, var_name="series_key", value_name=config.TARGET_COL
    )
    long[config.PRODUCT_ID_COL] = long["series_key"].map(lambda k: spec.key_map[k][0])
    long[config.MARKET_COL] = long["series_key"].map(lambda k: spec.key_map[k][1])
    cols = [config.PRODUCT_ID_COL, config.MARKET_COL, config.DATE_COL, config.TARGET_COL]
    return long[cols].sort_values(cols[:3]).reset_index(drop=True)


# ----------------------------------------------------------------------------
# regression paths
# ----------------------------------------------------------------------------

def market_volume_shares(merged: pd.DataFrame) -> pd.DataFrame:
    """
    Each market's share of a product's total historical units.

    Products with no recorded units split the weight evenly across markets.
    """
    pid, market = config.PRODUCT_ID_COL, config.MARKET_COL
    volume = (
        merged.assign(**{pid: merged[pid].astype(str), market: merged[market].astype(str)})
        .groupby([pid, market], observed=True)[config.TARGET_COL]
        .sum(min_count=1)
        .fillna(0.0)
        .rename("volume")
        .reset_index()
    )
    totals = volume.groupby(pid)["volume"].transform("sum")
    n_markets = volume.groupby(pid)["volume"].transform("size")
    volume["share"] = np.where(totals > 0, volume["volume"] / totals.where(totals > 0, 1.0), 1.0 / n_markets)
    return volume[[pid, market, "share"]]


def _daily_regression_inputs(merged: pd.DataFrame) -> pd.DataFrame:
    """
    Daily per-product frame: summed units, share-weighted promotion flags summed
    across markets, and one price column per market.
    """
    pid, market, date = config.PRODUCT_ID_COL, config.MARKET_COL, config.DATE_COL
    frame = merged.assign(**{pid: merged[pid].astype(str), market: merged[market].astype(str)})
    frame = frame.merge(market_volume_shares(frame), on=[pid, market], how="left")

    for col in config.PROMOTION_COLS:
        frame[col] = frame[col].astype(float).clip(0.0, 1.0) * frame["share"]

    summed = frame.groupby([pid, date])[[config.TARGET_COL] + config.PROMOTION_COLS].sum(min_count=1)

    # prices are not additive across markets, one regressor per market
    prices = frame.pivot_table(index=[pid, date], columns=market, values=config.PRICE_COL, aggfunc="mean")
    prices.columns = [f"{PRICE_PREFIX}{m}" for m in prices.columns]

    return summed.join(prices, how="left").reset_index()


def _weekly_per_product(
    daily: pd.DataFrame,
    units_how: str,
    rule: Optional[str],
    units_factor: float = 1.0
) -> pd.DataFrame:
    pid, date = config.PRODUCT_ID_COL, config.DATE_COL
    regressor_cols = [c for c in daily.columns if c not in (pid, date, config.TARGET_COL)]

    frames = []
    for product_id, group in daily.groupby(pid, sort=True):
        group = group.set_index(date)
        units = to_weekly(group[config.TARGET_COL], how=units_how, rule=rule) * units_factor
        regressors = to_weekly(group[regressor_cols], how="mean", rule=rule)
        weekly = regressors.join(units.rename(config.TARGET_COL), how="outer").fillna(0.0)
        weekly.insert(0, pid, product_id)
        frames.append(weekly.rename_axis(date).reset_index())

    out = pd.concat(frames, ignore_index=True)
    # markets a product never sold in show up as all-zero price columns
    out[regressor_cols] = out[regressor_cols].fillna(0.0)
    return out


def build_regression_frame(merged: pd.DataFrame, rule: Optional[str] = None) -> pd.DataFrame:
    """
    Weekly ARIMAX inputs: units summed per week, regressors averaged per week.

    Returns:
        Long frame with product_id, date (week start), units_sold and regressors
    """
    daily = _daily_regression_inputs(merged)
    weekly = _weekly_per_product(daily, units_how="sum", rule=rule)
    logger.info(f"Regression frame: {weekly.shape}, regressors: {regressor_columns(weekly)}")
    return weekly


def build_additive_frame(
    merged: pd.DataFrame,
    rule: Optional[str] = None,
    cap: Optional[float] = None,
    floor: Optional[float] = None,
    factor: Optional[float] = None
) -> pd.DataFrame:
    """
    Weekly Prophet inputs.

    Units are the weekly mean of daily totals times `factor` (7), not a weekly
    sum, so weeks with missing days are not understated. Every row carries the
    logistic growth `cap` and `floor`.
    """
    fc = config.FORECAST_CONFIG
    cap = fc["logistic_cap"] if cap is None else cap
    floor = fc["logistic_floor"] if floor is None else floor
    factor = fc["daily_to_weekly_factor"] if factor is None else factor

    daily = _daily_regression_inputs(merged)
    weekly = _weekly_per_product(daily, units_how="mean", rule=rule, units_factor=factor)
    weekly["cap"] = float(cap)
    weekly["floor"] = float(floor)
    logger.info(f"Additive frame: {weekly.shape} (cap={cap}, floor={floor})")
    return weekly


def regressor_columns(frame: pd.DataFrame) -> List[str]:
    """exogenous columns in a regression/additive frame"""
    skip = {config.PRODUCT_ID_COL, config.DATE_COL, config.TARGET_COL, "cap", "floor"}
    return [c for c in frame.columns if c not in skip]


def product_frame(frame: pd.DataFrame, product_id: str) -> pd.DataFrame:
    """one product's weekly rows, indexed by week start"""
    rows = frame[frame[config.PRODUCT_ID_COL].astype(str) == str(product_id)]
    if rows.empty:
        raise KeyError(f"Product '{product_id}' not found")
    return rows.drop(columns=[config.PRODUCT_ID_COL]).set_index(config.DATE_COL).sort_index()


def weekly_product_totals(merged: pd.DataFrame, rule: Optional[str] = None) -> pd.DataFrame:
    """weekly unit sums per product (long), used for descriptive plots"""
    pid, date = config.PRODUCT_ID_COL, config.DATE_COL
    daily = (
        merged.assign(**{pid: merged[pid].astype(str)})
        .groupby([pid, date])[config.TARGET_COL]
        .sum(min_count=1)
        .reset_index()
    )
    frames = []
    for product_id, group in daily.groupby(pid, sort=True):
        weekly = to_weekly(group.set_index(date)[config.TARGET_COL], how="sum", rule=rule)
        frames.append(pd.DataFrame({pid: product_id, date: weekly.index, config.TARGET_COL: weekly.values}))
    return pd.concat(frames, ignore_index=True)
