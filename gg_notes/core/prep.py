"""
Data preparation helpers used by the example chunks before plotting.

All helpers are pure: they take a DataFrame and return a new one. Missing
columns or type mismatches surface as whatever pandas raises.
"""
from __future__ import annotations

import itertools
from typing import Any, Callable, Dict, Iterable, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

_ROUNDERS: Dict[str, Callable[[np.ndarray], np.ndarray]] = {
    "round": np.round,
    "floor": np.floor,
    "ceil": np.ceil,
}


def sample_rows(frame: pd.DataFrame, n: int, seed: int) -> pd.DataFrame:
    """
    Random sub-sample of n rows without replacement, reproducible for a given seed.
    """
    return frame.sample(n=n, random_state=np.random.RandomState(seed))


def add_product_column(frame: pd.DataFrame, name: str, columns: Sequence[str]) -> pd.DataFrame:
    """
    Multiply columns together into a new column, e.g. volume = x * y * z.
    """
    if not columns:
        raise ValueError("add_product_column needs at least one column")

    out = frame.copy()
    product = out[columns[0]].astype(float)
    for col in columns[1:]:
        product = product * out[col]
    out[name] = product
    return out


def round_any(values: Any, accuracy: float, how: str = "round") -> Any:
    """
    Round values to the nearest multiple of accuracy.

    how="floor"/"ceil" round down/up to the bucket boundary instead.
    Scalars return scalars, Series return Series.
    """
    if accuracy <= 0:
        raise ValueError(f"accuracy must be positive, got {accuracy}")
    try:
        rounder = _ROUNDERS[how]
    except KeyError:
        raise ValueError(f"Unknown rounding '{how}'. Expected one of {sorted(_ROUNDERS)}")

    if isinstance(values, pd.Series):
        return pd.Series(rounder(values.to_numpy(dtype=float) / accuracy) * accuracy, index=values.index, name=values.name)

    result = rounder(np.asarray(values, dtype=float) / accuracy) * accuracy
    if np.ndim(result) == 0:
        return float(result)
    return result


def bucket_column(
    frame: pd.DataFrame,
    column: str,
    accuracy: float,
    name: Optional[str] = None,
    how: str = "round",
) -> pd.DataFrame:
    """Round one column to bucket boundaries, storing the result in `name` (default: in place)."""
    out = frame.copy()
    out[name or column] = round_any(out[column], accuracy, how=how)
    return out


def join_boundaries(
    boundaries: pd.DataFrame,
    stats: pd.DataFrame,
    key: str = "region",
    order_col: str = "order",
    how: str = "inner",
) -> pd.DataFrame:
    """
    Attach per-region statistics to a polygon-vertex table.

    The merge scrambles row order, so the result is re-sorted on the stored
    vertex order column; polygons draw correctly only in that order.
    """
    merged = boundaries.merge(stats, on=key, how=how, sort=False)
    return merged.sort_values(order_col, kind="mergesort").reset_index(drop=True)


def midrange_by_group(
    frame: pd.DataFrame,
    by: Union[str, Sequence[str]],
    columns: Union[str, Sequence[str]],
) -> pd.DataFrame:
    """
    Per-group midpoint of the range, (min + max) / 2, for each column.

    Used to place a label in the middle of each map region.
    """
    by_cols = [by] if isinstance(by, str) else list(by)
    value_cols = [columns] if isinstance(columns, str) else list(columns)

    grouped = frame.groupby(by_cols, sort=True, observed=True)[value_cols]
    mid = (grouped.min() + grouped.max()) / 2
    return mid.reset_index()


def summarise_by(
    frame: pd.DataFrame,
    by: Union[str, Sequence[str]],
    **aggregations: Tuple[str, Union[str, Callable[[pd.Series], Any]]],
) -> pd.DataFrame:
    """
    Group and aggregate with named outputs:

        summarise_by(df, "day", n=("tip", "size"), avg=("tip", "mean"))
    """
    if not aggregations:
        raise ValueError("summarise_by needs at least one aggregation")

    by_cols = [by] if isinstance(by, str) else list(by)
    return frame.groupby(by_cols, sort=True, observed=True).agg(**aggregations).reset_index()


def _unique_in_order(values: Iterable[Any]) -> list:
    # pd.unique keeps first-seen order and treats NaN as one value
    return list(pd.unique(pd.Series(list(values), dtype=object)))


def expand_grid(**domains: Iterable[Any]) -> pd.DataFrame:
    """
    Full cross-product of the given variable domains.

    Each domain is de-duplicated first, so the grid has exactly
    prod(len(domain)) rows and no duplicate rows. Column order follows the
    keyword order; the first variable varies slowest.
    """
    if not domains:
        return pd.DataFrame()

    names = list(domains)
    levels = [_unique_in_order(domains[name]) for name in names]
    rows = list(itertools.product(*levels))
    grid = pd.DataFrame(rows, columns=names)

    # Restore numeric dtypes lost through the object round trip
    return grid.infer_objects()
