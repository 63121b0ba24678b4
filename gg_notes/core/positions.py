from __future__ import annotations

from typing import Any, Callable, Dict, Mapping

import numpy as np
import pandas as pd

from gg_notes.core.exceptions import LayerError

PositionFn = Callable[[pd.DataFrame, Mapping[str, Any]], pd.DataFrame]


def resolution(values: pd.Series) -> float:
    """Smallest non-zero gap between distinct values (1 for a single value)."""
    unique = np.unique(values.dropna().to_numpy(dtype=float))
    if unique.size < 2:
        return 1.0
    gaps = np.diff(unique)
    gaps = gaps[gaps > 0]
    return float(gaps.min()) if gaps.size else 1.0


def _is_continuous(values: pd.Series) -> bool:
    return pd.api.types.is_numeric_dtype(values) and not pd.api.types.is_bool_dtype(values)


def _identity(frame: pd.DataFrame, params: Mapping[str, Any]) -> pd.DataFrame:
    return frame


def _jitter(frame: pd.DataFrame, params: Mapping[str, Any]) -> pd.DataFrame:
    """
    Add uniform noise to x and y. Width/height default to 40% of the data
    resolution; the same seed always gives the same offsets. A discrete y
    stays on its categories.
    """
    out = frame.copy()
    rng = np.random.default_rng(params.get("seed"))
    n = len(out)

    width = params.get("width")
    if width is None:
        width = 0.4 * resolution(out["x"])
    out["x"] = out["x"].astype(float) + rng.uniform(-width, width, n)

    if "y" in out.columns and _is_continuous(out["y"]):
        height = params.get("height")
        if height is None:
            height = 0.4 * resolution(out["y"])
        out["y"] = out["y"].astype(float) + rng.uniform(-height, height, n)

    return out


def _stack_keys(frame: pd.DataFrame) -> list:
    # Stacks never cross facet panels
    return ["PANEL", "x"] if "PANEL" in frame.columns else ["x"]


def _stack(frame: pd.DataFrame, params: Mapping[str, Any]) -> pd.DataFrame:
    """Stack y values of overlapping groups at the same x, in group order."""
    keys = _stack_keys(frame)
    out = frame.sort_values(keys + ["group"], kind="mergesort").copy()
    heights = out["y"].astype(float).fillna(0.0)
    out["ymax"] = heights.groupby([out[k] for k in keys]).cumsum()
    out["ymin"] = out["ymax"] - heights
    out["y"] = out["ymax"]
    return out.sort_index()


def _fill(frame: pd.DataFrame, params: Mapping[str, Any]) -> pd.DataFrame:
    """Stack, then rescale each x so the stack spans 0..1."""
    out = _stack(frame, params)
    totals = out.groupby(_stack_keys(out))["ymax"].transform("max").replace(0, np.nan)
    for col in ("ymin", "ymax", "y"):
        out[col] = (out[col] / totals).fillna(0.0)
    return out


def _dodge(frame: pd.DataFrame, params: Mapping[str, Any]) -> pd.DataFrame:
    """Place groups sharing an x side by side within the original width."""
    out = frame.copy()
    groups = sorted(out["group"].unique())
    n = len(groups)
    if n <= 1:
        return out

    if params.get("width") is not None:
        width = float(params["width"])
    elif "width" in out.columns:
        width = float(out["width"].max())
    else:
        width = 0.9

    slot = {g: i for i, g in enumerate(groups)}
    index = out["group"].map(slot).to_numpy(dtype=float)
    out["x"] = out["x"].astype(float) - width / 2 + (index + 0.5) * width / n
    out["width"] = width / n
    return out


_POSITIONS: Dict[str, PositionFn] = {
    "identity": _identity,
    "jitter": _jitter,
    "stack": _stack,
    "fill": _fill,
    "dodge": _dodge,
}


def apply_position(name: str, frame: pd.DataFrame, params: Mapping[str, Any]) -> pd.DataFrame:
    try:
        fn = _POSITIONS[name]
    except KeyError:
        raise LayerError(f"Unknown position '{name}'. Expected one of {sorted(_POSITIONS)}")

    if frame.empty:
        return frame
    if name in ("stack", "fill") and "y" not in frame.columns:
        return frame
    if "group" not in frame.columns:
        frame = frame.assign(group=0)
    return fn(frame, params)
