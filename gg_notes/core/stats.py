"""
Statistical transforms applied to a layer's data before it is drawn.

Every stat receives a frame whose columns are named after aesthetics
(x, y, colour, weight, ...) plus a `group` column, and returns the
transformed frame. Grouping aesthetics that are constant within a group are
carried through unchanged.
"""
from __future__ import annotations

import logging
import warnings
from typing import Any, Callable, Dict, Mapping, Tuple

import numpy as np
import pandas as pd
from scipy.stats import gaussian_kde

from gg_notes.core.exceptions import LayerError

logger = logging.getLogger(__name__)

# Group-level columns copied onto every stat output row
_CARRY_COLUMNS = ("colour", "fill", "shape", "linetype", "alpha", "size", "PANEL")

StatFn = Callable[[pd.DataFrame, Mapping[str, Any]], pd.DataFrame]
SetupFn = Callable[[pd.DataFrame, Mapping[str, Any]], Dict[str, Any]]


# -----------------------------------------------------------------------------
# Shared helpers
# -----------------------------------------------------------------------------
def _numeric(series: pd.Series, aesthetic: str) -> np.ndarray:
    if not pd.api.types.is_numeric_dtype(series):
        raise LayerError(f"Aesthetic '{aesthetic}' must be numeric for this stat, got dtype {series.dtype}")
    return series.to_numpy(dtype=float)


def _weights(frame: pd.DataFrame) -> np.ndarray | None:
    if "weight" not in frame.columns:
        return None
    return frame["weight"].to_numpy(dtype=float)


def _breaks(values: np.ndarray, binwidth: float | None, bins: int) -> np.ndarray:
    """Equal-width bin edges aligned to multiples of the bin width."""
    lo, hi = float(np.nanmin(values)), float(np.nanmax(values))
    if binwidth is None:
        binwidth = (hi - lo) / bins if hi > lo else 1.0
    if binwidth <= 0:
        raise LayerError(f"binwidth must be positive, got {binwidth}")

    start = np.floor(lo / binwidth) * binwidth
    n = max(1, int(np.ceil((hi - start) / binwidth)))
    if start + n * binwidth < hi:
        n += 1
    return start + binwidth * np.arange(n + 1)


def _pair(value: Any) -> Tuple[Any, Any]:
    if isinstance(value, (list, tuple)):
        return value[0], value[1]
    return value, value


# -----------------------------------------------------------------------------
# identity
# -----------------------------------------------------------------------------
def _stat_identity(frame: pd.DataFrame, params: Mapping[str, Any]) -> pd.DataFrame:
    return frame.copy()


# -----------------------------------------------------------------------------
# bin (histogram / freqpoly)
# -----------------------------------------------------------------------------
def _setup_bin(frame: pd.DataFrame, params: Mapping[str, Any]) -> Dict[str, Any]:
    x = _numeric(frame["x"], "x")
    x = x[~np.isnan(x)]
    if x.size == 0:
        return {"breaks": np.array([0.0, 1.0])}
    if params.get("binwidth") is None and "bins" not in params:
        logger.info("stat_bin using bins = 30. Pick better value with binwidth.")
    return {"breaks": _breaks(x, params.get("binwidth"), int(params.get("bins", 30)))}


def _stat_bin(frame: pd.DataFrame, params: Mapping[str, Any]) -> pd.DataFrame:
    breaks = params["breaks"]
    x = _numeric(frame["x"], "x")
    keep = ~np.isnan(x)
    weights = _weights(frame)

    counts, _ = np.histogram(x[keep], bins=breaks, weights=None if weights is None else weights[keep])
    counts = counts.astype(float)
    widths = np.diff(breaks)
    total = counts.sum()
    density = counts / (total * widths) if total > 0 else np.zeros_like(counts)

    return pd.DataFrame(
        {
            "x": (breaks[:-1] + breaks[1:]) / 2,
            "xmin": breaks[:-1],
            "xmax": breaks[1:],
            "width": widths,
            "count": counts,
            "density": density,
            "ncount": counts / counts.max() if counts.max() > 0 else counts,
            "ndensity": density / density.max() if density.max() > 0 else density,
            "y": counts,
        }
    )


# -----------------------------------------------------------------------------
# count (bar)
# -----------------------------------------------------------------------------
def _stat_count(frame: pd.DataFrame, params: Mapping[str, Any]) -> pd.DataFrame:
    if "weight" in frame.columns:
        counts = frame.groupby("x", sort=True, observed=True)["weight"].sum()
    else:
        counts = frame.groupby("x", sort=True, observed=True).size()

    counts = counts.astype(float)
    out = pd.DataFrame({"x": counts.index, "count": counts.to_numpy()})
    out["prop"] = out["count"] / out["count"].sum()
    out["y"] = out["count"]
    out["width"] = params.get("width", 0.9)
    return out


# -----------------------------------------------------------------------------
# density
# -----------------------------------------------------------------------------
def _setup_density(frame: pd.DataFrame, params: Mapping[str, Any]) -> Dict[str, Any]:
    x = _numeric(frame["x"], "x")
    x = x[~np.isnan(x)]
    if x.size == 0:
        return {"range": (0.0, 1.0)}
    return {"range": (float(x.min()), float(x.max()))}


def _stat_density(frame: pd.DataFrame, params: Mapping[str, Any]) -> pd.DataFrame:
    x = _numeric(frame["x"], "x")
    x = x[~np.isnan(x)]
    columns = ["x", "density", "count", "scaled", "n", "y"]

    if x.size < 2 or np.ptp(x) == 0:
        warnings.warn(
            "Groups with fewer than two distinct data points have been dropped.",
            RuntimeWarning,
            stacklevel=2,
        )
        return pd.DataFrame(columns=columns)

    kde = gaussian_kde(x, bw_method=params.get("bw"))
    adjust = float(params.get("adjust", 1.0))
    if adjust != 1.0:
        kde.set_bandwidth(kde.factor * adjust)

    lo, hi = params["range"]
    grid = np.linspace(lo, hi, int(params.get("n", 512)))
    density = kde(grid)

    return pd.DataFrame(
        {
            "x": grid,
            "density": density,
            "count": density * x.size,
            "scaled": density / density.max(),
            "n": x.size,
            "y": density,
        }
    )


# -----------------------------------------------------------------------------
# smooth
# -----------------------------------------------------------------------------
def _stat_smooth(frame: pd.DataFrame, params: Mapping[str, Any]) -> pd.DataFrame:
    from gg_notes.models import ModelConfig, fit_model

    data = frame[["x", "y"]].dropna()
    if len(data) < 3:
        warnings.warn(
            "stat_smooth needs at least three observations per group; group dropped.",
            RuntimeWarning,
            stacklevel=2,
        )
        return pd.DataFrame(columns=["x", "y", "ymin", "ymax", "se"])

    method = params.get("method", "auto")
    if method == "auto":
        method = "loess" if len(data) < 1000 else "gam"
        logger.info("geom_smooth: method = %s", method, extra={"n_obs": len(data)})

    formula = params.get("formula")
    if formula is None:
        formula = "y ~ s(x)" if method == "gam" else "y ~ x"

    config = ModelConfig(
        method=method,
        formula=formula,
        family=params.get("family"),
        span=float(params.get("span", 0.75)),
    )
    result = fit_model(data, config)

    grid = pd.DataFrame({"x": np.linspace(data["x"].min(), data["x"].max(), int(params.get("n", 80)))})
    level = float(params.get("level", 0.95))
    pred = result.predict_interval(grid, level=level)

    out = pd.DataFrame({"x": grid["x"].to_numpy(), "y": pred["fit"].to_numpy()})
    if params.get("se", True):
        out["ymin"] = pred["lower"].to_numpy()
        out["ymax"] = pred["upper"].to_numpy()
        out["se"] = pred["se"].to_numpy()
    return out


# -----------------------------------------------------------------------------
# bin2d
# -----------------------------------------------------------------------------
def _setup_bin2d(frame: pd.DataFrame, params: Mapping[str, Any]) -> Dict[str, Any]:
    x = _numeric(frame["x"], "x")
    y = _numeric(frame["y"], "y")
    keep = ~(np.isnan(x) | np.isnan(y))
    bw_x, bw_y = _pair(params.get("binwidth"))
    bins_x, bins_y = _pair(params.get("bins", 30))
    return {
        "xbreaks": _breaks(x[keep], bw_x, int(bins_x)),
        "ybreaks": _breaks(y[keep], bw_y, int(bins_y)),
    }


def _stat_bin2d(frame: pd.DataFrame, params: Mapping[str, Any]) -> pd.DataFrame:
    xb, yb = params["xbreaks"], params["ybreaks"]
    x = _numeric(frame["x"], "x")
    y = _numeric(frame["y"], "y")
    keep = ~(np.isnan(x) | np.isnan(y))
    weights = _weights(frame)

    counts, _, _ = np.histogram2d(
        x[keep], y[keep], bins=[xb, yb], weights=None if weights is None else weights[keep]
    )
    ix, iy = np.nonzero(counts)
    values = counts[ix, iy]

    return pd.DataFrame(
        {
            "x": (xb[ix] + xb[ix + 1]) / 2,
            "y": (yb[iy] + yb[iy + 1]) / 2,
            "xmin": xb[ix],
            "xmax": xb[ix + 1],
            "ymin": yb[iy],
            "ymax": yb[iy + 1],
            "width": xb[ix + 1] - xb[ix],
            "height": yb[iy + 1] - yb[iy],
            "count": values,
            "density": values / values.sum() if values.size else values,
        }
    )


# -----------------------------------------------------------------------------
# binhex
# -----------------------------------------------------------------------------
def _setup_binhex(frame: pd.DataFrame, params: Mapping[str, Any]) -> Dict[str, Any]:
    x = _numeric(frame["x"], "x")
    y = _numeric(frame["y"], "y")
    keep = ~(np.isnan(x) | np.isnan(y))
    x, y = x[keep], y[keep]
    if x.size == 0:
        return {"origin": (0.0, 0.0), "binwidth": (1.0, 1.0)}

    bins_x, bins_y = _pair(params.get("bins", 30))
    bw_x, bw_y = _pair(params.get("binwidth"))
    if bw_x is None:
        bw_x = np.ptp(x) / bins_x if np.ptp(x) > 0 else 1.0
    if bw_y is None:
        bw_y = np.ptp(y) / bins_y if np.ptp(y) > 0 else 1.0
    return {"origin": (float(x.min()), float(y.min())), "binwidth": (float(bw_x), float(bw_y))}


def _stat_binhex(frame: pd.DataFrame, params: Mapping[str, Any]) -> pd.DataFrame:
    (x0, y0), (sx, sy) = params["origin"], params["binwidth"]
    x = _numeric(frame["x"], "x")
    y = _numeric(frame["y"], "y")
    keep = ~(np.isnan(x) | np.isnan(y))
    weights = _weights(frame)
    w = np.ones(int(keep.sum())) if weights is None else weights[keep]

    # Two offset rectangular lattices; each point goes to the nearer centre
    u = (x[keep] - x0) / sx
    v = (y[keep] - y0) / sy
    i1, j1 = np.round(u), np.round(v)
    i2, j2 = np.floor(u), np.floor(v)
    d1 = (u - i1) ** 2 + 3.0 * (v - j1) ** 2
    d2 = (u - i2 - 0.5) ** 2 + 3.0 * (v - j2 - 0.5) ** 2
    first = d1 < d2

    cx = np.where(first, i1, i2 + 0.5) * sx + x0
    cy = np.where(first, j1, j2 + 0.5) * sy + y0

    cells = pd.DataFrame({"x": cx, "y": cy, "w": w})
    counts = cells.groupby(["x", "y"], sort=True)["w"].sum().reset_index(name="count")
    counts["density"] = counts["count"] / counts["count"].sum() if len(counts) else counts["count"]
    counts["width"] = sx
    counts["height"] = sy
    return counts


# -----------------------------------------------------------------------------
# boxplot
# -----------------------------------------------------------------------------
def _stat_boxplot(frame: pd.DataFrame, params: Mapping[str, Any]) -> pd.DataFrame:
    coef = float(params.get("coef", 1.5))
    data = frame.copy()
    if "x" not in data.columns:
        data["x"] = 0

    rows = []
    for x_value, sub in data.groupby("x", sort=True, observed=True):
        y = _numeric(sub["y"], "y")
        y = y[~np.isnan(y)]
        if y.size == 0:
            continue
        lower, middle, upper = np.percentile(y, [25, 50, 75])
        iqr = upper - lower
        inside = y[(y >= lower - coef * iqr) & (y <= upper + coef * iqr)]
        outliers = y[(y < lower - coef * iqr) | (y > upper + coef * iqr)]
        rows.append(
            {
                "x": x_value,
                "lower": lower,
                "middle": middle,
                "upper": upper,
                "ymin": inside.min(),
                "ymax": inside.max(),
                "outliers": outliers.tolist(),
                "n": int(y.size),
                "width": params.get("width", 0.75),
            }
        )

    return pd.DataFrame(
        rows, columns=["x", "lower", "middle", "upper", "ymin", "ymax", "outliers", "n", "width"]
    )


_STATS: Dict[str, StatFn] = {
    "identity": _stat_identity,
    "bin": _stat_bin,
    "count": _stat_count,
    "density": _stat_density,
    "smooth": _stat_smooth,
    "bin2d": _stat_bin2d,
    "binhex": _stat_binhex,
    "boxplot": _stat_boxplot,
}

# Setup runs once over all groups and panels so breaks/ranges are shared
_SETUPS: Dict[str, SetupFn] = {
    "bin": _setup_bin,
    "density": _setup_density,
    "bin2d": _setup_bin2d,
    "binhex": _setup_binhex,
}


def compute_stat(name: str, frame: pd.DataFrame, params: Mapping[str, Any]) -> pd.DataFrame:
    """
    Run stat `name` over each group of `frame` and stack the results.
    """
    try:
        fn = _STATS[name]
    except KeyError:
        raise LayerError(f"Unknown stat '{name}'. Expected one of {sorted(_STATS)}")

    if frame.empty or name == "identity":
        return frame.copy()

    data = frame if "group" in frame.columns else frame.assign(group=0)

    merged_params: Dict[str, Any] = dict(params)
    setup = _SETUPS.get(name)
    if setup is not None:
        merged_params.update(setup(data, params))

    pieces = []
    for group_id, sub in data.groupby("group", sort=True):
        result = fn(sub, merged_params)
        if result.empty:
            continue
        for col in _CARRY_COLUMNS:
            if col in sub.columns and col not in result.columns:
                result[col] = sub[col].iloc[0]
        result["group"] = group_id
        pieces.append(result)

    if not pieces:
        return pd.DataFrame(columns=list(data.columns))
    return pd.concat(pieces, ignore_index=True)
