"""
Turn a Plot specification into a plotly Figure.

For each layer: resolve data and mapping, evaluate the aesthetics into a
frame named by channel, compute the stat, apply the position adjustment and
draw one or more traces. Facets are laid out with make_subplots.
"""
from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Tuple

import numpy as np
import pandas as pd
import plotly.colors as pcolors
import plotly.graph_objects as go
from plotly.subplots import make_subplots

from gg_notes.core.aes import Aes, GROUPING_AESTHETICS
from gg_notes.core.exceptions import DatasetSchemaError
from gg_notes.core.layer import Layer
from gg_notes.core.plot import Plot
from gg_notes.core.positions import apply_position
from gg_notes.core.stats import compute_stat

logger = logging.getLogger(__name__)

DEFAULT_COLOUR = "#333333"
SMOOTH_COLOUR = "#3366FF"
RIBBON_FILL = "rgba(153, 153, 153, 0.4)"
CONTINUOUS_SCALE = "Viridis"

_GREY = re.compile(r"^gr[ae]y(\d{1,3})$")

# R plotting symbols -> plotly marker symbols
_SHAPES = {
    0: "square-open",
    1: "circle-open",
    2: "triangle-up-open",
    3: "cross-thin-open",
    4: "x-thin-open",
    15: "square",
    16: "circle",
    17: "triangle-up",
    18: "diamond",
    19: "circle",
}
_SHAPE_CYCLE = ["circle", "triangle-up", "square", "cross", "diamond", "x", "star", "hexagon"]
_DASH_CYCLE = ["solid", "dash", "dot", "dashdot", "longdash", "longdashdot"]

# Position adjustments that need numeric x
_NUMERIC_X_POSITIONS = ("jitter", "dodge")


def r_colour(value: Any) -> Any:
    """Translate R grey levels ('grey50') to rgb(); pass other colours through."""
    if isinstance(value, str):
        match = _GREY.match(value.lower())
        if match:
            level = round(255 * min(int(match.group(1)), 100) / 100)
            return f"rgb({level}, {level}, {level})"
    return value


def _is_discrete(series: pd.Series) -> bool:
    return not pd.api.types.is_numeric_dtype(series) or pd.api.types.is_bool_dtype(series)


def _levels(series: pd.Series) -> List[Any]:
    if isinstance(series.dtype, pd.CategoricalDtype):
        return list(series.cat.categories)
    return sorted(series.dropna().unique().tolist(), key=str)


# -----------------------------------------------------------------------------
# Scales shared across layers of one render
# -----------------------------------------------------------------------------
@dataclass
class _Scales:
    palette: List[str] = field(default_factory=lambda: list(pcolors.qualitative.Plotly))
    colours: Dict[Any, str] = field(default_factory=dict)
    shapes: Dict[Any, str] = field(default_factory=dict)
    dashes: Dict[Any, str] = field(default_factory=dict)
    continuous: Dict[str, Tuple[float, float]] = field(default_factory=dict)
    legend_seen: set = field(default_factory=set)

    def colour(self, value: Any) -> str:
        if value not in self.colours:
            self.colours[value] = self.palette[len(self.colours) % len(self.palette)]
        return self.colours[value]

    def shape(self, value: Any) -> str:
        if value not in self.shapes:
            self.shapes[value] = _SHAPE_CYCLE[len(self.shapes) % len(_SHAPE_CYCLE)]
        return self.shapes[value]

    def dash(self, value: Any) -> str:
        if value not in self.dashes:
            self.dashes[value] = _DASH_CYCLE[len(self.dashes) % len(_DASH_CYCLE)]
        return self.dashes[value]

    def train(self, aesthetic: str, values: pd.Series) -> None:
        """Record the range of a continuous aesthetic so every layer shares it."""
        lo, hi = float(values.min()), float(values.max())
        if aesthetic in self.continuous:
            old_lo, old_hi = self.continuous[aesthetic]
            lo, hi = min(lo, old_lo), max(hi, old_hi)
        self.continuous[aesthetic] = (lo, hi)

    def rescale(self, aesthetic: str, values: pd.Series) -> np.ndarray:
        lo, hi = self.continuous.get(aesthetic, (float(values.min()), float(values.max())))
        span = hi - lo
        if span == 0 or math.isnan(span):
            return np.full(len(values), 0.5)
        return (values.to_numpy(dtype=float) - lo) / span

    def show_legend(self, key: str) -> bool:
        if key in self.legend_seen:
            return False
        self.legend_seen.add(key)
        return True


@dataclass
class _DrawContext:
    layer: Layer
    scales: _Scales
    discrete: Dict[str, bool]

    @property
    def params(self) -> Mapping[str, Any]:
        return self.layer.params


@dataclass
class _Piece:
    name: Optional[str]
    frame: pd.DataFrame
    colour: Any
    fill: Any
    symbol: Any
    dash: Any


# -----------------------------------------------------------------------------
# Aesthetic evaluation
# -----------------------------------------------------------------------------
def _evaluate(data: pd.DataFrame, mapping: Aes, index: int) -> pd.DataFrame:
    refs = mapping.data_refs()
    missing = sorted({col for col in refs.values() if col not in data.columns})
    if missing:
        raise DatasetSchemaError(
            f"Layer {index}: mapped columns {missing} not found in the layer data. "
            f"Available columns: {list(map(str, data.columns))}"
        )
    return pd.DataFrame({aesthetic: data[col].to_numpy() for aesthetic, col in refs.items()})


def _assign_groups(frame: pd.DataFrame) -> pd.Series:
    keys = ["PANEL"]
    for aesthetic in GROUPING_AESTHETICS:
        if aesthetic in frame.columns and (aesthetic == "group" or _is_discrete(frame[aesthetic])):
            keys.append(aesthetic)
    return frame.groupby(keys, sort=True, dropna=False).ngroup()


def _resolve_stat_refs(frame: pd.DataFrame, mapping: Aes, layer: Layer) -> pd.DataFrame:
    refs = mapping.stat_refs()
    if not refs:
        return frame
    out = frame.copy()
    for aesthetic, computed in refs.items():
        if computed not in out.columns:
            raise DatasetSchemaError(
                f"stat_{layer.stat} does not compute '..{computed}..'. "
                f"Computed columns: {list(map(str, out.columns))}"
            )
        out[aesthetic] = out[computed]
    return out


def _numeric_x(frame: pd.DataFrame) -> Tuple[pd.DataFrame, Optional[Tuple[List[int], List[str]]]]:
    """Replace a discrete x by integer positions; return tick values/labels."""
    if "x" not in frame.columns or not _is_discrete(frame["x"]):
        return frame, None
    levels = _levels(frame["x"])
    positions = {level: i + 1 for i, level in enumerate(levels)}
    out = frame.copy()
    out["x"] = out["x"].map(positions).astype(float)
    return out, (list(positions.values()), [str(level) for level in levels])


# -----------------------------------------------------------------------------
# Trace splitting and styling
# -----------------------------------------------------------------------------
def _constant_colour(params: Mapping[str, Any], key: str, default: Any) -> Any:
    return r_colour(params.get(key, default))


def _pieces(frame: pd.DataFrame, ctx: _DrawContext, default_colour: str = DEFAULT_COLOUR) -> Iterator[_Piece]:
    """
    Split a frame by group, resolving discrete colour/fill/shape/linetype to
    concrete styles. Continuous mappings are handled by the geoms themselves.
    """
    params = ctx.params
    for _, sub in frame.groupby("group", sort=True):
        names = []
        colour = _constant_colour(params, "colour", default_colour)
        fill = _constant_colour(params, "fill", None)
        symbol = params.get("shape")
        symbol = _SHAPES.get(symbol, symbol) if symbol is not None else "circle"
        dash = params.get("linetype", "solid")

        if "colour" in sub.columns and ctx.discrete.get("colour"):
            value = sub["colour"].iloc[0]
            colour = ctx.scales.colour(value)
            names.append(str(value))
        if "fill" in sub.columns and ctx.discrete.get("fill"):
            value = sub["fill"].iloc[0]
            fill = ctx.scales.colour(value)
            if str(value) not in names:
                names.append(str(value))
        if "shape" in sub.columns and ctx.discrete.get("shape"):
            value = sub["shape"].iloc[0]
            symbol = ctx.scales.shape(value)
            if str(value) not in names:
                names.append(str(value))
        if "linetype" in sub.columns and ctx.discrete.get("linetype"):
            value = sub["linetype"].iloc[0]
            dash = ctx.scales.dash(value)
            if str(value) not in names:
                names.append(str(value))

        yield _Piece(
            name=", ".join(names) if names else None,
            frame=sub,
            colour=colour,
            fill=fill,
            symbol=symbol,
            dash=dash,
        )


def _legend(piece: _Piece, ctx: _DrawContext) -> Dict[str, Any]:
    if piece.name is None:
        return {"showlegend": False}
    return {
        "name": piece.name,
        "legendgroup": piece.name,
        "showlegend": ctx.scales.show_legend(piece.name),
    }


def _continuous_colours(frame: pd.DataFrame, aesthetic: str, ctx: _DrawContext) -> List[str]:
    scaled = ctx.scales.rescale(aesthetic, frame[aesthetic])
    return pcolors.sample_colorscale(CONTINUOUS_SCALE, np.clip(scaled, 0, 1).tolist())


def _marker(piece: _Piece, ctx: _DrawContext) -> Dict[str, Any]:
    params = ctx.params
    frame = piece.frame
    marker: Dict[str, Any] = {
        "color": piece.colour,
        "symbol": piece.symbol,
        "size": float(params.get("size", 2)) * 3,
        "opacity": float(params.get("alpha", 1.0)),
    }
    if "colour" in frame.columns and not ctx.discrete.get("colour"):
        lo, hi = ctx.scales.continuous.get("colour", (frame["colour"].min(), frame["colour"].max()))
        marker.update(
            color=frame["colour"].to_numpy(),
            colorscale=CONTINUOUS_SCALE,
            cmin=lo,
            cmax=hi,
            showscale=ctx.scales.show_legend("__colourbar__"),
        )
    if "size" in frame.columns and not ctx.discrete.get("size"):
        marker["size"] = 4 + 14 * ctx.scales.rescale("size", frame["size"])
    if "alpha" in frame.columns and not ctx.discrete.get("alpha"):
        # plotly has no per-point opacity; use the mean
        marker["opacity"] = float(np.clip(0.1 + 0.9 * ctx.scales.rescale("alpha", frame["alpha"]).mean(), 0, 1))
    return marker


def _band(x: np.ndarray, lower: np.ndarray, upper: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Closed outline of the region between two curves."""
    return np.concatenate([x, x[::-1]]), np.concatenate([upper, lower[::-1]])


# -----------------------------------------------------------------------------
# Geoms
# -----------------------------------------------------------------------------
def _draw_point(frame: pd.DataFrame, ctx: _DrawContext) -> List[go.BaseTraceType]:
    traces = []
    for piece in _pieces(frame, ctx):
        traces.append(
            go.Scatter(
                x=piece.frame["x"],
                y=piece.frame["y"],
                mode="markers",
                marker=_marker(piece, ctx),
                **_legend(piece, ctx),
            )
        )
    return traces


def _draw_lines(frame: pd.DataFrame, ctx: _DrawContext, sort_x: bool) -> List[go.BaseTraceType]:
    traces = []
    width = float(ctx.params.get("size", 0.5)) * 4
    for piece in _pieces(frame, ctx):
        sub = piece.frame.sort_values("x", kind="mergesort") if sort_x else piece.frame
        traces.append(
            go.Scatter(
                x=sub["x"],
                y=sub["y"],
                mode="lines",
                line={"color": piece.colour, "dash": piece.dash, "width": width},
                opacity=float(ctx.params.get("alpha", 1.0)),
                **_legend(piece, ctx),
            )
        )
    return traces


def _draw_line(frame: pd.DataFrame, ctx: _DrawContext) -> List[go.BaseTraceType]:
    return _draw_lines(frame, ctx, sort_x=True)


def _draw_path(frame: pd.DataFrame, ctx: _DrawContext) -> List[go.BaseTraceType]:
    return _draw_lines(frame, ctx, sort_x=False)


def _draw_area(frame: pd.DataFrame, ctx: _DrawContext) -> List[go.BaseTraceType]:
    traces = []
    for piece in _pieces(frame, ctx):
        sub = piece.frame.sort_values("x", kind="mergesort")
        upper = sub["ymax"].to_numpy(dtype=float) if "ymax" in sub.columns else sub["y"].to_numpy(dtype=float)
        lower = sub["ymin"].to_numpy(dtype=float) if "ymin" in sub.columns else np.zeros(len(sub))
        xs, ys = _band(sub["x"].to_numpy(dtype=float), lower, upper)
        fill = piece.fill or piece.colour
        traces.append(
            go.Scatter(
                x=xs,
                y=ys,
                mode="lines",
                fill="toself",
                fillcolor=fill,
                line={"color": piece.colour, "width": 0.5},
                opacity=float(ctx.params.get("alpha", 1.0)),
                **_legend(piece, ctx),
            )
        )
    return traces


def _draw_polygon(frame: pd.DataFrame, ctx: _DrawContext) -> List[go.BaseTraceType]:
    traces = []
    continuous_fill = "fill" in frame.columns and not ctx.discrete.get("fill")
    for piece in _pieces(frame, ctx):
        sub = piece.frame
        fill = piece.fill
        if continuous_fill:
            fill = _continuous_colours(sub.iloc[:1], "fill", ctx)[0]
        traces.append(
            go.Scatter(
                x=sub["x"],
                y=sub["y"],
                mode="lines",
                fill="toself" if fill is not None else "none",
                fillcolor=fill,
                line={"color": piece.colour, "width": float(ctx.params.get("size", 0.5)) * 2},
                opacity=float(ctx.params.get("alpha", 1.0)),
                hoverinfo="skip" if piece.name is None else None,
                **_legend(piece, ctx),
            )
        )
    if continuous_fill and ctx.scales.show_legend("__fillbar__"):
        lo, hi = ctx.scales.continuous["fill"]
        traces.append(_colourbar_trace(lo, hi))
    return traces


def _colourbar_trace(lo: float, hi: float) -> go.Scatter:
    """Invisible trace that only carries a colour bar."""
    return go.Scatter(
        x=[None],
        y=[None],
        mode="markers",
        marker={"colorscale": CONTINUOUS_SCALE, "cmin": lo, "cmax": hi, "color": [lo], "showscale": True},
        showlegend=False,
        hoverinfo="skip",
    )


def _draw_text(frame: pd.DataFrame, ctx: _DrawContext) -> List[go.BaseTraceType]:
    traces = []
    for piece in _pieces(frame, ctx):
        traces.append(
            go.Scatter(
                x=piece.frame["x"],
                y=piece.frame["y"],
                mode="text",
                text=piece.frame["label"].astype(str),
                textfont={"color": piece.colour, "size": float(ctx.params.get("size", 4)) * 3},
                **_legend(piece, ctx),
            )
        )
    return traces


def _draw_tile(frame: pd.DataFrame, ctx: _DrawContext) -> List[go.BaseTraceType]:
    value_col = "fill" if "fill" in frame.columns else "count" if "count" in frame.columns else None
    if value_col is None:
        z = np.ones(len(frame))
    elif _is_discrete(frame[value_col]):
        z = pd.Categorical(frame[value_col]).codes
    else:
        z = frame[value_col].to_numpy(dtype=float)
    return [
        go.Heatmap(
            x=frame["x"],
            y=frame["y"],
            z=z,
            colorscale=CONTINUOUS_SCALE,
            colorbar={"title": {"text": value_col or ""}},
            showscale=ctx.scales.show_legend("__tilebar__"),
        )
    ]


def _draw_bar(frame: pd.DataFrame, ctx: _DrawContext) -> List[go.BaseTraceType]:
    traces = []
    for piece in _pieces(frame, ctx, default_colour="rgb(89, 89, 89)"):
        sub = piece.frame
        if "ymax" in sub.columns and "ymin" in sub.columns:
            base = sub["ymin"].to_numpy(dtype=float)
            height = sub["ymax"].to_numpy(dtype=float) - base
        else:
            base = np.zeros(len(sub))
            height = sub["y"].to_numpy(dtype=float)
        fill = piece.fill or piece.colour
        traces.append(
            go.Bar(
                x=sub["x"],
                y=height,
                base=base,
                width=sub["width"].to_numpy(dtype=float) if "width" in sub.columns and not _is_discrete(sub["x"]) else None,
                marker={"color": fill, "line": {"color": piece.colour if "colour" in ctx.params else fill, "width": 0.5}},
                opacity=float(ctx.params.get("alpha", 1.0)),
                **_legend(piece, ctx),
            )
        )
    return traces


def _draw_freqpoly(frame: pd.DataFrame, ctx: _DrawContext) -> List[go.BaseTraceType]:
    return _draw_lines(frame, ctx, sort_x=True)


def _draw_density(frame: pd.DataFrame, ctx: _DrawContext) -> List[go.BaseTraceType]:
    if "fill" in frame.columns or "fill" in ctx.params:
        return _draw_area(frame, ctx)
    return _draw_lines(frame, ctx, sort_x=True)


def _draw_boxplot(frame: pd.DataFrame, ctx: _DrawContext) -> List[go.BaseTraceType]:
    traces = []
    for piece in _pieces(frame, ctx):
        sub = piece.frame
        fill = piece.fill or "white"
        traces.append(
            go.Box(
                x=sub["x"],
                q1=sub["lower"],
                median=sub["middle"],
                q3=sub["upper"],
                lowerfence=sub["ymin"],
                upperfence=sub["ymax"],
                width=float(sub["width"].iloc[0]) if "width" in sub.columns and not _is_discrete(sub["x"]) else None,
                fillcolor=fill,
                line={"color": piece.colour},
                **_legend(piece, ctx),
            )
        )
        outliers = [(x, y) for x, ys in zip(sub["x"], sub["outliers"]) for y in ys]
        if outliers:
            traces.append(
                go.Scatter(
                    x=[o[0] for o in outliers],
                    y=[o[1] for o in outliers],
                    mode="markers",
                    marker={"color": piece.colour, "size": 5},
                    showlegend=False,
                )
            )
    return traces


def _draw_smooth(frame: pd.DataFrame, ctx: _DrawContext) -> List[go.BaseTraceType]:
    traces = []
    for piece in _pieces(frame, ctx, default_colour=SMOOTH_COLOUR):
        sub = piece.frame.sort_values("x", kind="mergesort")
        has_band = {"ymin", "ymax"}.issubset(sub.columns) and sub["ymin"].notna().any()
        if has_band and ctx.params.get("se", True):
            xs, ys = _band(
                sub["x"].to_numpy(dtype=float),
                sub["ymin"].to_numpy(dtype=float),
                sub["ymax"].to_numpy(dtype=float),
            )
            traces.append(
                go.Scatter(
                    x=xs,
                    y=ys,
                    mode="lines",
                    fill="toself",
                    fillcolor=r_colour(ctx.params.get("fill", RIBBON_FILL)),
                    line={"width": 0},
                    hoverinfo="skip",
                    showlegend=False,
                )
            )
        traces.append(
            go.Scatter(
                x=sub["x"],
                y=sub["y"],
                mode="lines",
                line={"color": piece.colour, "width": float(ctx.params.get("size", 1)) * 2, "dash": piece.dash},
                **_legend(piece, ctx),
            )
        )
    return traces


def _draw_binhex(frame: pd.DataFrame, ctx: _DrawContext) -> List[go.BaseTraceType]:
    value_col = "fill" if "fill" in frame.columns else "count"
    return [
        go.Scatter(
            x=frame["x"],
            y=frame["y"],
            mode="markers",
            marker={
                "symbol": "hexagon",
                "size": float(ctx.params.get("size", 4)) * 3,
                "color": frame[value_col].to_numpy(dtype=float),
                "colorscale": CONTINUOUS_SCALE,
                "showscale": ctx.scales.show_legend("__hexbar__"),
                "colorbar": {"title": {"text": value_col}},
            },
            showlegend=False,
        )
    ]


_GEOMS: Dict[str, Callable[[pd.DataFrame, _DrawContext], List[go.BaseTraceType]]] = {
    "point": _draw_point,
    "jitter": _draw_point,
    "bar": _draw_bar,
    "histogram": _draw_bar,
    "line": _draw_line,
    "path": _draw_path,
    "area": _draw_area,
    "polygon": _draw_polygon,
    "text": _draw_text,
    "tile": _draw_tile,
    "bin2d": _draw_tile,
    "freqpoly": _draw_freqpoly,
    "density": _draw_density,
    "boxplot": _draw_boxplot,
    "smooth": _draw_smooth,
    "binhex": _draw_binhex,
}


# -----------------------------------------------------------------------------
# Facets
# -----------------------------------------------------------------------------
def _facet_levels(plot: Plot) -> List[Any]:
    if plot.facet is None:
        return [None]
    column = plot.facet.column
    sources = [plot.data] + [lyr.data for lyr in plot.layers]
    frames = [d for d in sources if d is not None and column in d.columns]
    if not frames:
        raise DatasetSchemaError(f"Facet column '{column}' not found in any layer data")
    return _levels(pd.concat([f[column] for f in frames], ignore_index=True))


def _panel_grid(n_panels: int, ncol: Optional[int]) -> Tuple[int, int]:
    cols = ncol or int(math.ceil(math.sqrt(n_panels)))
    rows = int(math.ceil(n_panels / cols))
    return rows, cols


def _with_panels(frame: pd.DataFrame, data: pd.DataFrame, plot: Plot, levels: List[Any]) -> pd.DataFrame:
    """Attach the PANEL column; layers without the facet column repeat in every panel."""
    if plot.facet is None:
        return frame.assign(PANEL=1)
    column = plot.facet.column
    if column in data.columns:
        panel_of = {level: i + 1 for i, level in enumerate(levels)}
        return frame.assign(PANEL=data[column].map(panel_of).to_numpy())
    return pd.concat([frame.assign(PANEL=i + 1) for i in range(len(levels))], ignore_index=True)


# -----------------------------------------------------------------------------
# Entry points
# -----------------------------------------------------------------------------
def build_layer_frame(plot: Plot, index: int, levels: Optional[List[Any]] = None) -> Tuple[pd.DataFrame, Optional[tuple]]:
    """
    Evaluated, stat-transformed and position-adjusted data of one layer.
    Also returns tick values/labels when a discrete x was made numeric.
    """
    lyr = plot.layers[index]
    data = plot.layer_data(index)
    if data is None:
        raise DatasetSchemaError(f"Layer {index} has no data and the plot has no default data")

    mapping = plot.layer_mapping(index)
    frame = _evaluate(data, mapping, index)
    frame = _with_panels(frame, data, plot, levels if levels is not None else _facet_levels(plot))

    ticks = None
    if lyr.position in _NUMERIC_X_POSITIONS:
        frame, ticks = _numeric_x(frame)

    frame["group"] = _assign_groups(frame).to_numpy()
    frame = compute_stat(lyr.stat, frame, lyr.params)
    frame = _resolve_stat_refs(frame, mapping, lyr)
    frame = apply_position(lyr.position, frame, lyr.params)
    return frame, ticks


def _axis_title(plot: Plot, aesthetic: str) -> Optional[str]:
    explicit = getattr(plot.labels, aesthetic)
    if explicit is not None:
        return explicit

    if aesthetic in plot.mapping:
        value = plot.mapping[aesthetic]
    else:
        value = next(
            (plot.layer_mapping(i)[aesthetic] for i in range(len(plot.layers)) if aesthetic in plot.layer_mapping(i)),
            None,
        )

    if value is not None:
        return value.strip(".")
    if aesthetic == "y" and plot.layers:
        stat = plot.layers[0].stat
        if stat in ("bin", "count"):
            return "count"
        if stat == "density":
            return "density"
    return None


def render(plot: Plot, width: Optional[int] = None, height: Optional[int] = None) -> go.Figure:
    """Render the plot to a plotly Figure."""
    levels = _facet_levels(plot)
    faceted = plot.facet is not None
    rows, cols = _panel_grid(len(levels), plot.facet.ncol if faceted else None)

    if faceted:
        fig = make_subplots(
            rows=rows,
            cols=cols,
            subplot_titles=[str(level) for level in levels],
            shared_xaxes=True,
            shared_yaxes=True,
            horizontal_spacing=0.04,
            vertical_spacing=0.08,
        )
    else:
        fig = go.Figure()

    scales = _Scales()
    frames: List[Tuple[Layer, pd.DataFrame]] = []
    ticks = None

    for idx, lyr in enumerate(plot.layers):
        frame, layer_ticks = build_layer_frame(plot, idx, levels)
        ticks = ticks or layer_ticks
        for aesthetic in ("colour", "fill", "size", "alpha"):
            if aesthetic in frame.columns and not frame.empty and not _is_discrete(frame[aesthetic]):
                scales.train(aesthetic, frame[aesthetic])
        frames.append((lyr, frame))

    for lyr, frame in frames:
        if frame.empty:
            logger.warning("Layer produced no data", extra={"geom": lyr.geom, "stat": lyr.stat})
            continue

        discrete = {a: _is_discrete(frame[a]) for a in ("colour", "fill", "shape", "linetype", "size", "alpha") if a in frame.columns}
        ctx = _DrawContext(layer=lyr, scales=scales, discrete=discrete)
        draw = _GEOMS[lyr.geom]

        for panel, sub in frame.groupby("PANEL", sort=True):
            for trace in draw(sub, ctx):
                if faceted:
                    panel_idx = int(panel) - 1
                    fig.add_trace(trace, row=panel_idx // cols + 1, col=panel_idx % cols + 1)
                else:
                    fig.add_trace(trace)

    x_title = _axis_title(plot, "x")
    y_title = _axis_title(plot, "y")
    if faceted:
        fig.update_xaxes(title_text=x_title, row=rows)
        fig.update_yaxes(title_text=y_title, col=1)
    else:
        fig.update_layout(xaxis_title=x_title, yaxis_title=y_title)

    if ticks is not None:
        fig.update_xaxes(tickmode="array", tickvals=ticks[0], ticktext=ticks[1])

    legend_title = plot.labels.colour
    if legend_title is None:
        legend_title = next(
            (plot.layer_mapping(i).get(a) for i in range(len(plot.layers)) for a in ("colour", "fill", "shape") if a in plot.layer_mapping(i)),
            None,
        )

    fig.update_layout(
        title=plot.labels.title,
        template="plotly_white",
        barmode="overlay",
        legend_title_text=legend_title,
        margin=dict(l=40, r=40, t=60 if plot.labels.title or faceted else 40, b=40),
    )
    if width is not None:
        fig.update_layout(width=width)
    if height is not None:
        fig.update_layout(height=height)
    return fig


def save(plot: Plot, path: str | Path, width: Optional[int] = None, height: Optional[int] = None) -> Path:
    """Render and write a standalone HTML file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    render(plot, width=width, height=height).write_html(str(path), include_plotlyjs="cdn")
    return path
