from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Union

import pandas as pd

from gg_notes.core.aes import Aes, normalise_aesthetic
from gg_notes.core.exceptions import LayerError

# geom -> (default stat, default position)
GEOM_DEFAULTS: Dict[str, Tuple[str, str]] = {
    "point": ("identity", "identity"),
    "bar": ("count", "stack"),
    "line": ("identity", "identity"),
    "path": ("identity", "identity"),
    "area": ("identity", "stack"),
    "polygon": ("identity", "identity"),
    "text": ("identity", "identity"),
    "tile": ("identity", "identity"),
    "histogram": ("bin", "stack"),
    "freqpoly": ("bin", "identity"),
    "density": ("density", "identity"),
    "boxplot": ("boxplot", "dodge"),
    "jitter": ("identity", "jitter"),
    "smooth": ("smooth", "identity"),
    "bin2d": ("bin2d", "identity"),
    "binhex": ("binhex", "identity"),
}

# stat -> geom used when a layer is built from the stat side
STAT_DEFAULT_GEOMS: Dict[str, str] = {
    "identity": "point",
    "bin": "histogram",
    "count": "bar",
    "density": "density",
    "smooth": "smooth",
    "bin2d": "bin2d",
    "binhex": "binhex",
    "boxplot": "boxplot",
}

POSITIONS: Tuple[str, ...] = ("identity", "stack", "dodge", "fill", "jitter")

# Aesthetics a geom needs from the data before its stat runs
REQUIRED_AES: Dict[str, Tuple[str, ...]] = {
    "point": ("x", "y"),
    "bar": ("x",),
    "line": ("x", "y"),
    "path": ("x", "y"),
    "area": ("x", "y"),
    "polygon": ("x", "y"),
    "text": ("x", "y", "label"),
    "tile": ("x", "y"),
    "histogram": ("x",),
    "freqpoly": ("x",),
    "density": ("x",),
    "boxplot": ("y",),
    "jitter": ("x", "y"),
    "smooth": ("x", "y"),
    "bin2d": ("x", "y"),
    "binhex": ("x", "y"),
}

# Stats that compute their own y, so y is not required in the data
_STATS_PRODUCING_Y = ("bin", "count", "density")


@dataclass(frozen=True, eq=False)
class Layer:
    """
    One (data, mapping, geometry, statistic, position) bundle of a plot.

    `data=None` means the layer uses the plot's default dataset.
    `inherit_aes=False` stops the plot's default mapping from being merged in.
    """

    geom: str
    stat: str
    position: str
    mapping: Aes = field(default_factory=Aes)
    data: Optional[pd.DataFrame] = None
    params: Mapping[str, Any] = field(default_factory=dict)
    inherit_aes: bool = True

    def __post_init__(self) -> None:
        if self.geom not in GEOM_DEFAULTS:
            raise LayerError(f"Unknown geom '{self.geom}'. Expected one of {sorted(GEOM_DEFAULTS)}")
        if self.stat not in STAT_DEFAULT_GEOMS:
            raise LayerError(f"Unknown stat '{self.stat}'. Expected one of {sorted(STAT_DEFAULT_GEOMS)}")
        if self.position not in POSITIONS:
            raise LayerError(f"Unknown position '{self.position}'. Expected one of {list(POSITIONS)}")

    def with_params(self, **params: Any) -> "Layer":
        merged = dict(self.params)
        merged.update(_normalise_params(params))
        return replace(self, params=merged)

    def required_aesthetics(self) -> Tuple[str, ...]:
        required = REQUIRED_AES[self.geom]
        if self.stat in _STATS_PRODUCING_Y:
            required = tuple(a for a in required if a != "y")
        if self.stat == "boxplot":
            required = ("y",)
        return required

    def describe(self) -> str:
        """Three-line description used by Plot.summary()."""
        params = ", ".join(f"{k} = {v!r}" for k, v in self.params.items())
        lines = [
            f"geom_{self.geom}: {params}" if params else f"geom_{self.geom}",
            f"stat_{self.stat}:",
            f"position_{self.position}",
        ]
        if self.mapping:
            lines.insert(0, f"mapping: {self.mapping!r}")
        if self.data is not None:
            lines.insert(0, f"data: {', '.join(map(str, self.data.columns))} [{self.data.shape[0]}x{self.data.shape[1]}]")
        return "\n".join(lines)


def _normalise_params(params: Mapping[str, Any]) -> Dict[str, Any]:
    return {normalise_aesthetic(k): v for k, v in params.items()}


def _as_aes(mapping: Union[Aes, Mapping[str, str], None]) -> Aes:
    if mapping is None:
        return Aes()
    if isinstance(mapping, Aes):
        return mapping
    return Aes.from_dict(mapping)


def layer(
    geom: Optional[str] = None,
    stat: Optional[str] = None,
    position: Optional[str] = None,
    mapping: Union[Aes, Mapping[str, str], None] = None,
    data: Optional[pd.DataFrame] = None,
    inherit_aes: bool = True,
    **params: Any,
) -> Layer:
    """
    Build a layer, filling in the default stat/position of the geom (or the
    default geom of the stat).
    """
    if geom is None and stat is None:
        raise LayerError("A layer needs a geom or a stat")

    if geom is None:
        if stat not in STAT_DEFAULT_GEOMS:
            raise LayerError(f"Unknown stat '{stat}'. Expected one of {sorted(STAT_DEFAULT_GEOMS)}")
        geom = STAT_DEFAULT_GEOMS[stat]

    if geom not in GEOM_DEFAULTS:
        raise LayerError(f"Unknown geom '{geom}'. Expected one of {sorted(GEOM_DEFAULTS)}")

    default_stat, default_position = GEOM_DEFAULTS[geom]
    return Layer(
        geom=geom,
        stat=stat or default_stat,
        position=position or default_position,
        mapping=_as_aes(mapping),
        data=data,
        params=_normalise_params(params),
        inherit_aes=inherit_aes,
    )


def _geom_factory(geom: str) -> Callable[..., Layer]:
    def factory(
        mapping: Union[Aes, Mapping[str, str], None] = None,
        data: Optional[pd.DataFrame] = None,
        stat: Optional[str] = None,
        position: Optional[str] = None,
        inherit_aes: bool = True,
        **params: Any,
    ) -> Layer:
        return layer(
            geom=geom,
            stat=stat,
            position=position,
            mapping=mapping,
            data=data,
            inherit_aes=inherit_aes,
            **params,
        )

    factory.__name__ = f"geom_{geom}"
    factory.__doc__ = f"Layer drawing '{geom}' marks (default stat '{GEOM_DEFAULTS[geom][0]}')."
    return factory


def _stat_factory(stat: str) -> Callable[..., Layer]:
    def factory(
        mapping: Union[Aes, Mapping[str, str], None] = None,
        data: Optional[pd.DataFrame] = None,
        geom: Optional[str] = None,
        position: Optional[str] = None,
        inherit_aes: bool = True,
        **params: Any,
    ) -> Layer:
        return layer(
            geom=geom or STAT_DEFAULT_GEOMS[stat],
            stat=stat,
            position=position,
            mapping=mapping,
            data=data,
            inherit_aes=inherit_aes,
            **params,
        )

    factory.__name__ = f"stat_{stat}"
    factory.__doc__ = f"Layer computing stat '{stat}' (default geom '{STAT_DEFAULT_GEOMS[stat]}')."
    return factory


geom_point = _geom_factory("point")
geom_bar = _geom_factory("bar")
geom_line = _geom_factory("line")
geom_path = _geom_factory("path")
geom_area = _geom_factory("area")
geom_polygon = _geom_factory("polygon")
geom_text = _geom_factory("text")
geom_tile = _geom_factory("tile")
geom_histogram = _geom_factory("histogram")
geom_freqpoly = _geom_factory("freqpoly")
geom_density = _geom_factory("density")
geom_boxplot = _geom_factory("boxplot")
geom_jitter = _geom_factory("jitter")
geom_smooth = _geom_factory("smooth")
geom_bin2d = _geom_factory("bin2d")
geom_binhex = _geom_factory("binhex")

stat_bin = _stat_factory("bin")
stat_density = _stat_factory("density")
stat_smooth = _stat_factory("smooth")
stat_bin2d = _stat_factory("bin2d")
stat_binhex = _stat_factory("binhex")
stat_boxplot = _stat_factory("boxplot")
