"""
Plot specification and data preparation.

    from gg_notes.core import ggplot, aes, geom_point, render
"""
from .aes import Aes, aes
from .dataset import Dataset
from .layer import (
    GEOM_DEFAULTS,
    POSITIONS,
    STAT_DEFAULT_GEOMS,
    Layer,
    geom_area,
    geom_bar,
    geom_bin2d,
    geom_binhex,
    geom_boxplot,
    geom_density,
    geom_freqpoly,
    geom_histogram,
    geom_jitter,
    geom_line,
    geom_path,
    geom_point,
    geom_polygon,
    geom_smooth,
    geom_text,
    geom_tile,
    layer,
    stat_bin,
    stat_bin2d,
    stat_binhex,
    stat_boxplot,
    stat_density,
    stat_smooth,
)
from .plot import FacetWrap, Labels, Plot, facet_wrap, ggplot, ggtitle, labs, qplot
from .render import render, save

__all__ = [
    "Aes", "aes", "Dataset",
    "GEOM_DEFAULTS", "POSITIONS", "STAT_DEFAULT_GEOMS", "Layer", "layer",
    "geom_area", "geom_bar", "geom_bin2d", "geom_binhex", "geom_boxplot", "geom_density",
    "geom_freqpoly", "geom_histogram", "geom_jitter", "geom_line", "geom_path", "geom_point",
    "geom_polygon", "geom_smooth", "geom_text", "geom_tile",
    "stat_bin", "stat_bin2d", "stat_binhex", "stat_boxplot", "stat_density", "stat_smooth",
    "FacetWrap", "Labels", "Plot", "facet_wrap", "ggplot", "ggtitle", "labs", "qplot",
    "render", "save",
]
