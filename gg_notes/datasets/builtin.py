from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable, Dict, List

import pandas as pd
import plotly.express as px

from gg_notes.core.dataset import Dataset
from gg_notes.core.exceptions import DatasetConfigError
from gg_notes.maps.boundaries import map_data

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuiltinSpec:
    loader: Callable[[], pd.DataFrame]
    group: str
    description: str


# -----------------------------------------------------------------------------
# Synthetic boundaries: a 3 x 2 grid of square regions plus one island region
# -----------------------------------------------------------------------------
_TOY_REGION_NAMES = ["avalon", "brenmoor", "caldera", "dunmore", "eastvale", "fairhaven"]


def _square(x0: float, y0: float, size: float = 1.0) -> List[List[float]]:
    return [[x0, y0], [x0 + size, y0], [x0 + size, y0 + size], [x0, y0 + size], [x0, y0]]


def toy_regions() -> Dict[str, Any]:
    """GeoJSON FeatureCollection of six adjoining regions."""
    features = []
    for idx, name in enumerate(_TOY_REGION_NAMES):
        col, row = idx % 3, idx // 3
        rings = [[_square(-3.0 + col, 50.0 + row)]]
        if name == "fairhaven":
            # offshore island makes this region a MultiPolygon
            rings.append([_square(0.4, 51.2, 0.3)])
        features.append(
            {
                "type": "Feature",
                "properties": {"name": name},
                "geometry": {"type": "MultiPolygon", "coordinates": rings},
            }
        )
    return {"type": "FeatureCollection", "features": features}


def _toy_region_stats() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "region": _TOY_REGION_NAMES,
            "population": [120_000, 45_500, 310_250, 88_000, 152_750, 61_300],
            "incidents": [9.1, 4.2, 13.7, 6.5, 7.9, 3.3],
        }
    )


BUILTIN_DATASETS: Dict[str, BuiltinSpec] = {
    "tips": BuiltinSpec(px.data.tips, "plotly", "Restaurant bills and tips by day, time and party size"),
    "iris": BuiltinSpec(px.data.iris, "plotly", "Sepal and petal measurements of three iris species"),
    "gapminder": BuiltinSpec(px.data.gapminder, "plotly", "Life expectancy, population and GDP per country, 1952-2007"),
    "stocks": BuiltinSpec(
        lambda: px.data.stocks(datetimes=True), "plotly", "Normalised daily closing prices of six tech stocks"
    ),
    "wind": BuiltinSpec(px.data.wind, "plotly", "Wind direction and strength frequencies"),
    "experiment": BuiltinSpec(px.data.experiment, "plotly", "Three experiment scores by gender and group"),
    "carshare": BuiltinSpec(px.data.carshare, "plotly", "Car share availability by location"),
    "medals_long": BuiltinSpec(px.data.medals_long, "plotly", "Olympic medal counts by nation and medal"),
    "election": BuiltinSpec(px.data.election, "plotly", "Montreal 2013 mayoral election results by district"),
    "toy_regions": BuiltinSpec(
        lambda: map_data(toy_regions()), "synthetic", "Polygon vertices of six synthetic regions"
    ),
    "toy_region_stats": BuiltinSpec(_toy_region_stats, "synthetic", "Population and incident rate per synthetic region"),
}


def builtin_names() -> List[str]:
    return sorted(BUILTIN_DATASETS)


@lru_cache(maxsize=None)
def load_builtin(name: str) -> Dataset:
    """Materialise a built-in dataset (cached; treat the frame as read-only)."""
    try:
        spec = BUILTIN_DATASETS[name]
    except KeyError:
        raise DatasetConfigError(f"Unknown builtin dataset '{name}'. Available: {builtin_names()}")

    logger.info("Loading builtin dataset", extra={"dataset": name})
    return Dataset(name=name, group=spec.group, frame=spec.loader(), description=spec.description)
