from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

import pandas as pd

from gg_notes.core.aes import aes
from gg_notes.core.exceptions import DatasetSchemaError
from gg_notes.core.layer import Layer, layer
from gg_notes.core.prep import midrange_by_group

logger = logging.getLogger(__name__)

BOUNDARY_COLUMNS = ["long", "lat", "group", "order", "region", "subregion"]

GeoSource = Union[str, Path, Mapping[str, Any]]


def _load_geojson(source: GeoSource) -> Mapping[str, Any]:
    if isinstance(source, Mapping):
        return source
    path = Path(source)
    if not path.is_file():
        raise FileNotFoundError(f"Boundary file not found at {path}")
    with path.open() as f:
        return json.load(f)


def _polygons(geometry: Mapping[str, Any]) -> List[Sequence[Sequence[float]]]:
    """Outer rings of a Polygon/MultiPolygon geometry."""
    gtype = geometry.get("type")
    coords = geometry.get("coordinates", [])
    if gtype == "Polygon":
        return [coords[0]] if coords else []
    if gtype == "MultiPolygon":
        return [poly[0] for poly in coords if poly]
    raise DatasetSchemaError(f"Unsupported geometry type '{gtype}'. Expected Polygon or MultiPolygon")


def map_data(
    source: GeoSource,
    region: Optional[Union[str, Iterable[str]]] = None,
    name_property: str = "name",
    subregion_property: str = "subregion",
) -> pd.DataFrame:
    """
    Flatten GeoJSON polygons into a vertex table.

    Columns: long, lat, group, order, region, subregion. One `group` per
    polygon ring; `order` is the global drawing order of the vertices.
    """
    collection = _load_geojson(source)
    features = collection.get("features")
    if features is None:
        raise DatasetSchemaError("Boundary source must be a GeoJSON FeatureCollection")

    wanted = None
    if region is not None:
        wanted = {region.lower()} if isinstance(region, str) else {r.lower() for r in region}

    rows: List[Dict[str, Any]] = []
    group_id = 0
    for feature in features:
        props = feature.get("properties") or {}
        name = str(props.get(name_property, "")).lower()
        if wanted is not None and name not in wanted:
            continue

        for ring in _polygons(feature.get("geometry") or {}):
            group_id += 1
            for long, lat in (pt[:2] for pt in ring):
                rows.append(
                    {
                        "long": float(long),
                        "lat": float(lat),
                        "group": group_id,
                        "order": len(rows) + 1,
                        "region": name,
                        "subregion": props.get(subregion_property),
                    }
                )

    logger.debug("Boundary table built", extra={"n_vertices": len(rows), "n_groups": group_id})
    return pd.DataFrame(rows, columns=BOUNDARY_COLUMNS)


def borders(
    source: GeoSource,
    region: Optional[Union[str, Iterable[str]]] = None,
    colour: str = "grey",
    fill: Optional[str] = None,
    **params: Any,
) -> Layer:
    """
    Polygon layer of region outlines, carrying its own data so it can be
    added to any plot whose x/y are longitude/latitude.
    """
    params = dict(params)
    params["colour"] = colour
    if fill is not None:
        params["fill"] = fill
    return layer(
        geom="polygon",
        mapping=aes(x="long", y="lat", group="group"),
        data=map_data(source, region=region),
        inherit_aes=False,
        **params,
    )


def region_centres(boundaries: pd.DataFrame) -> pd.DataFrame:
    """Midpoint of each region's long/lat range, for placing labels."""
    return midrange_by_group(boundaries, "region", ["long", "lat"])
