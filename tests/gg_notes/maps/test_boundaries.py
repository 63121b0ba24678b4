import json

import pandas as pd
import pytest

from gg_notes.core import aes, geom_point, ggplot, render
from gg_notes.core.exceptions import DatasetSchemaError
from gg_notes.core.prep import join_boundaries
from gg_notes.datasets.builtin import toy_regions
from gg_notes.maps.boundaries import BOUNDARY_COLUMNS, borders, map_data, region_centres


def test_map_data_one_group_per_ring():
    table = map_data(toy_regions())

    assert list(table.columns) == BOUNDARY_COLUMNS
    # six squares plus the island ring, five vertices each
    assert table["group"].nunique() == 7
    assert len(table) == 35
    assert table["order"].tolist() == list(range(1, 36))
    assert table.loc[table["region"] == "fairhaven", "group"].nunique() == 2


def test_map_data_region_filter_is_case_insensitive():
    table = map_data(toy_regions(), region=["Avalon", "caldera"])

    assert sorted(table["region"].unique()) == ["avalon", "caldera"]
    assert len(table) == 10


def test_map_data_reads_files(tmp_path):
    path = tmp_path / "regions.geojson"
    path.write_text(json.dumps(toy_regions()))

    assert len(map_data(path, region="dunmore")) == 5

    with pytest.raises(FileNotFoundError):
        map_data(tmp_path / "missing.geojson")


def test_map_data_rejects_other_shapes():
    line = {"type": "Feature", "properties": {"name": "road"}, "geometry": {"type": "LineString", "coordinates": [[0, 0], [1, 1]]}}

    with pytest.raises(DatasetSchemaError):
        map_data({"type": "FeatureCollection", "features": [line]})
    with pytest.raises(DatasetSchemaError):
        map_data({"type": "Feature"})


def test_region_centres_are_range_midpoints():
    centres = region_centres(map_data(toy_regions(), region="avalon"))

    assert centres.to_dict("records") == [{"region": "avalon", "long": -2.5, "lat": 50.5}]


def test_join_keeps_vertex_order():
    table = map_data(toy_regions())
    stats = pd.DataFrame({"region": ["fairhaven", "avalon"], "rate": [1.0, 2.0]})

    joined = join_boundaries(table, stats)

    assert joined["order"].is_monotonic_increasing
    assert set(joined["region"]) == {"avalon", "fairhaven"}
    assert len(joined) == 15


def test_borders_layer_carries_its_own_data():
    lyr = borders(toy_regions(), region="eastvale", colour="grey50")

    assert lyr.geom == "polygon"
    assert not lyr.inherit_aes
    assert lyr.params["colour"] == "grey50"
    assert len(lyr.data) == 5

    points = pd.DataFrame({"lon": [-1.5], "lat_deg": [51.5]})
    fig = render(ggplot(points, aes(x="lon", y="lat_deg")) + geom_point() + lyr)
    assert [trace.mode for trace in fig.data] == ["markers", "lines"]
