from __future__ import annotations

import numpy as np

from gg_notes.core import (
    aes,
    geom_bin2d,
    geom_binhex,
    geom_boxplot,
    geom_point,
    geom_polygon,
    geom_smooth,
    geom_text,
    geom_tile,
    ggplot,
    labs,
)
from gg_notes.core.prep import bucket_column, join_boundaries, summarise_by
from gg_notes.datasets import toy_regions
from gg_notes.maps import borders, region_centres
from gg_notes.notes.chunk import ChunkOptions
from gg_notes.notes.document import Document, ExampleRef, Prose
from gg_notes.notes.example_base import BaseExample

CHAPTER = "toolbox"

_MAP_OPTIONS = ChunkOptions(width=7, height=5.5)


def _log_gdp(frame):
    return frame.assign(log_gdp=np.log10(frame["gdpPercap"]))


class ToolboxBin2d(BaseExample):
    """With many points, counting them in rectangular bins beats overplotting."""

    id = "toolbox_bin2d"
    label = "Rectangular binning"
    chapter = CHAPTER
    datasets = ("gapminder",)

    def compute_data(self):
        return _log_gdp(self.dataset("gapminder").frame)

    def build_plot(self, data):
        return ggplot(data, aes(x="log_gdp", y="lifeExp")) + geom_bin2d(bins=25)


class ToolboxBinhex(BaseExample):
    """Hexagonal bins tile the plane with less visual bias than rectangles."""

    id = "toolbox_binhex"
    label = "Hexagonal binning"
    chapter = CHAPTER
    datasets = ("gapminder",)

    def compute_data(self):
        return _log_gdp(self.dataset("gapminder").frame)

    def build_plot(self, data):
        return ggplot(data, aes(x="log_gdp", y="lifeExp")) + geom_binhex(bins=20)


class ToolboxConditionalBoxplot(BaseExample):
    """
    Rounding a continuous variable to buckets turns it into a conditioning
    variable: the distribution of tips for bills of about $5, $10, $15 and so on.
    """

    id = "toolbox_conditional_boxplot"
    label = "Tip conditional on rounded bill"
    chapter = CHAPTER
    options = ChunkOptions(width=8, height=4)
    datasets = ("tips",)

    def compute_data(self):
        return bucket_column(self.dataset("tips").frame, "total_bill", 5, name="bill_bucket")

    def build_plot(self, data):
        return ggplot(data, aes(x="bill_bucket", y="tip")) + geom_boxplot(width=3) + labs(x="total bill (nearest $5)")


class ToolboxTile(BaseExample):
    """A tile per (day, party size) cell, filled with the mean tip."""

    id = "toolbox_tile"
    label = "Mean tip by day and party size"
    chapter = CHAPTER
    options = ChunkOptions(width=6, height=4)
    datasets = ("tips",)

    def compute_data(self):
        return summarise_by(self.dataset("tips").frame, ["day", "size"], mean_tip=("tip", "mean"))

    def build_plot(self, data):
        return ggplot(data, aes(x="size", y="day", fill="mean_tip")) + geom_tile()


class ToolboxChoropleth(BaseExample):
    """
    A choropleth: the boundary table is joined to the statistics on the
    region name, then re-sorted by vertex order so the polygons still draw
    correctly.
    """

    id = "toolbox_choropleth"
    label = "Incident rate per region"
    chapter = CHAPTER
    options = _MAP_OPTIONS
    datasets = ("toy_regions", "toy_region_stats")

    def compute_data(self):
        return join_boundaries(self.dataset("toy_regions").frame, self.dataset("toy_region_stats").frame)

    def build_plot(self, data):
        return (
            ggplot(data, aes(x="long", y="lat", group="group", fill="incidents"))
            + geom_polygon(colour="grey50")
            + labs(x="longitude", y="latitude")
        )


class ToolboxBordersLabels(BaseExample):
    """
    borders() adds the outlines as a layer with its own data. The labels sit
    at the midpoint of each region's range.
    """

    id = "toolbox_borders_labels"
    label = "Region outlines and names"
    chapter = CHAPTER
    options = _MAP_OPTIONS
    datasets = ("toy_regions",)

    def compute_data(self):
        return region_centres(self.dataset("toy_regions").frame)

    def build_plot(self, data):
        return (
            ggplot(data, aes(x="long", y="lat"))
            + borders(toy_regions(), colour="grey40")
            + geom_text(aes(label="region"), size=4)
        )


class ToolboxRegionSubset(BaseExample):
    """map_data() and borders() can be limited to some regions."""

    id = "toolbox_region_subset"
    label = "Two regions only"
    chapter = CHAPTER
    options = _MAP_OPTIONS

    def compute_data(self):
        return toy_regions()

    def build_plot(self, data):
        outlines = borders(data, region=["avalon", "brenmoor"], fill="grey90")
        return ggplot() + outlines + labs(x="long", y="lat")


class ToolboxUncertainty(BaseExample):
    """
    Revealing uncertainty: the band around a linear fit is the 95%
    confidence interval of the mean.
    """

    id = "toolbox_uncertainty"
    label = "Linear fit per continent with confidence bands"
    chapter = CHAPTER
    datasets = ("gapminder",)

    def compute_data(self):
        return _log_gdp(self.dataset("gapminder").subset(year=2007, continent=["Africa", "Europe", "Asia"]).frame)

    def build_plot(self, data):
        return (
            ggplot(data, aes(x="log_gdp", y="lifeExp", colour="continent"))
            + geom_point(alpha=0.5)
            + geom_smooth(method="lm", level=0.95)
        )


EXAMPLES = [
    ToolboxBin2d,
    ToolboxBinhex,
    ToolboxConditionalBoxplot,
    ToolboxTile,
    ToolboxChoropleth,
    ToolboxBordersLabels,
    ToolboxRegionSubset,
    ToolboxUncertainty,
]

DOCUMENT = Document(
    id=CHAPTER,
    title="Toolbox",
    subtitle="Binning, maps and uncertainty",
    blocks=(
        Prose(
            "## Overplotting\n\n"
            "Once there are more points than pixels, counting points is more honest than drawing them."
        ),
        ExampleRef("toolbox_bin2d"),
        ExampleRef("toolbox_binhex"),
        Prose("## Conditioning on a continuous variable"),
        ExampleRef("toolbox_conditional_boxplot"),
        ExampleRef("toolbox_tile"),
        Prose(
            "## Maps\n\n"
            "Boundaries are plain tables of vertices: longitude, latitude, a group per polygon "
            "and the drawing order."
        ),
        ExampleRef("toolbox_choropleth"),
        ExampleRef("toolbox_borders_labels"),
        ExampleRef("toolbox_region_subset"),
        Prose("## Revealing uncertainty"),
        ExampleRef("toolbox_uncertainty"),
    ),
)
