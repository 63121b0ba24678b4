from __future__ import annotations

from gg_notes.core import (
    aes,
    geom_area,
    geom_bar,
    geom_density,
    geom_freqpoly,
    geom_histogram,
    geom_line,
    geom_point,
    geom_smooth,
    ggplot,
    labs,
    stat_bin,
)
from gg_notes.notes.chunk import ChunkOptions
from gg_notes.notes.document import Document, ExampleRef, Prose
from gg_notes.notes.example_base import BaseExample

CHAPTER = "layer-by-layer"

_BAR_OPTIONS = ChunkOptions(width=6, height=4)


class LayerHistogram(BaseExample):
    """A layer built from a geom; its stat (bin) and position (stack) are defaults."""

    id = "layer_histogram"
    label = "geom_histogram with a binwidth"
    chapter = CHAPTER
    datasets = ("tips",)

    def compute_data(self):
        return self.dataset("tips").frame

    def build_plot(self, data):
        return ggplot(data, aes(x="total_bill")) + geom_histogram(binwidth=2, fill="steelblue", colour="white")


class LayerStatFirst(BaseExample):
    """The same histogram written from the stat side."""

    id = "layer_stat_first"
    label = "stat_bin with geom area"
    chapter = CHAPTER
    datasets = ("tips",)

    def compute_data(self):
        return self.dataset("tips").frame

    def build_plot(self, data):
        return ggplot(data, aes(x="total_bill")) + stat_bin(geom="area", position="identity", binwidth=2, fill="grey60")


class LayerStatDensityRef(BaseExample):
    """
    Mapping y to `..density..` uses a column the stat computes, so the
    histogram is on the same scale as the density curve.
    """

    id = "layer_density_ref"
    label = "Histogram scaled to density"
    chapter = CHAPTER
    datasets = ("tips",)

    def compute_data(self):
        return self.dataset("tips").frame

    def build_plot(self, data):
        return (
            ggplot(data, aes(x="total_bill", y="..density.."))
            + geom_histogram(binwidth=2, fill="grey70")
            + geom_density(colour="black")
            + labs(y="density")
        )


class LayerFreqpoly(BaseExample):
    """Frequency polygons compare distributions better than stacked bars."""

    id = "layer_freqpoly"
    label = "Frequency polygons by time"
    chapter = CHAPTER
    datasets = ("tips",)

    def compute_data(self):
        return self.dataset("tips").frame

    def build_plot(self, data):
        return ggplot(data, aes(x="total_bill", colour="time")) + geom_freqpoly(binwidth=2.5)


class BarStack(BaseExample):
    """Bars are stacked by default."""

    id = "layer_bar_stack"
    label = "position = stack"
    chapter = CHAPTER
    options = _BAR_OPTIONS
    datasets = ("tips",)

    def compute_data(self):
        return self.dataset("tips").frame

    def build_plot(self, data):
        return ggplot(data, aes(x="day", fill="time")) + geom_bar()


class BarFill(BaseExample):
    """Fill stacks and rescales every bar to height one, showing proportions."""

    id = "layer_bar_fill"
    label = "position = fill"
    chapter = CHAPTER
    options = _BAR_OPTIONS
    datasets = ("tips",)

    def compute_data(self):
        return self.dataset("tips").frame

    def build_plot(self, data):
        return ggplot(data, aes(x="day", fill="time")) + geom_bar(position="fill") + labs(y="proportion")


class BarDodge(BaseExample):
    """Dodge puts the bars of each group side by side."""

    id = "layer_bar_dodge"
    label = "position = dodge"
    chapter = CHAPTER
    options = _BAR_OPTIONS
    datasets = ("tips",)

    def compute_data(self):
        return self.dataset("tips").frame

    def build_plot(self, data):
        return ggplot(data, aes(x="day", fill="sex")) + geom_bar(position="dodge")


class LayerStackedArea(BaseExample):
    """Areas stack too: the total height is the population of all continents."""

    id = "layer_stacked_area"
    label = "Population by continent"
    chapter = CHAPTER
    options = ChunkOptions(width=8, height=4)
    datasets = ("gapminder",)

    def compute_data(self):
        gap = self.dataset("gapminder").frame
        totals = gap.groupby(["continent", "year"], as_index=False)["pop"].sum()
        return totals.assign(pop_bn=totals["pop"] / 1e9)

    def build_plot(self, data):
        return ggplot(data, aes(x="year", y="pop_bn", fill="continent")) + geom_area() + labs(y="population (bn)")


class LayerSetVersusMap(BaseExample):
    """
    A mapping inside a layer applies to that layer only. The points are
    coloured by continent while the smoother fits all countries at once.
    """

    id = "layer_set_vs_map"
    label = "Layer-level mapping"
    chapter = CHAPTER
    datasets = ("gapminder",)

    def compute_data(self):
        return self.dataset("gapminder").subset(year=2007).frame

    def build_plot(self, data):
        return (
            ggplot(data, aes(x="gdpPercap", y="lifeExp"))
            + geom_point(aes(colour="continent"))
            + geom_smooth(method="loess", span=0.5, colour="black")
        )


class LayerGroupAesthetic(BaseExample):
    """
    The group aesthetic draws one line per country. A second layer with its
    own mapping summarises all countries with a single smoother.
    """

    id = "layer_group_aesthetic"
    label = "One line per country"
    chapter = CHAPTER
    options = ChunkOptions(width=8, height=5, suppress_warnings=True)
    datasets = ("gapminder",)

    def compute_data(self):
        return self.dataset("gapminder").subset(continent="Europe").frame.sort_values(["country", "year"])

    def build_plot(self, data):
        return (
            ggplot(data, aes(x="year", y="lifeExp", group="country"))
            + geom_line(colour="grey60", alpha=0.5)
            + geom_smooth(aes(x="year", y="lifeExp"), inherit_aes=False, method="lm", size=1.5)
        )


EXAMPLES = [
    LayerHistogram,
    LayerStatFirst,
    LayerStatDensityRef,
    LayerFreqpoly,
    BarStack,
    BarFill,
    BarDodge,
    LayerStackedArea,
    LayerSetVersusMap,
    LayerGroupAesthetic,
]

DOCUMENT = Document(
    id=CHAPTER,
    title="Build a plot layer by layer",
    subtitle="geom_*, stat_* and position adjustments",
    blocks=(
        Prose(
            "Layers are added one at a time with `+`. A layer can be built from the geom side, "
            "in which case it gets the geom's default stat, or from the stat side."
        ),
        ExampleRef("layer_histogram"),
        ExampleRef("layer_stat_first"),
        Prose(
            "## Generated variables\n\n"
            "Stats add columns to the data. A mapping written as `..name..` refers to one of them."
        ),
        ExampleRef("layer_density_ref"),
        ExampleRef("layer_freqpoly"),
        Prose("## Position adjustments"),
        ExampleRef("layer_bar_stack"),
        ExampleRef("layer_bar_fill"),
        ExampleRef("layer_bar_dodge"),
        ExampleRef("layer_stacked_area"),
        Prose(
            "## Mappings per layer\n\n"
            "A layer merges its own mapping over the plot default unless `inherit_aes=False`."
        ),
        ExampleRef("layer_set_vs_map"),
        ExampleRef("layer_group_aesthetic"),
    ),
)
