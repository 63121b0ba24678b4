from __future__ import annotations

import numpy as np

from gg_notes.core import qplot
from gg_notes.core.prep import add_product_column
from gg_notes.notes.chunk import ChunkOptions
from gg_notes.notes.document import Document, ExampleRef, Prose
from gg_notes.notes.example_base import BaseExample

CHAPTER = "getting-started"


class QplotScatter(BaseExample):
    """Two continuous variables give a scatterplot."""

    id = "qplot_scatter"
    label = "Bill against tip"
    chapter = CHAPTER
    datasets = ("tips",)

    def compute_data(self):
        return self.dataset("tips").frame

    def build_plot(self, data):
        return qplot("total_bill", "tip", data=data)


class QplotLogScatter(BaseExample):
    """Logging both variables straightens the relationship."""

    id = "qplot_log_scatter"
    label = "Log bill against log tip"
    chapter = CHAPTER
    datasets = ("tips",)

    def compute_data(self):
        tips = self.dataset("tips").frame
        return tips.assign(log_bill=np.log(tips["total_bill"]), log_tip=np.log(tips["tip"]))

    def build_plot(self, data):
        return qplot("log_bill", "log_tip", data=data, xlab="log(total_bill)", ylab="log(tip)")


class QplotProductColumn(BaseExample):
    """
    Variables can be combined before plotting: the product of sepal length
    and width approximates the sepal area.
    """

    id = "qplot_product_column"
    label = "Sepal area against petal length"
    chapter = CHAPTER
    datasets = ("iris",)

    def compute_data(self):
        return add_product_column(self.dataset("iris").frame, "sepal_area", ["sepal_length", "sepal_width"])

    def build_plot(self, data):
        return qplot("sepal_area", "petal_length", data=data)


class QplotSampleColour(BaseExample):
    """
    A fixed-seed sample keeps the plot reproducible. Mapping day to colour
    and time to shape adds a legend for each.
    """

    id = "qplot_sample_colour"
    label = "Random sample, coloured by day"
    chapter = CHAPTER
    datasets = ("tips",)

    def compute_data(self):
        return self.dataset("tips").sample(100, seed=self.seed).frame

    def build_plot(self, data):
        return qplot("total_bill", "tip", data=data, colour="day", shape="time")


class QplotAlpha(BaseExample):
    """Transparency reveals where points overplot."""

    id = "qplot_alpha"
    label = "Semi-transparent points"
    chapter = CHAPTER
    datasets = ("gapminder",)

    def compute_data(self):
        gap = self.dataset("gapminder").frame
        return gap.assign(log_gdp=np.log10(gap["gdpPercap"]))

    def build_plot(self, data):
        return qplot("log_gdp", "lifeExp", data=data, alpha=0.2, xlab="log10(gdpPercap)")


class QplotSmooth(BaseExample):
    """
    Adding a smoother: with fewer than 1000 points the default is a local
    regression, and `span` controls its wiggliness.
    """

    id = "qplot_smooth"
    label = "Points plus a loess smoother"
    chapter = CHAPTER
    datasets = ("tips",)

    def compute_data(self):
        return self.dataset("tips").frame

    def build_plot(self, data):
        return qplot("total_bill", "tip", data=data, geom=["point", "smooth"], span=0.4)


class QplotSmoothLm(BaseExample):
    """A linear model smoother with its confidence band."""

    id = "qplot_smooth_lm"
    label = "Points plus a linear fit"
    chapter = CHAPTER
    datasets = ("tips",)

    def compute_data(self):
        return self.dataset("tips").frame

    def build_plot(self, data):
        return qplot("total_bill", "tip", data=data, geom=["point", "smooth"], method="lm")


class QplotBoxplot(BaseExample):
    """A categorical x with a boxplot per level."""

    id = "qplot_boxplot"
    label = "Tip by day, boxplots"
    chapter = CHAPTER
    datasets = ("tips",)

    def compute_data(self):
        return self.dataset("tips").frame

    def build_plot(self, data):
        return qplot("day", "tip", data=data, geom="boxplot")


class QplotJitter(BaseExample):
    """Jittering spreads the points of each day sideways."""

    id = "qplot_jitter"
    label = "Tip by day, jittered"
    chapter = CHAPTER
    datasets = ("tips",)

    def compute_data(self):
        return self.dataset("tips").frame

    def build_plot(self, data):
        return qplot("day", "tip", data=data, geom="jitter", alpha=0.5, seed=self.seed)


class QplotHistogram(BaseExample):
    """One variable alone gives a histogram. Try several binwidths."""

    id = "qplot_histogram"
    label = "Histogram of total bill"
    chapter = CHAPTER
    options = ChunkOptions(width=7, height=4)
    datasets = ("tips",)

    def compute_data(self):
        return self.dataset("tips").frame

    def build_plot(self, data):
        return qplot("total_bill", data=data, geom="histogram", binwidth=2.5)


class QplotDefaultBins(BaseExample):
    """Without a binwidth the histogram falls back to 30 bins and says so."""

    id = "qplot_default_bins"
    label = "Histogram with default bins"
    chapter = CHAPTER
    options = ChunkOptions(width=7, height=4)
    datasets = ("tips",)

    def compute_data(self):
        return self.dataset("tips").frame

    def build_plot(self, data):
        return qplot("tip", data=data)


class QplotDensityColour(BaseExample):
    """Density curves, one per level of the colour variable."""

    id = "qplot_density_colour"
    label = "Density of bill by time"
    chapter = CHAPTER
    options = ChunkOptions(width=7, height=4)
    datasets = ("tips",)

    def compute_data(self):
        return self.dataset("tips").frame

    def build_plot(self, data):
        return qplot("total_bill", data=data, geom="density", colour="time")


class QplotBarWeight(BaseExample):
    """A weighted bar chart: bar height is the total tip, not the row count."""

    id = "qplot_bar_weight"
    label = "Total tips per day"
    chapter = CHAPTER
    options = ChunkOptions(width=6, height=4)
    datasets = ("tips",)

    def compute_data(self):
        return self.dataset("tips").frame

    def build_plot(self, data):
        return qplot("day", data=data, geom="bar", weight="tip", ylab="tip")


class QplotTimeSeries(BaseExample):
    """Line plots join the observations in x order."""

    id = "qplot_time_series"
    label = "Google share price"
    chapter = CHAPTER
    options = ChunkOptions(width=8, height=4)
    datasets = ("stocks",)

    def compute_data(self):
        return self.dataset("stocks").frame

    def build_plot(self, data):
        return qplot("date", "GOOG", data=data, geom="line")


class QplotPath(BaseExample):
    """
    Path plots join observations in data order, showing how two variables
    moved together over time.
    """

    id = "qplot_path"
    label = "Life expectancy against GDP over time"
    chapter = CHAPTER
    datasets = ("gapminder",)

    def compute_data(self):
        gap = self.dataset("gapminder").subset(country=["China", "India", "Brazil", "Nigeria"]).frame
        return gap.sort_values(["country", "year"])

    def build_plot(self, data):
        return qplot("gdpPercap", "lifeExp", data=data, geom=["path", "point"], colour="country")


class QplotFacets(BaseExample):
    """Facetting splits the data into one small panel per level."""

    id = "qplot_facets"
    label = "Tip histograms by day"
    chapter = CHAPTER
    options = ChunkOptions(width=8, height=5, suppress_messages=True)
    datasets = ("tips",)

    def compute_data(self):
        return self.dataset("tips").frame

    def build_plot(self, data):
        return qplot("tip", data=data, geom="histogram", facets="day")


EXAMPLES = [
    QplotScatter,
    QplotLogScatter,
    QplotProductColumn,
    QplotSampleColour,
    QplotAlpha,
    QplotSmooth,
    QplotSmoothLm,
    QplotBoxplot,
    QplotJitter,
    QplotHistogram,
    QplotDefaultBins,
    QplotDensityColour,
    QplotBarWeight,
    QplotTimeSeries,
    QplotPath,
    QplotFacets,
]

DOCUMENT = Document(
    id=CHAPTER,
    title="Getting started with qplot",
    subtitle="One function call per plot",
    blocks=(
        Prose(
            "`qplot` takes the names of the x and y variables and a data frame. "
            "Everything else has a sensible default, so one line is enough for a first look at the data."
        ),
        ExampleRef("qplot_scatter"),
        Prose("Transforming the variables first is often more informative than the raw scale."),
        ExampleRef("qplot_log_scatter"),
        ExampleRef("qplot_product_column"),
        Prose(
            "## Colour, size, shape\n\n"
            "Other aesthetics are mapped the same way as x and y. "
            "A constant value, such as `alpha=0.2`, is set rather than mapped and gets no legend."
        ),
        ExampleRef("qplot_sample_colour"),
        ExampleRef("qplot_alpha"),
        Prose(
            "## Geoms\n\n"
            "`geom` picks the kind of mark. A list of geoms draws one layer each, in order."
        ),
        ExampleRef("qplot_smooth"),
        ExampleRef("qplot_smooth_lm"),
        ExampleRef("qplot_boxplot"),
        ExampleRef("qplot_jitter"),
        Prose("### One variable\n\nA histogram, a density curve or a bar chart summarise a single variable."),
        ExampleRef("qplot_histogram"),
        ExampleRef("qplot_default_bins"),
        ExampleRef("qplot_density_colour"),
        ExampleRef("qplot_bar_weight"),
        Prose("### Time series\n\nLines connect points left to right; paths connect them in the order they appear."),
        ExampleRef("qplot_time_series"),
        ExampleRef("qplot_path"),
        Prose("## Facetting"),
        ExampleRef("qplot_facets"),
    ),
)
