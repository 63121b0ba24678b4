from __future__ import annotations

import numpy as np

from gg_notes.core import aes, facet_wrap, geom_line, geom_point, geom_smooth, ggplot, labs
from gg_notes.notes.chunk import ChunkOptions
from gg_notes.notes.document import Document, ExampleRef, Prose
from gg_notes.notes.example_base import BaseExample

CHAPTER = "mastering-the-grammar"


def _gapminder_2007(catalog_dataset):
    frame = catalog_dataset.subset(year=2007).frame
    return frame.assign(log_gdp=np.log10(frame["gdpPercap"]))


class GrammarMappings(BaseExample):
    """
    Every visual property is an aesthetic mapped from a variable: position
    from GDP and life expectancy, colour from continent, size from population.
    """

    id = "grammar_mappings"
    label = "Countries in 2007"
    chapter = CHAPTER
    datasets = ("gapminder",)

    def compute_data(self):
        return _gapminder_2007(self.dataset("gapminder"))

    def build_plot(self, data):
        return ggplot(data, aes(x="log_gdp", y="lifeExp", colour="continent", size="pop")) + geom_point(alpha=0.7)


class GrammarSharedMapping(BaseExample):
    """
    Layers share the plot's default mapping: the points and the smoother
    below both use x and y from ggplot().
    """

    id = "grammar_shared_mapping"
    label = "Points and a linear smoother"
    chapter = CHAPTER
    datasets = ("gapminder",)

    def compute_data(self):
        return _gapminder_2007(self.dataset("gapminder"))

    def build_plot(self, data):
        return (
            ggplot(data, aes(x="log_gdp", y="lifeExp"))
            + geom_point()
            + geom_smooth(method="lm")
            + labs(x="log10(GDP per capita)", y="Life expectancy")
        )


class GrammarGroupedLines(BaseExample):
    """A discrete colour splits the data into groups; each group gets its own line."""

    id = "grammar_grouped_lines"
    label = "Life expectancy per continent"
    chapter = CHAPTER
    options = ChunkOptions(width=8, height=4)
    datasets = ("gapminder",)

    def compute_data(self):
        gap = self.dataset("gapminder").frame
        return gap.groupby(["continent", "year"], as_index=False)["lifeExp"].median()

    def build_plot(self, data):
        return ggplot(data, aes(x="year", y="lifeExp", colour="continent")) + geom_line() + geom_point()


class GrammarOverride(BaseExample):
    """
    The same specification with a different dataset: `%` swaps the default
    data and leaves mappings and layers untouched.
    """

    id = "grammar_override"
    label = "Same plot, 1952 data"
    chapter = CHAPTER
    datasets = ("gapminder",)

    def compute_data(self):
        gap = self.dataset("gapminder")
        early = gap.subset(year=1952).frame
        return {
            "base": _gapminder_2007(gap),
            "early": early.assign(log_gdp=np.log10(early["gdpPercap"])),
        }

    def build_plot(self, data):
        base = ggplot(data["base"], aes(x="log_gdp", y="lifeExp", colour="continent")) + geom_point()
        return base % data["early"]


class GrammarFacetWrap(BaseExample):
    """Facetting is part of the specification too."""

    id = "grammar_facet_wrap"
    label = "One panel per continent"
    chapter = CHAPTER
    options = ChunkOptions(width=9, height=6)
    datasets = ("gapminder",)

    def compute_data(self):
        return _gapminder_2007(self.dataset("gapminder"))

    def build_plot(self, data):
        return ggplot(data, aes(x="log_gdp", y="lifeExp")) + geom_point() + facet_wrap("continent", ncol=3)


EXAMPLES = [
    GrammarMappings,
    GrammarSharedMapping,
    GrammarGroupedLines,
    GrammarOverride,
    GrammarFacetWrap,
]

DOCUMENT = Document(
    id=CHAPTER,
    title="Mastering the grammar",
    subtitle="Data, mappings, geoms, stats and positions",
    blocks=(
        Prose(
            "A plot is a dataset plus a set of aesthetic mappings plus one or more layers. "
            "Each layer has a geometric object, a statistical transformation and a position adjustment."
        ),
        ExampleRef("grammar_mappings"),
        Prose(
            "The summary printed under each figure lists exactly these components. "
            "Nothing is drawn until the specification is rendered."
        ),
        ExampleRef("grammar_shared_mapping"),
        ExampleRef("grammar_grouped_lines"),
        Prose(
            "## Changing the data\n\n"
            "Because a specification is an immutable value, it can be reused with different data."
        ),
        ExampleRef("grammar_override"),
        Prose("## Facets"),
        ExampleRef("grammar_facet_wrap"),
    ),
)
