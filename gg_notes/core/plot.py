from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import pandas as pd

from gg_notes.core.aes import Aes, aes
from gg_notes.core.layer import Layer, layer
from gg_notes.validation.errors import ValidationError, ValidationIssue


@dataclass(frozen=True)
class Labels:
    """Plot title and axis titles. None leaves the current value in place."""

    title: Optional[str] = None
    x: Optional[str] = None
    y: Optional[str] = None
    colour: Optional[str] = None

    def merge(self, other: "Labels") -> "Labels":
        return Labels(
            title=other.title if other.title is not None else self.title,
            x=other.x if other.x is not None else self.x,
            y=other.y if other.y is not None else self.y,
            colour=other.colour if other.colour is not None else self.colour,
        )


def labs(
    title: Optional[str] = None,
    x: Optional[str] = None,
    y: Optional[str] = None,
    colour: Optional[str] = None,
    color: Optional[str] = None,
) -> Labels:
    return Labels(title=title, x=x, y=y, colour=colour if colour is not None else color)


def ggtitle(title: str) -> Labels:
    return Labels(title=title)


@dataclass(frozen=True)
class FacetWrap:
    """Split the plot into one panel per level of a single column."""

    column: str
    ncol: Optional[int] = None


def facet_wrap(column: str, ncol: Optional[int] = None) -> FacetWrap:
    return FacetWrap(column=column, ncol=ncol)


PlotComponent = Union[Layer, Labels, FacetWrap, Aes]


@dataclass(frozen=True, eq=False)
class Plot:
    """
    Immutable plot specification.

    Accumulates a default dataset, a default aesthetic mapping and an ordered
    list of layers. Every composition step returns a new Plot; nothing is
    rendered until render()/show() is called.

        p = ggplot(tips, aes(x="total_bill", y="tip")) + geom_point()
        p2 = p % other_frame          # same layers, different data
    """

    data: Optional[pd.DataFrame] = None
    mapping: Aes = field(default_factory=Aes)
    layers: Tuple[Layer, ...] = field(default_factory=tuple)
    labels: Labels = field(default_factory=Labels)
    facet: Optional[FacetWrap] = None

    # -------------------------------------------------------------------------
    # Composition
    # -------------------------------------------------------------------------
    def __add__(self, other: Union[PlotComponent, Iterable[PlotComponent], None]) -> "Plot":
        if other is None:
            return self
        if isinstance(other, Layer):
            return replace(self, layers=self.layers + (other,))
        if isinstance(other, Labels):
            return replace(self, labels=self.labels.merge(other))
        if isinstance(other, FacetWrap):
            return replace(self, facet=other)
        if isinstance(other, Aes):
            return self.with_mapping(other)
        if isinstance(other, (list, tuple)):
            result = self
            for item in other:
                result = result + item
            return result
        return NotImplemented

    def __mod__(self, data: pd.DataFrame) -> "Plot":
        """The override operator: same plot, new default dataset."""
        if not isinstance(data, pd.DataFrame):
            return NotImplemented
        return self.with_data(data)

    def with_data(self, data: pd.DataFrame) -> "Plot":
        return replace(self, data=data)

    def with_mapping(self, mapping: Union[Aes, Mapping[str, str]]) -> "Plot":
        return replace(self, mapping=self.mapping.merge(mapping))

    def with_layers(self, layers: Sequence[Layer]) -> "Plot":
        return replace(self, layers=tuple(layers))

    # -------------------------------------------------------------------------
    # Layer resolution
    # -------------------------------------------------------------------------
    def layer_data(self, index: int) -> Optional[pd.DataFrame]:
        lyr = self.layers[index]
        return lyr.data if lyr.data is not None else self.data

    def layer_mapping(self, index: int) -> Aes:
        lyr = self.layers[index]
        if not lyr.inherit_aes:
            return lyr.mapping
        return self.mapping.merge(lyr.mapping)

    # -------------------------------------------------------------------------
    # Inspection
    # -------------------------------------------------------------------------
    def summary(self) -> str:
        """
        Textual summary of the specification: data, mapping, faceting, then
        one block per layer.
        """
        lines: List[str] = []
        if self.data is not None:
            cols = ", ".join(map(str, self.data.columns))
            lines.append(f"data:     {cols} [{self.data.shape[0]}x{self.data.shape[1]}]")
        else:
            lines.append("data:     (none)")

        mapping = ", ".join(f"{k} = {v}" for k, v in self.mapping.items())
        lines.append(f"mapping:  {mapping}")

        if self.facet is not None:
            lines.append(f"faceting: facet_wrap(~{self.facet.column})")
        else:
            lines.append("faceting: facet_null()")

        for lyr in self.layers:
            lines.append("-" * 52)
            lines.append(lyr.describe())

        return "\n".join(lines)

    def validate(self) -> List[ValidationIssue]:
        """
        Check every layer's mapping against its data. Returns the issues found;
        an empty list means the plot should render.
        """
        issues: List[ValidationIssue] = []

        if not self.layers:
            issues.append(ValidationIssue("no_layers", "Plot has no layers to render"))

        if self.facet is not None and self.data is not None and self.facet.column not in self.data.columns:
            issues.append(
                ValidationIssue("facet_column_missing", f"Facet column '{self.facet.column}' not found in plot data")
            )

        for idx, lyr in enumerate(self.layers):
            data = self.layer_data(idx)
            mapping = self.layer_mapping(idx)

            if data is None:
                issues.append(ValidationIssue("no_data", "Layer has no data and the plot has no default data", idx))
                continue

            for aesthetic in lyr.required_aesthetics():
                if aesthetic not in mapping and aesthetic not in lyr.params:
                    issues.append(
                        ValidationIssue("missing_aesthetic", f"geom_{lyr.geom} requires aesthetic '{aesthetic}'", idx)
                    )

            for aesthetic, column in mapping.data_refs().items():
                if column not in data.columns:
                    issues.append(
                        ValidationIssue(
                            "column_missing",
                            f"Aesthetic '{aesthetic}' maps to '{column}', which is not a column of the layer data",
                            idx,
                        )
                    )

        return issues

    def check(self) -> "Plot":
        issues = self.validate()
        if issues:
            raise ValidationError(issues)
        return self

    def show(self, width: Optional[int] = None, height: Optional[int] = None) -> None:
        from gg_notes.core.render import render

        render(self, width=width, height=height).show()


def ggplot(
    data: Optional[pd.DataFrame] = None,
    mapping: Union[Aes, Mapping[str, str], None] = None,
) -> Plot:
    if mapping is None:
        mapping = Aes()
    elif not isinstance(mapping, Aes):
        mapping = Aes.from_dict(mapping)
    return Plot(data=data, mapping=mapping)


# Keywords qplot routes to the layer (or labels) rather than the mapping
_QPLOT_AESTHETICS = ("colour", "color", "fill", "size", "shape", "alpha", "linetype", "label", "group", "weight")


def qplot(
    x: str,
    y: Optional[str] = None,
    data: Optional[pd.DataFrame] = None,
    geom: Union[str, Sequence[str]] = "auto",
    facets: Optional[str] = None,
    main: Optional[str] = None,
    xlab: Optional[str] = None,
    ylab: Optional[str] = None,
    **kwargs: Any,
) -> Plot:
    """
    Quick plot.

    Aesthetic keywords (colour, size, shape, ...) become mappings when their
    value names a column of `data`, and constant parameters otherwise. Any
    other keyword (binwidth, span, method, formula, ...) is passed to every
    layer as a parameter.

    geom="auto" draws a histogram for x alone and points for x and y.
    """
    columns = set(map(str, data.columns)) if data is not None else set()

    mapping: Dict[str, str] = {"x": x}
    if y is not None:
        mapping["y"] = y

    params: Dict[str, Any] = {}
    for key, value in kwargs.items():
        if key in _QPLOT_AESTHETICS and isinstance(value, str) and value in columns:
            mapping[key] = value
        elif key in _QPLOT_AESTHETICS and isinstance(value, str) and value.startswith(".."):
            mapping[key] = value
        else:
            params[key] = value

    if geom == "auto":
        geoms: List[str] = ["histogram" if y is None else "point"]
    elif isinstance(geom, str):
        geoms = [geom]
    else:
        geoms = list(geom)

    plot = ggplot(data, aes(**mapping))
    for name in geoms:
        plot = plot + layer(geom=name, **params)

    if facets is not None:
        plot = plot + facet_wrap(facets)

    return plot + Labels(title=main, x=xlab, y=ylab)

