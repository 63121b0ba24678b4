import pandas as pd
import pytest

from gg_notes.core import (
    aes,
    facet_wrap,
    geom_histogram,
    geom_point,
    geom_smooth,
    ggplot,
    ggtitle,
    labs,
    qplot,
)
from gg_notes.validation import ValidationError


def _make_frame() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "carat": [0.2, 0.5, 1.0, 1.5],
            "price": [300.0, 900.0, 4000.0, 8000.0],
            "cut": ["Fair", "Good", "Good", "Ideal"],
        }
    )


def test_composition_returns_new_plots():
    base = ggplot(_make_frame(), aes(x="carat", y="price"))

    with_points = base + geom_point()
    with_both = with_points + geom_smooth(method="lm")

    assert len(base.layers) == 0
    assert len(with_points.layers) == 1
    assert [lyr.geom for lyr in with_both.layers] == ["point", "smooth"]


def test_adding_a_list_adds_each_item():
    plot = ggplot(_make_frame(), aes(x="carat", y="price")) + [geom_point(), labs(x="Carat"), None]

    assert len(plot.layers) == 1
    assert plot.labels.x == "Carat"


def test_labels_merge():
    plot = ggplot(_make_frame()) + labs(x="a") + ggtitle("t") + labs(y="b")

    assert (plot.labels.title, plot.labels.x, plot.labels.y) == ("t", "a", "b")


def test_data_override_keeps_mapping_and_layers():
    base = ggplot(_make_frame(), aes(x="carat", y="price")) + geom_point()
    other = _make_frame().head(2)

    overridden = base % other

    assert overridden.data is other
    assert base.data is not other
    assert overridden.mapping == base.mapping
    assert overridden.layers == base.layers


def test_with_mapping_merges():
    base = ggplot(_make_frame(), aes(x="carat", y="price"))

    coloured = base.with_mapping({"colour": "cut"})

    assert dict(coloured.mapping) == {"x": "carat", "y": "price", "colour": "cut"}
    assert "colour" not in base.mapping


def test_layer_mapping_and_data_resolution():
    frame = _make_frame()
    extra = frame.head(1)
    plot = (
        ggplot(frame, aes(x="carat", y="price"))
        + geom_point(aes(colour="cut"), data=extra)
        + geom_point(aes(x="price"), inherit_aes=False)
    )

    assert plot.layer_data(0) is extra
    assert dict(plot.layer_mapping(0)) == {"x": "carat", "y": "price", "colour": "cut"}
    assert plot.layer_data(1) is frame
    assert dict(plot.layer_mapping(1)) == {"x": "price"}


def test_with_layers_replaces_layers():
    plot = ggplot(_make_frame(), aes(x="carat", y="price")) + geom_point()

    replaced = plot.with_layers([geom_smooth()])

    assert [lyr.geom for lyr in replaced.layers] == ["smooth"]


def test_summary_lists_components():
    plot = (
        ggplot(_make_frame(), aes(x="carat", y="price"))
        + geom_point(alpha=0.5)
        + geom_smooth(method="lm")
        + facet_wrap("cut")
    )

    text = plot.summary()

    assert text.splitlines()[0] == "data:     carat, price, cut [4x3]"
    assert "mapping:  x = carat, y = price" in text
    assert "faceting: facet_wrap(~cut)" in text
    assert text.count("-" * 52) == 2
    assert "geom_smooth: method = 'lm'" in text
    assert "stat_smooth:" in text


def test_summary_without_data_or_facets():
    text = ggplot().summary()

    assert "data:     (none)" in text
    assert "faceting: facet_null()" in text


def test_validate_reports_problems():
    frame = _make_frame()

    assert (ggplot(frame, aes(x="carat", y="price")) + geom_point()).validate() == []

    codes = {i.code for i in ggplot(frame).validate()}
    assert codes == {"no_layers"}

    missing_y = ggplot(frame, aes(x="carat")) + geom_point()
    assert [i.code for i in missing_y.validate()] == ["missing_aesthetic"]

    bad_column = ggplot(frame, aes(x="carat", y="weight")) + geom_point()
    assert [i.code for i in bad_column.validate()] == ["column_missing"]

    no_data = ggplot(mapping=aes(x="carat", y="price")) + geom_point()
    assert [i.code for i in no_data.validate()] == ["no_data"]

    bad_facet = ggplot(frame, aes(x="carat", y="price")) + geom_point() + facet_wrap("colour")
    assert "facet_column_missing" in {i.code for i in bad_facet.validate()}


def test_validate_ignores_stat_references():
    plot = ggplot(_make_frame(), aes(x="carat", y="..density..")) + geom_histogram()

    assert plot.validate() == []


def test_check_raises_validation_error():
    plot = ggplot(_make_frame(), aes(x="carat", y="weight")) + geom_point()

    with pytest.raises(ValidationError) as exc:
        plot.check()

    assert exc.value.issues[0].layer == 0
    assert "weight" in str(exc.value)


def test_qplot_auto_geom():
    frame = _make_frame()

    assert [lyr.geom for lyr in qplot("carat", data=frame).layers] == ["histogram"]
    assert [lyr.geom for lyr in qplot("carat", "price", data=frame).layers] == ["point"]


def test_qplot_routes_aesthetics_and_params():
    frame = _make_frame()

    plot = qplot(
        "carat",
        "price",
        data=frame,
        geom=["point", "smooth"],
        colour="cut",
        alpha=0.2,
        method="lm",
        main="Diamonds",
        xlab="weight",
    )

    assert dict(plot.mapping) == {"x": "carat", "y": "price", "colour": "cut"}
    assert [lyr.geom for lyr in plot.layers] == ["point", "smooth"]
    assert plot.layers[1].params == {"alpha": 0.2, "method": "lm"}
    assert plot.labels.title == "Diamonds"
    assert plot.labels.x == "weight"


def test_qplot_constant_colour_is_a_param():
    plot = qplot("carat", "price", data=_make_frame(), colour="red")

    assert "colour" not in plot.mapping
    assert plot.layers[0].params == {"colour": "red"}


def test_qplot_stat_reference_and_facets():
    plot = qplot("carat", data=_make_frame(), y="..density..", facets="cut")

    assert plot.mapping["y"] == "..density.."
    assert plot.facet.column == "cut"
