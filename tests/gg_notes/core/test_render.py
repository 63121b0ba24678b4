import pandas as pd
import plotly.graph_objects as go
import pytest

from gg_notes.core import (
    aes,
    facet_wrap,
    geom_bar,
    geom_boxplot,
    geom_histogram,
    geom_jitter,
    geom_point,
    geom_smooth,
    ggplot,
    labs,
    render,
    save,
)
from gg_notes.core.exceptions import DatasetSchemaError
from gg_notes.core.render import build_layer_frame, r_colour


def _make_frame() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "carat": [0.2, 0.3, 0.5, 0.7, 1.0, 1.2, 1.5, 2.0],
            "price": [300.0, 450.0, 900.0, 1800.0, 4000.0, 5200.0, 8000.0, 14000.0],
            "cut": ["Fair", "Good", "Good", "Ideal", "Fair", "Ideal", "Good", "Ideal"],
        }
    )


def test_point_layer_is_one_scatter_trace():
    fig = render(ggplot(_make_frame(), aes(x="carat", y="price")) + geom_point())

    assert isinstance(fig, go.Figure)
    assert len(fig.data) == 1
    assert fig.data[0].mode == "markers"
    assert list(fig.data[0].x) == _make_frame()["carat"].tolist()
    assert fig.layout.barmode == "overlay"


def test_discrete_colour_splits_traces_with_one_legend_entry_each():
    fig = render(ggplot(_make_frame(), aes(x="carat", y="price", colour="cut")) + geom_point())

    assert sorted(trace.name for trace in fig.data) == ["Fair", "Good", "Ideal"]
    assert all(trace.showlegend for trace in fig.data)
    assert fig.layout.legend.title.text == "cut"


def test_axis_titles_come_from_mapping_and_labels():
    plot = ggplot(_make_frame(), aes(x="carat", y="price")) + geom_point()

    fig = render(plot)
    relabelled = render(plot + labs(x="Weight (carat)", title="Diamonds"))

    assert fig.layout.xaxis.title.text == "carat"
    assert fig.layout.yaxis.title.text == "price"
    assert relabelled.layout.xaxis.title.text == "Weight (carat)"
    assert relabelled.layout.title.text == "Diamonds"


def test_histogram_y_axis_is_count():
    fig = render(ggplot(_make_frame(), aes(x="carat")) + geom_histogram(binwidth=0.5))

    assert fig.layout.yaxis.title.text == "count"
    assert fig.data[0].type == "bar"
    assert sum(fig.data[0].y) == 8


def test_smooth_draws_band_and_line():
    fig = render(ggplot(_make_frame(), aes(x="carat", y="price")) + geom_smooth(method="lm"))

    assert [trace.fill for trace in fig.data] == ["toself", None]


def test_boxplot_uses_box_traces():
    fig = render(ggplot(_make_frame(), aes(x="cut", y="price")) + geom_boxplot())

    assert {trace.type for trace in fig.data} == {"box"}
    # discrete x becomes numbered positions with the level names as ticks
    assert list(fig.layout.xaxis.ticktext) == ["Fair", "Good", "Ideal"]


def test_stacked_bars_carry_their_base():
    plot = ggplot(_make_frame(), aes(x="cut", fill="cut")) + geom_bar()

    frame, _ = build_layer_frame(plot, 0)

    assert (frame["ymin"] == 0).all()
    assert frame.set_index("x")["ymax"].to_dict() == {"Fair": 2.0, "Good": 3.0, "Ideal": 3.0}


def test_facets_make_one_panel_per_level():
    plot = ggplot(_make_frame(), aes(x="carat", y="price")) + geom_point() + facet_wrap("cut")

    fig = render(plot, width=600, height=400)

    assert len(fig.data) == 3
    assert [a.text for a in fig.layout.annotations] == ["Fair", "Good", "Ideal"]
    assert {trace.xaxis for trace in fig.data} == {"x", "x2", "x3"}
    assert (fig.layout.width, fig.layout.height) == (600, 400)


def test_missing_mapped_column_raises():
    plot = ggplot(_make_frame(), aes(x="carat", y="depth")) + geom_point()

    with pytest.raises(DatasetSchemaError, match="depth"):
        render(plot)


def test_layer_without_data_raises():
    with pytest.raises(DatasetSchemaError):
        render(ggplot(mapping=aes(x="carat", y="price")) + geom_point())


def test_grey_levels_are_translated():
    assert r_colour("grey50") == "rgb(128, 128, 128)"
    assert r_colour("gray0") == "rgb(0, 0, 0)"
    assert r_colour("steelblue") == "steelblue"


def test_save_writes_html(tmp_path):
    out = save(ggplot(_make_frame(), aes(x="carat", y="price")) + geom_point(), tmp_path / "plots" / "p.html")

    assert out.exists()
    assert "plotly" in out.read_text().lower()


def test_jitter_with_a_discrete_y_keeps_the_categories():
    fig = render(ggplot(_make_frame(), aes(x="price", y="cut")) + geom_jitter(seed=3))

    ys = [y for trace in fig.data for y in trace.y]
    assert sorted(ys) == sorted(_make_frame()["cut"])
