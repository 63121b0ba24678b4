import json

import plotly.graph_objects as go
from dash import dcc

from gg_notes.notes import Document, ExampleRef, Prose, build_registries
from gg_notes.notes.chunk import ChunkOptions, ChunkResult
from gg_notes.ui import create_dash_app
from gg_notes.ui.callbacks.callbacks_render import _message_figure
from gg_notes.ui.ids import IDs, chunk_graph_id
from gg_notes.ui.layout.build_document_panel import render_document


def _make_config_root(tmp_path, global_config):
    root = tmp_path / "config"
    (root / "datasets").mkdir(parents=True)
    (root / "global.json").write_text(json.dumps(global_config))
    (root / "datasets" / "tips.json").write_text(json.dumps({"name": "tips", "builtin": "tips"}))
    return root


def _find(component, component_id):
    return next(c for c in component._traverse() if getattr(c, "id", None) == component_id)


def test_create_dash_app_builds_layout(tmp_path):
    root = _make_config_root(tmp_path, {"ui_title": "My notes", "default_document": "toolbox", "output_dir": "out"})

    app = create_dash_app(root)

    assert app.title == "My notes"
    select = _find(app.layout, IDs.Control.DOCUMENT_SELECT)
    assert select.value == "toolbox"
    assert [o["value"] for o in select.options][0] == "getting-started"
    _find(app.layout, IDs.Control.DOCUMENT_BODY)
    _find(app.layout, IDs.Store.DOCUMENT_STATUS)
    assert (root / "out").is_dir()


def test_unknown_default_document_falls_back_to_first(tmp_path):
    root = _make_config_root(tmp_path, {"default_document": "appendix"})

    app = create_dash_app(root)

    assert _find(app.layout, IDs.Control.DOCUMENT_SELECT).value == "getting-started"
    assert (root / "exports").is_dir()


def test_callbacks_are_registered(tmp_path):
    app = create_dash_app(_make_config_root(tmp_path, {}))

    outputs = " ".join(app.callback_map)
    assert IDs.Control.DOCUMENT_BODY in outputs
    assert IDs.Control.STATUS_BAR in outputs
    assert IDs.Control.EXPORT_STATUS in outputs


def test_render_document_shows_failed_chunks_with_placeholder():
    examples, _ = build_registries()
    document = Document(id="d", title="Doc", blocks=(Prose("Intro"), ExampleRef("qplot_scatter")))
    failed = ChunkResult(
        example_id="qplot_scatter",
        label="Bill against tip",
        options=ChunkOptions(),
        error="KeyError: 'tips'",
    )
    placeholder = _message_figure("Failed")

    children = render_document(document, {"qplot_scatter": failed}, examples, failed_figure=placeholder)

    assert children[0].children == "Doc"
    assert isinstance(children[1], dcc.Markdown)
    graph = _find(children[2], chunk_graph_id("qplot_scatter"))
    assert graph.figure is placeholder
    assert graph.style["width"] == "672px"


def test_message_figure_hides_axes():
    fig = _message_figure("Nothing here", "details")

    assert isinstance(fig, go.Figure)
    assert fig.layout.annotations[0].text == "Nothing here<br><br>details"
    assert fig.layout.xaxis.visible is False
