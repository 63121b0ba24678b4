from __future__ import annotations

from typing import Dict, List

import dash_bootstrap_components as dbc
import plotly.graph_objects as go
from dash import dcc, html

from gg_notes.notes.chunk import ChunkResult
from gg_notes.notes.document import Document, ExampleRef, Prose
from gg_notes.notes.registry import ExampleRegistry
from gg_notes.ui.ids import IDs, chunk_graph_id


def build_document_panel() -> dbc.Card:
    return dbc.Card(
        [
            dbc.CardHeader(
                html.Div(
                    [
                        html.Strong("Notes"),
                        dbc.Button(
                            "Export chapter (HTML)",
                            id=IDs.Control.EXPORT_BTN,
                            color="secondary",
                            size="sm",
                            className="ms-auto",
                        ),
                    ],
                    className="d-flex align-items-center",
                ),
                className="p-2",
            ),
            dbc.CardBody(
                [
                    html.Div(id=IDs.Control.EXPORT_STATUS),
                    dcc.Loading(
                        id=IDs.Control.DOCUMENT_LOADING,
                        type="default",
                        children=html.Div(id=IDs.Control.DOCUMENT_BODY),
                    ),
                ],
                className="ggn-document-body",
            ),
        ],
        className="ggn-maincard",
    )


def _chunk_card(result: ChunkResult, caption: str, failed_figure: go.Figure) -> dbc.Card:
    options = result.options
    figure = result.figure if result.ok else failed_figure

    body = []
    if caption:
        body.append(dcc.Markdown(caption, className="ggn-caption"))

    body.append(
        dcc.Graph(
            id=chunk_graph_id(result.example_id),
            figure=figure,
            style={"width": f"{options.pixel_width}px", "height": f"{options.pixel_height}px", "maxWidth": "100%"},
            config={"responsive": False, "displaylogo": False},
        )
    )

    for message in result.messages:
        body.append(dbc.Alert(message, color="info", className="py-1 mb-1 small"))
    for warning in result.warnings:
        body.append(dbc.Alert(f"Warning: {warning}", color="warning", className="py-1 mb-1 small"))
    if not result.ok:
        body.append(dbc.Alert(result.error, color="danger", className="py-1 mb-1 small"))

    details = []
    if result.source:
        details.append(html.Details([html.Summary("Code"), html.Pre(result.source, className="ggn-code")]))
    if result.summary:
        details.append(html.Details([html.Summary("Plot summary"), html.Pre(result.summary, className="ggn-code")]))

    return dbc.Card(
        [
            dbc.CardHeader(html.Strong(result.label), className="p-2"),
            dbc.CardBody(body + details),
            dbc.CardFooter(f"{result.example_id} · {result.elapsed:.2f} s", className="small text-muted p-1"),
        ],
        className="ggn-chunk mb-3",
    )


def render_document(
    document: Document,
    results: Dict[str, ChunkResult],
    examples: ExampleRegistry,
    failed_figure: go.Figure,
) -> List:
    """Dash children for a document: Markdown for prose, a card per chunk."""
    children: List = [html.H1(document.title, className="mt-2")]
    if document.subtitle:
        children.append(html.P(document.subtitle, className="lead text-muted"))

    for block in document.blocks:
        if isinstance(block, Prose):
            children.append(dcc.Markdown(block.markdown))
        elif isinstance(block, ExampleRef):
            caption = examples.get_class(block.example_id).caption()
            children.append(_chunk_card(results[block.example_id], caption, failed_figure))
    return children
