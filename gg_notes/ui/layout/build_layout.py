from __future__ import annotations

from typing import TYPE_CHECKING

import dash_bootstrap_components as dbc
from dash import dcc, html

from gg_notes.ui.ids import IDs
from gg_notes.ui.layout.build_document_panel import build_document_panel
from gg_notes.ui.layout.build_navbar import build_navbar

if TYPE_CHECKING:
    from gg_notes.ui.config import AppConfig


def build_layout(ctx: "AppConfig") -> dbc.Container:
    navbar = build_navbar(ctx.documents.all(), ctx.global_config, ctx.default_document)

    return dbc.Container(
        fluid=True,
        className="ggn-root",
        children=[
            navbar,
            dcc.Store(id=IDs.Store.DOCUMENT_STATUS, storage_type="memory"),
            dbc.Row(
                dbc.Col(build_document_panel(), lg={"size": 10, "offset": 1}, className="mt-3"),
            ),
            html.Div(id=IDs.Control.STATUS_BAR, className="ggn-status-bar small text-muted px-3 py-1"),
        ],
    )
