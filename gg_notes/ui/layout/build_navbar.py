from __future__ import annotations

from typing import List, Optional

import dash_bootstrap_components as dbc
from dash import dcc, html

from gg_notes.config.model import GlobalConfig
from gg_notes.notes.document import Document
from gg_notes.ui.ids import IDs


def build_navbar(
    documents: List[Document],
    global_config: GlobalConfig,
    default_document: Optional[str],
) -> dbc.Navbar:
    title = getattr(global_config, "ui_title", "ggplot2 notes")
    subtitle = getattr(global_config, "subtitle", "")

    if default_document is None and documents:
        default_document = documents[0].id

    document_options = [{"label": doc.title, "value": doc.id} for doc in documents]

    return dbc.Navbar(
        dbc.Container(
            fluid=True,
            children=[
                # Left: title
                html.Div(
                    [
                        html.H2(title, className="mb-0"),
                        html.Small(subtitle, className="text-muted", id="navbar-subtitle"),
                    ],
                    className="d-flex flex-column justify-content-center",
                ),

                # Right: chapter selector
                html.Div(
                    [
                        html.Div("Chapter", className="navbar-document-title"),
                        dcc.Dropdown(
                            id=IDs.Control.DOCUMENT_SELECT,
                            options=document_options,
                            value=default_document,
                            clearable=False,
                            placeholder="Select chapter",
                            className="ggn-document-dropdown mt-1",
                        ),
                    ],
                    className="ms-auto navbar-document-block",
                    style={"minWidth": "280px", "maxWidth": "380px", "marginRight": "24px"},
                ),
            ],
        ),
        dark=False,
        className="shadow-sm ggn-navbar",
    )
