from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

import dash
import dash_bootstrap_components as dbc
from dash import Input, Output, State

from gg_notes.ui.ids import IDs

if TYPE_CHECKING:
    from gg_notes.ui.config import AppConfig

logger = logging.getLogger(__name__)


def register_export_callbacks(app: dash.Dash, ctx: AppConfig) -> None:
    @app.callback(
        Output(IDs.Control.EXPORT_STATUS, "children"),
        Input(IDs.Control.EXPORT_BTN, "n_clicks"),
        State(IDs.Control.DOCUMENT_SELECT, "value"),
        prevent_initial_call=True,
    )
    def export_current_document(n_clicks: Optional[int], document_id: Optional[str]):
        if not n_clicks or not document_id:
            raise dash.exceptions.PreventUpdate

        if ctx.exporter is None:
            return dbc.Alert("Export is not configured.", color="secondary", dismissable=True)

        try:
            entry = ctx.exporter.export_document(ctx.documents.get(document_id))
        except Exception as e:
            logger.exception("Export failed", extra={"document_id": document_id})
            return dbc.Alert(f"Export failed: {e}", color="danger", dismissable=True)

        n_failed = sum(1 for c in entry["chunks"] if not c["ok"])
        colour = "success" if n_failed == 0 else "warning"
        return dbc.Alert(
            f"Wrote {entry['file']} ({len(entry['chunks'])} chunks, {n_failed} failed).",
            color=colour,
            dismissable=True,
        )
