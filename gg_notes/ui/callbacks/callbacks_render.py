from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

import dash
import dash_bootstrap_components as dbc
import plotly.graph_objects as go
from dash import Input, Output, html

from gg_notes.notes.chunk import run_chunk
from gg_notes.ui.ids import IDs
from gg_notes.ui.layout.build_document_panel import render_document

if TYPE_CHECKING:
    from gg_notes.ui.config import AppConfig

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Helper: Empty/Error Figures
# -----------------------------------------------------------------------------
def _message_figure(title: str, details: Optional[str] = None) -> go.Figure:
    fig = go.Figure()
    text = title if details is None else f"{title}<br><br>{details}"
    fig.add_annotation(
        text=text,
        showarrow=False,
        xref="paper",
        yref="paper",
        x=0.5,
        y=0.5,
    )
    fig.update_xaxes(visible=False)
    fig.update_yaxes(visible=False)
    fig.update_layout(margin=dict(l=40, r=40, t=40, b=40), template="plotly_white")
    return fig


def _error_figure(details: str) -> go.Figure:
    return _message_figure("Something went wrong while rendering this chunk.", details)


def _message_card(title: str, details: str) -> dbc.Alert:
    return dbc.Alert([html.H5(title), html.P(details, className="mb-0")], color="warning")


def register_render_callbacks(app: dash.Dash, ctx: AppConfig) -> None:
    # ---------------------------------------------------------
    # Document selector -> rendered document
    # ---------------------------------------------------------
    @app.callback(
        Output(IDs.Control.DOCUMENT_BODY, "children"),
        Output(IDs.Store.DOCUMENT_STATUS, "data"),
        Input(IDs.Control.DOCUMENT_SELECT, "value"),
    )
    def update_document(document_id: Optional[str]):
        if not document_id:
            return _message_card("No chapter selected.", "Choose a chapter from the navigation bar."), None

        try:
            document = ctx.documents.get(document_id)
        except KeyError:
            return _message_card(
                f"The chapter '{document_id}' is not available.",
                "Try reloading the app or selecting a different chapter.",
            ), None

        try:
            logger.info("render_document_start", extra={"document_id": document_id})
            results = {
                eid: run_chunk(ctx.examples.create(eid, ctx.catalog))
                for eid in document.example_ids()
            }
            children = render_document(
                document,
                results,
                ctx.examples,
                failed_figure=_error_figure("See the message below the figure."),
            )
        except Exception:
            logger.exception("Error in update_document", extra={"document_id": document_id})
            return _message_card(
                "The app hit an unexpected error.",
                "If this keeps happening, grab the logs and open an issue.",
            ), None

        status = {
            "document_id": document_id,
            "n_chunks": len(results),
            "n_failed": sum(1 for r in results.values() if not r.ok),
            "elapsed_s": round(sum(r.elapsed for r in results.values()), 3),
        }
        logger.info("render_document_done", extra=status)
        return children, status

    # ---------------------------------------------------------
    # Status bar
    # ---------------------------------------------------------
    @app.callback(
        Output(IDs.Control.STATUS_BAR, "children"),
        Input(IDs.Store.DOCUMENT_STATUS, "data"),
    )
    def update_status_bar(status: Optional[dict]):
        if not status:
            return ""
        text = f"{status['n_chunks']} chunks rendered in {status['elapsed_s']:.2f} s"
        if status["n_failed"]:
            text += f" · {status['n_failed']} failed"
        return text
