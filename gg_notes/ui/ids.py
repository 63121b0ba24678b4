from __future__ import annotations

__all__ = ["IDs", "chunk_graph_id"]


class IDs:
    class Store:
        DOCUMENT_STATUS = "document-status"

    class Control:
        DOCUMENT_SELECT = "document-select"
        DOCUMENT_BODY = "document-body"
        DOCUMENT_LOADING = "document-loading"

        EXPORT_BTN = "export-btn"
        EXPORT_STATUS = "export-status"

        STATUS_BAR = "status-bar"


def chunk_graph_id(example_id: str) -> str:
    return f"chunk-graph-{example_id}"
