from __future__ import annotations

import logging
from pathlib import Path

import dash_bootstrap_components as dbc
from dash import Dash

from gg_notes.config.loader import load_dataset_registry
from gg_notes.notes.registry import build_registries
from gg_notes.services.dataset_service import DatasetCatalog
from gg_notes.services.export_service import NotesExporter
from gg_notes.services.storage import NotesStorage
from gg_notes.ui.callbacks.callbacks_export import register_export_callbacks
from gg_notes.ui.callbacks.callbacks_render import register_render_callbacks
from gg_notes.ui.config import AppConfig
from gg_notes.ui.layout.build_layout import build_layout

logger = logging.getLogger(__name__)


def create_dash_app(config_root: Path | str = Path("config")) -> Dash:
    config_root = Path(config_root)

    # 1) Load Config
    global_config, cfg_by_name = load_dataset_registry(config_root)

    # 2) Initialize Service Layer
    catalog = DatasetCatalog(cfg_by_name, seed=global_config.seed)
    examples, documents = build_registries()

    # 3) Choose Default Document
    default_document = global_config.default_document
    if default_document not in documents.ids():
        if default_document is not None:
            logger.warning("Unknown default_document in config", extra={"document_id": default_document})
        default_document = documents.ids()[0]

    # 4) Export Service
    export_root = global_config.output_dir or (config_root / "exports")
    exporter = NotesExporter(
        storage=NotesStorage(export_root),
        examples=examples,
        documents=documents,
        catalog=catalog,
    )

    # 5) App Context
    ctx = AppConfig(
        config_root=config_root,
        global_config=global_config,
        catalog=catalog,
        examples=examples,
        documents=documents,
        default_document=default_document,
        exporter=exporter,
    )
    ctx.validate()

    assets_path = Path(__file__).parent / "assets"

    app = Dash(
        __name__,
        external_stylesheets=[dbc.themes.FLATLY],
        assets_folder=str(assets_path),
    )
    app.title = global_config.ui_title
    app.layout = build_layout(ctx)

    # Register callbacks
    register_render_callbacks(app, ctx)
    register_export_callbacks(app, ctx)

    logger.info(
        "Dash app created",
        extra={"n_documents": len(documents.ids()), "n_examples": len(examples.all_classes())},
    )
    return app
