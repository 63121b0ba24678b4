from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from gg_notes.config.model import GlobalConfig
from gg_notes.notes.registry import DocumentRegistry, ExampleRegistry
from gg_notes.services.dataset_service import DatasetCatalog
from gg_notes.services.export_service import NotesExporter


@dataclass
class AppConfig:
    config_root: Path
    global_config: GlobalConfig
    catalog: Optional[DatasetCatalog] = None
    examples: Optional[ExampleRegistry] = None
    documents: Optional[DocumentRegistry] = None
    default_document: Optional[str] = None
    exporter: Optional[NotesExporter] = None

    def validate(self) -> None:
        """Ensure all required services are attached before the app starts."""
        if self.catalog is None:
            raise RuntimeError("AppConfig.catalog must be initialized.")
        if self.examples is None or self.documents is None:
            raise RuntimeError("AppConfig.examples and AppConfig.documents must be initialized.")
        if not self.documents.ids():
            raise RuntimeError("No documents registered.")
