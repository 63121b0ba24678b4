import os
from pathlib import Path

from gg_notes.config.loader import load_dataset_registry
from gg_notes.logging_config import configure_logging
from gg_notes.notes.registry import build_registries
from gg_notes.services.dataset_service import DatasetCatalog
from gg_notes.services.export_service import NotesExporter
from gg_notes.services.storage import NotesStorage

BASE_DIR = Path(__file__).resolve().parent.parent
CONFIG_DIR = Path(os.getenv("GG_NOTES_CONFIG", BASE_DIR / "config"))


def main() -> None:
    configure_logging(force_format="plain")

    global_config, cfg_by_name = load_dataset_registry(CONFIG_DIR)
    examples, documents = build_registries()
    out_dir = global_config.output_dir or (CONFIG_DIR / "exports")

    exporter = NotesExporter(
        storage=NotesStorage(out_dir),
        examples=examples,
        documents=documents,
        catalog=DatasetCatalog(cfg_by_name, seed=global_config.seed),
    )
    manifest = exporter.export_all()

    print(f"{'DOCUMENT':<25} | {'CHUNKS':>6} | {'FAILED':>6}")
    print("-" * 45)
    for entry in manifest["documents"]:
        failed = sum(1 for c in entry["chunks"] if not c["ok"])
        print(f"{entry['id']:<25} | {len(entry['chunks']):>6} | {failed:>6}")
    print(f"\nwrote {out_dir / 'index.html'}")


if __name__ == "__main__":
    main()
