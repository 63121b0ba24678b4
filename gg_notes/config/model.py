from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional


@dataclass
class DatasetConfig:
    """
    Parsed config entry for a single dataset.

    Either `file` (a CSV path, relative to the config root) or `builtin`
    (a name from gg_notes.datasets) must be given.
    """
    raw: Dict[str, Any]
    source_path: Path
    index: int

    @property
    def name(self) -> str:
        return self.raw.get("name", f"Dataset {self.index}")

    @property
    def key(self) -> str:
        return self.raw.get("key", self.name)

    @property
    def group(self) -> str:
        return self.raw.get("group", "Default")

    @property
    def builtin(self) -> Optional[str]:
        return self.raw.get("builtin")

    @property
    def path(self) -> Optional[Path]:
        file = self.raw.get("file")
        if file is None:
            return None
        path = Path(file)
        if path.is_absolute():
            return path
        # datasets/<entry>.json -> resolve relative to the config root
        return (self.source_path.parent.parent / path).resolve()

    @property
    def parse_dates(self) -> List[str]:
        return list(self.raw.get("parse_dates", []))

    @property
    def description(self) -> Optional[str]:
        return self.raw.get("description")

    @classmethod
    def from_raw(cls, raw: Dict[str, Any], source_path: Path, index: int) -> DatasetConfig:
        return cls(raw=raw, source_path=source_path, index=index)


@dataclass
class GlobalConfig:
    ui_title: str = "ggplot2 notes"
    subtitle: str = "Executable notes on the layered grammar of graphics"
    default_document: Optional[str] = None
    seed: int = 1410
    output_dir: Optional[Path] = None
    datasets: List[DatasetConfig] = field(default_factory=list)
