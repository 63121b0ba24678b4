from __future__ import annotations

from pathlib import Path
from typing import List


class NotesStorage:
    """
    Local directory that rendered notes are written into.

    All paths are relative to the root; anything resolving outside it is
    rejected.
    """

    def __init__(self, root: Path):
        self.root = Path(root).resolve()
        self.root.mkdir(parents=True, exist_ok=True)

    def _resolve(self, path: str) -> Path:
        full_path = (self.root / path).resolve()
        if full_path != self.root and self.root not in full_path.parents:
            raise ValueError(f"Access denied: {path}")
        return full_path

    def write_text(self, path: str, text: str) -> Path:
        p = self._resolve(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(text, encoding="utf-8")
        return p

    def read_text(self, path: str) -> str:
        return self._resolve(path).read_text(encoding="utf-8")

    def exists(self, path: str) -> bool:
        return self._resolve(path).exists()

    def list_files(self, prefix: str = "", suffix: str = "") -> List[str]:
        """Relative paths of files directly under prefix ending with suffix."""
        p = self._resolve(prefix) if prefix else self.root
        if not p.exists():
            return []
        return sorted(
            str(f.relative_to(self.root))
            for f in p.glob(f"*{suffix}")
            if f.is_file()
        )
