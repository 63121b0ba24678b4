from __future__ import annotations

import logging
from typing import Dict, Iterator, Mapping, Optional

from gg_notes.config.dataset_loader import from_config
from gg_notes.config.model import DatasetConfig
from gg_notes.core.dataset import Dataset
from gg_notes.core.exceptions import DatasetConfigError
from gg_notes.datasets.builtin import builtin_names, load_builtin

logger = logging.getLogger(__name__)


class DatasetCatalog(Mapping[str, Dataset]):
    """
    Read-only lookup of every dataset the notes may use.

    Configured datasets shadow builtins of the same name. Tables are read
    lazily on first access and cached afterwards.
    """

    def __init__(
        self,
        cfg_by_name: Optional[Dict[str, DatasetConfig]] = None,
        *,
        include_builtins: bool = True,
        seed: int = 1410,
    ):
        self._cfg_by_name = dict(cfg_by_name or {})
        self._include_builtins = include_builtins
        self._loaded: Dict[str, Dataset] = {}
        self.seed = seed

    def __getitem__(self, name: str) -> Dataset:
        # 1. Fast path: already materialised
        if name in self._loaded:
            return self._loaded[name]

        # 2. Configured entry, else builtin
        cfg = self._cfg_by_name.get(name)
        if cfg is not None:
            try:
                logger.info("Lazy-loading dataset", extra={"dataset": cfg.name, "path": str(cfg.path or "")})
                ds = from_config(cfg)
            except DatasetConfigError as e:
                logger.error(
                    "Dataset config error on load",
                    extra={"dataset": cfg.name, "error": str(e)},
                )
                raise
        elif self._include_builtins and name in builtin_names():
            ds = load_builtin(name)
        else:
            raise KeyError(f"Unknown dataset '{name}'")

        self._loaded[name] = ds
        return ds

    def __iter__(self) -> Iterator[str]:
        names = list(self._cfg_by_name)
        names += [n for n in self._loaded if n not in names]
        if self._include_builtins:
            names += [n for n in builtin_names() if n not in names]
        return iter(names)

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def __contains__(self, name: object) -> bool:
        if name in self._cfg_by_name or name in self._loaded:
            return True
        return bool(self._include_builtins and name in builtin_names())

    def is_loaded(self, name: str) -> bool:
        return name in self._loaded

    def register(self, dataset: Dataset) -> None:
        """Make an in-memory dataset available under its own name."""
        self._loaded[dataset.name] = dataset
        self._cfg_by_name.pop(dataset.name, None)
