from __future__ import annotations

import logging

import pandas as pd

from gg_notes.config.model import DatasetConfig
from gg_notes.core.dataset import Dataset
from gg_notes.core.exceptions import DatasetConfigError, DatasetSchemaError
from gg_notes.datasets.builtin import load_builtin

logger = logging.getLogger(__name__)


def from_config(cfg: DatasetConfig) -> Dataset:
    """
    Materialise a Dataset from its config entry.

    - builtin: reuse the packaged table under the configured name/group
    - file: read the CSV, parsing the configured date columns

    :raises DatasetConfigError: for missing files, unknown builtins or
        unreadable tables.
    """
    if cfg.builtin is not None and cfg.path is not None:
        raise DatasetConfigError(f"Dataset '{cfg.name}' sets both 'builtin' and 'file'")

    if cfg.builtin is not None:
        base = load_builtin(cfg.builtin)
        return Dataset(
            name=cfg.name,
            group=cfg.group,
            frame=base.frame,
            description=cfg.description or base.description,
        )

    path = cfg.path
    if path is None:
        raise DatasetConfigError(f"Dataset '{cfg.name}' needs either 'builtin' or 'file'")
    if not path.is_file():
        raise DatasetConfigError(f"Data file for '{cfg.name}' not found at {path}")

    try:
        frame = pd.read_csv(path, parse_dates=cfg.parse_dates or False)
    except (ValueError, pd.errors.ParserError) as e:
        raise DatasetConfigError(f"Could not read '{path}' for dataset '{cfg.name}': {e}") from e

    logger.info(
        "Dataset read from file",
        extra={"dataset": cfg.name, "path": str(path), "n_rows": len(frame)},
    )

    try:
        return Dataset(
            name=cfg.name,
            group=cfg.group,
            frame=frame,
            description=cfg.description,
            file_path=path,
        )
    except DatasetSchemaError as e:
        raise DatasetConfigError(str(e)) from e
