from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, List, Tuple

from gg_notes.config.dataset_loader import from_config
from gg_notes.config.model import DatasetConfig, GlobalConfig
from gg_notes.core.dataset import Dataset
from gg_notes.core.exceptions import ConfigError, DatasetConfigError

logger = logging.getLogger(__name__)


def load_global_config(root: Path) -> GlobalConfig:
    """
    Load configuration from a directory using the multi-file layout.

    Expected structure:

        root/
            global.json
            datasets/
                tips.json
                economics.json
                ...

    global.json keys (all optional):

    - ui_title / subtitle: browser title and navbar subtitle
    - default_document: document opened first in the browser
    - seed: default seed for sampling examples
    - output_dir: export root, relative paths resolve against the config root

    :param root: Directory containing 'global.json' and optionally 'datasets/'.
    :return: A GlobalConfig instance.
    :raises FileNotFoundError: if global.json does not exist.
    :raises ConfigError: if a config file is not valid JSON.
    """
    root = Path(root)
    logger.info(
        "Loading global config",
        extra={"config_root": str(root)},
    )

    global_path = root / "global.json"
    if not global_path.is_file():
        raise FileNotFoundError(f"File not found at {global_path}")

    raw_global = _read_json(global_path)

    datasets_dir = root / "datasets"
    datasets: List[DatasetConfig] = []

    if datasets_dir.is_dir():
        for idx, config_file in enumerate(sorted(datasets_dir.glob("*.json"))):
            logger.info("Loading dataset config", extra={"file": config_file.name})
            datasets.append(
                DatasetConfig.from_raw(_read_json(config_file), source_path=config_file, index=idx)
            )
    else:
        logger.warning("Datasets directory not found", extra={"path": str(datasets_dir)})

    # Resolve output_dir:
    # - Absolute paths are used as-is.
    # - Relative paths are resolved relative to the config root directory.
    output_raw = raw_global.get("output_dir")
    if output_raw is None:
        output_dir = None
    else:
        output_path = Path(output_raw)
        output_dir = output_path if output_path.is_absolute() else (root / output_path).resolve()

    defaults = GlobalConfig()
    return GlobalConfig(
        ui_title=raw_global.get("ui_title", defaults.ui_title),
        subtitle=raw_global.get("subtitle", defaults.subtitle),
        default_document=raw_global.get("default_document"),
        seed=int(raw_global.get("seed", defaults.seed)),
        output_dir=output_dir,
        datasets=datasets,
    )


def _read_json(path: Path) -> dict:
    try:
        with path.open() as f:
            raw = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"Expected a JSON object in {path}")
    return raw


def load_dataset_registry(path: Path) -> Tuple[GlobalConfig, Dict[str, DatasetConfig]]:
    """
    Load global config + dataset config objects only (no tables are read).
    Returns mapping of dataset name -> DatasetConfig.

    :raises ConfigError: on duplicate dataset names.
    """
    global_config = load_global_config(path)

    cfg_by_name: Dict[str, DatasetConfig] = {}
    duplicates: List[str] = []

    for ds_cfg in global_config.datasets:
        if ds_cfg.name in cfg_by_name:
            duplicates.append(ds_cfg.name)
            continue
        cfg_by_name[ds_cfg.name] = ds_cfg

    if duplicates:
        raise ConfigError(f"Duplicate dataset names in config: {sorted(set(duplicates))}")

    logger.info(
        "Dataset registry loaded (lazy mode; tables not read)",
        extra={
            "config_root": str(path),
            "n_dataset_configs": len(cfg_by_name),
            "dataset_names": sorted(cfg_by_name.keys()),
        },
    )

    return global_config, cfg_by_name


def load_datasets(path: Path) -> Tuple[GlobalConfig, List[Dataset]]:
    """
    Load the global configuration and materialise every configured Dataset.

    Entries whose config is invalid are skipped with a logged error.

    :raises RuntimeError: if no valid datasets could be loaded.
    """
    global_config = load_global_config(path)

    datasets: List[Dataset] = []
    failed = 0

    for ds_cfg in global_config.datasets:
        try:
            ds = from_config(ds_cfg)
        except DatasetConfigError as e:
            failed += 1
            logger.error(
                "Skipping dataset due to config error",
                extra={
                    "dataset": ds_cfg.name,
                    "path": str(ds_cfg.path or ""),
                    "error": str(e),
                },
            )
            continue

        datasets.append(ds)

    logger.info(
        "Datasets loaded from config root",
        extra={
            "config_root": str(path),
            "n_datasets": len(datasets),
            "n_failed": failed,
            "dataset_names": [ds.name for ds in datasets],
        },
    )

    if not datasets:
        raise RuntimeError(
            f"No valid datasets could be loaded from config root: {path}"
        )

    return global_config, datasets
