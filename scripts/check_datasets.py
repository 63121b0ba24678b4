from pathlib import Path

from gg_notes.config.dataset_loader import from_config
from gg_notes.config.loader import load_global_config
from gg_notes.core.exceptions import DatasetConfigError

BASE_DIR = Path(__file__).parent.parent
CONFIG_DIR = BASE_DIR / "config"


def check_datasets():
    print(f"{'DATASET':<20} | {'SOURCE':<25} | {'ROWS':>6} | {'STATUS'}")
    print("-" * 70)

    global_config = load_global_config(CONFIG_DIR)
    if not global_config.datasets:
        print(f"No dataset configs found in {CONFIG_DIR / 'datasets'}")
        return

    for cfg in global_config.datasets:
        source = f"builtin:{cfg.builtin}" if cfg.builtin else str(cfg.path)
        try:
            ds = from_config(cfg)
        except DatasetConfigError as e:
            print(f"{cfg.name:<20} | {source:<25} | {'-':>6} | Error: {e}")
            continue
        print(f"{cfg.name:<20} | {source:<25} | {ds.n_rows:>6} | OK")


if __name__ == "__main__":
    check_datasets()
