from .builtin import BUILTIN_DATASETS, builtin_names, load_builtin, toy_regions

__all__ = ["BUILTIN_DATASETS", "builtin_names", "load_builtin", "toy_regions"]
