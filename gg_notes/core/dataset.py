from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

import pandas as pd

from gg_notes.core.exceptions import DatasetSchemaError


class Dataset:
    """
    Named rectangular table used by every example chunk.

    Includes:
    - Unique column names (checked on construction)
    - Cached seeded sub-samples
    - Equality/membership filtering
    - A small schema table for inspection
    """

    MAX_SAMPLE_CACHE = 32

    # -------------------------------------------------------------------------
    # Constructor
    # -------------------------------------------------------------------------
    def __init__(
        self,
        name: str,
        group: str,
        frame: pd.DataFrame,
        description: Optional[str] = None,
        file_path: Optional[Path] = None,
    ) -> None:
        duplicated = frame.columns[frame.columns.duplicated()].tolist()
        if duplicated:
            raise DatasetSchemaError(
                f"Dataset '{name}' has duplicate column names: {sorted(set(map(str, duplicated)))}"
            )

        self.name = name
        self.group = group
        self.frame = frame
        self.description = description
        self.file_path = file_path

        # Cache of seeded samples keyed on (n, seed)
        self._sample_cache: Dict[Tuple[int, int], "Dataset"] = {}

    def __repr__(self) -> str:
        return f"Dataset(name={self.name!r}, rows={self.n_rows}, columns={len(self.columns)})"

    # -------------------------------------------------------------------------
    # Shape
    # -------------------------------------------------------------------------
    @property
    def columns(self) -> List[str]:
        return [str(c) for c in self.frame.columns]

    @property
    def n_rows(self) -> int:
        return int(self.frame.shape[0])

    def require_columns(self, columns: Iterable[str]) -> None:
        """
        Raise DatasetSchemaError naming every requested column the table lacks.
        """
        missing = [c for c in columns if c not in self.frame.columns]
        if missing:
            raise DatasetSchemaError(
                f"Columns {missing} not found in dataset '{self.name}'. "
                f"Available columns: {self.columns}"
            )

    # -------------------------------------------------------------------------
    # Derived datasets
    # -------------------------------------------------------------------------
    def with_frame(self, frame: pd.DataFrame) -> "Dataset":
        return Dataset(
            name=self.name,
            group=self.group,
            frame=frame,
            description=self.description,
            file_path=self.file_path,
        )

    def sample(self, n: int, seed: int) -> "Dataset":
        """
        Return a seeded random sub-sample of n rows.

        The same (n, seed) always yields the same rows; results are cached.
        """
        from gg_notes.core.prep import sample_rows

        key = (int(n), int(seed))
        cached = self._sample_cache.get(key)
        if cached is not None:
            return cached

        sub = self.with_frame(sample_rows(self.frame, n=n, seed=seed))

        if len(self._sample_cache) >= self.MAX_SAMPLE_CACHE:
            self._sample_cache.pop(next(iter(self._sample_cache)))
        self._sample_cache[key] = sub
        return sub

    def subset(self, **equals: Any) -> "Dataset":
        """
        Filter rows by column value. List/tuple/set values filter by membership.

            ds.subset(day=["Sat", "Sun"], smoker="No")
        """
        self.require_columns(equals.keys())

        mask = pd.Series(True, index=self.frame.index)
        for column, value in equals.items():
            if isinstance(value, (list, tuple, set, frozenset)):
                mask &= self.frame[column].isin(list(value))
            else:
                mask &= self.frame[column] == value

        return self.with_frame(self.frame.loc[mask].copy())

    # -------------------------------------------------------------------------
    # Inspection
    # -------------------------------------------------------------------------
    def schema(self) -> pd.DataFrame:
        """Column name, dtype and number of unique values."""
        frame = self.frame
        return pd.DataFrame(
            {
                "column": self.columns,
                "dtype": [str(t) for t in frame.dtypes],
                "n_unique": [int(frame[c].nunique()) for c in frame.columns],
            }
        )
