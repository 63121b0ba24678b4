from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Iterator, Mapping, Optional, Tuple

# ..count.., ..density.. etc. name a column computed by the layer's stat
_STAT_REF = re.compile(r"^\.\.([A-Za-z_][A-Za-z0-9_]*)\.\.$")

# Aesthetic spellings normalised before storage
_ALIASES = {
    "color": "colour",
    "col": "colour",
    "pch": "shape",
    "cex": "size",
    "lty": "linetype",
}

# Channels whose discrete values split the data into groups
GROUPING_AESTHETICS = ("colour", "fill", "shape", "linetype", "group")


def normalise_aesthetic(name: str) -> str:
    return _ALIASES.get(name, name)


def stat_ref(value: str) -> Optional[str]:
    """Return the computed column name for '..name..' references, else None."""
    match = _STAT_REF.match(value)
    return match.group(1) if match else None


@dataclass(frozen=True)
class Aes(Mapping[str, str]):
    """
    Immutable aesthetic mapping: visual channel -> column name.

    A value of the form '..name..' refers to a column produced by the layer's
    statistic rather than a raw data column; the two are told apart purely by
    that naming convention.
    """

    items_: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, mapping: Optional[Mapping[str, str]] = None) -> "Aes":
        if not mapping:
            return cls()
        normalised: Dict[str, str] = {}
        for key, value in mapping.items():
            if not isinstance(value, str):
                raise TypeError(
                    f"Aesthetic '{key}' must map to a column name, got {value!r}. "
                    "Set constant values as layer parameters instead."
                )
            normalised[normalise_aesthetic(key)] = value
        return cls(tuple(normalised.items()))

    def __getitem__(self, key: str) -> str:
        key = normalise_aesthetic(key)
        for name, value in self.items_:
            if name == key:
                return value
        raise KeyError(key)

    def __iter__(self) -> Iterator[str]:
        return (name for name, _ in self.items_)

    def __len__(self) -> int:
        return len(self.items_)

    def __repr__(self) -> str:
        inner = ", ".join(f"{k}={v}" for k, v in self.items_)
        return f"aes({inner})"

    def merge(self, other: Optional[Mapping[str, str]]) -> "Aes":
        """Return a mapping where `other` overrides matching channels."""
        if not other:
            return self
        other_aes = other if isinstance(other, Aes) else Aes.from_dict(other)
        merged = dict(self.items_)
        merged.update(other_aes.items_)
        return Aes(tuple(merged.items()))

    def data_refs(self) -> Dict[str, str]:
        """Channels that read raw data columns."""
        return {k: v for k, v in self.items_ if stat_ref(v) is None}

    def stat_refs(self) -> Dict[str, str]:
        """Channels that read stat-computed columns, as channel -> computed name."""
        refs: Dict[str, str] = {}
        for key, value in self.items_:
            computed = stat_ref(value)
            if computed is not None:
                refs[key] = computed
        return refs


def aes(**mapping: str) -> Aes:
    """Build an aesthetic mapping, e.g. aes(x="carat", y="price", colour="cut")."""
    return Aes.from_dict(mapping)
