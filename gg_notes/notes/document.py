from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple, Union


@dataclass(frozen=True)
class Prose:
    """Markdown paragraph(s) between chunks."""

    markdown: str


@dataclass(frozen=True)
class ExampleRef:
    """Placeholder for one example chunk, resolved through the ExampleRegistry."""

    example_id: str


Block = Union[Prose, ExampleRef]


@dataclass(frozen=True)
class Document:
    """
    One chapter of the notes: an ordered sequence of prose and example chunks.

    Documents are independent; rendering one never depends on another.
    """

    id: str
    title: str
    blocks: Tuple[Block, ...] = ()
    subtitle: str = ""

    def example_ids(self) -> List[str]:
        return [b.example_id for b in self.blocks if isinstance(b, ExampleRef)]
