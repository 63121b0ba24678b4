from .chunk import ChunkOptions, ChunkResult, run_chunk
from .document import Document, ExampleRef, Prose
from .example_base import BaseExample
from .registry import DocumentRegistry, ExampleRegistry, build_registries

__all__ = [
    "BaseExample",
    "ChunkOptions",
    "ChunkResult",
    "Document",
    "DocumentRegistry",
    "ExampleRef",
    "ExampleRegistry",
    "Prose",
    "build_registries",
    "run_chunk",
]
