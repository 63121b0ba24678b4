from __future__ import annotations

import logging
import threading
import time
import warnings
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional

import plotly.graph_objects as go

if TYPE_CHECKING:
    from gg_notes.notes.example_base import BaseExample

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChunkOptions:
    """
    Rendering metadata of one chunk.

    - width/height: figure size in inches, converted to pixels at `dpi`
    - suppress_messages: drop informational log records emitted while running
    - suppress_warnings: drop Python warnings emitted while running
    """

    width: float = 7.0
    height: float = 5.0
    dpi: int = 96
    suppress_messages: bool = False
    suppress_warnings: bool = False

    @property
    def pixel_width(self) -> int:
        return int(round(self.width * self.dpi))

    @property
    def pixel_height(self) -> int:
        return int(round(self.height * self.dpi))


@dataclass
class ChunkResult:
    example_id: str
    label: str
    options: ChunkOptions
    figure: Optional[go.Figure] = None
    summary: Optional[str] = None
    source: Optional[str] = None
    messages: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    elapsed: float = 0.0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


# Loggers whose INFO records are shown to the reader as chunk messages
MESSAGE_SOURCES = ("gg_notes.core", "gg_notes.models", "gg_notes.maps")

# warnings.catch_warnings and the package logger level are process-wide;
# chunks from concurrent Dash callbacks run one at a time
_CHUNK_LOCK = threading.Lock()


class _RecordCollector(logging.Handler):
    """Collects INFO-level records from the plotting and modelling loggers, emitted on the chunk's thread."""

    def __init__(self) -> None:
        super().__init__(level=logging.INFO)
        self.thread = threading.get_ident()
        self.records: List[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        if record.thread != self.thread:
            return
        if record.name.startswith(MESSAGE_SOURCES) and record.levelno == logging.INFO:
            self.records.append(record)


def run_chunk(example: "BaseExample") -> ChunkResult:
    """
    Run one example chunk: prepare data, build the plot, render it.

    Warnings and informational messages raised along the way are recorded
    on the result unless the chunk options suppress them. An exception
    aborts this chunk only; it is logged and stored on the result.
    """
    options = example.options
    result = ChunkResult(
        example_id=example.id,
        label=example.label,
        options=options,
        source=example.source(),
    )

    with _CHUNK_LOCK:
        collector = _RecordCollector()
        package_logger = logging.getLogger("gg_notes")
        previous_level = package_logger.level
        package_logger.addHandler(collector)
        if package_logger.getEffectiveLevel() > logging.INFO:
            package_logger.setLevel(logging.INFO)

        start = time.perf_counter()
        logger.info("chunk_start", extra={"example_id": example.id})
        try:
            with warnings.catch_warnings(record=True) as caught:
                warnings.simplefilter("always")
                try:
                    data = example.timed_compute()
                    plot = example.build_plot(data)
                    result.summary = plot.summary()
                    result.figure = example.render_figure(plot)
                except Exception as e:
                    logger.exception("chunk_failed", extra={"example_id": example.id})
                    result.error = f"{type(e).__name__}: {e}"
        finally:
            package_logger.removeHandler(collector)
            package_logger.setLevel(previous_level)

        result.elapsed = time.perf_counter() - start
    if not options.suppress_warnings:
        result.warnings = [str(w.message) for w in caught]
    if not options.suppress_messages:
        result.messages = [r.getMessage() for r in collector.records]

    logger.info(
        "chunk_done",
        extra={
            "example_id": example.id,
            "elapsed_s": round(result.elapsed, 4),
            "ok": result.ok,
            "n_warnings": len(result.warnings),
        },
    )
    return result
