from __future__ import annotations

import inspect
import logging
import textwrap
import time
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Tuple

import plotly.graph_objects as go

from gg_notes.core.dataset import Dataset
from gg_notes.core.plot import Plot
from gg_notes.core.render import render
from gg_notes.notes.chunk import ChunkOptions

if TYPE_CHECKING:
    from gg_notes.services.dataset_service import DatasetCatalog

logger = logging.getLogger(__name__)


class BaseExample(ABC):
    """
    Abstract base class for every example chunk of the notes.

    Defines the contract each chunk follows
    - expose an 'id' - unique across all chapters
    - expose a 'label' - shown above the rendered figure
    - expose a 'chapter' - id of the document the chunk belongs to
    - implement 'compute_data' - load and prepare the table(s) to plot
    - implement 'build_plot' - compose the plot specification from that data

    The class docstring is the chunk's caption.
    """

    id: str = None
    label: str = None
    chapter: str = None
    options: ChunkOptions = ChunkOptions()
    datasets: Tuple[str, ...] = ()

    def __init__(self, catalog: "DatasetCatalog"):
        self.catalog = catalog

    @abstractmethod
    def compute_data(self) -> Any:
        """
        Prepare the data for this chunk
        :return: data: usually a DataFrame, passed unchanged to build_plot()
        """
        raise NotImplementedError()

    @abstractmethod
    def build_plot(self, data: Any) -> Plot:
        """
        Compose the plot specification
        :param data: the data provided by compute_data()
        :return: the Plot to render
        """
        raise NotImplementedError()

    # ------------------------------------------------------------------
    # Common helpers for all examples
    # ------------------------------------------------------------------
    def dataset(self, name: str) -> Dataset:
        return self.catalog[name]

    @property
    def seed(self) -> int:
        return self.catalog.seed

    @classmethod
    def caption(cls) -> str:
        return inspect.cleandoc(cls.__doc__ or "")

    @classmethod
    def source(cls) -> str:
        """Source of compute_data and build_plot, shown next to the figure."""
        parts = []
        for name in ("compute_data", "build_plot"):
            fn = getattr(cls, name)
            try:
                parts.append(textwrap.dedent(inspect.getsource(fn)))
            except (OSError, TypeError):
                continue
        return "\n".join(parts)

    def timed_compute(self) -> Any:
        start = time.perf_counter()
        data = self.compute_data()
        logger.debug(
            "compute_data finished",
            extra={"example_id": self.id, "elapsed_s": round(time.perf_counter() - start, 4)},
        )
        return data

    def render_figure(self, plot: Plot) -> go.Figure:
        return render(plot, width=self.options.pixel_width, height=self.options.pixel_height)
