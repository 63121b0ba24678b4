import logging
import threading
import warnings
from concurrent.futures import ThreadPoolExecutor

import pandas as pd
import pytest

from gg_notes.core import aes, geom_histogram, geom_point, ggplot
from gg_notes.notes import BaseExample, ChunkOptions, run_chunk
from gg_notes.services.dataset_service import DatasetCatalog


def _make_frame() -> pd.DataFrame:
    return pd.DataFrame({"x": [float(i) for i in range(40)], "y": [float(i % 7) for i in range(40)]})


class _DefaultBins(BaseExample):
    """Histogram without a bin width."""

    id = "default_bins"
    label = "Default bins"
    chapter = "tests"

    def compute_data(self):
        return _make_frame()

    def build_plot(self, data):
        return ggplot(data, aes(x="x")) + geom_histogram()


class _QuietBins(_DefaultBins):
    id = "quiet_bins"
    options = ChunkOptions(suppress_messages=True)


class _Warns(BaseExample):
    id = "warns"
    label = "Emits a warning"
    chapter = "tests"
    options = ChunkOptions(width=4, height=3, dpi=100)

    def compute_data(self):
        warnings.warn("three rows were dropped", UserWarning)
        return _make_frame()

    def build_plot(self, data):
        return ggplot(data, aes(x="x", y="y")) + geom_point()


class _QuietWarns(_Warns):
    id = "quiet_warns"
    options = ChunkOptions(suppress_warnings=True)


class _Fails(BaseExample):
    id = "fails"
    label = "Fails"
    chapter = "tests"

    def compute_data(self):
        return self.dataset("no_such_dataset")

    def build_plot(self, data):
        return ggplot(data)


@pytest.fixture
def catalog():
    return DatasetCatalog(include_builtins=False)


def test_messages_are_recorded(catalog):
    result = run_chunk(_DefaultBins(catalog))

    assert result.ok
    assert result.messages == ["stat_bin using bins = 30. Pick better value with binwidth."]
    assert result.summary.splitlines()[0].startswith("data:")
    assert "def build_plot" in result.source


def test_messages_can_be_suppressed(catalog):
    result = run_chunk(_QuietBins(catalog))

    assert result.ok
    assert result.messages == []


def test_warnings_are_recorded_and_size_applied(catalog):
    result = run_chunk(_Warns(catalog))

    assert "three rows were dropped" in result.warnings
    assert (result.figure.layout.width, result.figure.layout.height) == (400, 300)


def test_warnings_can_be_suppressed(catalog):
    result = run_chunk(_QuietWarns(catalog))

    assert result.ok
    assert result.warnings == []


def test_failure_is_captured_on_the_result(catalog):
    result = run_chunk(_Fails(catalog))

    assert not result.ok
    assert result.figure is None
    assert result.error.startswith("KeyError")
    assert "no_such_dataset" in result.error


def test_runner_restores_the_package_logger(catalog):
    package_logger = logging.getLogger("gg_notes")
    handlers = list(package_logger.handlers)
    level = package_logger.level

    run_chunk(_DefaultBins(catalog))
    run_chunk(_Fails(catalog))

    assert package_logger.handlers == handlers
    assert package_logger.level == level


def test_chunk_options_pixels():
    options = ChunkOptions(width=7.5, height=5)

    assert (options.pixel_width, options.pixel_height) == (720, 480)


class _Announces(BaseExample):
    """Logs and warns with its own id, so concurrent chunks can be told apart."""

    label = "Announces itself"
    chapter = "tests"

    def __init__(self, catalog, tag):
        super().__init__(catalog)
        self.tag = tag
        self.id = f"announce_{tag}"

    def compute_data(self):
        logging.getLogger("gg_notes.core.announce").info("message from %s", self.tag)
        warnings.warn(f"warning from {self.tag}", UserWarning)
        return _make_frame()

    def build_plot(self, data):
        return ggplot(data, aes(x="x", y="y")) + geom_point()


class _LogsFromAnotherThread(_DefaultBins):
    id = "other_thread"

    def compute_data(self):
        side = threading.Thread(
            target=lambda: logging.getLogger("gg_notes.core.side").info("from another thread")
        )
        side.start()
        side.join()
        return super().compute_data()


def test_records_from_other_threads_are_not_collected(catalog):
    result = run_chunk(_LogsFromAnotherThread(catalog))

    assert result.ok
    assert "from another thread" not in result.messages
    assert result.messages == ["stat_bin using bins = 30. Pick better value with binwidth."]


def test_concurrent_chunks_keep_their_own_messages_and_warnings(catalog):
    examples = [_Announces(catalog, tag) for tag in "abcdefgh"]

    with ThreadPoolExecutor(max_workers=4) as pool:
        results = list(pool.map(run_chunk, examples))

    for example, result in zip(examples, results):
        assert result.ok
        assert result.messages == [f"message from {example.tag}"]
        assert f"warning from {example.tag}" in result.warnings
        assert not [w for w in result.warnings if w.startswith("warning from") and not w.endswith(example.tag)]
