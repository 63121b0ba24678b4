import json

import pytest

from gg_notes.core import aes, geom_point, ggplot
from gg_notes.notes import BaseExample, Document, DocumentRegistry, ExampleRef, ExampleRegistry, Prose
from gg_notes.services.dataset_service import DatasetCatalog
from gg_notes.services.export_service import NotesExporter, prose_to_html
from gg_notes.services.storage import NotesStorage


class _TipsScatter(BaseExample):
    """Tip against bill."""

    id = "t_scatter"
    label = "Tips scatter"
    chapter = "t"
    datasets = ("tips",)

    def compute_data(self):
        return self.dataset("tips").frame

    def build_plot(self, data):
        return ggplot(data, aes(x="total_bill", y="tip")) + geom_point()


class _MissingColumn(BaseExample):
    id = "t_missing"
    label = "Broken"
    chapter = "t"

    def compute_data(self):
        return self.dataset("tips").frame

    def build_plot(self, data):
        return ggplot(data, aes(x="total_bill", y="gratuity")) + geom_point()


def _make_exporter(root):
    examples = ExampleRegistry()
    examples.register(_TipsScatter)
    examples.register(_MissingColumn)
    documents = DocumentRegistry()
    documents.register(
        Document(
            id="t",
            title="Test chapter",
            blocks=(Prose("# Intro\n\nUse `qplot` first."), ExampleRef("t_scatter"), ExampleRef("t_missing")),
        ),
        examples,
    )
    storage = NotesStorage(root)
    exporter = NotesExporter(storage=storage, examples=examples, documents=documents, catalog=DatasetCatalog())
    return exporter, storage


def test_storage_round_trip_and_listing(tmp_path):
    storage = NotesStorage(tmp_path / "out")

    storage.write_text("a.html", "<p>a</p>")
    storage.write_text("sub/b.html", "<p>b</p>")
    storage.write_text("notes.txt", "n")

    assert storage.read_text("a.html") == "<p>a</p>"
    assert storage.exists("sub/b.html")
    assert storage.list_files(suffix=".html") == ["a.html"]
    assert storage.list_files(prefix="sub") == ["sub/b.html"]
    assert storage.list_files(prefix="missing") == []


def test_storage_rejects_paths_outside_root(tmp_path):
    storage = NotesStorage(tmp_path / "out")

    with pytest.raises(ValueError):
        storage.write_text("../escape.html", "x")
    with pytest.raises(ValueError):
        storage.read_text("/etc/passwd")


def test_prose_to_html_headings_paragraphs_and_code():
    out = prose_to_html("## Geoms\n\nA <b> tag and `geom_point()`.")

    assert out == "<h2>Geoms</h2>\n<p>A &lt;b&gt; tag and <code>geom_point()</code>.</p>"


def test_export_all_writes_pages_and_manifest(tmp_path):
    exporter, storage = _make_exporter(tmp_path / "out")

    manifest = exporter.export_all()

    assert storage.list_files(suffix=".html") == ["index.html", "t.html"]
    assert json.loads(storage.read_text("manifest.json")) == manifest

    (entry,) = manifest["documents"]
    assert entry["file"] == "t.html"
    chunks = {c["id"]: c for c in entry["chunks"]}
    assert chunks["t_scatter"]["ok"] is True
    assert chunks["t_scatter"]["error"] is None
    assert chunks["t_missing"]["ok"] is False
    assert chunks["t_missing"]["error"].startswith("DatasetSchemaError")


def test_document_page_keeps_working_chunks_next_to_failed_ones(tmp_path):
    exporter, storage = _make_exporter(tmp_path / "out")

    exporter.export_all()
    page = storage.read_text("t.html")

    assert "<h1>Intro</h1>" in page
    assert "<code>qplot</code>" in page
    assert "Tip against bill." in page
    assert 'class="plotly-graph-div"' in page
    assert 'class="error"' in page
    assert "gratuity" in page
    assert 'href="t.html"' in storage.read_text("index.html")
