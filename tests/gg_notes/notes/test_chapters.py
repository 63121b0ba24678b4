import pytest

from gg_notes.notes import build_registries, run_chunk
from gg_notes.services.dataset_service import DatasetCatalog

EXAMPLES, DOCUMENTS = build_registries()


@pytest.fixture(scope="module")
def catalog():
    return DatasetCatalog(seed=1410)


@pytest.mark.parametrize("example_id", [cls.id for cls in EXAMPLES.all_classes()])
def test_every_example_renders(catalog, example_id):
    result = run_chunk(EXAMPLES.create(example_id, catalog))

    assert result.ok, result.error
    assert len(result.figure.data) > 0
    assert result.summary


def test_default_bins_chunk_reports_its_bin_choice(catalog):
    result = run_chunk(EXAMPLES.create("qplot_default_bins", catalog))

    assert any("bins = 30" in m for m in result.messages)


def test_facet_chunk_hides_messages(catalog):
    result = run_chunk(EXAMPLES.create("qplot_facets", catalog))

    assert result.messages == []
    assert len(result.figure.layout.annotations) == 4
