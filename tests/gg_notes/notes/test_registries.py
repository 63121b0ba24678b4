import pytest

from gg_notes.core import aes, geom_point, ggplot
from gg_notes.notes import BaseExample, Document, DocumentRegistry, ExampleRef, ExampleRegistry, Prose, build_registries
from gg_notes.notes.chapters import CHAPTERS


def _make_example(example_id, chapter="c1"):
    def compute_data(self):
        return self.dataset("tips").frame

    def build_plot(self, data):
        return ggplot(data, aes(x="total_bill", y="tip")) + geom_point()

    return type(
        f"Example_{example_id}",
        (BaseExample,),
        {"id": example_id, "label": example_id, "chapter": chapter, "compute_data": compute_data, "build_plot": build_plot},
    )


def test_register_and_lookup():
    registry = ExampleRegistry()
    first = _make_example("a")
    second = _make_example("b", chapter="c2")

    registry.register(first)
    registry.register(second)

    assert "a" in registry
    assert registry.get_class("b") is second
    assert registry.all_classes() == [first, second]
    assert registry.by_chapter("c2") == [second]


def test_register_rejects_bad_classes():
    registry = ExampleRegistry()
    registry.register(_make_example("a"))

    with pytest.raises(TypeError):
        registry.register(object)
    with pytest.raises(ValueError):
        registry.register(_make_example(None))
    with pytest.raises(ValueError):
        registry.register(_make_example("a"))


def test_unknown_example_raises_key_error():
    with pytest.raises(KeyError):
        ExampleRegistry().get_class("nope")


def test_document_registry_checks_references():
    examples = ExampleRegistry()
    examples.register(_make_example("a"))
    documents = DocumentRegistry()
    doc = Document(id="c1", title="One", blocks=(Prose("text"), ExampleRef("a")))

    documents.register(doc, examples)

    assert documents.get("c1") is doc
    assert documents.ids() == ["c1"]
    with pytest.raises(ValueError):
        documents.register(doc, examples)
    with pytest.raises(ValueError):
        documents.register(Document(id="c2", title="Two", blocks=(ExampleRef("zzz"),)), examples)
    with pytest.raises(KeyError):
        documents.get("c3")


def test_build_registries_covers_every_chapter():
    examples, documents = build_registries()

    assert documents.ids() == [chapter.CHAPTER for chapter in CHAPTERS]
    assert len(examples.all_classes()) == sum(len(chapter.EXAMPLES) for chapter in CHAPTERS)


@pytest.mark.parametrize("chapter", CHAPTERS, ids=lambda c: c.CHAPTER)
def test_each_document_references_its_own_examples_once(chapter):
    ids = chapter.DOCUMENT.example_ids()

    assert len(ids) == len(set(ids))
    assert set(ids) == {cls.id for cls in chapter.EXAMPLES}
    assert all(cls.chapter == chapter.CHAPTER for cls in chapter.EXAMPLES)
    assert all(cls.caption() for cls in chapter.EXAMPLES)
