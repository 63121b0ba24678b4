from __future__ import annotations

from typing import TYPE_CHECKING, Dict, List, Tuple, Type

from gg_notes.notes.document import Document
from gg_notes.notes.example_base import BaseExample

if TYPE_CHECKING:
    from gg_notes.services.dataset_service import DatasetCatalog


class ExampleRegistry:
    """
    Registry of example classes so documents, the exporter and the UI can
    instantiate chunks by id.

    Design Notes:
    - Stores subclasses of BaseExample, not instances, so every run gets a fresh chunk
    - Enforces:
        * only BaseExample subclasses can be registered
        * each example 'id' is unique across the registry
    """

    def __init__(self):
        self._examples: Dict[str, Type[BaseExample]] = {}

    def register(self, example_cls: Type[BaseExample]) -> None:
        """
        Register a BaseExample subclass

        Raises:
            TypeError: if example_cls is not a subclass of BaseExample
            ValueError: if an example with the same 'id' already exists
        """
        if not (isinstance(example_cls, type) and issubclass(example_cls, BaseExample)):
            raise TypeError(f"Example '{getattr(example_cls, 'id', example_cls)}' must be a subclass of BaseExample")

        if not example_cls.id:
            raise ValueError(f"Example class '{example_cls.__name__}' has no 'id'")

        if example_cls.id in self._examples:
            raise ValueError(f"Example '{example_cls.id}' already registered")

        self._examples[example_cls.id] = example_cls

    def get_class(self, example_id: str) -> Type[BaseExample]:
        """
        Raises:
            KeyError: if no example with the given id exists in the registry
        """
        try:
            return self._examples[example_id]
        except KeyError:
            raise KeyError(f"Example '{example_id}' not found")

    def create(self, example_id: str, catalog: "DatasetCatalog") -> BaseExample:
        """Instantiate the example for example_id against the dataset catalog"""
        return self.get_class(example_id)(catalog)

    def __contains__(self, example_id: object) -> bool:
        return example_id in self._examples

    def all_classes(self) -> List[Type[BaseExample]]:
        return list(self._examples.values())

    def by_chapter(self, chapter: str) -> List[Type[BaseExample]]:
        return [cls for cls in self._examples.values() if cls.chapter == chapter]


class DocumentRegistry:
    """Ordered collection of documents, keyed by id."""

    def __init__(self):
        self._documents: Dict[str, Document] = {}

    def register(self, document: Document, examples: ExampleRegistry) -> None:
        """
        Raises:
            ValueError: on a duplicate document id or a reference to an unknown example
        """
        if document.id in self._documents:
            raise ValueError(f"Document '{document.id}' already registered")

        missing = [eid for eid in document.example_ids() if eid not in examples]
        if missing:
            raise ValueError(f"Document '{document.id}' references unknown examples: {missing}")

        self._documents[document.id] = document

    def get(self, document_id: str) -> Document:
        try:
            return self._documents[document_id]
        except KeyError:
            raise KeyError(f"Document '{document_id}' not found")

    def all(self) -> List[Document]:
        return list(self._documents.values())

    def ids(self) -> List[str]:
        return list(self._documents)


def build_registries() -> Tuple[ExampleRegistry, DocumentRegistry]:
    """Register every chapter's examples, then its document."""
    from gg_notes.notes.chapters import CHAPTERS

    examples = ExampleRegistry()
    documents = DocumentRegistry()
    for chapter in CHAPTERS:
        for example_cls in chapter.EXAMPLES:
            examples.register(example_cls)
        documents.register(chapter.DOCUMENT, examples)
    return examples, documents
