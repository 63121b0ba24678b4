from __future__ import annotations

import html
import json
import logging
import re
from typing import Any, Dict, List

from plotly.offline import get_plotlyjs_version

from gg_notes.notes.chunk import ChunkResult, run_chunk
from gg_notes.notes.document import Document, ExampleRef, Prose
from gg_notes.notes.registry import DocumentRegistry, ExampleRegistry
from gg_notes.services.dataset_service import DatasetCatalog
from gg_notes.services.storage import NotesStorage

logger = logging.getLogger(__name__)

_HEADING = re.compile(r"^(#{1,6})\s+(.*)$")
_INLINE_CODE = re.compile(r"`([^`]+)`")

_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{title}</title>
<script src="https://cdn.plot.ly/plotly-{plotly_version}.min.js"></script>
<style>
body {{ font-family: sans-serif; max-width: 60rem; margin: 2rem auto; color: #2c3e50; }}
pre {{ background: #f4f6f7; padding: 0.75rem; overflow-x: auto; }}
.chunk {{ margin: 1.5rem 0; }}
.warning {{ color: #b9770e; }}
.message {{ color: #566573; }}
.error {{ color: #c0392b; }}
</style>
</head>
<body>
{body}
</body>
</html>
"""


def _inline(text: str) -> str:
    return _INLINE_CODE.sub(r"<code>\1</code>", html.escape(text))


def prose_to_html(markdown: str) -> str:
    """Headings and paragraphs of a prose block; inline `code` becomes <code>."""
    parts = []
    for paragraph in re.split(r"\n\s*\n", markdown.strip()):
        match = _HEADING.match(paragraph)
        if match:
            level = len(match.group(1))
            parts.append(f"<h{level}>{_inline(match.group(2))}</h{level}>")
        elif paragraph:
            parts.append(f"<p>{_inline(paragraph)}</p>")
    return "\n".join(parts)


def chunk_to_html(result: ChunkResult, caption: str = "") -> str:
    parts = [f'<section class="chunk" id="{html.escape(result.example_id)}">', f"<h3>{html.escape(result.label)}</h3>"]
    if caption:
        parts.append(f"<p>{_inline(caption)}</p>")
    if result.source:
        parts.append(f"<pre><code>{html.escape(result.source)}</code></pre>")

    if result.error is not None:
        parts.append(f'<pre class="error">{html.escape(result.error)}</pre>')
    else:
        parts.append(result.figure.to_html(full_html=False, include_plotlyjs=False))
        if result.summary:
            parts.append(f"<details><summary>Plot summary</summary><pre>{html.escape(result.summary)}</pre></details>")

    parts.extend(f'<pre class="message">{html.escape(m)}</pre>' for m in result.messages)
    parts.extend(f'<pre class="warning">Warning: {html.escape(w)}</pre>' for w in result.warnings)
    parts.append("</section>")
    return "\n".join(parts)


class NotesExporter:
    """
    Runs the chunks of each document and writes standalone HTML pages.

    Output layout under the storage root:
    - <document id>.html: one page per document
    - index.html: links to every document
    - manifest.json: outcome of every chunk (ok, elapsed, warnings, error)
    """

    def __init__(
        self,
        *,
        storage: NotesStorage,
        examples: ExampleRegistry,
        documents: DocumentRegistry,
        catalog: DatasetCatalog,
    ) -> None:
        self._storage = storage
        self._examples = examples
        self._documents = documents
        self._catalog = catalog

    def run_document(self, document: Document) -> List[ChunkResult]:
        return [run_chunk(self._examples.create(eid, self._catalog)) for eid in document.example_ids()]

    def export_document(self, document: Document) -> Dict[str, Any]:
        """
        Write <document id>.html and return the document's manifest entry.
        A failing chunk is reported on the page; the rest still render.
        """
        results = {r.example_id: r for r in self.run_document(document)}

        body = [f"<h1>{html.escape(document.title)}</h1>"]
        if document.subtitle:
            body.append(f"<p><em>{html.escape(document.subtitle)}</em></p>")
        for block in document.blocks:
            if isinstance(block, Prose):
                body.append(prose_to_html(block.markdown))
            elif isinstance(block, ExampleRef):
                caption = self._examples.get_class(block.example_id).caption()
                body.append(chunk_to_html(results[block.example_id], caption))
        body.append('<p><a href="index.html">All chapters</a></p>')

        page = _PAGE.format(title=html.escape(document.title), plotly_version=get_plotlyjs_version(), body="\n".join(body))
        path = self._storage.write_text(f"{document.id}.html", page)

        failed = [r.example_id for r in results.values() if not r.ok]
        logger.info(
            "Document exported",
            extra={"document_id": document.id, "path": str(path), "n_chunks": len(results), "n_failed": len(failed)},
        )
        if failed:
            logger.warning("Chunks failed", extra={"document_id": document.id, "example_ids": failed})

        return {
            "id": document.id,
            "title": document.title,
            "file": path.name,
            "chunks": [
                {
                    "id": r.example_id,
                    "ok": r.ok,
                    "elapsed_s": round(r.elapsed, 4),
                    "n_messages": len(r.messages),
                    "n_warnings": len(r.warnings),
                    "error": r.error,
                }
                for r in results.values()
            ],
        }

    def export_all(self) -> Dict[str, Any]:
        """Export every registered document plus index.html and manifest.json."""
        entries = [self.export_document(doc) for doc in self._documents.all()]

        links = "\n".join(
            f'<li><a href="{html.escape(e["file"])}">{html.escape(e["title"])}</a></li>' for e in entries
        )
        index = _PAGE.format(
            title="Contents",
            plotly_version=get_plotlyjs_version(),
            body=f"<h1>Contents</h1>\n<ol>\n{links}\n</ol>",
        )
        self._storage.write_text("index.html", index)

        manifest = {"documents": entries}
        self._storage.write_text("manifest.json", json.dumps(manifest, indent=2))
        logger.info("Notes exported", extra={"root": str(self._storage.root), "n_documents": len(entries)})
        return manifest
