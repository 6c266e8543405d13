"""In-memory document source."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any, TypeAlias

from docprofiler.sources.base import Document, DocumentSource

DocumentLike: TypeAlias = Document | tuple[str, Mapping[str, Any]]


class InMemorySource(DocumentSource):
    """Source backed by a list of documents already in memory.

    Accepts ``Document`` instances or plain ``(id, payload)`` pairs.
    ``subcollections`` maps a document id to its subcollections, each a name
    and the documents in it.
    """

    def __init__(
        self,
        documents: Iterable[DocumentLike],
        name: str = "memory",
        subcollections: Mapping[str, Mapping[str, Iterable[DocumentLike]]] | None = None,
    ):
        self.name = name
        self._documents = [Document(str(doc_id), data) for doc_id, data in documents]
        self._subcollections = {
            str(doc_id): {
                sub_name: InMemorySource(sub_documents, name=f"{name}/{doc_id}/{sub_name}")
                for sub_name, sub_documents in by_name.items()
            }
            for doc_id, by_name in (subcollections or {}).items()
        }

    def __len__(self) -> int:
        return len(self._documents)

    def iter_batches(self, batch_size: int) -> Iterator[list[Document]]:
        for start in range(0, len(self._documents), batch_size):
            yield self._documents[start : start + batch_size]

    def subcollections(self, doc_id: str) -> dict[str, DocumentSource]:
        return dict(self._subcollections.get(doc_id, {}))
