"""Document source abstraction.

Profiling treats a collection as an ordered sequence of ``(id, payload)``
pairs, fetched in batches. A source must be re-enumerable: the issue checks
scan it twice and expect the same documents in the same order both times.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping
from typing import Any, NamedTuple

DEFAULT_BATCH_SIZE = 500


class Document(NamedTuple):
    """One document: a stable id and its nested key-value payload."""

    id: str
    data: Mapping[str, Any]


class DocumentSourceError(Exception):
    """Error reading documents from a source."""


class DocumentSource(ABC):
    """Base class for document sources."""

    name: str

    @abstractmethod
    def iter_batches(self, batch_size: int) -> Iterator[list[Document]]:
        """Yield documents in pages of at most ``batch_size``.

        Raises:
            DocumentSourceError: If a page cannot be read
        """

    def scan(
        self, limit: int | None = None, batch_size: int | None = None
    ) -> Iterator[Document]:
        """Iterate documents in order, stopping after ``limit`` (None = all).

        Args:
            limit: Maximum number of documents
            batch_size: Page size requested from the source (None = DEFAULT_BATCH_SIZE)

        Yields:
            Documents in source order
        """
        if batch_size is None:
            batch_size = DEFAULT_BATCH_SIZE
        if limit is not None and limit <= 0:
            return
        if limit is not None:
            batch_size = min(batch_size, limit)

        seen = 0
        for batch in self.iter_batches(batch_size):
            for document in batch:
                yield document
                seen += 1
                if limit is not None and seen >= limit:
                    return

    def subcollections(self, doc_id: str) -> dict[str, DocumentSource]:
        """Direct subcollections of one document, by name.

        Sources without nested collections keep this default and return none.
        """
        return {}
