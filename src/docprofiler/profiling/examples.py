"""Representative example documents.

Documents carry opaque values (timestamps, geopoints, references, binary
blobs) that a report renderer cannot serialize directly. ``sanitize_value``
turns them into plain JSON-safe data.
"""

from __future__ import annotations

import base64
from collections.abc import Mapping
from datetime import date
from typing import Any

from pydantic import BaseModel

from docprofiler.profiling.kinds import DocumentReference, Kind, classify


class ExampleDocument(BaseModel):
    """A sanitized copy of one document."""

    id: str
    document: dict[str, Any]
    # subcollection name -> a few sanitized documents from it
    subcollections: dict[str, list[dict[str, Any]]] | None = None


def sanitize_value(value: Any) -> Any:
    """Convert a document value to JSON-safe data.

    - timestamp: ISO 8601 string
    - geopoint: ``{"latitude": ..., "longitude": ...}``
    - reference: the referenced document path
    - bytes: base64 text
    - unknown: ``str(value)``
    """
    kind = classify(value)
    if kind in (Kind.NULL, Kind.STRING, Kind.BOOLEAN, Kind.NUMBER):
        return value
    if kind == Kind.TIMESTAMP:
        return value.isoformat() if isinstance(value, date) else str(value)
    if kind == Kind.GEOPOINT:
        # registered client-library geopoints expose the same two attributes
        return {"latitude": value.latitude, "longitude": value.longitude}
    if kind == Kind.REFERENCE:
        if isinstance(value, DocumentReference):
            return value.path
        return str(getattr(value, "path", value))
    if kind == Kind.BYTES:
        return base64.b64encode(bytes(value)).decode("ascii")
    if kind == Kind.ARRAY:
        return [sanitize_value(element) for element in value]
    if kind == Kind.OBJECT:
        return {str(key): sanitize_value(child) for key, child in value.items()}
    return str(value)


class ExamplePicker:
    """Keeps the document with the most top-level fields seen so far.

    The first document wins ties. Only one candidate is held at a time.
    """

    def __init__(self) -> None:
        self._best_id: str | None = None
        self._best_data: Mapping[str, Any] | None = None
        self._best_width = -1

    def offer(self, doc_id: str, data: Mapping[str, Any]) -> None:
        """Consider one document as the example."""
        width = len(data)
        if width > self._best_width:
            self._best_id = doc_id
            self._best_data = data
            self._best_width = width

    def merge(self, other: ExamplePicker) -> None:
        """Adopt the other picker's candidate if it is strictly wider."""
        if other._best_id is not None and other._best_data is not None:
            self.offer(other._best_id, other._best_data)

    def example(self) -> ExampleDocument | None:
        """The chosen example, sanitized, or None if nothing was offered."""
        if self._best_id is None or self._best_data is None:
            return None
        return ExampleDocument(id=self._best_id, document=sanitize_value(self._best_data))
