"""JSON Lines document source.

One JSON object per line. Plain JSON has no timestamp, geopoint, reference or
binary types, so those are written as single-key tagged objects:

    {"$timestamp": "2024-01-15T09:30:00Z"}
    {"$geopoint": {"latitude": 52.52, "longitude": 13.40}}
    {"$ref": "users/alice"}
    {"$bytes": "aGVsbG8="}

The document id is read from ``id_field`` and removed from the payload.
Documents without one get ``line-<n>``.
"""

from __future__ import annotations

import base64
import binascii
import json
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path
from typing import Any

from docprofiler.core.logging import get_logger
from docprofiler.profiling.kinds import DocumentReference, GeoPoint
from docprofiler.sources.base import Document, DocumentSource, DocumentSourceError

logger = get_logger(__name__)


def _decode_timestamp(value: Any) -> datetime:
    return datetime.fromisoformat(value)


def _decode_geopoint(value: Any) -> GeoPoint:
    return GeoPoint(latitude=float(value["latitude"]), longitude=float(value["longitude"]))


def _decode_reference(value: Any) -> DocumentReference:
    if not isinstance(value, str):
        raise ValueError("$ref must be a document path string")
    return DocumentReference(path=value)


def _decode_bytes(value: Any) -> bytes:
    return base64.b64decode(value, validate=True)


TAG_DECODERS = {
    "$timestamp": _decode_timestamp,
    "$geopoint": _decode_geopoint,
    "$ref": _decode_reference,
    "$bytes": _decode_bytes,
}


def decode_tagged(obj: dict[str, Any]) -> Any:
    """``json`` object hook turning tagged objects into document value types."""
    if len(obj) == 1:
        ((tag, value),) = obj.items()
        decoder = TAG_DECODERS.get(tag)
        if decoder is not None:
            try:
                return decoder(value)
            except (KeyError, TypeError, ValueError, binascii.Error) as e:
                raise ValueError(f"invalid {tag} value {value!r}: {e}") from e
    return obj


class JsonLinesSource(DocumentSource):
    """Documents stored one per line in a ``.jsonl`` file.

    Subcollections of a document live in a directory next to the file, named
    after the file stem and then the document id, one ``.jsonl`` file per
    subcollection::

        users.jsonl
        users/alice/orders.jsonl
        users/alice/sessions.jsonl
    """

    def __init__(self, path: Path | str, id_field: str = "id", name: str | None = None):
        self.path = Path(path)
        self.id_field = id_field
        self.name = name or self.path.stem

    def iter_batches(self, batch_size: int) -> Iterator[list[Document]]:
        batch: list[Document] = []
        try:
            with open(self.path, "rb") as f:
                for lineno, raw in enumerate(f, start=1):
                    if not raw.strip():
                        continue
                    batch.append(self._parse_line(raw, lineno))
                    if len(batch) >= batch_size:
                        yield batch
                        batch = []
        except OSError as e:
            raise DocumentSourceError(f"Failed to read {self.path}: {e}") from e

        if batch:
            yield batch

    def subcollections(self, doc_id: str) -> dict[str, DocumentSource]:
        if doc_id in ("", ".", "..") or "/" in doc_id or "\\" in doc_id:
            return {}
        directory = self.path.with_suffix("") / doc_id
        if not directory.is_dir():
            return {}
        return {
            path.stem: JsonLinesSource(
                path, id_field=self.id_field, name=f"{self.name}/{doc_id}/{path.stem}"
            )
            for path in sorted(directory.glob("*.jsonl"))
        }

    def _parse_line(self, raw: bytes, lineno: int) -> Document:
        try:
            line = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DocumentSourceError(f"{self.path}:{lineno}: invalid UTF-8: {e}") from e

        try:
            data = json.loads(line, object_hook=decode_tagged)
        except ValueError as e:
            raise DocumentSourceError(f"{self.path}:{lineno}: invalid document: {e}") from e

        if not isinstance(data, dict):
            raise DocumentSourceError(
                f"{self.path}:{lineno}: expected a JSON object, got {type(data).__name__}"
            )

        doc_id = data.pop(self.id_field, None)
        if doc_id is None:
            doc_id = f"line-{lineno}"
            logger.debug("document_without_id", path=str(self.path), line=lineno)
        return Document(id=str(doc_id), data=data)
