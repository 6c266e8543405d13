"""Value kinds for semi-structured documents.

Every value observed in a document maps to exactly one ``Kind``. Classification
is ordered: ``null`` first, then the opaque document-store types (timestamp,
geopoint, reference, bytes), then arrays, then scalars, then generic mappings.
The order keeps structured values such as geopoints from being mistaken for
plain objects.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any


class Kind(str, Enum):
    """Discrete type tag assigned to one observed value."""

    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    TIMESTAMP = "timestamp"
    GEOPOINT = "geopoint"
    REFERENCE = "reference"
    BYTES = "bytes"
    ARRAY = "array"
    OBJECT = "object"
    UNKNOWN = "unknown"


# Kinds eligible as dictionary values under the map heuristic
SCALAR_KINDS = frozenset({Kind.BOOLEAN, Kind.STRING, Kind.NUMBER})

OPAQUE_KINDS = frozenset({Kind.TIMESTAMP, Kind.GEOPOINT, Kind.REFERENCE, Kind.BYTES})


@dataclass(frozen=True)
class GeoPoint:
    """A 2-D geographic coordinate."""

    latitude: float
    longitude: float


@dataclass(frozen=True)
class DocumentReference:
    """A pointer to another document, by its slash-separated path."""

    path: str

    @property
    def id(self) -> str:
        return self.path.rsplit("/", 1)[-1]


# Checked in insertion order after ``None``
_OPAQUE_TYPES: dict[type, Kind] = {
    datetime: Kind.TIMESTAMP,
    date: Kind.TIMESTAMP,
    GeoPoint: Kind.GEOPOINT,
    DocumentReference: Kind.REFERENCE,
    bytes: Kind.BYTES,
    bytearray: Kind.BYTES,
    memoryview: Kind.BYTES,
}


def register_opaque_type(python_type: type, kind: Kind) -> None:
    """Classify instances of ``python_type`` as one of the opaque kinds.

    Document-source adapters use this to map a client library's own value
    classes (its timestamp or geopoint type, for instance) onto ``Kind``.

    Raises:
        ValueError: If ``kind`` is not timestamp, geopoint, reference or bytes
    """
    if kind not in OPAQUE_KINDS:
        raise ValueError(f"Only opaque kinds can be registered, got: {kind.value}")
    _OPAQUE_TYPES[python_type] = kind


def classify(value: Any) -> Kind:
    """Map a value to its kind. Total and side-effect free."""
    if value is None:
        return Kind.NULL
    for python_type, kind in _OPAQUE_TYPES.items():
        if isinstance(value, python_type):
            return kind
    if isinstance(value, (list, tuple)):
        return Kind.ARRAY
    if isinstance(value, str):
        return Kind.STRING
    # bool subclasses int, so it has to be tested first
    if isinstance(value, bool):
        return Kind.BOOLEAN
    if isinstance(value, (int, float)):
        return Kind.NUMBER
    if isinstance(value, Mapping):
        return Kind.OBJECT
    return Kind.UNKNOWN


def is_integral(value: int | float) -> bool:
    """Check whether a number-kind value has no fractional part."""
    if isinstance(value, int):
        return True
    if math.isnan(value) or math.isinf(value):
        return False
    return value.is_integer()
