"""Document sources.

A source yields ``(id, payload)`` documents in batches and can be scanned
more than once.
"""

from docprofiler.sources.base import Document, DocumentSource, DocumentSourceError
from docprofiler.sources.jsonl import JsonLinesSource
from docprofiler.sources.memory import InMemorySource

__all__ = [
    "Document",
    "DocumentSource",
    "DocumentSourceError",
    "InMemorySource",
    "JsonLinesSource",
]
