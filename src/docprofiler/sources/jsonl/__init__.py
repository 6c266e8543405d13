"""JSON Lines document source."""

from docprofiler.sources.jsonl.loader import JsonLinesSource, decode_tagged

__all__ = ["JsonLinesSource", "decode_tagged"]
