"""Bounded example evidence gathered during the first document pass.

The aggregate tree only keeps counters. Issues still need concrete examples,
so the collector records document ids as documents stream by, capped per
field and per kind. First seen wins; later documents never displace an
example.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any, TypeVar

from docprofiler.profiling.kinds import Kind, classify
from docprofiler.quality.config import ProfileConfig
from docprofiler.quality.models import RegexViolationExample

PATH_SEPARATOR = "."

T = TypeVar("T")


def iter_field_paths(data: Mapping[Any, Any], base: str = "") -> Iterator[tuple[str, Any]]:
    """Yield ``(dotted_path, value)`` for every field, descending into objects.

    Object-valued fields are yielded themselves and then walked. Arrays are
    leaves: their elements have no stable path.
    """
    for key, value in data.items():
        path = f"{base}{PATH_SEPARATOR}{key}" if base else str(key)
        yield path, value
        if classify(value) == Kind.OBJECT:
            yield from iter_field_paths(value, path)


def normalize_field_name(path: str) -> str:
    """Key used to spot spelling variants: lowercase, no dots or underscores."""
    return path.replace(PATH_SEPARATOR, "").replace("_", "").lower()


def _push(examples: list[T], item: T, limit: int) -> None:
    if len(examples) < limit:
        examples.append(item)


class EvidenceCollector:
    """Per-field example ids and regex violations for one run."""

    def __init__(self, config: ProfileConfig):
        self._limit = config.examples_per_issue
        self._rules = config.regex_rules
        self.presence_examples: dict[str, list[str]] = {}
        self.kind_examples: dict[str, dict[Kind, list[str]]] = {}
        self.regex_violations: dict[str, list[RegexViolationExample]] = {}

    def observe(self, doc_id: str, data: Mapping[str, Any]) -> None:
        """Record evidence for one document.

        A path reached twice in one document (a dotted key next to the same
        nested field) records the document id once.
        """
        seen: set[tuple[str, Kind | None]] = set()
        for path, value in iter_field_paths(data):
            kind = classify(value)
            if (path, None) not in seen:
                seen.add((path, None))
                _push(self.presence_examples.setdefault(path, []), doc_id, self._limit)
            if (path, kind) not in seen:
                seen.add((path, kind))
                by_kind = self.kind_examples.setdefault(path, {})
                _push(by_kind.setdefault(kind, []), doc_id, self._limit)

            rule = self._rules.get(path)
            if rule is not None and kind == Kind.STRING and not rule.matches(value):
                _push(
                    self.regex_violations.setdefault(path, []),
                    RegexViolationExample(doc_id=doc_id, value=value),
                    self._limit,
                )

    def merge(self, other: EvidenceCollector) -> None:
        """Append another collector's examples after this one's, keeping the cap.

        Merging collectors of consecutive shards in shard order gives the same
        examples as one sequential pass.
        """
        for path, ids in other.presence_examples.items():
            mine = self.presence_examples.setdefault(path, [])
            for doc_id in ids:
                _push(mine, doc_id, self._limit)

        for path, by_kind in other.kind_examples.items():
            mine_by_kind = self.kind_examples.setdefault(path, {})
            for kind, ids in by_kind.items():
                mine = mine_by_kind.setdefault(kind, [])
                for doc_id in ids:
                    _push(mine, doc_id, self._limit)

        for path, violations in other.regex_violations.items():
            mine_violations = self.regex_violations.setdefault(path, [])
            for violation in violations:
                _push(mine_violations, violation, self._limit)
