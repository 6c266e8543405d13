"""Accumulators for field observations across a document stream.

The aggregate tree mirrors the nesting of the documents it was folded from:

- ``ObjectAggregate``: all object values seen at one position (or the root)
- ``FieldAggregate``: everything seen for one key of that object
- ``VariantAggregate``: the observations of that key that had one ``Kind``
- ``ArrayAggregate``: all array values of a field, with one shared ``items``
  aggregate for every element of every array

Each node exclusively owns its children. Counters only grow while folding, and
aggregates built from disjoint document sets can be merged: merging is
associative and commutative, so shards can be folded independently.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field

from docprofiler.profiling.kinds import Kind


@dataclass
class VariantAggregate:
    """Observations of one field that had a single kind."""

    kind: Kind
    count: int = 0
    object_aggregate: ObjectAggregate | None = None
    array_aggregate: ArrayAggregate | None = None
    # Only meaningful for Kind.NUMBER; flips to False once and stays there
    integer_only: bool = True

    @classmethod
    def create(cls, kind: Kind) -> VariantAggregate:
        """Create an empty variant with the nested aggregate its kind needs."""
        variant = cls(kind=kind)
        if kind == Kind.OBJECT:
            variant.object_aggregate = ObjectAggregate()
        elif kind == Kind.ARRAY:
            variant.array_aggregate = ArrayAggregate()
        return variant

    def merge(self, other: VariantAggregate) -> None:
        """Add another variant of the same kind into this one."""
        if other.kind != self.kind:
            raise ValueError(f"Cannot merge {other.kind.value} variant into {self.kind.value}")
        self.count += other.count
        self.integer_only = self.integer_only and other.integer_only
        if self.object_aggregate is not None and other.object_aggregate is not None:
            self.object_aggregate.merge(other.object_aggregate)
        if self.array_aggregate is not None and other.array_aggregate is not None:
            self.array_aggregate.merge(other.array_aggregate)


@dataclass
class FieldAggregate:
    """Presence and type statistics for one field at one nesting position."""

    present_count: int = 0
    variants: dict[Kind, VariantAggregate] = field(default_factory=dict)

    def variant(self, kind: Kind) -> VariantAggregate:
        """Fetch or create the variant for ``kind``."""
        found = self.variants.get(kind)
        if found is None:
            found = VariantAggregate.create(kind)
            self.variants[kind] = found
        return found

    @property
    def nullable(self) -> bool:
        return Kind.NULL in self.variants

    @property
    def non_null_kinds(self) -> list[Kind]:
        """Distinct non-null kinds, sorted by name."""
        return sorted(
            (kind for kind in self.variants if kind != Kind.NULL), key=lambda k: k.value
        )

    def kind_counts(self) -> dict[str, int]:
        """Histogram of observations per kind name, sorted by name."""
        return {
            kind.value: self.variants[kind].count
            for kind in sorted(self.variants, key=lambda k: k.value)
        }

    def merge(self, other: FieldAggregate) -> None:
        """Add another field aggregate into this one."""
        self.present_count += other.present_count
        for kind, other_variant in other.variants.items():
            mine = self.variants.get(kind)
            if mine is None:
                self.variants[kind] = copy.deepcopy(other_variant)
            else:
                mine.merge(other_variant)


@dataclass
class ObjectAggregate:
    """All object values observed at one position, or all documents at the root."""

    total_seen: int = 0
    properties: dict[str, FieldAggregate] = field(default_factory=dict)

    def child(self, name: str) -> FieldAggregate:
        """Fetch or create the aggregate for key ``name``."""
        found = self.properties.get(name)
        if found is None:
            found = FieldAggregate()
            self.properties[name] = found
        return found

    def merge(self, other: ObjectAggregate) -> None:
        """Add another object aggregate into this one."""
        self.total_seen += other.total_seen
        for name, other_field in other.properties.items():
            mine = self.properties.get(name)
            if mine is None:
                self.properties[name] = copy.deepcopy(other_field)
            else:
                mine.merge(other_field)


@dataclass
class ArrayAggregate:
    """All array values observed for one field."""

    total_seen: int = 0
    empty_count: int = 0
    items: FieldAggregate | None = None

    def merge(self, other: ArrayAggregate) -> None:
        """Add another array aggregate into this one."""
        self.total_seen += other.total_seen
        self.empty_count += other.empty_count
        if other.items is None:
            return
        if self.items is None:
            self.items = copy.deepcopy(other.items)
        else:
            self.items.merge(other.items)


def merge_aggregates(left: ObjectAggregate, right: ObjectAggregate) -> ObjectAggregate:
    """Merge two root aggregates into a new one, leaving both inputs untouched."""
    merged = copy.deepcopy(left)
    merged.merge(right)
    return merged
