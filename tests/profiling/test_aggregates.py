"""Tests for aggregate merging."""

import copy

import pytest

from docprofiler.profiling.aggregates import (
    FieldAggregate,
    ObjectAggregate,
    VariantAggregate,
    merge_aggregates,
)
from docprofiler.profiling.kinds import Kind
from docprofiler.profiling.sampler import fold_documents

SHARD_A = [
    {"id": 1, "tags": ["a", "b"], "profile": {"age": 30}},
    {"id": 2, "tags": [], "profile": None},
]
SHARD_B = [
    {"id": 3.5, "tags": [1], "profile": {"age": "thirty", "city": "Berlin"}},
]
SHARD_C = [
    {"name": "x", "tags": [[]]},
    {"id": None},
]


class TestMonoid:
    """Merging shard aggregates equals folding the concatenation."""

    def test_merge_equals_concatenated_fold(self):
        merged = merge_aggregates(fold_documents(SHARD_A), fold_documents(SHARD_B))
        assert merged == fold_documents(SHARD_A + SHARD_B)

    def test_commutative(self):
        a = fold_documents(SHARD_A)
        b = fold_documents(SHARD_B)
        assert merge_aggregates(a, b) == merge_aggregates(b, a)

    def test_associative(self):
        a = fold_documents(SHARD_A)
        b = fold_documents(SHARD_B)
        c = fold_documents(SHARD_C)
        left = merge_aggregates(merge_aggregates(a, b), c)
        right = merge_aggregates(a, merge_aggregates(b, c))
        assert left == right

    def test_empty_is_identity(self):
        a = fold_documents(SHARD_A)
        assert merge_aggregates(a, ObjectAggregate()) == a
        assert merge_aggregates(ObjectAggregate(), a) == a

    def test_integer_only_is_anded(self):
        merged = merge_aggregates(fold_documents(SHARD_A), fold_documents(SHARD_B))
        number = merged.properties["id"].variants[Kind.NUMBER]
        assert number.count == 3
        assert not number.integer_only


class TestOwnership:
    """Merged trees never share nodes with their inputs."""

    def test_merge_aggregates_leaves_inputs_untouched(self):
        a = fold_documents(SHARD_A)
        b = fold_documents(SHARD_B)
        a_before = copy.deepcopy(a)
        b_before = copy.deepcopy(b)

        merge_aggregates(a, b)

        assert a == a_before
        assert b == b_before

    def test_adopted_subtrees_are_copies(self):
        target = ObjectAggregate()
        other = fold_documents(SHARD_B)
        target.merge(other)

        target.properties["profile"].present_count += 10
        assert other.properties["profile"].present_count == 1


class TestVariantMerge:
    """Tests for VariantAggregate.merge()."""

    def test_kind_mismatch(self):
        with pytest.raises(ValueError, match="Cannot merge"):
            VariantAggregate.create(Kind.STRING).merge(VariantAggregate.create(Kind.NUMBER))

    def test_create_builds_nested_aggregates(self):
        assert VariantAggregate.create(Kind.OBJECT).object_aggregate == ObjectAggregate()
        assert VariantAggregate.create(Kind.ARRAY).array_aggregate is not None
        assert VariantAggregate.create(Kind.STRING).object_aggregate is None


def test_field_variant_fetch_or_create():
    field_agg = FieldAggregate()
    first = field_agg.variant(Kind.STRING)
    assert field_agg.variant(Kind.STRING) is first
    assert list(field_agg.variants) == [Kind.STRING]
