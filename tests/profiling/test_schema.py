"""Tests for the schema summarizer."""

import json
from datetime import UTC, datetime

from docprofiler.profiling.aggregates import FieldAggregate
from docprofiler.profiling.kinds import GeoPoint
from docprofiler.profiling.sampler import fold_documents, fold_value
from docprofiler.profiling.schema import SchemaNode, summarize, summarize_field


def _schema(documents) -> dict:
    return summarize(fold_documents(documents)).to_dict()


class TestRequiredAndNullable:
    """required <=> present in every parent; nullable <=> a null was seen."""

    def test_required_iff_fully_present(self):
        schema = _schema([{"a": 1, "b": 1}, {"a": 2}])

        assert schema["fields"]["a"]["required"] is True
        assert schema["fields"]["b"]["required"] is False
        assert schema["required_fields"] == ["a"]

    def test_nullable(self):
        schema = _schema([{"a": None}, {"a": "x"}])

        assert schema["fields"]["a"] == {"type": "string", "required": True, "nullable": True}

    def test_null_only_field_is_unknown(self):
        schema = _schema([{"a": None}])

        assert schema["fields"]["a"] == {"type": "unknown", "required": True, "nullable": True}

    def test_not_required_under_empty_parent(self):
        assert summarize_field(FieldAggregate(), 0).required is False


class TestTypes:
    """Type naming and formats."""

    def test_integer_vs_number(self):
        schema = _schema([{"count": 1, "price": 1.5}, {"count": 2, "price": 2}])

        assert schema["fields"]["count"]["type"] == "integer"
        assert schema["fields"]["price"]["type"] == "number"

    def test_formats(self):
        schema = _schema([{"at": datetime(2024, 1, 1, tzinfo=UTC), "blob": b"x"}])

        assert schema["fields"]["at"]["format"] == "RFC3339"
        assert schema["fields"]["blob"] == {
            "type": "bytes",
            "required": True,
            "nullable": False,
            "format": "base64",
        }

    def test_union_members_sorted(self):
        schema = _schema([{"age": "9"}, {"age": 9}, {"age": None}, {"age": GeoPoint(1, 2)}])

        age = schema["fields"]["age"]
        assert age["type"] == "union"
        assert age["union"] == ["geopoint", "integer", "string"]
        assert age["nullable"] is True

    def test_array_items(self):
        schema = _schema([{"tags": ["a", "b"]}, {"tags": []}])

        assert schema["fields"]["tags"] == {
            "type": "array",
            "required": True,
            "nullable": False,
            "items": {"type": "string", "required": True, "nullable": False},
        }

    def test_only_empty_arrays_have_any_items(self):
        schema = _schema([{"tags": []}])

        assert schema["fields"]["tags"]["items"] == {"type": "any"}

    def test_nested_record(self):
        schema = _schema(
            [
                {"status": {"code": "ABC", "at": 1}},
                {"status": {"code": "XYZ"}},
            ]
        )

        status = schema["fields"]["status"]
        assert status["type"] == "object"
        assert status["required_fields"] == ["code"]
        assert status["fields"]["at"]["required"] is False


class TestMapHeuristic:
    """Objects with varying keys of one scalar kind are dictionaries."""

    def test_map_detected(self):
        # a and b never both present across 5 instances
        field_agg = FieldAggregate()
        for value in [{"a": True}, {"b": False}, {"a": False}, {"b": True}, {"a": True}]:
            fold_value(field_agg, value)
        node = summarize_field(field_agg, 5)

        assert node.type == "map<string,boolean>"
        assert node.fields is None

    def test_map_with_sparse_keys(self):
        field_agg = FieldAggregate()
        values = [
            {"a": True, "b": True},
            {"a": True, "b": False},
            {"a": False, "b": True},
            {},
            {},
        ]
        for value in values:
            fold_value(field_agg, value)

        assert summarize_field(field_agg, 5).type == "map<string,boolean>"

    def test_fully_present_keys_make_a_record(self):
        field_agg = FieldAggregate()
        for value in [{"a": True, "b": True}, {"a": False, "b": True}, {"a": True, "b": False}]:
            fold_value(field_agg, value)
        node = summarize_field(field_agg, 3)

        assert node.type == "object"
        assert node.required_fields == ["a", "b"]

    def test_mixed_value_kinds_make_a_record(self):
        field_agg = FieldAggregate()
        for value in [{"a": True}, {"b": "x"}]:
            fold_value(field_agg, value)

        assert summarize_field(field_agg, 2).type == "object"

    def test_non_scalar_values_make_a_record(self):
        field_agg = FieldAggregate()
        for value in [{"a": [1]}, {"b": [2]}]:
            fold_value(field_agg, value)

        assert summarize_field(field_agg, 2).type == "object"

    def test_root_is_always_a_record(self):
        schema = _schema([{"a": 1}, {"b": 2}])

        assert schema["type"] == "object"
        assert set(schema["fields"]) == {"a", "b"}


class TestDeterminism:
    """Summaries do not depend on discovery order and are repeatable."""

    def test_idempotent(self):
        root = fold_documents([{"b": 1, "a": {"y": [1, "x"], "x": None}}, {"c": True}])

        first = json.dumps(summarize(root).to_dict())
        second = json.dumps(summarize(root).to_dict())
        assert first == second

    def test_independent_of_field_order(self):
        one = _schema([{"b": 1, "a": "x"}, {"c": None}])
        two = _schema([{"c": None}, {"a": "x", "b": 1}])

        assert json.dumps(one) == json.dumps(two)
        assert list(one["fields"]) == ["a", "b", "c"]


def test_schema_node_drops_unset_attributes():
    assert SchemaNode(type="string").to_dict() == {"type": "string"}
