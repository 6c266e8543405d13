"""Derive a declarative schema from a finished aggregate tree.

Rules:
- a field is required when it was present in every parent object
- a field is nullable when any observation was null
- more than one non-null kind renders as ``union``
- an object whose keys vary between instances and whose values all share one
  scalar kind renders as ``map<string,KIND>`` instead of a fixed record

Output is independent of the order fields were discovered in: field maps,
required field lists and union members are sorted.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from docprofiler.profiling.aggregates import FieldAggregate, ObjectAggregate, VariantAggregate
from docprofiler.profiling.kinds import SCALAR_KINDS, Kind

_FORMATS: dict[Kind, str] = {
    Kind.TIMESTAMP: "RFC3339",
    Kind.BYTES: "base64",
}


class SchemaNode(BaseModel):
    """Schema summary for one field, an array's items, or the document root."""

    model_config = ConfigDict(frozen=True)

    type: str
    required: bool | None = None
    nullable: bool | None = None
    format: str | None = None
    union: list[str] | None = None
    items: SchemaNode | None = None
    required_fields: list[str] | None = None
    fields: dict[str, SchemaNode] | None = None

    def to_dict(self) -> dict:
        """Plain data with unset attributes dropped."""
        return self.model_dump(mode="json", exclude_none=True)


def type_name(variant: VariantAggregate) -> str:
    """Report name for a variant; integral-only numbers are ``integer``."""
    if variant.kind == Kind.NUMBER:
        return "integer" if variant.integer_only else "number"
    return variant.kind.value


def map_value_kind(obj_agg: ObjectAggregate) -> Kind | None:
    """Return the value kind if the object behaves like a homogeneous dictionary.

    An object is a dictionary when no key is present in every instance and
    every key only ever held the same scalar kind.
    """
    if not obj_agg.properties:
        return None

    value_kind: Kind | None = None
    for field_agg in obj_agg.properties.values():
        if field_agg.present_count == obj_agg.total_seen:
            return None
        if len(field_agg.variants) != 1:
            return None
        (kind,) = field_agg.variants
        if kind not in SCALAR_KINDS:
            return None
        if value_kind is None:
            value_kind = kind
        elif kind != value_kind:
            return None
    return value_kind


def summarize(obj_agg: ObjectAggregate) -> SchemaNode:
    """Summarize the document root as a fixed-shape record."""
    fields, required_fields = _summarize_properties(obj_agg)
    return SchemaNode(type="object", required_fields=required_fields, fields=fields)


def summarize_field(field_agg: FieldAggregate, parent_total: int) -> SchemaNode:
    """Summarize one field observed under a parent seen ``parent_total`` times."""
    required = parent_total > 0 and field_agg.present_count == parent_total
    nullable = field_agg.nullable
    non_null = field_agg.non_null_kinds

    if not non_null:
        return SchemaNode(type=Kind.UNKNOWN.value, required=required, nullable=True)

    if len(non_null) > 1:
        union = sorted(type_name(field_agg.variants[kind]) for kind in non_null)
        return SchemaNode(type="union", union=union, required=required, nullable=nullable)

    variant = field_agg.variants[non_null[0]]

    if variant.kind == Kind.ARRAY:
        assert variant.array_aggregate is not None
        items_agg = variant.array_aggregate.items
        if items_agg is None:
            items = SchemaNode(type="any")
        else:
            items = summarize_field(items_agg, items_agg.present_count)
        return SchemaNode(type="array", items=items, required=required, nullable=nullable)

    if variant.kind == Kind.OBJECT:
        assert variant.object_aggregate is not None
        value_kind = map_value_kind(variant.object_aggregate)
        if value_kind is not None:
            return SchemaNode(
                type=f"map<string,{value_kind.value}>", required=required, nullable=nullable
            )
        fields, required_fields = _summarize_properties(variant.object_aggregate)
        return SchemaNode(
            type="object",
            required=required,
            nullable=nullable,
            required_fields=required_fields,
            fields=fields,
        )

    return SchemaNode(
        type=type_name(variant),
        format=_FORMATS.get(variant.kind),
        required=required,
        nullable=nullable,
    )


def _summarize_properties(
    obj_agg: ObjectAggregate,
) -> tuple[dict[str, SchemaNode], list[str] | None]:
    fields: dict[str, SchemaNode] = {}
    required_fields: list[str] = []
    for name in sorted(obj_agg.properties):
        field_agg = obj_agg.properties[name]
        node = summarize_field(field_agg, obj_agg.total_seen)
        fields[name] = node
        if node.required:
            required_fields.append(name)
    return fields, required_fields or None
