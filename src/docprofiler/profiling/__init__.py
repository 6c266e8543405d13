"""Profiling module.

Folds semi-structured documents into an aggregate tree and summarizes it:
- Kind classification of values
- Aggregate model (field/object/array accumulators, mergeable)
- Sampler (document folding, shard folding)
- Schema summarizer (required/nullable/union/map detection)
- Example document selection
"""

from docprofiler.profiling.aggregates import (
    ArrayAggregate,
    FieldAggregate,
    ObjectAggregate,
    VariantAggregate,
    merge_aggregates,
)
from docprofiler.profiling.examples import ExampleDocument, ExamplePicker, sanitize_value
from docprofiler.profiling.kinds import (
    DocumentReference,
    GeoPoint,
    Kind,
    classify,
    register_opaque_type,
)
from docprofiler.profiling.sampler import (
    fold_documents,
    fold_object_sample,
    fold_shards,
    fold_value,
)
from docprofiler.profiling.schema import SchemaNode, summarize, summarize_field

__all__ = [
    # Kinds
    "DocumentReference",
    "GeoPoint",
    "Kind",
    "classify",
    "register_opaque_type",
    # Aggregates
    "ArrayAggregate",
    "FieldAggregate",
    "ObjectAggregate",
    "VariantAggregate",
    "merge_aggregates",
    # Sampler
    "fold_documents",
    "fold_object_sample",
    "fold_shards",
    "fold_value",
    # Schema
    "SchemaNode",
    "summarize",
    "summarize_field",
    # Examples
    "ExampleDocument",
    "ExamplePicker",
    "sanitize_value",
]
