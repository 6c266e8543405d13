"""Fold documents into an aggregate tree.

``fold_object_sample`` is the per-document entry point; ``fold_value`` records
one observation of a (possibly nested) value. Folding keeps counters only, so
memory grows with the number of distinct field positions, never with the
number of documents.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from docprofiler.core.logging import get_logger
from docprofiler.profiling.aggregates import FieldAggregate, ObjectAggregate
from docprofiler.profiling.kinds import Kind, classify, is_integral

logger = get_logger(__name__)

# Maximum parallel shard workers
MAX_SHARD_WORKERS = 4


def fold_value(aggregate: FieldAggregate, value: Any) -> None:
    """Record one more observation of ``value`` in ``aggregate``.

    Args:
        aggregate: Field aggregate for the position the value was found at
        value: The observed value (any kind, including None)
    """
    aggregate.present_count += 1
    kind = classify(value)
    variant = aggregate.variant(kind)
    variant.count += 1

    if kind == Kind.OBJECT:
        assert variant.object_aggregate is not None
        _fold_properties(variant.object_aggregate, value)
    elif kind == Kind.ARRAY:
        array_aggregate = variant.array_aggregate
        assert array_aggregate is not None
        array_aggregate.total_seen += 1
        if not value:
            array_aggregate.empty_count += 1
        else:
            if array_aggregate.items is None:
                array_aggregate.items = FieldAggregate()
            for element in value:
                fold_value(array_aggregate.items, element)
    elif kind == Kind.NUMBER:
        if variant.integer_only and not is_integral(value):
            variant.integer_only = False


def fold_object_sample(obj_agg: ObjectAggregate, document: Mapping[str, Any]) -> None:
    """Fold one whole document into the root aggregate.

    Folding the same document twice counts it twice; callers must not re-fold
    a document within one run.
    """
    _fold_properties(obj_agg, document)


def _fold_properties(obj_agg: ObjectAggregate, value: Mapping[Any, Any]) -> None:
    obj_agg.total_seen += 1
    for key, child in value.items():
        fold_value(obj_agg.child(str(key)), child)


def fold_documents(
    documents: Iterable[Mapping[str, Any]],
    aggregate: ObjectAggregate | None = None,
) -> ObjectAggregate:
    """Fold a stream of document payloads.

    Args:
        documents: Document payloads, in stream order
        aggregate: Existing aggregate to continue folding into

    Returns:
        The aggregate that was folded into
    """
    if aggregate is None:
        aggregate = ObjectAggregate()
    for document in documents:
        fold_object_sample(aggregate, document)
    return aggregate


def fold_shards(
    shards: Sequence[Iterable[Mapping[str, Any]]],
    max_workers: int = MAX_SHARD_WORKERS,
) -> ObjectAggregate:
    """Fold independent document shards in parallel and merge the results.

    Each shard gets its own aggregate, so no tree has more than one writer.
    Results are merged in shard order.

    Args:
        shards: Disjoint groups of document payloads
        max_workers: Thread pool size

    Returns:
        Root aggregate equal to folding all shards sequentially
    """
    merged = ObjectAggregate()
    if not shards:
        return merged

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        partials = list(executor.map(fold_documents, shards))

    for partial in partials:
        merged.merge(partial)

    logger.debug("shards_merged", shards=len(shards), documents=merged.total_seen)
    return merged
