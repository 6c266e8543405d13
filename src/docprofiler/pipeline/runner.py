"""Profiling run orchestration.

A run is two passes over one document source:

1. Fold every document (up to ``sample_limit``) into the aggregate tree and
   collect bounded issue evidence at the same time.
   With ``include_subcollections``, each document's direct subcollections
   are folded too, one aggregate per subcollection name.
2. Only when issues are requested and some expected field is missing:
   rescan the same documents to collect missing-field example ids.

Usage:
    from docprofiler.pipeline import ProfileMode, run_profile
    from docprofiler.quality import ProfileConfig
    from docprofiler.sources import JsonLinesSource

    result = run_profile(JsonLinesSource("users.jsonl"), ProfileConfig(), ProfileMode.FULL)
    if result.success:
        print(result.unwrap().to_dict())
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Iterator
from enum import Enum
from typing import Any
from uuid import uuid4

from docprofiler.core.config import get_settings
from docprofiler.core.logging import (
    end_pass_metrics,
    end_run_metrics,
    get_logger,
    log_context,
    record_documents_processed,
    start_pass_metrics,
    start_run_metrics,
)
from docprofiler.core.result import Result
from docprofiler.profiling.aggregates import ObjectAggregate
from docprofiler.profiling.examples import ExampleDocument, ExamplePicker, sanitize_value
from docprofiler.profiling.sampler import fold_object_sample
from docprofiler.profiling.schema import SchemaNode, summarize
from docprofiler.quality.config import ProfileConfig
from docprofiler.quality.detectors import IssueDetector, collect_missing_examples
from docprofiler.quality.evidence import EvidenceCollector
from docprofiler.quality.models import IssueSet
from docprofiler.report.assembler import assemble_report
from docprofiler.report.models import ProfileReport, RunMetadata
from docprofiler.sources.base import Document, DocumentSource, DocumentSourceError

logger = get_logger(__name__)


class ProfileMode(str, Enum):
    """What a run produces."""

    SCHEMA = "schema"
    LINT = "lint"
    FULL = "full"

    @property
    def includes_schema(self) -> bool:
        return self in (ProfileMode.SCHEMA, ProfileMode.FULL)

    @property
    def includes_issues(self) -> bool:
        return self in (ProfileMode.LINT, ProfileMode.FULL)


class RunCancelled(Exception):
    """Raised inside a run when its cancel event is set."""


def _checked(
    documents: Iterable[Document], cancel: threading.Event | None
) -> Iterator[Document]:
    """Pass documents through, counting them and stopping on cancellation."""
    for document in documents:
        if cancel is not None and cancel.is_set():
            raise RunCancelled()
        yield document
        record_documents_processed()


class CollectionProfiler:
    """Pass-1 state for one collection: aggregate, evidence and example.

    Profilers of disjoint, consecutive shards can be merged in shard order;
    the result is the same as observing every document on one profiler.
    Subcollections get one aggregate per name, shared by every parent document.
    """

    def __init__(self, config: ProfileConfig):
        self.config = config
        self.aggregate = ObjectAggregate()
        self.evidence = EvidenceCollector(config)
        self.picker = ExamplePicker()
        self.subcollections: dict[str, ObjectAggregate] = {}

    @property
    def documents_seen(self) -> int:
        return self.aggregate.total_seen

    def observe(self, document: Document) -> None:
        """Fold one document and record its evidence."""
        fold_object_sample(self.aggregate, document.data)
        self.evidence.observe(document.id, document.data)
        if self.config.include_example:
            self.picker.offer(document.id, document.data)

    def observe_subcollections(
        self,
        source: DocumentSource,
        document: Document,
        batch_size: int | None = None,
        cancel: threading.Event | None = None,
    ) -> int:
        """Fold the direct subcollections of one document.

        At most ``sample_limit`` documents are read from each subcollection.

        Returns:
            Number of subcollection documents folded
        """
        folded = 0
        for name, subsource in source.subcollections(document.id).items():
            aggregate = self.subcollections.setdefault(name, ObjectAggregate())
            documents = subsource.scan(limit=self.config.sample_limit, batch_size=batch_size)
            for sub_document in documents:
                if cancel is not None and cancel.is_set():
                    raise RunCancelled()
                fold_object_sample(aggregate, sub_document.data)
                folded += 1
        return folded

    def merge(self, other: CollectionProfiler) -> None:
        """Absorb another profiler's state, appended after this one's."""
        self.aggregate.merge(other.aggregate)
        self.evidence.merge(other.evidence)
        self.picker.merge(other.picker)
        for name, aggregate in other.subcollections.items():
            self.subcollections.setdefault(name, ObjectAggregate()).merge(aggregate)

    def schema(self) -> SchemaNode:
        return summarize(self.aggregate)

    def subcollection_schemas(self) -> dict[str, SchemaNode]:
        """Schema per subcollection name, for names with at least one document."""
        return {
            name: summarize(aggregate)
            for name, aggregate in sorted(self.subcollections.items())
            if aggregate.total_seen > 0
        }

    def example(
        self, source: DocumentSource | None = None, batch_size: int | None = None
    ) -> ExampleDocument | None:
        """The example document.

        With a ``source`` and ``include_subcollections`` set, the first
        ``examples_per_subcollection`` documents of each of the example's
        subcollections are attached. Empty subcollections are left out.
        """
        example = self.picker.example()
        if example is None or source is None or not self.config.include_subcollections:
            return example

        samples: dict[str, list[dict[str, Any]]] = {}
        for name, subsource in source.subcollections(example.id).items():
            documents = [
                sanitize_value(document.data)
                for document in subsource.scan(
                    limit=self.config.examples_per_subcollection, batch_size=batch_size
                )
            ]
            if documents:
                samples[name] = documents
        if not samples:
            return example
        return example.model_copy(update={"subcollections": samples})

    def issues(
        self,
        source: DocumentSource | None = None,
        batch_size: int | None = None,
        cancel: threading.Event | None = None,
    ) -> IssueSet:
        """Run the issue checks, rescanning ``source`` for missing-field examples.

        Args:
            source: The source pass 1 read from. None skips the second pass,
                leaving missing-field issues without example ids.
            batch_size: Page size for the second pass
            cancel: Checked before each document of the second pass

        Returns:
            IssueSet
        """
        detector = IssueDetector(self.config)
        deficits = detector.missing_field_deficits(self.aggregate)

        missing_examples: dict[str, list[str]] = {}
        if deficits and source is not None:
            logger.debug("missing_example_scan_started", fields=len(deficits))
            documents = _checked(
                source.scan(limit=self.documents_seen, batch_size=batch_size), cancel
            )
            missing_examples = collect_missing_examples(
                documents, deficits, limit=self.config.examples_per_issue
            )

        return detector.detect(self.aggregate, self.evidence, missing_examples)


def _run_metadata(
    source: DocumentSource, config: ProfileConfig, mode: ProfileMode, documents_scanned: int
) -> RunMetadata:
    return RunMetadata(
        collection=source.name,
        mode=mode.value,
        documents_scanned=documents_scanned,
        sample_limit=config.sample_limit,
        required_threshold=config.required_threshold,
        rare_field_max_fraction=config.rare_field_max_fraction,
        examples_per_issue=config.examples_per_issue,
        check_field_name_variants=config.check_field_name_variants,
        include_subcollections=config.include_subcollections,
        regex_rules={path: rule.pattern for path, rule in config.regex_rules.items()},
    )


def run_profile(
    source: DocumentSource,
    config: ProfileConfig,
    mode: ProfileMode = ProfileMode.FULL,
    batch_size: int | None = None,
    cancel: threading.Event | None = None,
) -> Result[ProfileReport]:
    """Profile one document collection.

    Args:
        source: Re-enumerable document source
        config: Validated run configuration
        mode: Schema only, issues only, or both
        batch_size: Documents per source page (None = settings default)
        cancel: Event checked at every document boundary

    Returns:
        Result with the ProfileReport. Source read failures and cancellation
        return a failed Result and no partial report.
    """
    if batch_size is None:
        batch_size = get_settings().batch_size

    run_id = str(uuid4())
    start_run_metrics(run_id=run_id, collection=source.name)
    warnings: list[str] = []

    try:
        with log_context(run_id=run_id, collection=source.name):
            logger.info(
                "profile_run_started",
                mode=mode.value,
                sample_limit=config.sample_limit,
                batch_size=batch_size,
            )
            profiler = CollectionProfiler(config)
            with_subcollections = config.include_subcollections and mode.includes_schema

            try:
                start_pass_metrics("fold")
                documents = _checked(
                    source.scan(limit=config.sample_limit, batch_size=batch_size), cancel
                )
                subdocuments = 0
                for document in documents:
                    profiler.observe(document)
                    if with_subcollections:
                        subdocuments += profiler.observe_subcollections(
                            source, document, batch_size=batch_size, cancel=cancel
                        )
                end_pass_metrics()
                logger.info(
                    "fold_pass_completed",
                    documents=profiler.documents_seen,
                    subcollections=len(profiler.subcollections),
                    subcollection_documents=subdocuments,
                )

                schema = profiler.schema() if mode.includes_schema else None
                subcollections = profiler.subcollection_schemas() if with_subcollections else None
                example = profiler.example(
                    source if with_subcollections else None, batch_size=batch_size
                )

                issues = None
                if mode.includes_issues:
                    start_pass_metrics("missing_examples")
                    issues = profiler.issues(source, batch_size=batch_size, cancel=cancel)
                    end_pass_metrics()
                    logger.info("issue_checks_completed", issues=issues.issue_count)

            except DocumentSourceError as e:
                logger.error("document_source_failed", error=str(e))
                return Result.fail(f"Failed to read documents from {source.name}: {e}")
            except RunCancelled:
                logger.warning("profile_run_cancelled", documents=profiler.documents_seen)
                return Result.fail(f"Profiling of {source.name} was cancelled")
            finally:
                end_pass_metrics()

            if profiler.documents_seen == 0:
                warnings.append(f"No documents found in {source.name}")
                logger.warning("empty_collection")

            report = assemble_report(
                _run_metadata(source, config, mode, profiler.documents_seen),
                schema=schema,
                issues=issues,
                example=example,
                subcollections=subcollections,
            )
            return Result.ok(report, warnings=warnings)

    finally:
        metrics = end_run_metrics()
        if metrics:
            logger.info("profile_run_finished", **metrics.to_dict())
