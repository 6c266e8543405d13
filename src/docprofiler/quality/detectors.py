"""Data-quality checks over a finished aggregate tree.

Five independent checks, each a small class with a ``check_id`` and a
``detect`` method, share one ``DetectionContext``:

- missing_fields: expected fields (presence >= required_threshold) that some
  documents lack; examples come from a second pass over the source
- type_mismatches: fields observed with two or more non-null kinds
- regex_violations: string values failing a configured pattern
- rare_fields: fields present in at most rare_field_max_fraction of documents
- field_name_variants: paths that only differ by case, dots or underscores

Fields are addressed by dotted paths through object nesting. Array elements
are not addressed; they are covered by the schema summary instead.
Rare fields and name variants look at leaves: an object path whose nested
fields are reported is not reported itself.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import defaultdict
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel

from docprofiler.core.logging import get_logger
from docprofiler.profiling.aggregates import ObjectAggregate
from docprofiler.profiling.kinds import Kind
from docprofiler.quality.config import ProfileConfig
from docprofiler.quality.evidence import (
    PATH_SEPARATOR,
    EvidenceCollector,
    iter_field_paths,
    normalize_field_name,
)
from docprofiler.quality.models import (
    FieldNameVariant,
    FieldNameVariantGroup,
    FieldStat,
    IssueSet,
    MissingFieldIssue,
    RareFieldIssue,
    RegexViolationIssue,
    TypeMismatchIssue,
)

logger = get_logger(__name__)

FRACTION_DIGITS = 4


def iter_field_stats(root: ObjectAggregate) -> Iterator[FieldStat]:
    """Flatten the aggregate tree into per-path stats, parents before children.

    A literal key containing the path separator (``"a.b"``) lands on the same
    path as the nested field ``a`` -> ``b``. Such stats are combined into one,
    with presence capped at the document count.
    """
    merged: dict[str, FieldStat] = {}
    for stat in _walk(root, "", 0):
        previous = merged.get(stat.path)
        if previous is None:
            merged[stat.path] = stat
            continue
        kinds = dict(previous.kinds)
        for kind, count in stat.kinds.items():
            kinds[kind] = kinds.get(kind, 0) + count
        merged[stat.path] = FieldStat(
            path=stat.path,
            depth=min(previous.depth, stat.depth),
            present_count=min(previous.present_count + stat.present_count, root.total_seen),
            kinds=dict(sorted(kinds.items())),
            has_children=previous.has_children or stat.has_children,
        )
    yield from merged.values()


def _walk(obj_agg: ObjectAggregate, base: str, depth: int) -> Iterator[FieldStat]:
    for name in sorted(obj_agg.properties):
        field_agg = obj_agg.properties[name]
        path = f"{base}{PATH_SEPARATOR}{name}" if base else name
        object_variant = field_agg.variants.get(Kind.OBJECT)
        nested = object_variant.object_aggregate if object_variant is not None else None
        yield FieldStat(
            path=path,
            depth=depth,
            present_count=field_agg.present_count,
            kinds=field_agg.kind_counts(),
            has_children=bool(nested is not None and nested.properties),
        )
        if nested is not None:
            yield from _walk(nested, path, depth + 1)


def presence_fraction(present_count: int, total_docs: int) -> float:
    if total_docs <= 0:
        return 0.0
    return present_count / total_docs


def expected_fields(
    stats: Iterable[FieldStat], total_docs: int, config: ProfileConfig
) -> list[FieldStat]:
    """Fields whose presence fraction meets the required threshold.

    Only top-level fields are considered unless ``nested_missing_fields`` is set.
    """
    return [
        stat
        for stat in stats
        if (config.nested_missing_fields or stat.depth == 0)
        and total_docs > 0
        and presence_fraction(stat.present_count, total_docs) >= config.required_threshold
    ]


def collect_missing_examples(
    documents: Iterable[tuple[str, Mapping[str, Any]]],
    deficits: Mapping[str, int],
    limit: int,
) -> dict[str, list[str]]:
    """Second pass: find documents lacking each expected field.

    Args:
        documents: ``(doc_id, payload)`` pairs, the same sequence as the first pass
        deficits: Expected field path -> number of documents missing it
        limit: Maximum example ids per field

    Returns:
        Field path -> example document ids, in document order. Scanning stops
        as soon as every field has ``min(limit, deficit)`` examples.
    """
    targets = {path: min(limit, deficit) for path, deficit in deficits.items() if deficit > 0}
    examples: dict[str, list[str]] = {path: [] for path in targets}
    pending = set(targets)
    if not pending:
        return examples

    for doc_id, data in documents:
        present = {path for path, _ in iter_field_paths(data)}
        for path in sorted(pending - present):
            examples[path].append(doc_id)
            if len(examples[path]) >= targets[path]:
                pending.discard(path)
        if not pending:
            break

    return examples


@dataclass
class DetectionContext:
    """Everything the checks read. Built once pass 1 (and pass 2) are done."""

    config: ProfileConfig
    total_docs: int
    field_stats: list[FieldStat]
    evidence: EvidenceCollector
    missing_examples: dict[str, list[str]] = field(default_factory=dict)

    def fraction(self, stat: FieldStat) -> float:
        return presence_fraction(stat.present_count, self.total_docs)


class IssueCheck(ABC):
    """Base class for the data-quality checks."""

    check_id: str = ""
    description: str = ""

    @abstractmethod
    def detect(self, context: DetectionContext) -> list[Any]:
        """Run the check and return its issues, already ordered."""


class MissingFieldCheck(IssueCheck):
    """Expected fields absent from some documents.

    Fields below the required threshold are never reported here, even when
    mostly present. The threshold trades recall for precision.
    """

    check_id = "missing_fields"
    description = "Expected fields that some documents lack"

    def detect(self, context: DetectionContext) -> list[MissingFieldIssue]:
        issues = []
        for stat in expected_fields(context.field_stats, context.total_docs, context.config):
            missing_count = context.total_docs - stat.present_count
            if missing_count <= 0:
                continue
            issues.append(
                MissingFieldIssue(
                    field=stat.path,
                    missing_count=missing_count,
                    missing_fraction=round(missing_count / context.total_docs, FRACTION_DIGITS),
                    example_doc_ids=context.missing_examples.get(stat.path, []),
                )
            )
        issues.sort(key=lambda issue: (-issue.missing_count, issue.field))
        return issues


class TypeMismatchCheck(IssueCheck):
    """Fields holding more than one non-null kind."""

    check_id = "type_mismatches"
    description = "Fields observed with two or more non-null kinds"

    def detect(self, context: DetectionContext) -> list[TypeMismatchIssue]:
        issues = []
        for stat in context.field_stats:
            if len(stat.non_null_kinds) < 2:
                continue
            by_kind = context.evidence.kind_examples.get(stat.path, {})
            issues.append(
                TypeMismatchIssue(
                    field=stat.path,
                    kinds=stat.kinds,
                    example_doc_ids_by_kind={
                        kind.value: list(by_kind[kind])
                        for kind in sorted(by_kind, key=lambda k: k.value)
                        if by_kind[kind]
                    },
                )
            )
        issues.sort(key=lambda issue: (-len(issue.kinds), issue.field))
        return issues


class RegexViolationCheck(IssueCheck):
    """String values that fail their field's configured pattern."""

    check_id = "regex_violations"
    description = "String values failing a configured regex rule"

    def detect(self, context: DetectionContext) -> list[RegexViolationIssue]:
        issues = []
        for path, rule in context.config.regex_rules.items():
            violations = context.evidence.regex_violations.get(path)
            if not violations:
                continue
            issues.append(
                RegexViolationIssue(
                    field=path,
                    pattern=rule.pattern,
                    note=rule.note,
                    examples=list(violations),
                )
            )
        return issues


class RareFieldCheck(IssueCheck):
    """Fields present in very few documents.

    An object path whose nested fields are reported is skipped, so a stray
    subtree shows up once per leaf rather than once per level.
    """

    check_id = "rare_fields"
    description = "Fields at or below the rare-field presence fraction"

    def detect(self, context: DetectionContext) -> list[RareFieldIssue]:
        issues = []
        for stat in context.field_stats:
            if stat.is_container:
                continue
            fraction = context.fraction(stat)
            if fraction > context.config.rare_field_max_fraction:
                continue
            issues.append(
                RareFieldIssue(
                    field=stat.path,
                    present_count=stat.present_count,
                    present_fraction=round(fraction, FRACTION_DIGITS),
                    example_doc_ids=list(context.evidence.presence_examples.get(stat.path, [])),
                )
            )
        issues.sort(key=lambda issue: (issue.present_fraction, issue.field))
        return issues


class FieldNameVariantCheck(IssueCheck):
    """Groups of field paths that look like spellings of one field.

    The most frequently present path is the canonical one; ties go to the
    lexicographically smallest path. Object paths with nested fields are
    left out; their leaves are compared.
    """

    check_id = "field_name_variants"
    description = "Field paths that normalize to the same name"

    def detect(self, context: DetectionContext) -> list[FieldNameVariantGroup]:
        if not context.config.check_field_name_variants:
            return []

        stats = [stat for stat in context.field_stats if not stat.is_container]
        counts = {stat.path: stat.present_count for stat in stats}
        groups: dict[str, list[str]] = defaultdict(list)
        for stat in stats:
            groups[normalize_field_name(stat.path)].append(stat.path)

        issues = []
        for normalized in sorted(groups):
            paths = groups[normalized]
            if len(paths) <= 1:
                continue
            ordered = sorted(paths, key=lambda p: (-counts[p], p))
            canonical = ordered[0]
            issues.append(
                FieldNameVariantGroup(
                    normalized=normalized,
                    canonical=canonical,
                    canonical_count=counts[canonical],
                    variants=[
                        FieldNameVariant(field=path, present_count=counts[path])
                        for path in ordered[1:]
                    ],
                )
            )
        return issues


BUILTIN_CHECKS: list[type[IssueCheck]] = [
    MissingFieldCheck,
    TypeMismatchCheck,
    RegexViolationCheck,
    RareFieldCheck,
    FieldNameVariantCheck,
]


class IssueDetector:
    """Runs every check against one run's aggregate and evidence."""

    def __init__(self, config: ProfileConfig):
        self.config = config
        self.checks: list[IssueCheck] = [check_class() for check_class in BUILTIN_CHECKS]

    def missing_field_deficits(self, root: ObjectAggregate) -> dict[str, int]:
        """Expected fields with at least one missing document, for pass 2."""
        total = root.total_seen
        return {
            stat.path: total - stat.present_count
            for stat in expected_fields(iter_field_stats(root), total, self.config)
            if stat.present_count < total
        }

    def detect(
        self,
        root: ObjectAggregate,
        evidence: EvidenceCollector,
        missing_examples: dict[str, list[str]] | None = None,
    ) -> IssueSet:
        """Run all checks.

        Args:
            root: Finished root aggregate from pass 1
            evidence: Evidence collected during pass 1
            missing_examples: Pass 2 output from ``collect_missing_examples``

        Returns:
            IssueSet with one ordered list per check
        """
        field_stats = list(iter_field_stats(root))
        context = DetectionContext(
            config=self.config,
            total_docs=root.total_seen,
            field_stats=field_stats,
            evidence=evidence,
            missing_examples=missing_examples or {},
        )

        results: dict[str, list[BaseModel]] = {}
        for check in self.checks:
            results[check.check_id] = check.detect(context)
            logger.debug(
                "check_completed", check=check.check_id, issues=len(results[check.check_id])
            )

        return IssueSet(
            fields_total=len(field_stats),
            expected_fields=[
                stat.path
                for stat in expected_fields(field_stats, context.total_docs, self.config)
            ],
            **results,
        )
