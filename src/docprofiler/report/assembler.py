"""Joins schema, issues and run metadata into a ProfileReport."""

from __future__ import annotations

from docprofiler.profiling.examples import ExampleDocument
from docprofiler.profiling.schema import SchemaNode
from docprofiler.quality.models import IssueSet
from docprofiler.report.models import IssuesBlock, IssueSummary, ProfileReport, RunMetadata


def _documents_with_examples(issues: IssueSet) -> int:
    doc_ids: set[str] = set()
    for missing in issues.missing_fields:
        doc_ids.update(missing.example_doc_ids)
    for mismatch in issues.type_mismatches:
        for ids in mismatch.example_doc_ids_by_kind.values():
            doc_ids.update(ids)
    for violation in issues.regex_violations:
        doc_ids.update(example.doc_id for example in violation.examples)
    return len(doc_ids)


def summarize_issues(issues: IssueSet) -> IssueSummary:
    """Counts per issue section, plus how many documents the examples touch."""
    return IssueSummary(
        fields_total=issues.fields_total,
        expected_fields=len(issues.expected_fields),
        missing_fields=len(issues.missing_fields),
        type_mismatches=len(issues.type_mismatches),
        regex_violations=len(issues.regex_violations),
        rare_fields=len(issues.rare_fields),
        field_name_variants=len(issues.field_name_variants),
        documents_with_issue_examples=_documents_with_examples(issues),
    )


def assemble_report(
    meta: RunMetadata,
    schema: SchemaNode | None = None,
    issues: IssueSet | None = None,
    example: ExampleDocument | None = None,
    subcollections: dict[str, SchemaNode] | None = None,
) -> ProfileReport:
    """Build the final report.

    Empty issue lists become absent sections. When issue detection ran, the
    summary block is always present, even if every count is zero.

    Args:
        meta: Run metadata
        schema: Schema summary, if the run produced one
        issues: Issue set, if the run produced one
        example: Representative example document
        subcollections: Schema per subcollection name; empty means none found

    Returns:
        ProfileReport
    """
    summary = None
    block = None
    if issues is not None:
        summary = summarize_issues(issues)
        block = IssuesBlock(
            missing_fields=issues.missing_fields or None,
            type_mismatches=issues.type_mismatches or None,
            regex_violations=issues.regex_violations or None,
            rare_fields=issues.rare_fields or None,
            field_name_variants=issues.field_name_variants or None,
        )

    return ProfileReport(
        meta=meta,
        document_schema=schema,
        subcollections=subcollections or None,
        example=example,
        summary=summary,
        issues=block,
    )
