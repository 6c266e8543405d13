"""Report models.

``ProfileReport`` is the one structured value a run produces. Renderers
(YAML, JSON) consume ``ProfileReport.to_dict()``; sections with nothing to
say are absent rather than empty.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from docprofiler.profiling.examples import ExampleDocument
from docprofiler.profiling.schema import SchemaNode
from docprofiler.quality.models import (
    FieldNameVariantGroup,
    MissingFieldIssue,
    RareFieldIssue,
    RegexViolationIssue,
    TypeMismatchIssue,
)


class RunMetadata(BaseModel):
    """What was scanned and with which thresholds."""

    collection: str
    mode: str
    documents_scanned: int
    sample_limit: int | None = None
    required_threshold: float
    rare_field_max_fraction: float
    examples_per_issue: int
    check_field_name_variants: bool
    include_subcollections: bool = False
    regex_rules: dict[str, str] = Field(default_factory=dict)


class IssueSummary(BaseModel):
    """Issue counts per section."""

    fields_total: int
    expected_fields: int
    missing_fields: int
    type_mismatches: int
    regex_violations: int
    rare_fields: int
    field_name_variants: int
    documents_with_issue_examples: int


class IssuesBlock(BaseModel):
    """The five issue sections. A None section means no issues of that kind."""

    missing_fields: list[MissingFieldIssue] | None = None
    type_mismatches: list[TypeMismatchIssue] | None = None
    regex_violations: list[RegexViolationIssue] | None = None
    rare_fields: list[RareFieldIssue] | None = None
    field_name_variants: list[FieldNameVariantGroup] | None = None


class ProfileReport(BaseModel):
    """Final result of a profiling run."""

    model_config = ConfigDict(populate_by_name=True)

    meta: RunMetadata
    # 'schema' would shadow BaseModel.schema, so the attribute is renamed
    document_schema: SchemaNode | None = Field(default=None, alias="schema")
    subcollections: dict[str, SchemaNode] | None = Field(
        default=None, description="Merged schema per subcollection name"
    )
    example: ExampleDocument | None = None
    summary: IssueSummary | None = None
    issues: IssuesBlock | None = None

    def to_dict(self) -> dict[str, Any]:
        """Plain JSON-safe data, absent sections dropped."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
