"""Pydantic models for data-quality issues.

Each check produces an ordered list of one issue type. Example evidence is
always capped at ``examples_per_issue`` and kept in first-seen order.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class FieldStat(BaseModel):
    """Presence and kind counts for one dotted field path."""

    path: str
    depth: int = Field(description="0 for top-level fields")
    present_count: int
    kinds: dict[str, int] = Field(description="Observations per kind name")
    has_children: bool = Field(
        default=False, description="Some object value at this path had fields of its own"
    )

    @property
    def non_null_kinds(self) -> list[str]:
        return [kind for kind in self.kinds if kind != "null"]

    @property
    def is_container(self) -> bool:
        """Only ever an object with nested fields, which are reported themselves."""
        return self.has_children and self.non_null_kinds == ["object"]


class MissingFieldIssue(BaseModel):
    """An expected field that some documents lack."""

    field: str
    missing_count: int
    missing_fraction: float
    example_doc_ids: list[str] = Field(default_factory=list)


class TypeMismatchIssue(BaseModel):
    """A field observed with more than one non-null kind."""

    field: str
    kinds: dict[str, int]
    example_doc_ids_by_kind: dict[str, list[str]] = Field(default_factory=dict)


class RegexViolationExample(BaseModel):
    """One string value that failed its field's pattern."""

    doc_id: str
    value: Any


class RegexViolationIssue(BaseModel):
    """String values of a field that do not match the configured pattern."""

    field: str
    pattern: str
    note: str | None = None
    examples: list[RegexViolationExample] = Field(default_factory=list)


class RareFieldIssue(BaseModel):
    """A field present in very few documents, often a typo or stray write."""

    field: str
    present_count: int
    present_fraction: float
    example_doc_ids: list[str] = Field(default_factory=list)


class FieldNameVariant(BaseModel):
    """One spelling within a field-name variant group."""

    field: str
    present_count: int


class FieldNameVariantGroup(BaseModel):
    """Field paths that normalize to the same key."""

    normalized: str
    canonical: str
    canonical_count: int
    variants: list[FieldNameVariant]


class IssueSet(BaseModel):
    """Results of all five checks for one run."""

    fields_total: int = 0
    expected_fields: list[str] = Field(default_factory=list)
    missing_fields: list[MissingFieldIssue] = Field(default_factory=list)
    type_mismatches: list[TypeMismatchIssue] = Field(default_factory=list)
    regex_violations: list[RegexViolationIssue] = Field(default_factory=list)
    rare_fields: list[RareFieldIssue] = Field(default_factory=list)
    field_name_variants: list[FieldNameVariantGroup] = Field(default_factory=list)

    @property
    def issue_count(self) -> int:
        return (
            len(self.missing_fields)
            + len(self.type_mismatches)
            + len(self.regex_violations)
            + len(self.rare_fields)
            + len(self.field_name_variants)
        )
