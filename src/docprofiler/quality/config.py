"""Profile run configuration.

A ``ProfileConfig`` is built once, validated, and passed explicitly to every
stage of a run. It is frozen: nothing changes thresholds mid-run.

YAML layout::

    required_threshold: 0.9
    rare_field_max_fraction: 0.05
    examples_per_issue: 20
    check_field_name_variants: true
    sample_limit: null
    include_subcollections: false
    regex_rules:
      date:
        pattern: '^\\d{4}-\\d{2}-\\d{2}$'
        note: YYYY-MM-DD
      time: '^([01]\\d|2[0-3]):[0-5]\\d$'
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    ValidationError,
    ValidationInfo,
    field_validator,
)

from docprofiler.core.logging import get_logger

logger = get_logger(__name__)


class ConfigurationError(Exception):
    """Invalid profile configuration, raised before any document is read."""

    def __init__(self, message: str, option: str | None = None):
        super().__init__(message)
        self.option = option


def strict_end_anchors(pattern: str) -> str:
    r"""Rewrite ``$`` outside character classes to ``\Z``.

    Python's ``$`` also matches just before a trailing newline, so
    ``"ABC\n"`` would pass ``^[A-Z]{3}$``. Escaped dollars and dollars inside
    ``[...]`` are literals and stay as they are.
    """
    out: list[str] = []
    in_class = False
    i = 0
    while i < len(pattern):
        char = pattern[i]
        if char == "\\":
            out.append(pattern[i : i + 2])
            i += 2
            continue
        if in_class:
            if char == "]":
                in_class = False
        elif char == "[":
            in_class = True
            out.append(char)
            i += 1
            if pattern[i : i + 1] == "^":
                out.append("^")
                i += 1
            # a leading ']' is a literal member of the class
            if pattern[i : i + 1] == "]":
                out.append("]")
                i += 1
            continue
        elif char == "$":
            out.append(r"\Z")
            i += 1
            continue
        out.append(char)
        i += 1
    return "".join(out)


class RegexRule(BaseModel):
    """Validation pattern for the string values of one field path.

    ``$`` anchors at the very end of the value, unless the pattern turns on
    multiline mode itself.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    pattern: str = Field(description="Regular expression, searched in the value")
    note: str | None = Field(default=None, description="Human-readable expected format")

    _regex: re.Pattern[str] = PrivateAttr()

    @field_validator("pattern")
    @classmethod
    def _check_pattern(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"invalid regular expression: {e}") from e
        return value

    def model_post_init(self, __context: Any) -> None:
        """Compile regex pattern."""
        compiled = re.compile(self.pattern)
        if not compiled.flags & re.MULTILINE:
            compiled = re.compile(strict_end_anchors(self.pattern))
        self._regex = compiled

    def matches(self, value: str) -> bool:
        """Check a string value against the pattern (``re.search`` semantics)."""
        return self._regex.search(value) is not None


class ProfileConfig(BaseModel):
    """Thresholds and rules for one profiling run."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    required_threshold: float = Field(
        default=0.9,
        gt=0.0,
        le=1.0,
        description="Presence fraction at or above which a field is expected",
    )
    rare_field_max_fraction: float = Field(
        default=0.05,
        ge=0.0,
        lt=1.0,
        description="Presence fraction at or below which a field is rare",
    )
    examples_per_issue: int = Field(
        default=20,
        ge=1,
        description="Cap on example document ids per issue",
    )
    regex_rules: dict[str, RegexRule] = Field(
        default_factory=dict,
        description="Field path -> validation rule for string values",
    )
    check_field_name_variants: bool = Field(
        default=True,
        description="Group field paths that differ only by case, dots or underscores",
    )
    sample_limit: int | None = Field(
        default=None,
        ge=1,
        description="Maximum number of documents to scan (None = all)",
    )
    include_example: bool = Field(
        default=True,
        description="Attach the document with the most top-level fields to the report",
    )
    nested_missing_fields: bool = Field(
        default=False,
        description="Check nested field paths for missing values, not just top-level fields",
    )
    include_subcollections: bool = Field(
        default=False,
        description="Profile each document's direct subcollections into one schema per name",
    )
    examples_per_subcollection: int = Field(
        default=1,
        ge=1,
        description="Documents shown from each subcollection of the example document",
    )

    @field_validator("rare_field_max_fraction")
    @classmethod
    def _rare_below_required(cls, value: float, info: ValidationInfo) -> float:
        required = info.data.get("required_threshold")
        if required is not None and value >= required:
            raise ValueError(f"must be below required_threshold ({required})")
        return value

    @field_validator("regex_rules", mode="before")
    @classmethod
    def _expand_shorthand_rules(cls, value: Any) -> Any:
        if not isinstance(value, Mapping):
            return value
        return {
            path: {"pattern": rule} if isinstance(rule, str) else rule
            for path, rule in value.items()
        }


def _format_validation_error(error: ValidationError, source_name: str) -> ConfigurationError:
    details = []
    for item in error.errors():
        location = ".".join(str(loc) for loc in item["loc"])
        details.append(f"{location}: {item['msg']}")

    first = error.errors()[0] if error.errors() else None
    option = ".".join(str(loc) for loc in first["loc"]) if first else None
    message = f"Invalid configuration in {source_name}:\n" + "\n".join(details)
    return ConfigurationError(message, option=option or None)


def build_profile_config(
    data: Mapping[str, Any] | None = None,
    source_name: str = "options",
    **overrides: Any,
) -> ProfileConfig:
    """Validate raw options into a ProfileConfig.

    Args:
        data: Raw option mapping (e.g. parsed YAML)
        source_name: Where the options came from, for error messages
        **overrides: Options that take precedence over ``data``; None values are ignored

    Returns:
        Validated, frozen ProfileConfig

    Raises:
        ConfigurationError: If any option is invalid; ``option`` names the first one
    """
    merged: dict[str, Any] = dict(data or {})
    for key, value in overrides.items():
        if value is not None:
            merged[key] = value

    try:
        return ProfileConfig(**merged)
    except ValidationError as e:
        raise _format_validation_error(e, source_name) from e


def load_profile_config(config_path: Path | str, **overrides: Any) -> ProfileConfig:
    """Load a profile configuration from a YAML file.

    Args:
        config_path: Path to the YAML file
        **overrides: Options that take precedence over the file (None = keep file value)

    Returns:
        Validated ProfileConfig

    Raises:
        ConfigurationError: If the file is missing, unparsable or invalid
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}", option="config")

    try:
        with open(config_path, encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}", option="config") from e
    except OSError as e:
        raise ConfigurationError(
            f"Failed to read configuration {config_path}: {e}", option="config"
        ) from e

    if raw_config is None:
        logger.warning("empty_configuration_file", path=str(config_path))
        raw_config = {}

    if not isinstance(raw_config, dict):
        raise ConfigurationError(
            f"Configuration file must contain a YAML mapping: {config_path}", option="config"
        )

    config = build_profile_config(raw_config, source_name=str(config_path), **overrides)
    logger.info(
        "profile_config_loaded",
        path=str(config_path),
        regex_rules=len(config.regex_rules),
    )
    return config
