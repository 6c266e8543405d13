"""Data-quality module.

Derives issues from a profiled collection:
- Profile configuration (thresholds, regex rules) and its YAML loader
- Pass-1 evidence collection (bounded example ids)
- The five checks and the pass-2 missing-field scan
"""

from docprofiler.quality.config import (
    ConfigurationError,
    ProfileConfig,
    RegexRule,
    build_profile_config,
    load_profile_config,
)
from docprofiler.quality.detectors import (
    BUILTIN_CHECKS,
    DetectionContext,
    IssueCheck,
    IssueDetector,
    collect_missing_examples,
    iter_field_stats,
)
from docprofiler.quality.evidence import EvidenceCollector, iter_field_paths, normalize_field_name
from docprofiler.quality.models import (
    FieldNameVariant,
    FieldNameVariantGroup,
    FieldStat,
    IssueSet,
    MissingFieldIssue,
    RareFieldIssue,
    RegexViolationExample,
    RegexViolationIssue,
    TypeMismatchIssue,
)

__all__ = [
    # Config
    "ConfigurationError",
    "ProfileConfig",
    "RegexRule",
    "build_profile_config",
    "load_profile_config",
    # Evidence
    "EvidenceCollector",
    "iter_field_paths",
    "normalize_field_name",
    # Checks
    "BUILTIN_CHECKS",
    "DetectionContext",
    "IssueCheck",
    "IssueDetector",
    "collect_missing_examples",
    "iter_field_stats",
    # Models
    "FieldNameVariant",
    "FieldNameVariantGroup",
    "FieldStat",
    "IssueSet",
    "MissingFieldIssue",
    "RareFieldIssue",
    "RegexViolationExample",
    "RegexViolationIssue",
    "TypeMismatchIssue",
]
