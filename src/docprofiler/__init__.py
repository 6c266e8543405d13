"""docprofiler - schema inference and data-quality linting for document collections.

Example:
    from docprofiler import ProfileConfig, ProfileMode, run_profile
    from docprofiler.sources import JsonLinesSource

    result = run_profile(JsonLinesSource("users.jsonl"), ProfileConfig(), ProfileMode.FULL)
    report = result.unwrap()
    report.to_dict()
"""

__version__ = "0.1.0"

from docprofiler.core.result import Result
from docprofiler.pipeline.runner import CollectionProfiler, ProfileMode, run_profile
from docprofiler.quality.config import ConfigurationError, ProfileConfig
from docprofiler.report.models import ProfileReport

__all__ = [
    "CollectionProfiler",
    "ConfigurationError",
    "ProfileConfig",
    "ProfileMode",
    "ProfileReport",
    "Result",
    "__version__",
    "run_profile",
]
