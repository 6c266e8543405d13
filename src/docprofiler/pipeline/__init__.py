"""Profiling run orchestration."""

from docprofiler.pipeline.runner import (
    CollectionProfiler,
    ProfileMode,
    RunCancelled,
    run_profile,
)

__all__ = [
    "CollectionProfiler",
    "ProfileMode",
    "RunCancelled",
    "run_profile",
]
