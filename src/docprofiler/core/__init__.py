"""Core module - settings, logging and the shared Result type."""

from docprofiler.core.config import Settings, get_settings
from docprofiler.core.result import Result

__all__ = [
    "Result",
    "Settings",
    "get_settings",
]
