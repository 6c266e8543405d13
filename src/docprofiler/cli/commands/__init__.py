"""CLI command implementations."""

from docprofiler.cli.commands import lint, profile, schema

__all__ = [
    "lint",
    "profile",
    "schema",
]
