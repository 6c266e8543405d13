"""CLI for docprofiler.

Provides commands for profiling JSON Lines document collections.

Usage:
    docprofiler schema users.jsonl
    docprofiler lint users.jsonl --regex 'email=^[^@]+@[^@]+$'
    docprofiler profile users.jsonl --config profile.yaml -o report.yaml

Environment:
    Loads .env file from current directory if present.
    DOCPROFILER_CONFIG_PATH, DOCPROFILER_BATCH_SIZE and DOCPROFILER_LOG_LEVEL
    set defaults for the matching options.
"""

from docprofiler.cli.main import app, main

__all__ = ["app", "main"]
