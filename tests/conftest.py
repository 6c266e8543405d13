"""Shared pytest fixtures for all tests."""

from __future__ import annotations

import json
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import Any

import pytest

from docprofiler.core.config import get_settings
from docprofiler.core.logging import configure_logging
from docprofiler.quality.config import ProfileConfig
from docprofiler.sources.memory import InMemorySource


@pytest.fixture(autouse=True)
def _reset_logging_and_settings(monkeypatch: pytest.MonkeyPatch):
    """Bind logging to this test's stderr and start from default settings.

    CLI tests reconfigure logging against the runner's captured streams, which
    are closed afterwards.
    """
    for name in ("DOCPROFILER_CONFIG_PATH", "DOCPROFILER_BATCH_SIZE", "DOCPROFILER_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    configure_logging(log_level="WARNING", color=False)
    yield
    get_settings.cache_clear()


@pytest.fixture
def config() -> ProfileConfig:
    """Default profile configuration."""
    return ProfileConfig()


@pytest.fixture
def make_source() -> Callable[..., InMemorySource]:
    """Build an in-memory source from payloads, ids ``doc-0``, ``doc-1``, ..."""

    def _make(payloads: Iterable[Mapping[str, Any]], name: str = "test") -> InMemorySource:
        return InMemorySource(
            [(f"doc-{i}", payload) for i, payload in enumerate(payloads)], name=name
        )

    return _make


@pytest.fixture
def write_jsonl(tmp_path: Path) -> Callable[..., Path]:
    """Write documents to a JSON Lines file under tmp_path."""

    def _write(documents: Iterable[Mapping[str, Any]], name: str = "docs.jsonl") -> Path:
        path = tmp_path / name
        path.write_text("".join(json.dumps(doc) + "\n" for doc in documents))
        return path

    return _write
