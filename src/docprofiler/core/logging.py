"""Structured logging for profiling runs.

Usage:
    from docprofiler.core.logging import get_logger, configure_logging

    # Configure at startup
    configure_logging(log_level="INFO", log_format="console")

    # Get logger in any module
    logger = get_logger(__name__)

    # Log with structured context
    logger.info("pass_started", pass_number=1, collection="users")

    # Scoped context is merged into every event inside the block
    with log_context(run_id="run-123", collection="users"):
        logger.info("documents_folded", documents=1000)
"""

from __future__ import annotations

import logging
import sys
from collections.abc import MutableMapping
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, cast

import structlog
from structlog.typing import FilteringBoundLogger

_run_context: ContextVar[dict[str, Any] | None] = ContextVar("run_context", default=None)


@dataclass
class PassMetrics:
    """Counters collected while one document pass is running."""

    pass_name: str
    start_time: datetime = field(default_factory=lambda: datetime.now(UTC))
    end_time: datetime | None = None

    documents_processed: int = 0

    @property
    def duration_seconds(self) -> float:
        """Get duration in seconds."""
        if self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return (datetime.now(UTC) - self.start_time).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "pass_name": self.pass_name,
            "duration_seconds": round(self.duration_seconds, 4),
            "documents_processed": self.documents_processed,
        }


@dataclass
class RunMetrics:
    """Aggregate metrics for an entire profiling run."""

    run_id: str
    collection: str
    start_time: datetime = field(default_factory=lambda: datetime.now(UTC))
    end_time: datetime | None = None
    passes: list[PassMetrics] = field(default_factory=list)

    @property
    def duration_seconds(self) -> float:
        """Get total duration in seconds."""
        if self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return (datetime.now(UTC) - self.start_time).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "run_id": self.run_id,
            "collection": self.collection,
            "duration_seconds": round(self.duration_seconds, 4),
            "pass_count": len(self.passes),
            "total_documents_processed": sum(p.documents_processed for p in self.passes),
            "passes": [p.to_dict() for p in self.passes],
        }


_current_metrics: ContextVar[RunMetrics | None] = ContextVar("current_metrics", default=None)
_current_pass_metrics: ContextVar[PassMetrics | None] = ContextVar(
    "current_pass_metrics", default=None
)


def start_run_metrics(run_id: str, collection: str) -> RunMetrics:
    """Start collecting metrics for a profiling run."""
    metrics = RunMetrics(run_id=run_id, collection=collection)
    _current_metrics.set(metrics)
    return metrics


def get_run_metrics() -> RunMetrics | None:
    """Get current run metrics."""
    return _current_metrics.get()


def start_pass_metrics(pass_name: str) -> PassMetrics:
    """Start collecting metrics for a document pass."""
    metrics = PassMetrics(pass_name=pass_name)
    _current_pass_metrics.set(metrics)
    return metrics


def end_pass_metrics() -> PassMetrics | None:
    """End current pass metrics and attach them to the run."""
    pass_metrics = _current_pass_metrics.get()
    if pass_metrics:
        pass_metrics.end_time = datetime.now(UTC)
        run_metrics = _current_metrics.get()
        if run_metrics:
            run_metrics.passes.append(pass_metrics)
        _current_pass_metrics.set(None)
    return pass_metrics


def end_run_metrics() -> RunMetrics | None:
    """End run metrics collection."""
    metrics = _current_metrics.get()
    if metrics:
        metrics.end_time = datetime.now(UTC)
        _current_metrics.set(None)
    return metrics


def record_documents_processed(count: int = 1) -> None:
    """Record documents processed in the current pass."""
    metrics = _current_pass_metrics.get()
    if metrics:
        metrics.documents_processed += count


def _add_run_context(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Processor to add run context to log events."""
    context = _run_context.get()
    if context:
        event_dict.update(context)
    return event_dict


def _add_metrics_context(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Processor to tag events with the active pass and run."""
    pass_metrics = _current_pass_metrics.get()
    if pass_metrics:
        event_dict["_pass"] = pass_metrics.pass_name
    run_metrics = _current_metrics.get()
    if run_metrics:
        event_dict["_run_id"] = run_metrics.run_id
    return event_dict


def configure_logging(
    log_level: str = "INFO",
    log_format: str = "console",
    show_timestamps: bool = True,
    color: bool = True,
) -> None:
    """Configure structured logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_format: Output format ("console" for terminals, "json" for log shipping)
        show_timestamps: Whether to show timestamps
        color: Whether to use colors in console mode
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        _add_run_context,
        _add_metrics_context,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if show_timestamps:
        shared_processors.insert(0, structlog.processors.TimeStamper(fmt="iso", utc=True))

    if log_format == "json":
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(
                colors=color,
                exception_formatter=structlog.dev.plain_traceback,
            ),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, log_level.upper())),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, log_level.upper()),
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )


def get_logger(name: str | None = None) -> FilteringBoundLogger:
    """Get a structured logger.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Bound structlog logger
    """
    return cast(FilteringBoundLogger, structlog.get_logger(name))


class LogContext:
    """Context manager for adding context to logs within a scope."""

    def __init__(self, **context: Any):
        self.context = context
        self.token: Any = None

    def __enter__(self) -> LogContext:
        current = _run_context.get() or {}
        self.token = _run_context.set({**current, **self.context})
        return self

    def __exit__(self, *args: Any) -> None:
        if self.token:
            _run_context.reset(self.token)


def log_context(**context: Any) -> LogContext:
    """Create a context manager for scoped logging context.

    Usage:
        with log_context(run_id="abc", collection="users"):
            logger.info("pass_started")  # Will include run_id and collection
    """
    return LogContext(**context)


configure_logging(log_level="WARNING")
