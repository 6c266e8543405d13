"""Shared CLI utilities and constants."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Any

import typer
import yaml
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape

from docprofiler.core.config import get_settings
from docprofiler.core.logging import configure_logging
from docprofiler.pipeline.runner import ProfileMode, run_profile
from docprofiler.quality.config import (
    ConfigurationError,
    ProfileConfig,
    build_profile_config,
    load_profile_config,
)
from docprofiler.report.models import ProfileReport
from docprofiler.sources.jsonl import JsonLinesSource

# Load .env file from current directory (DOCPROFILER_* settings)
load_dotenv()

# Reports go to stdout, everything else to stderr
console = Console()
err_console = Console(stderr=True)

REPORT_FORMATS = ("yaml", "json")

# Common type aliases for typer options
SourceArg = Annotated[
    Path,
    typer.Argument(
        help="JSON Lines file with one document per line",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
    ),
]

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="YAML profile configuration (default: $DOCPROFILER_CONFIG_PATH)",
    ),
]

NameOption = Annotated[
    str | None,
    typer.Option(
        "--name",
        "-n",
        help="Collection name for the report (default: file name)",
    ),
]

IdFieldOption = Annotated[
    str,
    typer.Option(
        "--id-field",
        help="Document field holding the document id",
    ),
]

LimitOption = Annotated[
    int | None,
    typer.Option(
        "--limit",
        "-l",
        help="Scan at most this many documents",
    ),
]

BatchSizeOption = Annotated[
    int | None,
    typer.Option(
        "--batch-size",
        min=1,
        help="Documents fetched per batch (default: $DOCPROFILER_BATCH_SIZE)",
    ),
]

RequiredThresholdOption = Annotated[
    float | None,
    typer.Option(
        "--required-threshold",
        help="Presence fraction at or above which a field is expected",
    ),
]

RareFractionOption = Annotated[
    float | None,
    typer.Option(
        "--rare-fraction",
        help="Presence fraction at or below which a field is rare",
    ),
]

ExamplesOption = Annotated[
    int | None,
    typer.Option(
        "--examples",
        help="Maximum example document ids per issue",
    ),
]

RegexOption = Annotated[
    list[str] | None,
    typer.Option(
        "--regex",
        "-r",
        help="Regex rule as FIELD=PATTERN (repeatable)",
    ),
]

NoVariantsFlag = Annotated[
    bool,
    typer.Option(
        "--no-variants",
        help="Skip the field-name variant check",
    ),
]

NestedMissingFlag = Annotated[
    bool,
    typer.Option(
        "--nested-missing",
        help="Check nested fields for missing values, not just top-level ones",
    ),
]

NoExampleFlag = Annotated[
    bool,
    typer.Option(
        "--no-example",
        help="Leave the representative example document out of the report",
    ),
]

SubcollectionsFlag = Annotated[
    bool,
    typer.Option(
        "--subcollections",
        help="Profile subcollections stored as SOURCE_STEM/DOC_ID/NAME.jsonl",
    ),
]

FormatOption = Annotated[
    str,
    typer.Option(
        "--format",
        "-f",
        help="Report format (yaml or json)",
    ),
]

OutputOption = Annotated[
    Path | None,
    typer.Option(
        "--output",
        "-o",
        help="Write the report to this file instead of stdout",
    ),
]

VerboseOption = Annotated[
    int,
    typer.Option(
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-v=INFO, -vv=DEBUG)",
    ),
]

LogFormatOption = Annotated[
    str,
    typer.Option(
        "--log-format",
        help="Log output format (console or json)",
    ),
]


def setup_logging(verbosity: int = 0, log_format: str = "console") -> None:
    """Configure structured logging based on verbosity level.

    Args:
        verbosity: 0=settings log level (WARNING by default), 1=INFO, 2+=DEBUG
        log_format: "console" for terminals, "json" for log shipping
    """
    if verbosity >= 2:
        level = "DEBUG"
    elif verbosity >= 1:
        level = "INFO"
    else:
        level = get_settings().log_level

    configure_logging(
        log_level=level,
        log_format=log_format,
        show_timestamps=verbosity >= 1,
        color=log_format == "console",
    )


def parse_regex_rules(values: list[str] | None) -> dict[str, str]:
    """Parse repeated ``FIELD=PATTERN`` options.

    Raises:
        ConfigurationError: If a value has no ``=`` or an empty field path
    """
    rules: dict[str, str] = {}
    for value in values or []:
        path, sep, pattern = value.partition("=")
        if not sep or not path.strip():
            raise ConfigurationError(
                f"Invalid --regex value {value!r}, expected FIELD=PATTERN", option="regex_rules"
            )
        rules[path.strip()] = pattern
    return rules


def build_config(
    config_path: Path | None,
    regex: list[str] | None = None,
    **overrides: Any,
) -> ProfileConfig:
    """Combine the YAML configuration with command-line overrides.

    Command-line regex rules are added to the file's rules, replacing a
    file rule for the same field.
    """
    cli_rules = parse_regex_rules(regex)
    if config_path is None:
        config_path = get_settings().config_path

    if config_path is not None:
        config = load_profile_config(config_path, **overrides)
    else:
        config = build_profile_config(source_name="command line", **overrides)

    if cli_rules:
        rules: dict[str, Any] = {**config.regex_rules, **cli_rules}
        config = build_profile_config(
            config.model_dump(), source_name="command line", regex_rules=rules
        )
    return config


def render_report(report: ProfileReport, report_format: str) -> str:
    """Serialize a report as YAML or JSON text."""
    data = report.to_dict()
    if report_format == "json":
        return json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    return yaml.safe_dump(data, sort_keys=False, allow_unicode=True, default_flow_style=False)


def execute(
    mode: ProfileMode,
    source_path: Path,
    *,
    config_path: Path | None,
    name: str | None,
    id_field: str,
    batch_size: int | None,
    report_format: str,
    output: Path | None,
    verbose: int,
    log_format: str,
    regex: list[str] | None = None,
    **overrides: Any,
) -> None:
    """Run one profiling command end to end and exit with its status.

    Exit codes: 0 on success, 1 when the run fails, 2 on invalid configuration.
    """
    setup_logging(verbosity=verbose, log_format=log_format)

    if report_format not in REPORT_FORMATS:
        err_console.print(
            f"[red]Unknown report format {escape(repr(report_format))} "
            f"(choose from {', '.join(REPORT_FORMATS)})[/red]"
        )
        raise typer.Exit(2)

    try:
        config = build_config(config_path, regex, **overrides)
    except ConfigurationError as e:
        err_console.print(f"[red]Configuration error[/red] ({e.option or 'config'}):")
        err_console.print(str(e), markup=False, highlight=False)
        raise typer.Exit(2) from e

    source = JsonLinesSource(source_path, id_field=id_field, name=name)
    result = run_profile(source, config, mode=mode, batch_size=batch_size)

    if not result.success:
        err_console.print(f"[red]Error: {escape(result.error or '')}[/red]")
        raise typer.Exit(1)

    report = result.unwrap()
    text = render_report(report, report_format)

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text, encoding="utf-8")
        err_console.print(f"Report written to [cyan]{escape(str(output))}[/cyan]")
    else:
        console.out(text, end="", highlight=False)

    for warning in result.warnings:
        err_console.print(f"[yellow]Warning:[/yellow] {escape(warning)}")

    if report.summary is not None:
        summary = report.summary
        err_console.print(
            f"{report.meta.documents_scanned} documents, {summary.fields_total} fields: "
            f"{summary.missing_fields} missing, {summary.type_mismatches} mismatched, "
            f"{summary.regex_violations} regex, {summary.rare_fields} rare, "
            f"{summary.field_name_variants} variant groups"
        )
