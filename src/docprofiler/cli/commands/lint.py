"""Lint command - report data-quality issues in a collection."""

from __future__ import annotations

from docprofiler.cli.common import (
    BatchSizeOption,
    ConfigOption,
    ExamplesOption,
    FormatOption,
    IdFieldOption,
    LimitOption,
    LogFormatOption,
    NameOption,
    NestedMissingFlag,
    NoVariantsFlag,
    OutputOption,
    RareFractionOption,
    RegexOption,
    RequiredThresholdOption,
    SourceArg,
    VerboseOption,
    execute,
)
from docprofiler.pipeline.runner import ProfileMode


def lint(
    source: SourceArg,
    config: ConfigOption = None,
    name: NameOption = None,
    id_field: IdFieldOption = "id",
    limit: LimitOption = None,
    batch_size: BatchSizeOption = None,
    required_threshold: RequiredThresholdOption = None,
    rare_fraction: RareFractionOption = None,
    examples: ExamplesOption = None,
    regex: RegexOption = None,
    no_variants: NoVariantsFlag = False,
    nested_missing: NestedMissingFlag = False,
    report_format: FormatOption = "yaml",
    output: OutputOption = None,
    verbose: VerboseOption = 0,
    log_format: LogFormatOption = "console",
) -> None:
    """Find missing fields, type mismatches, regex violations, rare fields and name variants.

    Examples:

        docprofiler lint users.jsonl

        docprofiler lint users.jsonl --regex 'status.code=^[A-Z]{3}$'

        docprofiler lint users.jsonl --config profile.yaml --required-threshold 0.8
    """
    execute(
        ProfileMode.LINT,
        source,
        config_path=config,
        name=name,
        id_field=id_field,
        batch_size=batch_size,
        report_format=report_format,
        output=output,
        verbose=verbose,
        log_format=log_format,
        regex=regex,
        sample_limit=limit,
        required_threshold=required_threshold,
        rare_field_max_fraction=rare_fraction,
        examples_per_issue=examples,
        check_field_name_variants=False if no_variants else None,
        nested_missing_fields=True if nested_missing else None,
        include_example=False,
    )
