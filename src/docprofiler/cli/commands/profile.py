"""Profile command - schema and data-quality issues in one run."""

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
    NoExampleFlag,
    NoVariantsFlag,
    OutputOption,
    RareFractionOption,
    RegexOption,
    RequiredThresholdOption,
    SourceArg,
    SubcollectionsFlag,
    VerboseOption,
    execute,
)
from docprofiler.pipeline.runner import ProfileMode


def profile(
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
    no_example: NoExampleFlag = False,
    subcollections: SubcollectionsFlag = False,
    report_format: FormatOption = "yaml",
    output: OutputOption = None,
    verbose: VerboseOption = 0,
    log_format: LogFormatOption = "console",
) -> None:
    """Profile a collection: schema, issues and an example document.

    Examples:

        docprofiler profile users.jsonl

        docprofiler profile users.jsonl -v              # Show INFO level logs

        docprofiler profile users.jsonl --log-format json -vv
    """
    execute(
        ProfileMode.FULL,
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
        include_example=False if no_example else None,
        include_subcollections=True if subcollections else None,
    )
