"""Schema command - infer the structure of a collection."""

from __future__ import annotations

from docprofiler.cli.common import (
    BatchSizeOption,
    ConfigOption,
    FormatOption,
    IdFieldOption,
    LimitOption,
    LogFormatOption,
    NameOption,
    NoExampleFlag,
    OutputOption,
    SourceArg,
    SubcollectionsFlag,
    VerboseOption,
    execute,
)
from docprofiler.pipeline.runner import ProfileMode


def schema(
    source: SourceArg,
    config: ConfigOption = None,
    name: NameOption = None,
    id_field: IdFieldOption = "id",
    limit: LimitOption = None,
    batch_size: BatchSizeOption = None,
    no_example: NoExampleFlag = False,
    subcollections: SubcollectionsFlag = False,
    report_format: FormatOption = "yaml",
    output: OutputOption = None,
    verbose: VerboseOption = 0,
    log_format: LogFormatOption = "console",
) -> None:
    """Infer a schema: field types, optionality, unions and maps.

    Examples:

        docprofiler schema users.jsonl

        docprofiler schema users.jsonl --limit 1000 --format json

        docprofiler schema users.jsonl -o users.schema.yaml

        docprofiler schema users.jsonl --subcollections   # users/<id>/*.jsonl
    """
    execute(
        ProfileMode.SCHEMA,
        source,
        config_path=config,
        name=name,
        id_field=id_field,
        batch_size=batch_size,
        report_format=report_format,
        output=output,
        verbose=verbose,
        log_format=log_format,
        sample_limit=limit,
        include_example=False if no_example else None,
        include_subcollections=True if subcollections else None,
    )
