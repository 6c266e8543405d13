"""Main CLI application entry point."""

from __future__ import annotations

import typer

from docprofiler.cli.commands import lint, profile, schema

app = typer.Typer(
    name="docprofiler",
    help="Profile document collections: infer schemas and report data-quality issues.",
    no_args_is_help=True,
)

# Register commands
app.command()(schema.schema)
app.command()(lint.lint)
app.command()(profile.profile)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
