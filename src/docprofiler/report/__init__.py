"""Report assembly.

The report is a pydantic model; rendering to YAML or JSON happens in the CLI.
"""

from docprofiler.report.assembler import assemble_report, summarize_issues
from docprofiler.report.models import IssuesBlock, IssueSummary, ProfileReport, RunMetadata

__all__ = [
    "IssueSummary",
    "IssuesBlock",
    "ProfileReport",
    "RunMetadata",
    "assemble_report",
    "summarize_issues",
]
