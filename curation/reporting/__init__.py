"""Issue reporting: report entries and reporters."""

from curation.reporting.entry import ReportEntry
from curation.reporting.reporters import (
    AllowListReporter,
    MarkdownReporter,
    Reporter,
    ReporterState,
    SortProperty,
)

__all__ = [
    "AllowListReporter",
    "MarkdownReporter",
    "ReportEntry",
    "Reporter",
    "ReporterState",
    "SortProperty",
]
