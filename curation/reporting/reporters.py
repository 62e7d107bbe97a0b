"""
Reporters collecting the issues raised during a curation run.

Every reporter follows the same lifecycle: initialize() opens a report,
append() collects entries while the report is open and finalize() renders
the report and closes it. MarkdownReporter keeps all entries and writes one
markdown file at the end; AllowListReporter only counts entries and is used
to make step and pipeline behaviour assertable in tests.
"""

from abc import ABC, abstractmethod
from collections import Counter
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional

from loguru import logger
from rdkit import Chem

from curation.core.errors import ErrorCode, ReporterStateError, error_message
from curation.reporting.entry import ReportEntry

DEFAULT_REPORT_DIR = Path("Processing_Reports")
NO_STRUCTURE_PLACEHOLDER = "[no structure]"

_ERROR_CODE_ORDER = {code: index for index, code in enumerate(ErrorCode)}


class ReporterState(str, Enum):
    """Lifecycle states of a reporter."""
    UNINITIALIZED = "uninitialized"
    COLLECTING = "collecting"
    FINALIZED = "finalized"


class SortProperty(str, Enum):
    """Orderings of the entries of a rendered report."""
    STEP_POSITION = "step_position"
    ERROR_CODE = "error_code"
    RECORD_ID = "record_id"
    EXTERNAL_ID = "external_id"


def position_sort_key(position: Optional[str]) -> tuple:
    """
    Sort key ordering hierarchical positions naturally ("2" < "2.1" < "10").

    Top-level (None) positions sort first.
    """
    if position is None:
        return (0, ())
    parts = []
    for part in position.split("."):
        parts.append((0, int(part), "") if part.isdigit() else (1, 0, part))
    return (1, tuple(parts))


def _optional_text_key(value: Optional[str]) -> tuple:
    if value is None:
        return (0, 0, "")
    if value.isdigit():
        return (1, int(value), value)
    return (2, 0, value)


def entry_sort_key(entry: ReportEntry, sort_by: SortProperty = SortProperty.STEP_POSITION) -> tuple:
    """Sort key of a report entry; ties are broken by step position, then error code."""
    default_key = (position_sort_key(entry.step_position), _ERROR_CODE_ORDER[entry.error_code])
    if sort_by == SortProperty.STEP_POSITION:
        return default_key
    if sort_by == SortProperty.ERROR_CODE:
        return (_ERROR_CODE_ORDER[entry.error_code],) + default_key
    if sort_by == SortProperty.RECORD_ID:
        return (_optional_text_key(entry.record_id),) + default_key
    return (_optional_text_key(entry.external_id),) + default_key


class Reporter(ABC):
    """
    Base class of all reporters.

    Implements the lifecycle state machine; subclasses implement how entries
    are collected, rendered and dropped.
    """

    def __init__(self):
        self._state = ReporterState.UNINITIALIZED
        self.ended_with_fatal_exception = False

    @property
    def state(self) -> ReporterState:
        """Current lifecycle state."""
        return self._state

    def initialize(self) -> None:
        """
        Open a new report, dropping data of any previous one.

        Raises:
            ReporterStateError: If the previous report was not finalized.
        """
        if self._state == ReporterState.COLLECTING:
            raise ReporterStateError("The previous report has not been finalized.")
        self.clear()
        self.ended_with_fatal_exception = False
        self._state = ReporterState.COLLECTING

    def append(self, entry: ReportEntry) -> None:
        """
        Add an entry to the open report.

        Raises:
            ReporterStateError: If no report is open.
        """
        if entry is None:
            raise ValueError("The report entry must not be None.")
        if self._state != ReporterState.COLLECTING:
            raise ReporterStateError(
                f"Cannot append to a report in state {self._state.value}; call initialize() first."
            )
        self._collect(entry)

    def finalize(self) -> None:
        """
        Render the open report and close it.

        Collected data is dropped afterwards, also if rendering fails.

        Raises:
            ReporterStateError: If no report is open, or if the run ended with
                a fatal exception.
        """
        if self._state != ReporterState.COLLECTING:
            raise ReporterStateError(
                f"Cannot finalize a report in state {self._state.value}."
            )
        try:
            self._render()
        finally:
            self.clear()
            self._state = ReporterState.FINALIZED
        if self.ended_with_fatal_exception:
            raise ReporterStateError("The curation run ended with a fatal exception.")

    def clear(self) -> None:
        """Drop all collected data without changing the lifecycle state."""
        self._clear_data()

    def reset(self) -> None:
        """Drop all collected data and return to the uninitialized state."""
        self.clear()
        self.ended_with_fatal_exception = False
        self._state = ReporterState.UNINITIALIZED

    @abstractmethod
    def _collect(self, entry: ReportEntry) -> None:
        """Store or classify an entry."""
        ...

    @abstractmethod
    def _render(self) -> None:
        """Flush the collected entries to the reporter's sink."""
        ...

    @abstractmethod
    def _clear_data(self) -> None:
        ...


class MarkdownReporter(Reporter):
    """
    Reporter writing one markdown file per report.

    Entries are kept in memory until finalize(), then sorted and written to
    `Report_YYYY_MM_DD_HH_MM_SS.md` in the output directory, with a numeric
    suffix if that name is taken. Structures are listed as SMILES.
    """

    def __init__(
        self,
        output_dir: Path = DEFAULT_REPORT_DIR,
        sort_by: SortProperty = SortProperty.STEP_POSITION,
    ):
        """
        Initialize the markdown reporter.

        Args:
            output_dir: Directory the report files are written to; created
                on demand.
            sort_by: Ordering of the report entries.
        """
        super().__init__()
        self.output_dir = Path(output_dir)
        self.sort_by = sort_by
        self.last_report_path: Optional[Path] = None
        self._entries: list[ReportEntry] = []

    @property
    def entries(self) -> tuple[ReportEntry, ...]:
        """Entries of the open report, in insertion order."""
        return tuple(self._entries)

    def _collect(self, entry: ReportEntry) -> None:
        self._entries.append(entry)

    def _clear_data(self) -> None:
        self._entries.clear()

    def sorted_entries(self) -> list[ReportEntry]:
        """Entries of the open report in report order."""
        return sorted(self._entries, key=lambda entry: entry_sort_key(entry, self.sort_by))

    def _report_path(self, timestamp: datetime) -> Path:
        stem = f"Report_{timestamp:%Y_%m_%d_%H_%M_%S}"
        path = self.output_dir / f"{stem}.md"
        suffix = 1
        # Reports finalized within the same second get a counter
        while path.exists():
            path = self.output_dir / f"{stem}_{suffix}.md"
            suffix += 1
        return path

    def _render(self) -> None:
        now = datetime.now()
        content = self.render_markdown(now)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self._report_path(now)
        path.write_text(content, encoding="utf-8")
        self.last_report_path = path
        logger.info(f"Wrote curation report with {len(self._entries)} entries to {path}")

    def render_markdown(self, timestamp: Optional[datetime] = None) -> str:
        """Render the open report as markdown text."""
        timestamp = timestamp or datetime.now()
        entries = self.sorted_entries()

        lines = [
            "# Curation Report",
            "",
            f"Time of report generation: {timestamp:%H:%M:%S}",
            f"Date of report generation: {timestamp:%m/%d/%Y}",
            "",
        ]
        if self.ended_with_fatal_exception:
            lines += [
                "**The curation run was aborted by a fatal exception; this report is incomplete.**",
                "",
            ]
        lines += [f"Number of reported issues: {len(entries)}", ""]

        if entries:
            lines += ["## Summary", "", "| Error Code | Count |", "|---|---|"]
            counts = Counter(entry.error_code for entry in entries)
            for code in sorted(counts, key=_ERROR_CODE_ORDER.__getitem__):
                lines.append(f"| {code.name} | {counts[code]} |")
            lines.append("")

        lines += ["## Details", ""]
        for number, entry in enumerate(entries, start=1):
            lines += [
                f"**Issue number:** {number}",
                "",
                f"**Structure:** `{_structure_smiles(entry.record)}`",
                "",
                f"**Processing Step Position:** {entry.step_position or '-'}",
                "",
                f"**Processing Step Class:** {entry.step_name}",
                "",
                f"**Error Code:** {entry.error_code.name}",
                "",
                f"**Error Message:** {error_message(entry.error_code)}",
                "",
                f"**Record ID:** {entry.record_id or '-'}",
                "",
            ]
            if entry.external_id is not None:
                lines += [f"**External ID:** {entry.external_id}", ""]
            lines += ["______", ""]

        return "\n".join(lines)


def _structure_smiles(mol: Optional[Chem.Mol]) -> str:
    if mol is None or mol.GetNumAtoms() == 0:
        return NO_STRUCTURE_PLACEHOLDER
    try:
        return Chem.MolToSmiles(mol)
    except RuntimeError as e:
        logger.warning(f"Could not generate SMILES for the report: {e}")
        return NO_STRUCTURE_PLACEHOLDER


class AllowListReporter(Reporter):
    """
    Reporter counting entries against a list of allowed error codes.

    finalize() fails if any entry with a code outside the allow-list was
    appended. Counters stay readable until the report is finalized or cleared.
    """

    def __init__(self, allowed_error_codes: Iterable[ErrorCode] = ()):
        super().__init__()
        self.allowed_error_codes = frozenset(allowed_error_codes)
        self.allowed_count = 0
        self.not_allowed_count = 0
        self.reported_codes: list[ErrorCode] = []

    def _collect(self, entry: ReportEntry) -> None:
        self.reported_codes.append(entry.error_code)
        if entry.error_code in self.allowed_error_codes:
            self.allowed_count += 1
        else:
            self.not_allowed_count += 1
            logger.debug(f"Not allowed error code reported: {entry.error_code.name}")

    def _render(self) -> None:
        if self.not_allowed_count > 0:
            raise ReporterStateError(
                f"{self.not_allowed_count} entries with not allowed error codes were reported."
            )

    def _clear_data(self) -> None:
        self.allowed_count = 0
        self.not_allowed_count = 0
        self.reported_codes = []
