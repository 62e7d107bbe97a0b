"""
Processing step contract.

A processing step consumes a batch of structures, returns the structures
that survive it and reports every issue it encounters. Steps run either
standalone, owning the report lifecycle, or nested inside a pipeline which
owns the report and assigns the step its hierarchical position.
"""

from abc import ABC, abstractmethod
from typing import ClassVar, Optional, Sequence

from loguru import logger
from rdkit import Chem

from curation.core.errors import (
    CurationError,
    ErrorCode,
    MissingRecordIdError,
    ReporterStateError,
    is_structure_optional,
)
from curation.core.records import (
    assign_record_ids,
    clone_record,
    get_external_id,
    get_record_id,
    has_record_id,
)
from curation.reporting import MarkdownReporter, ReportEntry, Reporter

Batch = list[Optional[Chem.Mol]]


def _validate_optional_name(value: Optional[str], what: str) -> Optional[str]:
    if value is not None and not value.strip():
        raise ValueError(f"The {what} must be None or non-blank.")
    return value


class ProcessingStep(ABC):
    """
    Base class of all processing steps.

    Subclasses implement _process(). Records are dropped from the output
    when they are excluded or when processing them raises a CurationError
    whose code is not in fatal_error_codes; any other exception aborts the
    batch.
    """

    # Error codes that abort the batch instead of dropping a single record
    fatal_error_codes: ClassVar[frozenset[ErrorCode]] = frozenset()

    def __init__(
        self,
        reporter: Optional[Reporter] = None,
        external_id_property_name: Optional[str] = None,
    ):
        """
        Initialize the processing step.

        Args:
            reporter: Reporter receiving the issues; defaults to a
                MarkdownReporter writing to the default report directory.
            external_id_property_name: Name of the structure property holding
                an external identifier to include in report entries.
        """
        self._reporter = reporter if reporter is not None else MarkdownReporter()
        self._external_id_property_name = _validate_optional_name(
            external_id_property_name, "external ID property name"
        )
        self._position: Optional[str] = None

    @property
    def reporter(self) -> Reporter:
        """Reporter receiving the issues of this step."""
        return self._reporter

    @reporter.setter
    def reporter(self, reporter: Reporter) -> None:
        if reporter is None:
            raise ValueError("The reporter of a processing step must not be None.")
        self._reporter = reporter
        self._propagate()

    @property
    def external_id_property_name(self) -> Optional[str]:
        """Name of the property holding the external identifier, if any."""
        return self._external_id_property_name

    @external_id_property_name.setter
    def external_id_property_name(self, name: Optional[str]) -> None:
        self._external_id_property_name = _validate_optional_name(name, "external ID property name")
        self._propagate()

    @property
    def position(self) -> Optional[str]:
        """Hierarchical position within the enclosing pipeline (e.g. "2.1")."""
        return self._position

    @position.setter
    def position(self, position: Optional[str]) -> None:
        self._position = _validate_optional_name(position, "step position")
        self._propagate()

    @property
    def is_nested(self) -> bool:
        """Whether an enclosing pipeline owns the report lifecycle."""
        return self._position is not None

    def _propagate(self) -> None:
        """Hook for composite steps to push configuration to their children."""

    def describe(self) -> str:
        """Short description used in log messages."""
        if self._position is None:
            return type(self).__name__
        return f"{type(self).__name__} [{self._position}]"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(position={self._position!r})"

    def run(self, records: Sequence[Optional[Chem.Mol]], reporter: Optional[Reporter] = None) -> Batch:
        """
        Process a batch of structures.

        Library form: the input is neither cloned nor assigned record IDs and
        the reporter lifecycle is left to the caller.

        Args:
            records: Structures to process; each non-None structure must
                carry a record ID.
            reporter: Reporter to append to; defaults to the step's reporter.

        Returns:
            The structures that passed the step, in input order.

        Raises:
            MissingRecordIdError: If a structure lacks its record ID.
            Exception: Any fatal exception raised while processing.
        """
        if records is None:
            raise ValueError("The batch of structures must not be None.")
        reporter = reporter if reporter is not None else self._reporter
        records = list(records)
        for index, mol in enumerate(records):
            if mol is not None and not has_record_id(mol):
                raise MissingRecordIdError(f"Structure {index} of the batch has no record ID assigned.")

        result = self._process(records, reporter)
        logger.info(f"{self.describe()} kept {len(result)}/{len(records)} structures")
        return result

    def run_standalone(
        self,
        records: Sequence[Optional[Chem.Mol]],
        clone_first: bool = False,
        assign_ids: bool = True,
    ) -> Batch:
        """
        Process a batch of structures as the outermost step.

        Unless nested, the report is initialized before and finalized after
        processing. If a fatal exception occurs, the report is still
        finalized with the issues collected so far before the exception is
        re-raised.

        Args:
            records: Structures to process.
            clone_first: Process copies instead of the given structures;
                structures that cannot be copied are reported and dropped.
            assign_ids: Assign each structure its batch index as record ID;
                if False, all structures must already carry one.

        Returns:
            The structures that passed the step, in input order.
        """
        if records is None:
            raise ValueError("The batch of structures must not be None.")
        records = list(records)
        owns_report = not self.is_nested
        reporter = self._reporter
        if owns_report:
            reporter.initialize()

        try:
            if assign_ids:
                assign_record_ids(records)
            if clone_first:
                records = self._clone_records(records, reporter)
            result = self.run(records, reporter)
        except Exception as e:
            logger.error(f"{self.describe()} was interrupted by a fatal exception: {e!r}")
            if owns_report:
                self._finalize_after_fatal_exception(reporter)
            raise

        if owns_report:
            reporter.finalize()
        return result

    def _finalize_after_fatal_exception(self, reporter: Reporter) -> None:
        reporter.ended_with_fatal_exception = True
        try:
            reporter.finalize()
        except ReporterStateError as e:
            logger.warning(f"The report was finalized after a fatal exception: {e}")
        except OSError as e:
            logger.warning(f"The report could not be written after a fatal exception: {e}")

    def _clone_records(self, records: Batch, reporter: Reporter) -> Batch:
        clones: Batch = []
        for mol in records:
            if mol is None:
                clones.append(None)
                continue
            try:
                clones.append(clone_record(mol))
            except CurationError as e:
                logger.warning(f"{self.describe()}: {e}")
                self.append_to_report(e.error_code, mol, reporter)
        return clones

    @abstractmethod
    def _process(self, records: Batch, reporter: Reporter) -> Batch:
        """Apply the step to a batch whose structures all carry record IDs."""
        ...

    def report_issue(self, record: Optional[Chem.Mol], exc: Exception, reporter: Reporter) -> None:
        """
        Report an exception raised while processing a single structure.

        A CurationError with a non-fatal code is reported and the caller
        drops the structure. Anything else is reported and re-raised.

        Args:
            record: Structure being processed when the exception occurred.
            exc: The exception.
            reporter: Reporter to append to.

        Raises:
            Exception: The given exception, if it is fatal.
        """
        if isinstance(exc, CurationError) and exc.error_code not in self.fatal_error_codes:
            logger.debug(f"{self.describe()} dropped a structure: {exc.error_code.name}: {exc}")
            self.append_to_report(exc.error_code, record, reporter)
            return

        code = exc.error_code if isinstance(exc, CurationError) else ErrorCode.UNEXPECTED_EXCEPTION
        if record is None and not is_structure_optional(code):
            code = ErrorCode.UNEXPECTED_EXCEPTION
        logger.error(f"{self.describe()} failed fatally with {code.name}: {exc!r}")
        self.append_to_report(code, record, reporter)
        raise exc

    def append_to_report(
        self,
        error_code: ErrorCode,
        record: Optional[Chem.Mol],
        reporter: Optional[Reporter] = None,
    ) -> None:
        """Append an entry describing an issue with a structure."""
        reporter = reporter if reporter is not None else self._reporter
        record_id = None
        external_id = None
        if record is not None:
            record_id = get_record_id(record)
            if self._external_id_property_name is not None:
                external_id = get_external_id(record, self._external_id_property_name)
        reporter.append(
            ReportEntry(
                error_code=error_code,
                step_type=type(self),
                step_position=self._position,
                record=record,
                record_id=record_id,
                external_id=external_id,
            )
        )
