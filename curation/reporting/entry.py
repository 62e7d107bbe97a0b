"""
Report entries.

A report entry records one issue raised by a processing step: what went
wrong, which step raised it, where that step sits in its pipeline and which
structure was affected.
"""

from dataclasses import dataclass
from typing import Optional

from rdkit import Chem

from curation.core.errors import ErrorCode, error_message, is_structure_optional


def _is_blank(value: Optional[str]) -> bool:
    return value is not None and not value.strip()


@dataclass(frozen=True)
class ReportEntry:
    """
    Immutable description of one reported issue.

    Attributes:
        error_code: Kind of issue.
        step_type: Class of the reporting processing step.
        step_position: Hierarchical position of the step (e.g. "2.1"),
            None for a top-level step.
        record: Affected structure; may be None only for structure-optional codes.
        record_id: Record ID of the affected structure.
        external_id: External ID of the affected structure, if configured.
    """
    error_code: ErrorCode
    step_type: type
    step_position: Optional[str] = None
    record: Optional[Chem.Mol] = None
    record_id: Optional[str] = None
    external_id: Optional[str] = None

    def __post_init__(self):
        if self.step_type is None:
            raise ValueError("The step type of a report entry must not be None.")
        if self.record is None and not is_structure_optional(self.error_code):
            raise ValueError(
                f"Error code {self.error_code.name} requires the affected structure."
            )
        if self.record is not None and (self.record_id is None or not self.record_id.strip()):
            raise ValueError("A report entry with a structure requires a non-blank record ID.")
        if _is_blank(self.step_position):
            raise ValueError("The step position must be None or non-blank.")
        if _is_blank(self.record_id):
            raise ValueError("The record ID must be None or non-blank.")
        if _is_blank(self.external_id):
            raise ValueError("The external ID must be None or non-blank.")

    @property
    def step_name(self) -> str:
        """Class name of the reporting step."""
        return self.step_type.__name__

    @property
    def message(self) -> str:
        """Human-readable description of the error code."""
        return error_message(self.error_code)
