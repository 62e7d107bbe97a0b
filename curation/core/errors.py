"""
Issue taxonomy for chemical structure curation.

This module defines the closed set of error codes reported by processing
steps and the exception hierarchy that carries them. Steps classify
failures by the error code attached to the exception, never by parsing
exception messages.
"""

from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    """Kinds of issues a processing step can report."""
    CLONE_ERROR = "clone_error"
    STRUCTURE_NULL = "structure_null"
    ATOM_NULL = "atom_null"
    BOND_NULL = "bond_null"
    BOND_ORDER_UNSET = "bond_order_unset"
    BOND_ORDER_UNKNOWN = "bond_order_unknown"
    ATOMIC_NUMBER_NULL = "atomic_number_null"
    FORMAL_CHARGE_NULL = "formal_charge_null"
    IMPLICIT_HYDROGEN_COUNT_NULL = "implicit_hydrogen_count_null"
    KEKULIZATION_ERROR = "kekulization_error"
    NO_ATOMS = "no_atoms"
    INVALID_THRESHOLD = "invalid_threshold"
    INVALID_ATOMIC_NUMBER = "invalid_atomic_number"
    MISSING_PROPERTY = "missing_property"
    UNSET_EXTERNAL_ID = "unset_external_id"
    MISSING_RECORD_ID = "missing_record_id"
    IMPORT_FAILED = "import_failed"
    UNEXPECTED_EXCEPTION = "unexpected_exception"


# Codes that may be reported without a structure attached
STRUCTURE_OPTIONAL_CODES: frozenset[ErrorCode] = frozenset({
    ErrorCode.STRUCTURE_NULL,
    ErrorCode.IMPORT_FAILED,
    ErrorCode.UNEXPECTED_EXCEPTION,
})

ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.CLONE_ERROR: "The structure could not be cloned.",
    ErrorCode.STRUCTURE_NULL: "The structure is missing (null).",
    ErrorCode.ATOM_NULL: "An atom of the structure is missing (null).",
    ErrorCode.BOND_NULL: "A bond of the structure is missing (null).",
    ErrorCode.BOND_ORDER_UNSET: "The order of a bond is unset.",
    ErrorCode.BOND_ORDER_UNKNOWN: "The order of a bond is of an unknown or unsupported type.",
    ErrorCode.ATOMIC_NUMBER_NULL: "The atomic number of an atom is missing.",
    ErrorCode.FORMAL_CHARGE_NULL: "The formal charge of an atom is missing.",
    ErrorCode.IMPLICIT_HYDROGEN_COUNT_NULL: "The implicit hydrogen count of an atom is missing.",
    ErrorCode.KEKULIZATION_ERROR: "The aromatic system of the structure could not be kekulized.",
    ErrorCode.NO_ATOMS: "The structure contains no atoms.",
    ErrorCode.INVALID_THRESHOLD: "The threshold value of a filter is invalid.",
    ErrorCode.INVALID_ATOMIC_NUMBER: "An atomic number outside the known range was given.",
    ErrorCode.MISSING_PROPERTY: "The structure lacks a required property.",
    ErrorCode.UNSET_EXTERNAL_ID: "The external identifier property of the structure is unset.",
    ErrorCode.MISSING_RECORD_ID: "The structure has no record identifier assigned.",
    ErrorCode.IMPORT_FAILED: "The structure could not be imported.",
    ErrorCode.UNEXPECTED_EXCEPTION: "An unexpected exception occurred while processing the structure.",
}


def is_structure_optional(code: ErrorCode) -> bool:
    """Check whether an issue of this kind may be reported without a structure."""
    return code in STRUCTURE_OPTIONAL_CODES


def error_message(code: ErrorCode) -> str:
    """Get the human-readable description of an error code."""
    return ERROR_MESSAGES[code]


class CurationError(Exception):
    """
    Base exception carrying an error code.

    Processing steps treat a CurationError as a recognized issue: it is
    reported under its error code and, unless the step declares the code
    fatal, only the affected structure is dropped.
    """

    def __init__(self, error_code: ErrorCode, message: Optional[str] = None):
        self.error_code = error_code
        super().__init__(message or error_message(error_code))


class StructureNullError(CurationError):
    """Raised when a structure of the batch is None."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(ErrorCode.STRUCTURE_NULL, message)


class AttributeNullError(CurationError):
    """Raised when a required attribute of an atom or bond is missing."""


class InvalidThresholdError(CurationError, ValueError):
    """Raised when a filter threshold is negative."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(ErrorCode.INVALID_THRESHOLD, message)


class MissingRecordIdError(CurationError):
    """Raised when a structure lacks its record identifier."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(ErrorCode.MISSING_RECORD_ID, message)


class ReporterStateError(RuntimeError):
    """Raised when a reporter is used outside its lifecycle."""


class ValenceTableFormatError(ValueError):
    """Raised when a valence list source does not match the expected format."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class ValenceTableIndexError(IndexError):
    """Raised when a valence table row or field index is out of range."""
