"""
Error taxonomy for the partner application wizard.

Every failure the wizard can produce falls into one of four kinds. Components
raise the matching exception internally and convert it into a result object
with a user-facing message at the boundary of the operation.
"""
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Which stage of the wizard produced a failure."""
    VALIDATION = "VALIDATION"
    VERIFICATION = "VERIFICATION"
    UPLOAD = "UPLOAD"
    SUBMISSION = "SUBMISSION"


class IntakeError(Exception):
    """Base class for wizard errors. `message` is safe to show to applicants."""

    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(IntakeError):
    """Client-local validation failure. Never reaches the network."""
    kind = ErrorKind.VALIDATION


class DocumentValidationError(ValidationError):
    """A staged file violates the slot's type or size policy."""

    def __init__(self, slot: str, constraint: str, message: str):
        super().__init__(message)
        self.slot = slot
        self.constraint = constraint


class VerificationError(IntakeError):
    kind = ErrorKind.VERIFICATION


class UploadError(IntakeError):
    kind = ErrorKind.UPLOAD


class SubmissionError(IntakeError):
    kind = ErrorKind.SUBMISSION


class ApiError(Exception):
    """Backend answered with `success: false`, a non-2xx status, or not at all."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status
