"""
Partner application wizard.
"""
from partner_bot.wizard.controller import WizardController
from partner_bot.wizard.documents import DocumentStagingUploader
from partner_bot.wizard.errors import (
    ApiError,
    DocumentValidationError,
    ErrorKind,
    IntakeError,
    SubmissionError,
    UploadError,
    ValidationError,
    VerificationError,
)
from partner_bot.wizard.fields import (
    DocumentSlot,
    DraftSnapshot,
    FieldStore,
    FileRef,
    MULTI_SELECT_FIELDS,
)
from partner_bot.wizard.session import ApplicationSession
from partner_bot.wizard.steps import Step, StepValidator
from partner_bot.wizard.submission import SubmissionCoordinator, SubmissionOutcome
from partner_bot.wizard.verification import (
    ChallengeResult,
    EmailVerificationChallenge,
    VerificationState,
)

__all__ = [
    "ApiError",
    "ApplicationSession",
    "ChallengeResult",
    "DocumentSlot",
    "DocumentStagingUploader",
    "DocumentValidationError",
    "DraftSnapshot",
    "EmailVerificationChallenge",
    "ErrorKind",
    "FieldStore",
    "FileRef",
    "IntakeError",
    "MULTI_SELECT_FIELDS",
    "Step",
    "StepValidator",
    "SubmissionCoordinator",
    "SubmissionError",
    "SubmissionOutcome",
    "UploadError",
    "ValidationError",
    "VerificationError",
    "VerificationState",
    "WizardController",
]
