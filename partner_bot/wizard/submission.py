"""
Two-phase submission of a completed application.

Phase one uploads every staged document in a single multipart batch and gets
back a storage path per slot. Phase two posts the draft with those paths in
its `documents` field. Phase two never starts unless phase one succeeded, and
no failure is retried automatically.
"""
import uuid
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Tuple

from partner_bot.wizard.controller import WizardController
from partner_bot.wizard.documents import DocumentStagingUploader
from partner_bot.wizard.errors import (
    ApiError,
    ErrorKind,
    IntakeError,
    SubmissionError,
    UploadError,
)
from partner_bot.wizard.fields import DraftSnapshot, FieldStore
from partner_bot.wizard.steps import LAST_STEP
from partner_bot.wizard.verification import EmailVerificationChallenge
from partner_bot.utils.client_env import ClientEnvironment
from partner_bot.logger import get_logger

logger = get_logger(__name__)

DEFAULT_SUCCESS_MESSAGE = "Application submitted successfully!"


@dataclass(frozen=True)
class SubmissionOutcome:
    success: bool
    message: str
    kind: Optional[ErrorKind] = None
    document_paths: Mapping[str, str] = field(default_factory=dict)
    field_errors: Mapping[str, str] = field(default_factory=dict)


def new_temp_agent_id() -> str:
    return f"temp_{uuid.uuid4().hex}"


class SubmissionCoordinator:
    """Runs the upload and final-record phases for one application."""

    def __init__(
        self,
        store: FieldStore,
        uploader: DocumentStagingUploader,
        challenge: EmailVerificationChallenge,
        controller: WizardController,
        api,
        environment: Optional[ClientEnvironment] = None,
    ):
        self.store = store
        self.uploader = uploader
        self.challenge = challenge
        self.controller = controller
        self.api = api
        self.environment = environment or ClientEnvironment()
        self.temp_agent_id = new_temp_agent_id()
        self._in_flight = False
        # (uploader revision, slot -> path) of the last successful upload
        self._uploaded: Optional[Tuple[int, Dict[str, str]]] = None

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    async def submit(self) -> SubmissionOutcome:
        if self._in_flight:
            return SubmissionOutcome(False, "Submission already in progress.", ErrorKind.SUBMISSION)

        blocked = self._check_ready()
        if blocked is not None:
            return blocked

        self._in_flight = True
        try:
            revision = self.uploader.revision
            snapshot = self.store.snapshot()
            logger.info(
                "Submitting partner application",
                email=snapshot.get("email"),
                documents=len(snapshot.documents),
                temp_agent_id=self.temp_agent_id,
            )
            try:
                paths = await self._upload_documents(snapshot, revision)
                message = await self._submit_application(snapshot, paths)
            except IntakeError as e:
                return SubmissionOutcome(False, e.message, e.kind)
        finally:
            self._in_flight = False

        logger.info("Partner application submitted", email=snapshot.get("email"))
        return SubmissionOutcome(True, message, document_paths=paths)

    def reset(self) -> None:
        """Forget cached uploads and start a new temporary agent id."""
        self._uploaded = None
        self.temp_agent_id = new_temp_agent_id()

    # --- Phases ---

    def _check_ready(self) -> Optional[SubmissionOutcome]:
        if self.controller.current_step is not LAST_STEP:
            return SubmissionOutcome(
                False,
                "Please complete all steps before submitting.",
                ErrorKind.VALIDATION,
            )

        errors = self.controller.current_errors()
        if errors:
            return SubmissionOutcome(
                False,
                next(iter(errors.values())),
                ErrorKind.VALIDATION,
                field_errors=errors,
            )

        email = (self.store.get("email") or "").strip()
        if not self.challenge.is_verified or self.challenge.email != email:
            return SubmissionOutcome(False, "Please verify your email", ErrorKind.VERIFICATION)

        return None

    async def _upload_documents(self, snapshot: DraftSnapshot, revision: int) -> Dict[str, str]:
        """Phase one. Returns slot -> storage path, empty when nothing is staged."""
        files = {slot.value: file_ref for slot, file_ref in snapshot.documents.items()}
        if not files:
            logger.info("No staged documents, skipping upload")
            return {}

        if self._uploaded is not None and self._uploaded[0] == revision:
            logger.info("Reusing documents from previous upload", slots=sorted(files))
            return dict(self._uploaded[1])

        try:
            paths = await self.api.upload_agent_documents(
                snapshot.get("firstName") or "",
                snapshot.get("lastName") or "",
                self.temp_agent_id,
                files,
            )
        except ApiError as e:
            logger.warning("Document upload failed", error=e.message, status=e.status)
            raise UploadError(e.message) from e

        missing = sorted(set(files) - set(paths))
        if missing:
            logger.warning("Upload response missing documents", slots=missing)
            raise UploadError("Some documents could not be stored. Please try again.")

        self._uploaded = (revision, dict(paths))
        logger.info("Documents uploaded", slots=sorted(paths))
        return dict(paths)

    async def _submit_application(self, snapshot: DraftSnapshot, paths: Mapping[str, str]) -> str:
        """Phase two. Returns the backend's confirmation message."""
        payload = snapshot.to_payload()
        payload["documents"] = dict(paths)
        payload.update(self.environment.as_payload())

        try:
            body = await self.api.submit_partner_application(payload)
        except ApiError as e:
            logger.warning("Application submission failed", error=e.message, status=e.status)
            raise SubmissionError(e.message) from e

        return body.get("message") or DEFAULT_SUCCESS_MESSAGE
