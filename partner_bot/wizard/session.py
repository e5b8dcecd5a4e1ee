"""
One applicant's run through the partner application wizard.
"""
from typing import Any, Optional

from partner_bot.wizard.controller import WizardController
from partner_bot.wizard.documents import DocumentStagingUploader
from partner_bot.wizard.fields import FieldStore, FileRef
from partner_bot.wizard.steps import Step, StepValidator
from partner_bot.wizard.submission import SubmissionCoordinator, SubmissionOutcome
from partner_bot.wizard.verification import ChallengeResult, EmailVerificationChallenge
from partner_bot.utils.client_env import ClientEnvironment
from partner_bot.logger import get_logger

logger = get_logger(__name__)


class ApplicationSession:
    """
    Wires the wizard components together for a single applicant.

    UI layers should mutate the draft through this class so that editing the
    email always runs the challenge's reset rule.
    """

    def __init__(
        self,
        api,
        environment: Optional[ClientEnvironment] = None,
        validator: Optional[StepValidator] = None,
        challenge: Optional[EmailVerificationChallenge] = None,
    ):
        self.store = FieldStore()
        self.uploader = DocumentStagingUploader(self.store)
        self.challenge = challenge or EmailVerificationChallenge(api)
        self.controller = WizardController(self.store, self.challenge, validator)
        self.coordinator = SubmissionCoordinator(
            self.store,
            self.uploader,
            self.challenge,
            self.controller,
            api,
            environment,
        )

    @property
    def current_step(self) -> Step:
        return self.controller.current_step

    # --- Draft edits ---

    def set_field(self, name: str, value: Any) -> None:
        self.store.set(name, value)
        if name == "email":
            self.challenge.email_changed(value)

    def toggle_choice(self, name: str, item: str) -> bool:
        return self.store.toggle_choice(name, item)

    def assign_document(self, slot, file_ref: Optional[FileRef]) -> None:
        """Stage a file. Raises DocumentValidationError on a type or size violation."""
        self.uploader.assign(slot, file_ref)

    # --- Email verification ---

    async def send_otp(self) -> ChallengeResult:
        return await self.challenge.send_otp(self.store.get("email") or "")

    async def verify_otp(self, code: str) -> ChallengeResult:
        return await self.challenge.submit_otp(code)

    # --- Navigation ---

    def next(self) -> bool:
        return self.controller.next()

    def previous(self) -> bool:
        return self.controller.previous()

    # --- Terminal actions ---

    async def submit(self) -> SubmissionOutcome:
        outcome = await self.coordinator.submit()
        if outcome.success:
            self.reset()
        return outcome

    def abandon(self) -> None:
        logger.info("Application abandoned", step=self.current_step.value)
        self.reset()

    def reset(self) -> None:
        self.store.clear()
        self.challenge.reset()
        self.controller.reset()
        self.coordinator.reset()
