"""
Linear step navigation.
"""
from typing import Dict, Optional

from partner_bot.wizard.fields import FieldStore
from partner_bot.wizard.steps import FIRST_STEP, LAST_STEP, Step, StepValidator
from partner_bot.wizard.verification import EmailVerificationChallenge, VerificationState
from partner_bot.logger import get_logger

logger = get_logger(__name__)


class WizardController:
    """Owns the current step. Moving forward requires the current step to validate."""

    def __init__(
        self,
        store: FieldStore,
        challenge: EmailVerificationChallenge,
        validator: Optional[StepValidator] = None,
    ):
        self.store = store
        self.challenge = challenge
        self.validator = validator or StepValidator()
        self.current_step = FIRST_STEP

    def current_errors(self) -> Dict[str, str]:
        return self.validator.errors(self.current_step, self.store.snapshot(), self._verification_state())

    def is_current_valid(self) -> bool:
        return self.validator.is_valid(self.current_step, self.store.snapshot(), self._verification_state())

    def next(self) -> bool:
        """Advance one step if the current one validates. Returns True if moved."""
        if self.current_step is LAST_STEP:
            return False
        errors = self.current_errors()
        if errors:
            logger.debug(
                "Step blocked",
                step=self.current_step.value,
                fields=sorted(errors),
            )
            return False
        self.current_step = Step(self.current_step + 1)
        logger.debug("Step advanced", step=self.current_step.value)
        return True

    def previous(self) -> bool:
        if self.current_step is FIRST_STEP:
            return False
        self.current_step = Step(self.current_step - 1)
        return True

    def can_submit(self) -> bool:
        return self.current_step is LAST_STEP and self.is_current_valid()

    def reset(self) -> None:
        self.current_step = FIRST_STEP

    def _verification_state(self) -> VerificationState:
        # Verification only counts for the email currently in the draft
        email = (self.store.get("email") or "").strip()
        if self.challenge.is_verified and self.challenge.email != email:
            return VerificationState.IDLE
        return self.challenge.state
