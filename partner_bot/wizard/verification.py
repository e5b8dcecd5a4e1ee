"""
Email ownership challenge.

The applicant requests a one-time code for the email in the draft, then
submits it back. Only a successful check against the backend, for the exact
email currently in the draft, moves the challenge to VERIFIED.
"""
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from partner_bot.config import settings
from partner_bot.wizard.errors import ApiError, ErrorKind
from partner_bot.utils.date_utils import validate_email
from partner_bot.logger import get_logger

logger = get_logger(__name__)

DEFAULT_EXPIRES_IN = 300


class VerificationState(str, Enum):
    IDLE = "IDLE"
    OTP_SENT = "OTP_SENT"
    VERIFYING = "VERIFYING"
    VERIFIED = "VERIFIED"
    FAILED = "FAILED"


@dataclass(frozen=True)
class ChallengeResult:
    """Outcome of a challenge action, ready to show to the applicant."""
    success: bool
    message: str
    state: VerificationState
    kind: Optional[ErrorKind] = None


class EmailVerificationChallenge:
    """
    OTP state machine.

    IDLE -> OTP_SENT on a successful send. OTP_SENT or FAILED -> VERIFYING
    while a code is checked, then VERIFIED or FAILED. Any change of email
    while not IDLE goes back to IDLE through `email_changed`, and a response
    that arrives after such a reset is discarded.
    """

    def __init__(
        self,
        api,
        otp_length: Optional[int] = None,
        resend_cooldown: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.api = api
        self.otp_length = otp_length or settings.OTP_LENGTH
        self.resend_cooldown = (
            settings.OTP_RESEND_COOLDOWN_SECONDS if resend_cooldown is None else resend_cooldown
        )
        self.clock = clock

        self.state = VerificationState.IDLE
        self.email = ""
        self.expires_in: Optional[int] = None
        self._last_sent_at: Optional[float] = None
        self._generation = 0
        self._sending = False
        self._pending_email = ""

    @property
    def is_verified(self) -> bool:
        return self.state is VerificationState.VERIFIED

    @property
    def in_flight(self) -> bool:
        return self._sending or self.state is VerificationState.VERIFYING

    def cooldown_remaining(self) -> int:
        """Seconds until another code may be requested for the current email."""
        if self._last_sent_at is None:
            return 0
        elapsed = self.clock() - self._last_sent_at
        return max(0, int(round(self.resend_cooldown - elapsed)))

    # --- Transitions ---

    def email_changed(self, new_email: str) -> None:
        """Apply an edit of the draft's email field."""
        new_email = (new_email or "").strip()
        if self._sending and new_email != self._pending_email:
            logger.info(
                "Email edited while a code was being sent",
                pending_email=self._pending_email,
                new_email=new_email,
            )
            self.reset()
            return
        if self.state is VerificationState.IDLE or new_email == self.email:
            return
        logger.info(
            "Email edited, verification reset",
            previous_state=self.state.value,
            old_email=self.email,
            new_email=new_email,
        )
        self.reset()

    def reset(self) -> None:
        self.state = VerificationState.IDLE
        self.email = ""
        self.expires_in = None
        self._last_sent_at = None
        self._generation += 1

    async def send_otp(self, email: str) -> ChallengeResult:
        """Request a code for `email`. Re-sending invalidates earlier codes."""
        email = (email or "").strip()

        if self.in_flight:
            return self._fail("Please wait for the current request to finish.", ErrorKind.VERIFICATION)

        if not validate_email(email):
            return self._fail("Please provide a valid email address", ErrorKind.VALIDATION)

        if email != self.email and self.state is not VerificationState.IDLE:
            self.reset()

        if self.state is VerificationState.VERIFIED:
            return ChallengeResult(True, "Email already verified", self.state)

        remaining = self.cooldown_remaining()
        if self.state is not VerificationState.IDLE and remaining > 0:
            return self._fail(
                f"Please wait {remaining} seconds before requesting a new code.",
                ErrorKind.VERIFICATION,
            )

        generation = self._generation
        self._sending = True
        self._pending_email = email
        try:
            body = await self.api.send_otp(email)
        except ApiError as e:
            logger.warning("OTP request failed", email=email, error=e.message)
            return self._fail(e.message, ErrorKind.VERIFICATION)
        finally:
            self._sending = False
            self._pending_email = ""

        if generation != self._generation:
            logger.info("Discarding OTP response for a replaced email", email=email)
            return self._fail("Email changed while the code was being sent.", ErrorKind.VERIFICATION)

        self.state = VerificationState.OTP_SENT
        self.email = email
        self.expires_in = body.get("expiresIn") or DEFAULT_EXPIRES_IN
        self._last_sent_at = self.clock()
        logger.info("OTP sent", email=email, expires_in=self.expires_in)
        return ChallengeResult(True, "OTP sent to your email!", self.state)

    async def submit_otp(self, code: str) -> ChallengeResult:
        """Check `code` against the backend for the email the code was sent to."""
        code = (code or "").strip()

        if not code:
            return self._fail("Please enter the verification code.", ErrorKind.VERIFICATION)

        if self.state is VerificationState.VERIFIED:
            return ChallengeResult(True, "Email already verified", self.state)
        if self.in_flight:
            return self._fail("Please wait for the current request to finish.", ErrorKind.VERIFICATION)
        if self.state is VerificationState.IDLE:
            return self._fail("Please request a verification code first.", ErrorKind.VERIFICATION)

        if not (code.isdigit() and len(code) == self.otp_length):
            return self._fail(
                f"Please enter complete {self.otp_length}-digit OTP",
                ErrorKind.VERIFICATION,
            )

        generation = self._generation
        email = self.email
        self.state = VerificationState.VERIFYING
        try:
            await self.api.verify_otp(email, code)
        except ApiError as e:
            if generation == self._generation:
                self.state = VerificationState.FAILED
            logger.warning("OTP rejected", email=email, error=e.message)
            return self._fail(e.message, ErrorKind.VERIFICATION)

        if generation != self._generation:
            logger.info("Discarding OTP verification for a replaced email", email=email)
            return self._fail("Email changed during verification.", ErrorKind.VERIFICATION)

        self.state = VerificationState.VERIFIED
        logger.info("Email verified", email=email)
        return ChallengeResult(True, "Email verified successfully!", self.state)

    def _fail(self, message: str, kind: ErrorKind) -> ChallengeResult:
        return ChallengeResult(False, message, self.state, kind)
