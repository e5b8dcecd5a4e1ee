import pytest

from partner_bot.wizard import (
    ApplicationSession,
    EmailVerificationChallenge,
    StepValidator,
)
from partner_bot.utils.client_env import ClientEnvironment

from factories import (
    COMPANY,
    EXPERTISE,
    FakeInquiryApi,
    PARTNERSHIP,
    PERSONAL,
    REQUIRED_DOCUMENTS,
    VALID_OTP,
    YEAR,
    fill,
)


@pytest.fixture
def api():
    return FakeInquiryApi()


@pytest.fixture
def validator():
    return StepValidator(year_provider=lambda: YEAR)


@pytest.fixture
def challenge(api):
    return EmailVerificationChallenge(api, otp_length=6, resend_cooldown=0)


@pytest.fixture
def session(api, validator, challenge):
    return ApplicationSession(
        api,
        environment=ClientEnvironment(os="Linux", browser="Firefox"),
        validator=validator,
        challenge=challenge,
    )


@pytest.fixture
async def verified_session(session):
    """Session with step 1 filled and the email verified, still on step 1."""
    fill(session, PERSONAL)
    await session.send_otp()
    await session.verify_otp(VALID_OTP)
    return session


@pytest.fixture
async def review_session(verified_session):
    """Session that has passed steps 1-5 and sits on the review step."""
    session = verified_session
    assert session.next()
    fill(session, COMPANY)
    assert session.next()
    fill(session, EXPERTISE)
    assert session.next()
    fill(session, PARTNERSHIP)
    assert session.next()
    for slot, file_ref in REQUIRED_DOCUMENTS.items():
        session.assign_document(slot, file_ref)
    assert session.next()
    return session
