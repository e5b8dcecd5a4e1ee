from partner_bot.wizard import FieldStore, Step, WizardController

from factories import COMPANY, VALID_OTP


def test_starts_on_first_step(session):
    assert session.current_step is Step.PERSONAL
    assert not session.controller.can_submit()


def test_next_blocked_without_verified_email(session):
    session.set_field("firstName", "John")

    assert session.next() is False
    assert session.current_step is Step.PERSONAL
    assert "emailVerified" in session.controller.current_errors()


async def test_next_advances_once_step_is_valid(verified_session):
    assert verified_session.next() is True
    assert verified_session.current_step is Step.COMPANY


async def test_clearing_a_field_blocks_again(verified_session):
    session = verified_session
    session.next()
    for name, value in COMPANY.items():
        session.set_field(name, value)
    assert session.controller.is_current_valid()

    session.set_field("companyName", "")

    assert session.next() is False
    assert session.current_step is Step.COMPANY
    assert session.controller.current_errors() == {"companyName": "Company Name is required"}


async def test_email_edit_on_later_step_invalidates_first_step(verified_session):
    session = verified_session
    session.next()

    session.set_field("email", "jane@example.com")

    assert session.previous() is True
    assert not session.controller.is_current_valid()
    await session.send_otp()
    await session.verify_otp(VALID_OTP)
    assert session.next() is True


def test_previous_is_free_but_stops_at_first_step(challenge, validator):
    controller = WizardController(FieldStore(), challenge, validator)
    controller.current_step = Step.PARTNERSHIP

    assert controller.previous() is True
    assert controller.current_step is Step.EXPERTISE
    assert controller.previous() is True
    assert controller.previous() is True
    assert controller.current_step is Step.PERSONAL
    assert controller.previous() is False


async def test_next_is_a_no_op_on_last_step(review_session):
    assert review_session.current_step is Step.REVIEW
    assert review_session.next() is False
    assert review_session.current_step is Step.REVIEW


async def test_can_submit_after_consents(review_session):
    assert not review_session.controller.can_submit()

    review_session.set_field("termsAccepted", True)
    review_session.set_field("dataConsent", True)

    assert review_session.controller.can_submit()


def test_reset_returns_to_first_step(challenge, validator):
    controller = WizardController(FieldStore(), challenge, validator)
    controller.current_step = Step.DOCUMENTS

    controller.reset()

    assert controller.current_step is Step.PERSONAL
