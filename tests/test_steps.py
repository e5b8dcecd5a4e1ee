import pytest

from partner_bot.wizard.fields import DocumentSlot, FieldStore
from partner_bot.wizard.steps import Step, is_present
from partner_bot.wizard.verification import VerificationState

from factories import COMPANY, EXPERTISE, PARTNERSHIP, PERSONAL, REQUIRED_DOCUMENTS, YEAR

VERIFIED = VerificationState.VERIFIED


def snapshot(values=None, documents=None):
    store = FieldStore(values)
    for slot, file_ref in (documents or {}).items():
        store.set_document(slot, file_ref)
    return store.snapshot()


@pytest.mark.parametrize(
    "value, expected",
    [
        ("", False),
        ("   ", False),
        (None, False),
        (frozenset(), False),
        (False, False),
        ("x", True),
        (frozenset({"a"}), True),
        (True, True),
        (2018, True),
    ],
)
def test_is_present(value, expected):
    assert is_present(value) is expected


def test_personal_step_needs_fields_and_verified_email(validator):
    errors = validator.errors(Step.PERSONAL, snapshot(), VerificationState.IDLE)

    assert errors["firstName"] == "First Name is required"
    assert errors["emailVerified"] == "Please verify your email"
    assert "alternatePhone" not in errors


@pytest.mark.parametrize(
    "state",
    [VerificationState.IDLE, VerificationState.OTP_SENT, VerificationState.FAILED],
)
def test_personal_step_blocks_until_verified(validator, state):
    assert not validator.is_valid(Step.PERSONAL, snapshot(PERSONAL), state)


def test_personal_step_passes_when_verified(validator):
    assert validator.is_valid(Step.PERSONAL, snapshot(PERSONAL), VERIFIED)


def test_blank_text_counts_as_missing(validator):
    values = dict(PERSONAL, firstName="   ")

    errors = validator.errors(Step.PERSONAL, snapshot(values), VERIFIED)

    assert list(errors) == ["firstName"]


@pytest.mark.parametrize(
    "year, expected_error",
    [
        ("", "Year Established is required"),
        ("1899", "Enter a valid year"),
        ("1900", None),
        (str(YEAR), None),
        (str(YEAR + 1), "Enter a valid year"),
        ("20x8", "Enter a valid year"),
        (2018, None),
    ],
)
def test_established_year_bounds(validator, year, expected_error):
    values = dict(COMPANY, establishedYear=year)

    errors = validator.errors(Step.COMPANY, snapshot(values), VERIFIED)

    assert errors.get("establishedYear") == expected_error


def test_expertise_needs_one_of_each_multi_select(validator):
    values = dict(EXPERTISE, specialization=frozenset())

    errors = validator.errors(Step.EXPERTISE, snapshot(values), VERIFIED)

    assert errors == {"specialization": "Select at least one specialization"}


def test_partnership_step(validator):
    assert validator.is_valid(Step.PARTNERSHIP, snapshot(PARTNERSHIP), VERIFIED)

    errors = validator.errors(Step.PARTNERSHIP, snapshot(), VERIFIED)
    assert set(errors) == {"partnershipType", "expectedStudents", "whyPartner"}


def test_documents_step_needs_required_slots_only(validator):
    assert validator.is_valid(Step.DOCUMENTS, snapshot(documents=REQUIRED_DOCUMENTS), VERIFIED)

    partial = dict(REQUIRED_DOCUMENTS)
    del partial[DocumentSlot.COMPANY_PHOTO]
    errors = validator.errors(Step.DOCUMENTS, snapshot(documents=partial), VERIFIED)

    assert errors == {"companyPhoto": "Company Photo is required"}


def test_review_step_needs_both_consents(validator):
    errors = validator.errors(Step.REVIEW, snapshot({"termsAccepted": True}), VERIFIED)
    assert list(errors) == ["dataConsent"]

    both = snapshot({"termsAccepted": True, "dataConsent": True})
    assert validator.is_valid(Step.REVIEW, both, VERIFIED)


def test_review_step_rejects_truthy_non_bool(validator):
    values = {"termsAccepted": "yes", "dataConsent": 1}

    errors = validator.errors(Step.REVIEW, snapshot(values), VERIFIED)

    assert set(errors) == {"termsAccepted", "dataConsent"}


def test_step_titles():
    assert Step.EXPERTISE.title == "Expertise & Reach"
    assert Step.REVIEW.title == "Review & Submit"
