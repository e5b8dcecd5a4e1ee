"""
Wizard steps and their validation rules.
"""
from enum import IntEnum
from typing import Any, Callable, Dict

from partner_bot.wizard.fields import DraftSnapshot, REQUIRED_SLOTS
from partner_bot.wizard.verification import VerificationState
from partner_bot.utils.date_utils import current_year, parse_year

MIN_ESTABLISHED_YEAR = 1900


class Step(IntEnum):
    PERSONAL = 1
    COMPANY = 2
    EXPERTISE = 3
    PARTNERSHIP = 4
    DOCUMENTS = 5
    REVIEW = 6

    @property
    def title(self) -> str:
        return STEP_TITLES[self]


STEP_TITLES = {
    Step.PERSONAL: "Personal Information",
    Step.COMPANY: "Company Details",
    Step.EXPERTISE: "Expertise & Reach",
    Step.PARTNERSHIP: "Partnership Intent",
    Step.DOCUMENTS: "Documents",
    Step.REVIEW: "Review & Submit",
}

FIRST_STEP = Step.PERSONAL
LAST_STEP = Step.REVIEW

# (field, message) pairs that only need a value
REQUIRED_FIELDS = {
    Step.PERSONAL: [
        ("firstName", "First Name is required"),
        ("lastName", "Last Name is required"),
        ("email", "Email is required"),
        ("phone", "Phone Number is required"),
        ("qualification", "Qualification is required"),
        ("designation", "Designation is required"),
        ("experience", "Experience is required"),
    ],
    Step.COMPANY: [
        ("companyName", "Company Name is required"),
        ("companyType", "Company Type is required"),
        ("address", "Address is required"),
        ("city", "City is required"),
        ("state", "State is required"),
        ("pincode", "PIN Code is required"),
    ],
    Step.EXPERTISE: [
        ("specialization", "Select at least one specialization"),
        ("servicesOffered", "Select at least one service"),
        ("currentStudents", "Student Base is required"),
        ("teamSize", "Team Size is required"),
    ],
    Step.PARTNERSHIP: [
        ("partnershipType", "Partnership Type is required"),
        ("expectedStudents", "Students Target is required"),
        ("whyPartner", "This field is required"),
    ],
}


def is_present(value: Any) -> bool:
    """True for a value an applicant actually entered."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (set, frozenset, list, tuple, dict)):
        return len(value) > 0
    return True


class StepValidator:
    """
    Pure predicates over a draft snapshot and the verification state.

    A step is valid only when every one of its rules holds. `errors` returns
    the failing rules keyed by field so the UI can point at them.
    """

    def __init__(self, year_provider: Callable[[], int] = current_year):
        self.year_provider = year_provider

    def is_valid(self, step: Step, snapshot: DraftSnapshot, verification_state: VerificationState) -> bool:
        return not self.errors(step, snapshot, verification_state)

    def errors(
        self,
        step: Step,
        snapshot: DraftSnapshot,
        verification_state: VerificationState,
    ) -> Dict[str, str]:
        step = Step(step)
        errors: Dict[str, str] = {}

        for name, message in REQUIRED_FIELDS.get(step, []):
            if not is_present(snapshot.get(name)):
                errors[name] = message

        if step is Step.PERSONAL:
            if verification_state is not VerificationState.VERIFIED:
                errors["emailVerified"] = "Please verify your email"

        elif step is Step.COMPANY:
            year_error = self._established_year_error(snapshot.get("establishedYear"))
            if year_error:
                errors["establishedYear"] = year_error

        elif step is Step.DOCUMENTS:
            for slot in REQUIRED_SLOTS:
                if not snapshot.has_document(slot):
                    errors[slot.value] = f"{slot.label} is required"

        elif step is Step.REVIEW:
            if snapshot.get("termsAccepted") is not True:
                errors["termsAccepted"] = "You must accept the terms"
            if snapshot.get("dataConsent") is not True:
                errors["dataConsent"] = "You must provide data consent"

        return errors

    def _established_year_error(self, value: Any):
        if not is_present(value):
            return "Year Established is required"
        year = parse_year(value)
        if year is None or year < MIN_ESTABLISHED_YEAR or year > self.year_provider():
            return "Enter a valid year"
        return None
