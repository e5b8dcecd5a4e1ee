"""
FSM states and questions for the /apply wizard.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from aiogram.fsm.state import State, StatesGroup

from partner_bot.wizard import options
from partner_bot.wizard.steps import Step


class ApplicationStates(StatesGroup):
    """States of the partner application conversation."""

    # Free text answer for the current question
    answer = State()

    # Keyboard driven questions
    choice = State()
    multi_choice = State()

    # Email code entry
    otp = State()

    # Waiting for files
    documents = State()

    # Final review
    review = State()


TEXT = "text"
CHOICE = "choice"
MULTI = "multi"


@dataclass(frozen=True)
class Question:
    name: str
    prompt: str
    kind: str = TEXT
    options: List[str] = field(default_factory=list)
    optional: bool = False


QUESTIONS: Dict[Step, List[Question]] = {
    Step.PERSONAL: [
        Question("firstName", "👤 First name:"),
        Question("lastName", "👤 Last name:"),
        Question("phone", "📞 Phone number:"),
        Question("alternatePhone", "📞 Alternate phone (or '-' to skip):", optional=True),
        Question("qualification", "🎓 Highest qualification (e.g. MBA, B.Tech):"),
        Question("designation", "💼 Designation (e.g. CEO / Manager):"),
        Question("experience", "📅 Years of experience:", CHOICE, options.EXPERIENCE_OPTIONS),
        Question("email", "📧 Email address. We will send a verification code to it:"),
    ],
    Step.COMPANY: [
        Question("companyName", "🏢 Legal company name:"),
        Question("companyType", "🏷 Company type:", CHOICE, options.COMPANY_TYPES),
        Question("registrationNumber", "🆔 Registration number (or '-' to skip):", optional=True),
        Question("establishedYear", "📅 Year established (e.g. 2018):"),
        Question("website", "🌐 Company website (or '-' to skip):", optional=True),
        Question("address", "📍 Office address:"),
        Question("city", "🏙 City:"),
        Question("state", "🗺 State:", CHOICE, options.STATES),
        Question("pincode", "📮 PIN code:"),
    ],
    Step.EXPERTISE: [
        Question("specialization", "🎯 Areas of specialization (select all that apply):", MULTI,
                 options.SPECIALIZATION_OPTIONS),
        Question("servicesOffered", "🛠 Services offered (select all that apply):", MULTI,
                 options.SERVICES_OPTIONS),
        Question("currentStudents", "👥 Current student base:", CHOICE, options.CURRENT_STUDENTS_OPTIONS),
        Question("teamSize", "👥 Team size:", CHOICE, options.TEAM_SIZE_OPTIONS),
        Question("annualRevenue", "💰 Annual revenue:", CHOICE, options.ANNUAL_REVENUE_OPTIONS, optional=True),
    ],
    Step.PARTNERSHIP: [
        Question("partnershipType", "🤝 Partnership type:", CHOICE, options.PARTNERSHIP_TYPES),
        Question("expectedStudents", "🎯 Students target per year:", CHOICE, options.EXPECTED_STUDENTS_OPTIONS),
        Question("marketingBudget", "📣 Marketing budget:", CHOICE, options.MARKETING_BUDGET_OPTIONS, optional=True),
        Question("whyPartner", "✍️ Why do you want to partner with us?"),
        Question("references", "📇 References (or '-' to skip):", optional=True),
        Question("additionalInfo", "📝 Anything else we should know (or '-' to skip):", optional=True),
    ],
    # Documents and review have their own screens
    Step.DOCUMENTS: [],
    Step.REVIEW: [],
}

# Validation error keys that point at a question on another screen
ERROR_FIELD_ALIASES = {"emailVerified": "email"}


def question_index(step: Step, field_name: str) -> Optional[int]:
    """Position of the question asking for `field_name` within `step`."""
    field_name = ERROR_FIELD_ALIASES.get(field_name, field_name)
    for index, question in enumerate(QUESTIONS[step]):
        if question.name == field_name:
            return index
    return None
