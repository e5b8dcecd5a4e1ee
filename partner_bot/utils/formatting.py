"""
Message formatting for the Partner Application Bot.
"""
from html import escape
from typing import Mapping

from partner_bot.services.platform_settings import PlatformContext
from partner_bot.wizard.fields import DocumentSlot, DraftSnapshot
from partner_bot.wizard.steps import LAST_STEP, Step
from partner_bot.utils.date_utils import current_year, format_bytes, truncate_text


def format_welcome(platform: PlatformContext) -> str:
    name = escape(platform.platform_name) if platform.platform_name else ""
    greeting = f"Welcome to {name} CRM" if name else "Welcome to the Portal"
    text = (
        f"👋 <b>{greeting}</b>\n\n"
        "Join our global network of education partners. "
        "Help students achieve their dreams while growing your business"
        f"{f' with {name}' if name else ''}.\n\n"
        "Use /apply to start your partner application."
    )
    if platform.support_email:
        text += f"\n\n📧 Questions? Write to {escape(platform.support_email)}"
    return text


def format_step_header(step: Step) -> str:
    return f"<b>Step {step.value} of {LAST_STEP.value}: {step.title}</b>"


def format_errors(errors: Mapping[str, str]) -> str:
    lines = "\n".join(f"  • {escape(message)}" for message in errors.values())
    return f"❌ Please fix the following before continuing:\n{lines}"


def _value(value) -> str:
    if isinstance(value, (set, frozenset, list, tuple)):
        return escape(", ".join(sorted(value))) if value else "—"
    if value in (None, ""):
        return "—"
    return escape(truncate_text(str(value), 200))


def format_documents_status(snapshot: DraftSnapshot) -> str:
    lines = []
    for slot in DocumentSlot:
        file_ref = snapshot.documents.get(slot)
        requirement = "" if slot.required else " (optional)"
        if file_ref is not None:
            lines.append(
                f"  ✅ {slot.label}{requirement}: {escape(file_ref.name)} ({format_bytes(file_ref.size)})"
            )
        else:
            lines.append(f"  {'📎' if slot.required else '➕'} {slot.label}{requirement}: not attached")
    return "\n".join(lines)


def format_documents_screen(snapshot: DraftSnapshot) -> str:
    return (
        f"{format_step_header(Step.DOCUMENTS)}\n\n"
        "Tap a document, then send the file.\n"
        "Photos: JPG or PNG up to 2MB. Other documents: PDF up to 5MB.\n\n"
        f"{format_documents_status(snapshot)}"
    )


def format_application_preview(snapshot: DraftSnapshot, platform: PlatformContext) -> str:
    """Format the whole draft for the review screen."""
    get = snapshot.get
    footer_name = f"{escape(platform.platform_name)} " if platform.platform_name else ""
    return f"""
{format_step_header(Step.REVIEW)}

👤 <b>Personal</b>
Name: {_value(get('firstName'))} {_value(get('lastName'))}
Email: {_value(get('email'))} ✅
Phone: {_value(get('phone'))}
Alternate phone: {_value(get('alternatePhone'))}
Qualification: {_value(get('qualification'))}
Designation: {_value(get('designation'))}
Experience: {_value(get('experience'))}

🏢 <b>Company</b>
Name: {_value(get('companyName'))} ({_value(get('companyType'))})
Registration: {_value(get('registrationNumber'))}
Established: {_value(get('establishedYear'))}
Website: {_value(get('website'))}
Address: {_value(get('address'))}, {_value(get('city'))}, {_value(get('state'))} {_value(get('pincode'))}

🎯 <b>Expertise</b>
Specialization: {_value(get('specialization'))}
Services: {_value(get('servicesOffered'))}
Student base: {_value(get('currentStudents'))}
Team size: {_value(get('teamSize'))}
Annual revenue: {_value(get('annualRevenue'))}

🤝 <b>Partnership</b>
Type: {_value(get('partnershipType'))}
Students target/year: {_value(get('expectedStudents'))}
Marketing budget: {_value(get('marketingBudget'))}
Why partner: {_value(get('whyPartner'))}
References: {_value(get('references'))}
Additional info: {_value(get('additionalInfo'))}

📎 <b>Documents</b>
{format_documents_status(snapshot)}

Review typically takes 3-5 business days. We will reach out via email for the next steps.

© {current_year()} {footer_name}Global CRM • SECURE PORTAL
"""
