"""
Inline keyboards for the Partner Application Bot.
"""
from typing import Iterable, List, Optional

from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton
from aiogram.utils.keyboard import InlineKeyboardBuilder

from partner_bot.wizard.fields import DocumentSlot


# Callback data prefixes
CALLBACK_CANCEL = "cancel"
CALLBACK_BACK = "nav:back"
CALLBACK_OPTION = "opt:"
CALLBACK_MULTI = "multi:"
CALLBACK_OTP = "otp:"
CALLBACK_DOC = "doc:"
CALLBACK_CONSENT = "consent:"
CALLBACK_REVIEW = "review:"

OPTION_SKIP = "skip"
MULTI_DONE = "done"
DOCS_DONE = "done"
DOCS_LIST = "list"


def _add_navigation(builder: InlineKeyboardBuilder, with_back: bool) -> None:
    row = []
    if with_back:
        row.append(InlineKeyboardButton(text="⬅️ Back", callback_data=CALLBACK_BACK))
    row.append(InlineKeyboardButton(text="❌ Cancel", callback_data=CALLBACK_CANCEL))
    builder.row(*row)


def get_cancel_keyboard(with_back: bool = False) -> InlineKeyboardMarkup:
    """Get keyboard with cancel (and optionally back) button."""
    builder = InlineKeyboardBuilder()
    _add_navigation(builder, with_back)
    return builder.as_markup()


def get_options_keyboard(
    options: List[str],
    with_back: bool = False,
    skippable: bool = False,
) -> InlineKeyboardMarkup:
    """One button per option. Callback carries the option index."""
    builder = InlineKeyboardBuilder()

    for index, label in enumerate(options):
        builder.button(text=label, callback_data=f"{CALLBACK_OPTION}{index}")

    builder.adjust(2)

    if skippable:
        builder.row(
            InlineKeyboardButton(text="⏭ Skip", callback_data=f"{CALLBACK_OPTION}{OPTION_SKIP}")
        )
    _add_navigation(builder, with_back)
    return builder.as_markup()


def get_multi_select_keyboard(
    options: List[str],
    selected: Optional[Iterable[str]] = None,
    with_back: bool = False,
) -> InlineKeyboardMarkup:
    """Get keyboard for toggling options of a multi-select field."""
    selected = set(selected or [])

    builder = InlineKeyboardBuilder()

    for index, label in enumerate(options):
        prefix = "✅ " if label in selected else ""
        builder.button(
            text=f"{prefix}{label}",
            callback_data=f"{CALLBACK_MULTI}{index}"
        )

    builder.adjust(2)

    # Add done button
    builder.row(
        InlineKeyboardButton(
            text="✅ Done",
            callback_data=f"{CALLBACK_MULTI}{MULTI_DONE}"
        )
    )
    _add_navigation(builder, with_back)
    return builder.as_markup()


def get_otp_keyboard() -> InlineKeyboardMarkup:
    """Resend code or go back to editing the email."""
    builder = InlineKeyboardBuilder()
    builder.button(text="🔁 Resend code", callback_data=f"{CALLBACK_OTP}resend")
    builder.button(text="✏️ Change email", callback_data=f"{CALLBACK_OTP}change")
    builder.adjust(2)
    _add_navigation(builder, with_back=False)
    return builder.as_markup()


def get_documents_keyboard(filled: Iterable[str]) -> InlineKeyboardMarkup:
    """One button per document slot, marked when a file is staged."""
    filled = set(filled)

    builder = InlineKeyboardBuilder()

    for slot in DocumentSlot:
        if slot.value in filled:
            icon = "✅"
        elif slot.required:
            icon = "📎"
        else:
            icon = "➕"
        suffix = "" if slot.required else " (optional)"
        builder.button(
            text=f"{icon} {slot.label}{suffix}",
            callback_data=f"{CALLBACK_DOC}{slot.value}"
        )

    builder.adjust(1)
    builder.row(
        InlineKeyboardButton(
            text="➡️ Continue",
            callback_data=f"{CALLBACK_DOC}{DOCS_DONE}"
        )
    )
    _add_navigation(builder, with_back=True)
    return builder.as_markup()


def get_document_prompt_keyboard() -> InlineKeyboardMarkup:
    """Shown while waiting for a file: return to the document list or cancel."""
    builder = InlineKeyboardBuilder()
    builder.button(
        text="⬅️ Back to documents",
        callback_data=f"{CALLBACK_DOC}{DOCS_LIST}"
    )
    builder.button(text="❌ Cancel", callback_data=CALLBACK_CANCEL)
    builder.adjust(2)
    return builder.as_markup()


def get_review_keyboard(terms_accepted: bool, data_consent: bool) -> InlineKeyboardMarkup:
    """Consent toggles plus submit."""
    builder = InlineKeyboardBuilder()

    builder.button(
        text=f"{'☑️' if terms_accepted else '⬜️'} I agree to the Terms & Conditions",
        callback_data=f"{CALLBACK_CONSENT}terms"
    )
    builder.button(
        text=f"{'☑️' if data_consent else '⬜️'} I consent to data processing",
        callback_data=f"{CALLBACK_CONSENT}data"
    )
    builder.button(
        text="🚀 Submit application",
        callback_data=f"{CALLBACK_REVIEW}submit"
    )
    builder.adjust(1)
    _add_navigation(builder, with_back=True)
    return builder.as_markup()
