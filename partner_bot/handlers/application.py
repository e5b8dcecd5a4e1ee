"""
Handler for /apply command and the partner application wizard.
"""
from html import escape
from typing import Optional

from aiogram import Router, F, Bot
from aiogram.filters import Command, StateFilter
from aiogram.types import Message, CallbackQuery
from aiogram.fsm.context import FSMContext

from partner_bot.middlewares.session import SessionRegistry
from partner_bot.services.platform_settings import PlatformContext
from partner_bot.states.application import (
    ApplicationStates,
    CHOICE,
    MULTI,
    QUESTIONS,
    Question,
    question_index,
)
from partner_bot.keyboards.inline import (
    get_cancel_keyboard,
    get_document_prompt_keyboard,
    get_documents_keyboard,
    get_multi_select_keyboard,
    get_options_keyboard,
    get_otp_keyboard,
    get_review_keyboard,
    CALLBACK_BACK,
    CALLBACK_CANCEL,
    CALLBACK_CONSENT,
    CALLBACK_DOC,
    CALLBACK_MULTI,
    CALLBACK_OPTION,
    CALLBACK_OTP,
    CALLBACK_REVIEW,
    DOCS_DONE,
    DOCS_LIST,
    MULTI_DONE,
    OPTION_SKIP,
)
from partner_bot.utils.formatting import (
    format_application_preview,
    format_documents_screen,
    format_errors,
    format_step_header,
)
from partner_bot.wizard import (
    ApplicationSession,
    DocumentSlot,
    DocumentValidationError,
    FileRef,
    Step,
    VerificationState,
)
from partner_bot.wizard.documents import validate_file
from partner_bot.wizard.steps import FIRST_STEP, is_present
from partner_bot.logger import get_logger

logger = get_logger(__name__)

router = Router()

SKIP_MARKER = "-"
KEEP_MARKER = "="
MAX_ANSWER_LENGTH = 1000

CONSENT_FIELDS = {"terms": "termsAccepted", "data": "dataConsent"}


# --- Helper Functions ---

def current_question(application: ApplicationSession, data: dict) -> Optional[Question]:
    questions = QUESTIONS[application.current_step]
    index = data.get("question_index", 0)
    if 0 <= index < len(questions):
        return questions[index]
    return None


async def show_step(
    target: Message,
    state: FSMContext,
    application: ApplicationSession,
    platform: PlatformContext,
) -> None:
    """Open the current step at its first question or screen."""
    step = application.current_step

    if step is Step.DOCUMENTS:
        await show_documents(target, state, application)
    elif step is Step.REVIEW:
        await show_review(target, state, application, platform)
    else:
        await ask_question(target, state, application, platform, 0)


async def ask_question(
    target: Message,
    state: FSMContext,
    application: ApplicationSession,
    platform: PlatformContext,
    index: int,
) -> None:
    step = application.current_step
    questions = QUESTIONS[step]

    if index >= len(questions):
        await finish_step(target, state, application, platform)
        return

    question = questions[index]
    await state.update_data(question_index=index)

    text = question.prompt
    if index == 0:
        text = f"{format_step_header(step)}\n\n{text}"

    with_back = step is not FIRST_STEP

    if question.kind == CHOICE:
        await target.answer(
            text,
            reply_markup=get_options_keyboard(question.options, with_back, skippable=question.optional),
        )
        await state.set_state(ApplicationStates.choice)
        return

    if question.kind == MULTI:
        await target.answer(
            text,
            reply_markup=get_multi_select_keyboard(
                question.options,
                application.store.get(question.name),
                with_back,
            ),
        )
        await state.set_state(ApplicationStates.multi_choice)
        return

    current = application.store.get(question.name)
    if is_present(current):
        text += f"\n<i>Current: {escape(str(current))}. Send '{KEEP_MARKER}' to keep it.</i>"

    await target.answer(text, reply_markup=get_cancel_keyboard(with_back))
    await state.set_state(ApplicationStates.answer)


async def advance(
    target: Message,
    state: FSMContext,
    application: ApplicationSession,
    platform: PlatformContext,
) -> None:
    """Move on to the question after the current one."""
    data = await state.get_data()
    await ask_question(target, state, application, platform, data.get("question_index", 0) + 1)


async def finish_step(
    target: Message,
    state: FSMContext,
    application: ApplicationSession,
    platform: PlatformContext,
) -> None:
    """Try to leave the current step. On failure point at the first bad answer."""
    step = application.current_step

    if application.next():
        await target.answer(f"✅ {step.title} saved.")
        await show_step(target, state, application, platform)
        return

    errors = application.controller.current_errors()
    await target.answer(format_errors(errors))

    if not QUESTIONS[step]:
        await show_step(target, state, application, platform)
        return

    indexes = [question_index(step, name) for name in errors]
    indexes = [index for index in indexes if index is not None]
    await ask_question(target, state, application, platform, min(indexes) if indexes else 0)


async def show_documents(target: Message, state: FSMContext, application: ApplicationSession) -> None:
    snapshot = application.store.snapshot()
    await target.answer(
        format_documents_screen(snapshot),
        reply_markup=get_documents_keyboard(slot.value for slot in snapshot.documents),
    )
    await state.update_data(pending_slot=None)
    await state.set_state(ApplicationStates.documents)


async def show_review(
    target: Message,
    state: FSMContext,
    application: ApplicationSession,
    platform: PlatformContext,
) -> None:
    snapshot = application.store.snapshot()
    await target.answer(
        format_application_preview(snapshot, platform),
        reply_markup=get_review_keyboard(
            bool(snapshot.get("termsAccepted")),
            bool(snapshot.get("dataConsent")),
        ),
    )
    await state.set_state(ApplicationStates.review)


async def start_email_verification(
    message: Message,
    state: FSMContext,
    application: ApplicationSession,
    platform: PlatformContext,
) -> None:
    """Send a code to the email just entered, unless it is already verified."""
    challenge = application.challenge
    if challenge.is_verified:
        await advance(message, state, application, platform)
        return

    if challenge.state is VerificationState.IDLE:
        result = await application.send_otp()
        if not result.success:
            await message.answer(f"❌ {escape(result.message)}")
            data = await state.get_data()
            await ask_question(message, state, application, platform, data.get("question_index", 0))
            return
        notice = result.message
    else:
        # A code for this email is already out
        notice = "A code was already sent."

    await message.answer(
        f"📨 {escape(notice)}\n"
        f"Enter the {challenge.otp_length}-digit code sent to "
        f"<b>{escape(challenge.email)}</b>.",
        reply_markup=get_otp_keyboard(),
    )
    await state.set_state(ApplicationStates.otp)


# --- Command Handler ---

@router.message(Command("apply"))
async def cmd_apply(
    message: Message,
    state: FSMContext,
    application: ApplicationSession,
    platform: PlatformContext,
):
    """Start or resume the partner application wizard."""
    if await state.get_state() is not None:
        await message.answer(
            f"↩️ Resuming your application at step {application.current_step.value}.\n"
            "Use /cancel to start over."
        )
        await show_step(message, state, application, platform)
        return

    await message.answer(
        "🎯 <b>Partner Application</b>\n\n"
        "Join our network and help students achieve their medical dreams.\n"
        "I will ask a few questions in six short steps. "
        "You can cancel at any time with the button below or /cancel.",
        reply_markup=get_cancel_keyboard(),
    )
    await show_step(message, state, application, platform)
    logger.info("Application wizard started", user_id=message.from_user.id)


# --- Cancel and Back Handlers ---

@router.callback_query(F.data == CALLBACK_CANCEL)
async def cancel_wizard(
    callback: CallbackQuery,
    state: FSMContext,
    application: ApplicationSession,
    sessions: SessionRegistry,
):
    """Cancel the wizard and drop the draft."""
    application.abandon()
    sessions.discard(callback.from_user.id)
    await state.clear()
    await callback.message.edit_text("❌ Application cancelled.")
    await callback.answer()
    logger.info("Wizard cancelled", user_id=callback.from_user.id)


@router.callback_query(StateFilter(ApplicationStates), F.data == CALLBACK_BACK)
async def go_back(
    callback: CallbackQuery,
    state: FSMContext,
    application: ApplicationSession,
    platform: PlatformContext,
):
    """Return to the previous step. Answers are kept."""
    if not application.previous():
        await callback.answer("You are on the first step.")
        return
    await callback.answer()
    await show_step(callback.message, state, application, platform)


# --- Text Answer Handler ---

@router.message(ApplicationStates.answer, F.text)
async def process_answer(
    message: Message,
    state: FSMContext,
    application: ApplicationSession,
    platform: PlatformContext,
):
    """Store a free-text answer and move on."""
    data = await state.get_data()
    question = current_question(application, data)
    if question is None:
        await show_step(message, state, application, platform)
        return

    text = message.text.strip()

    if text == KEEP_MARKER and is_present(application.store.get(question.name)):
        pass
    elif question.optional and text == SKIP_MARKER:
        application.set_field(question.name, "")
    elif not text or text == SKIP_MARKER:
        await message.answer("❌ This field is required. Please enter a value:")
        return
    elif len(text) > MAX_ANSWER_LENGTH:
        await message.answer(f"❌ Too long. Maximum {MAX_ANSWER_LENGTH} characters:")
        return
    else:
        application.set_field(question.name, text)

    if question.name == "email":
        await start_email_verification(message, state, application, platform)
        return

    await advance(message, state, application, platform)


# --- Email Verification Handlers ---

@router.message(ApplicationStates.otp, F.text)
async def process_otp(
    message: Message,
    state: FSMContext,
    application: ApplicationSession,
    platform: PlatformContext,
):
    """Check the code the applicant typed."""
    result = await application.verify_otp(message.text)

    if not result.success:
        await message.answer(f"❌ {escape(result.message)}", reply_markup=get_otp_keyboard())
        return

    await message.answer(f"✅ {escape(result.message)}")
    await state.set_state(ApplicationStates.answer)
    await advance(message, state, application, platform)


@router.callback_query(ApplicationStates.otp, F.data.startswith(CALLBACK_OTP))
async def process_otp_action(
    callback: CallbackQuery,
    state: FSMContext,
    application: ApplicationSession,
    platform: PlatformContext,
):
    """Resend the code or go back to the email question."""
    action = callback.data[len(CALLBACK_OTP):]

    if action == "resend":
        result = await application.send_otp()
        await callback.answer(result.message, show_alert=not result.success)
        return

    await callback.answer()
    index = question_index(Step.PERSONAL, "email")
    await ask_question(callback.message, state, application, platform, index)


# --- Choice Handlers ---

@router.callback_query(ApplicationStates.choice, F.data.startswith(CALLBACK_OPTION))
async def process_choice(
    callback: CallbackQuery,
    state: FSMContext,
    application: ApplicationSession,
    platform: PlatformContext,
):
    """Store a single-choice answer."""
    data = await state.get_data()
    question = current_question(application, data)
    if question is None:
        await callback.answer()
        return

    raw = callback.data[len(CALLBACK_OPTION):]
    if raw == OPTION_SKIP and question.optional:
        application.set_field(question.name, "")
        answer = "skipped"
    else:
        try:
            answer = question.options[int(raw)]
        except (ValueError, IndexError):
            await callback.answer("❌ Unknown option", show_alert=True)
            return
        application.set_field(question.name, answer)

    await callback.message.edit_text(f"{question.prompt} <b>{escape(answer)}</b>")
    await callback.answer()
    await advance(callback.message, state, application, platform)


@router.callback_query(ApplicationStates.multi_choice, F.data.startswith(CALLBACK_MULTI))
async def process_multi_choice(
    callback: CallbackQuery,
    state: FSMContext,
    application: ApplicationSession,
    platform: PlatformContext,
):
    """Toggle options of a multi-select question."""
    data = await state.get_data()
    question = current_question(application, data)
    if question is None:
        await callback.answer()
        return

    action = callback.data[len(CALLBACK_MULTI):]

    if action == MULTI_DONE:
        if not application.store.get(question.name):
            await callback.answer("❌ Select at least one option!", show_alert=True)
            return
        await callback.answer()
        await advance(callback.message, state, application, platform)
        return

    try:
        option = question.options[int(action)]
    except (ValueError, IndexError):
        await callback.answer("❌ Unknown option", show_alert=True)
        return

    application.toggle_choice(question.name, option)
    await callback.message.edit_reply_markup(
        reply_markup=get_multi_select_keyboard(
            question.options,
            application.store.get(question.name),
            application.current_step is not FIRST_STEP,
        )
    )
    await callback.answer()


# --- Document Handlers ---

@router.callback_query(ApplicationStates.documents, F.data.startswith(CALLBACK_DOC))
async def process_document_slot(
    callback: CallbackQuery,
    state: FSMContext,
    application: ApplicationSession,
    platform: PlatformContext,
):
    """Pick which document the next file is for, or leave the step."""
    action = callback.data[len(CALLBACK_DOC):]

    if action == DOCS_DONE:
        await callback.answer()
        await finish_step(callback.message, state, application, platform)
        return

    if action == DOCS_LIST:
        await callback.answer()
        await show_documents(callback.message, state, application)
        return

    try:
        slot = DocumentSlot(action)
    except ValueError:
        await callback.answer("❌ Unknown document", show_alert=True)
        return

    await state.update_data(pending_slot=slot.value)
    kind = "a JPG or PNG photo (max 2MB)" if slot.is_photo else "a PDF file (max 5MB)"
    await callback.message.answer(
        f"📎 Send {kind} for <b>{slot.label}</b>.",
        reply_markup=get_document_prompt_keyboard(),
    )
    await callback.answer()


@router.message(ApplicationStates.documents, F.document | F.photo)
async def process_document_file(
    message: Message,
    state: FSMContext,
    application: ApplicationSession,
    bot: Bot,
):
    """Validate, download and stage a file for the selected slot."""
    data = await state.get_data()
    slot_name = data.get("pending_slot")
    if not slot_name:
        await message.answer("👆 Tap the document you are sending first.")
        await show_documents(message, state, application)
        return

    slot = DocumentSlot(slot_name)

    if message.document:
        source = message.document
        file_name = source.file_name or f"{slot.value}.pdf"
        media_type = source.mime_type or ""
    else:
        source = message.photo[-1]
        file_name = f"{slot.value}.jpg"
        media_type = "image/jpeg"

    try:
        # Check what Telegram reports before downloading anything
        validate_file(slot, FileRef(name=file_name, size=source.file_size or 0, media_type=media_type))
        buffer = await bot.download(source)
        content = buffer.getvalue()
        application.assign_document(
            slot,
            FileRef(name=file_name, size=len(content), media_type=media_type, content=content),
        )
    except DocumentValidationError as e:
        await message.answer(f"❌ {escape(e.message)}")
        return

    await message.answer(f"✅ {slot.label} attached.")
    await show_documents(message, state, application)


# --- Review Handlers ---

@router.callback_query(ApplicationStates.review, F.data.startswith(CALLBACK_CONSENT))
async def process_consent(callback: CallbackQuery, application: ApplicationSession):
    """Toggle one of the two consent checkboxes."""
    field_name = CONSENT_FIELDS.get(callback.data[len(CALLBACK_CONSENT):])
    if field_name is None:
        await callback.answer()
        return

    application.set_field(field_name, not application.store.get(field_name))
    await callback.message.edit_reply_markup(
        reply_markup=get_review_keyboard(
            bool(application.store.get("termsAccepted")),
            bool(application.store.get("dataConsent")),
        )
    )
    await callback.answer()


@router.callback_query(ApplicationStates.review, F.data == f"{CALLBACK_REVIEW}submit")
async def process_submit(
    callback: CallbackQuery,
    state: FSMContext,
    application: ApplicationSession,
    sessions: SessionRegistry,
):
    """Run the two-phase submission."""
    if application.coordinator.in_flight:
        await callback.answer("⏳ Already submitting...")
        return

    await callback.answer()
    progress = await callback.message.answer("⏳ Submitting your application...")

    outcome = await application.submit()

    if outcome.success:
        sessions.discard(callback.from_user.id)
        await state.clear()
        await progress.edit_text(f"✅ {escape(outcome.message)}")
        logger.info("Application submitted via bot", user_id=callback.from_user.id)
        return

    await progress.edit_text(
        f"❌ {escape(outcome.message)}\n\n"
        "Your answers are kept. Tap <b>Submit application</b> to try again."
    )
    logger.warning(
        "Application submission failed via bot",
        user_id=callback.from_user.id,
        kind=outcome.kind.value if outcome.kind else None,
    )


# --- Fallback ---

@router.message(StateFilter(
    ApplicationStates.choice,
    ApplicationStates.multi_choice,
    ApplicationStates.documents,
    ApplicationStates.review,
))
async def use_buttons(message: Message):
    await message.answer("👆 Please use the buttons above.")
