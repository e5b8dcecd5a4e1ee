"""
Handler for general commands (/start, /help, /status, /cancel).
"""
from aiogram import Router
from aiogram.filters import Command, CommandStart
from aiogram.fsm.context import FSMContext
from aiogram.types import Message

from partner_bot.middlewares.session import SessionRegistry
from partner_bot.services.platform_settings import PlatformContext
from partner_bot.utils.formatting import format_welcome
from partner_bot.wizard.steps import LAST_STEP, Step
from partner_bot.logger import get_logger

logger = get_logger(__name__)

router = Router()


# --- Start Command ---

@router.message(CommandStart())
async def cmd_start(message: Message, platform: PlatformContext):
    """Greet the applicant."""
    await message.answer(format_welcome(platform))


# --- Help Command ---

@router.message(Command("help"))
async def cmd_help(message: Message):
    """Show help message."""
    help_text = """
📚 <b>Partner application help</b>

<b>Available commands:</b>

/apply — Start or resume your partner application
/status — Show how far you are
/cancel — Cancel the application and discard your answers
/help — This help

<b>Steps:</b>

1. Personal — your contact details and email verification
2. Company — business details and address
3. Expertise — specializations, services, scale
4. Partnership — partnership type and goals
5. Documents — ID proof, company licence, photos
6. Review — check your answers, accept the terms and submit

<b>Documents:</b>

• Photos (agent, company): JPG or PNG, up to 2MB
• Everything else: PDF, up to 5MB
"""

    await message.answer(help_text)


# --- Status Command ---

@router.message(Command("status"))
async def cmd_status(message: Message, state: FSMContext, sessions: SessionRegistry):
    """Show the current step and what is still missing."""
    application = sessions.peek(message.from_user.id)
    if await state.get_state() is None or application is None:
        await state.clear()
        await message.answer("ℹ️ You have no application in progress. Use /apply to start.")
        return

    step = application.current_step
    lines = []
    for candidate in Step:
        if candidate < step:
            icon = "✅"
        elif candidate == step:
            icon = "👉"
        else:
            icon = "▫️"
        lines.append(f"{icon} {candidate.value}. {candidate.title}")

    text = f"📊 <b>Step {step.value} of {LAST_STEP.value}</b>\n\n" + "\n".join(lines)

    errors = application.controller.current_errors()
    if errors:
        text += "\n\n<b>Still needed on this step:</b>\n" + "\n".join(
            f"  • {message_text}" for message_text in errors.values()
        )

    await message.answer(text)


# --- Cancel Command ---

@router.message(Command("cancel"))
async def cmd_cancel(message: Message, state: FSMContext, sessions: SessionRegistry):
    """Cancel the wizard from anywhere."""
    application = sessions.peek(message.from_user.id)
    if await state.get_state() is None and application is None:
        await message.answer("ℹ️ Nothing to cancel.")
        return

    if application is not None:
        application.abandon()
    sessions.discard(message.from_user.id)
    await state.clear()
    await message.answer("❌ Application cancelled.")
    logger.info("Wizard cancelled by command", user_id=message.from_user.id)
