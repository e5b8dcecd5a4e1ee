"""
Main entry point for the Partner Application Bot.
"""
import asyncio
import signal
import sys

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode

from partner_bot.config import settings
from partner_bot.logger import configure_logging, get_logger
from partner_bot.handlers import application, commands
from partner_bot.middlewares.session import (
    ApplicationSessionMiddleware,
    LoggingMiddleware,
    SessionRegistry,
)
from partner_bot.services.inquiry_api import InquiryApiClient
from partner_bot.services.platform_settings import PlatformSettingsService

# Configure logging
configure_logging()
logger = get_logger(__name__)


# Global bot, dispatcher and backend client
bot: Bot = None
dp: Dispatcher = None
api: InquiryApiClient = None


async def on_startup() -> None:
    """Actions to perform on startup."""
    logger.info("Starting Partner Application Bot...")

    # Branding is read once and handed to handlers read-only
    platform = await PlatformSettingsService(api).load()
    dp["platform"] = platform
    logger.info("Platform context ready", platform_name=platform.platform_name)

    logger.info("Partner Application Bot started successfully")


async def on_shutdown() -> None:
    """Actions to perform on shutdown."""
    logger.info("Shutting down Partner Application Bot...")

    # Close backend client
    await api.close()

    # Close bot session
    await bot.session.close()

    logger.info("Partner Application Bot shutdown complete")


def setup_handlers() -> None:
    """Setup all handlers."""
    # Create dispatcher
    global dp
    dp = Dispatcher()

    for observer in (dp.message, dp.callback_query):
        observer.middleware(LoggingMiddleware())

    # Per-user wizard sessions, created only inside the wizard router
    registry = SessionRegistry(api)
    dp["sessions"] = registry
    for observer in (application.router.message, application.router.callback_query):
        observer.middleware(ApplicationSessionMiddleware(registry))

    # Register routers
    dp.include_router(commands.router)
    dp.include_router(application.router)

    logger.info("Handlers registered")


async def main() -> None:
    """Main function."""
    global bot, api

    # Validate configuration
    if not settings.BOT_TOKEN:
        logger.error("BOT_TOKEN is not set!")
        sys.exit(1)

    # Create bot instance
    bot = Bot(
        token=settings.BOT_TOKEN,
        default=DefaultBotProperties(parse_mode=ParseMode.HTML),
    )
    api = InquiryApiClient()

    # Setup handlers
    setup_handlers()

    # Run startup
    await on_startup()

    # Setup signal handlers for graceful shutdown
    loop = asyncio.get_event_loop()

    def signal_handler():
        logger.info("Received shutdown signal")
        asyncio.create_task(dp.stop_polling())

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, signal_handler)
        except NotImplementedError:
            # Windows doesn't support add_signal_handler
            pass

    try:
        # Start polling
        logger.info("Starting polling...")
        await dp.start_polling(
            bot,
            allowed_updates=dp.resolve_used_update_types(),
            handle_signals=False,
        )
    except asyncio.CancelledError:
        logger.info("Polling cancelled")
    finally:
        await on_shutdown()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Bot stopped by user")
    except Exception as e:
        logger.error("Fatal error", error=str(e), exc_info=True)
        sys.exit(1)
