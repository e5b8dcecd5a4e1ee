"""
Middlewares for the Partner Application Bot.
"""
import time
from typing import Callable, Dict, Any, Awaitable, Optional

from aiogram import BaseMiddleware
from aiogram.types import TelegramObject, User

from partner_bot.config import settings
from partner_bot.wizard.session import ApplicationSession
from partner_bot.utils.client_env import ClientEnvironment
from partner_bot.logger import get_logger

logger = get_logger(__name__)


class SessionRegistry:
    """
    In-memory applicant sessions keyed by Telegram user id.

    Sessions are created only by `get`, which the wizard router calls. Every
    access sweeps out sessions idle for longer than `idle_timeout` seconds,
    except ones with a request still in flight.
    """

    def __init__(
        self,
        api,
        environment: Optional[ClientEnvironment] = None,
        idle_timeout: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.api = api
        self.environment = environment or ClientEnvironment.for_bot()
        self.idle_timeout = (
            settings.SESSION_IDLE_TIMEOUT_SECONDS if idle_timeout is None else idle_timeout
        )
        self.clock = clock
        self._sessions: Dict[int, ApplicationSession] = {}
        self._touched: Dict[int, float] = {}

    def get(self, user_id: int) -> ApplicationSession:
        """Return the user's session, creating it if needed."""
        self.sweep()
        session = self._sessions.get(user_id)
        if session is None:
            session = ApplicationSession(self.api, environment=self.environment)
            self._sessions[user_id] = session
            logger.info("Application session created", user_id=user_id)
        self._touched[user_id] = self.clock()
        return session

    def peek(self, user_id: int) -> Optional[ApplicationSession]:
        """Return the user's session if one exists. Never creates one."""
        self.sweep()
        session = self._sessions.get(user_id)
        if session is not None:
            self._touched[user_id] = self.clock()
        return session

    def discard(self, user_id: int) -> None:
        self._sessions.pop(user_id, None)
        self._touched.pop(user_id, None)

    def sweep(self) -> int:
        """Drop idle sessions. Returns how many were dropped."""
        deadline = self.clock() - self.idle_timeout
        expired = [
            user_id
            for user_id, touched in self._touched.items()
            if touched < deadline and not self._busy(self._sessions[user_id])
        ]
        for user_id in expired:
            self.discard(user_id)
        if expired:
            logger.info("Idle application sessions dropped", count=len(expired))
        return len(expired)

    @staticmethod
    def _busy(session: ApplicationSession) -> bool:
        return session.challenge.in_flight or session.coordinator.in_flight

    def __len__(self) -> int:
        return len(self._sessions)


class ApplicationSessionMiddleware(BaseMiddleware):
    """
    Injects the applicant's ApplicationSession as `application`.

    Register it on the wizard router only, so commands such as /start and
    /help never create a session.
    """

    def __init__(self, registry: SessionRegistry):
        self.registry = registry

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any],
    ) -> Any:
        user: User = data.get("event_from_user")

        if user:
            data["application"] = self.registry.get(user.id)
            data["sessions"] = self.registry

        return await handler(event, data)


class LoggingMiddleware(BaseMiddleware):
    """Middleware for logging all updates."""

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any],
    ) -> Any:
        """Log incoming updates."""
        user: User = data.get("event_from_user")

        if user:
            logger.debug(
                "Update received",
                user_id=user.id,
                username=user.username,
                update_type=type(event).__name__,
            )

        return await handler(event, data)
