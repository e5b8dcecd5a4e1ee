from types import SimpleNamespace

from partner_bot.middlewares.session import ApplicationSessionMiddleware, SessionRegistry
from partner_bot.wizard import ApplicationSession


def test_registry_keeps_one_session_per_user(api):
    registry = SessionRegistry(api)

    first = registry.get(1)

    assert isinstance(first, ApplicationSession)
    assert registry.get(1) is first
    assert registry.get(2) is not first
    assert len(registry) == 2


def test_discard_starts_fresh(api):
    registry = SessionRegistry(api)
    first = registry.get(1)

    registry.discard(1)
    registry.discard(99)

    assert registry.get(1) is not first


def test_bot_sessions_report_telegram(api):
    registry = SessionRegistry(api)

    assert registry.get(1).coordinator.environment.browser == "Telegram"


async def test_middleware_injects_session(api):
    registry = SessionRegistry(api)
    middleware = ApplicationSessionMiddleware(registry)
    seen = {}

    async def handler(event, data):
        seen.update(data)
        return "handled"

    result = await middleware(handler, object(), {"event_from_user": SimpleNamespace(id=42)})

    assert result == "handled"
    assert seen["application"] is registry.get(42)
    assert seen["sessions"] is registry


async def test_middleware_passes_through_without_user(api):
    middleware = ApplicationSessionMiddleware(SessionRegistry(api))
    seen = {}

    async def handler(event, data):
        seen.update(data)

    await middleware(handler, object(), {})

    assert "application" not in seen


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_peek_never_creates(api):
    registry = SessionRegistry(api)

    assert registry.peek(1) is None
    assert len(registry) == 0

    session = registry.get(1)
    assert registry.peek(1) is session


def test_idle_sessions_are_swept_on_access(api):
    clock = FakeClock()
    registry = SessionRegistry(api, idle_timeout=60, clock=clock)
    stale = registry.get(1)
    clock.now = 50
    fresh = registry.get(2)

    clock.now = 100

    assert registry.peek(1) is None
    assert registry.peek(2) is fresh
    assert len(registry) == 1
    assert registry.get(1) is not stale


def test_activity_keeps_a_session_alive(api):
    clock = FakeClock()
    registry = SessionRegistry(api, idle_timeout=60, clock=clock)
    session = registry.get(1)

    for now in (40, 80, 120):
        clock.now = now
        assert registry.get(1) is session


def test_session_with_request_in_flight_is_not_swept(api):
    clock = FakeClock()
    registry = SessionRegistry(api, idle_timeout=60, clock=clock)
    session = registry.get(1)
    session.coordinator._in_flight = True

    clock.now = 1000

    assert registry.sweep() == 0
    assert registry.peek(1) is session
