"""
Service layer for public platform settings (branding and contact details).
"""
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping

from partner_bot.config import settings
from partner_bot.wizard.errors import ApiError
from partner_bot.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class PlatformContext:
    """Read-only branding injected into the UI layer."""
    platform_name: str = ""
    values: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def get(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)

    @property
    def support_email(self) -> str:
        return self.values.get("contact_email") or self.values.get("support_email") or ""


def flatten_settings(data: Any) -> Dict[str, Any]:
    """`{group: {key: value}}` -> `{key: value}`. Later groups win on clashes."""
    flattened: Dict[str, Any] = {}
    if not isinstance(data, dict):
        return flattened
    for group in data.values():
        if isinstance(group, dict):
            flattened.update(group)
    return flattened


class PlatformSettingsService:
    """Loads the public settings once and hands out a PlatformContext."""

    def __init__(self, api):
        self.api = api

    async def load(self) -> PlatformContext:
        try:
            body = await self.api.get_settings()
        except ApiError as e:
            logger.warning("Could not load platform settings", error=e.message)
            return PlatformContext(platform_name=settings.PLATFORM_NAME)

        values = flatten_settings(body.get("data"))
        platform_name = values.get("platform_name") or settings.PLATFORM_NAME
        logger.info("Platform settings loaded", platform_name=platform_name, keys=len(values))
        return PlatformContext(platform_name=platform_name, values=MappingProxyType(values))
