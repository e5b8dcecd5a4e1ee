"""
Partner application bot package.
"""
from partner_bot.config import settings
from partner_bot.logger import configure_logging, get_logger

__all__ = ["settings", "configure_logging", "get_logger"]
