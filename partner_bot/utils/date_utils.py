"""
Date and input helpers for the Partner Application Bot.
"""
import re
from datetime import datetime
from typing import Optional
import pytz
from partner_bot.config import settings

# Timezone
TZ = pytz.timezone(settings.TIMEZONE)


def get_now() -> datetime:
    """Get current datetime in configured timezone."""
    return datetime.now(TZ)


def current_year() -> int:
    """Current calendar year in configured timezone."""
    return get_now().year


def parse_year(value) -> Optional[int]:
    """
    Parse a year entered as an int or a string of digits.
    Returns None for anything else (including booleans).
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            return int(text)
    return None


def validate_email(email: str) -> bool:
    """Validate email format."""
    if not email:
        return False

    pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
    return bool(re.match(pattern, email.strip()))


def format_bytes(size: int) -> str:
    """Human readable file size."""
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


def truncate_text(text: str, max_length: int = 100) -> str:
    """Truncate text with ellipsis."""
    if len(text) <= max_length:
        return text
    return text[:max_length - 3] + "..."
