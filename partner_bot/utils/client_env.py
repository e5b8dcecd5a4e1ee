"""
Best-effort description of the applicant's client, sent with the application.
"""
import platform
from dataclasses import dataclass
from typing import Optional

UNKNOWN_OS = "Unknown OS"
UNKNOWN_BROWSER = "Unknown"

# Later matches win; Android user agents report Linux
OS_MARKERS = (
    ("Windows", "Windows"),
    ("Mac", "MacOS"),
    ("Linux", "Linux"),
)

# Checked in order; Edge and Chrome UAs also mention Safari
BROWSER_MARKERS = (
    ("Edg/", "Edge"),
    ("OPR/", "Opera"),
    ("Firefox/", "Firefox"),
    ("Chrome/", "Chrome"),
    ("Safari/", "Safari"),
)


@dataclass(frozen=True)
class ClientEnvironment:
    os: str = UNKNOWN_OS
    browser: str = UNKNOWN_BROWSER

    @classmethod
    def from_user_agent(cls, user_agent: Optional[str]) -> "ClientEnvironment":
        if not user_agent:
            return cls()

        os_name = UNKNOWN_OS
        for marker, name in OS_MARKERS:
            if marker in user_agent:
                os_name = name

        browser = UNKNOWN_BROWSER
        for marker, name in BROWSER_MARKERS:
            if marker in user_agent:
                browser = name
                break

        return cls(os=os_name, browser=browser)

    @classmethod
    def for_bot(cls) -> "ClientEnvironment":
        """Environment reported when the application comes in through the bot."""
        system = platform.system()
        os_name = {"Darwin": "MacOS"}.get(system, system) or UNKNOWN_OS
        return cls(os=os_name, browser="Telegram")

    def as_payload(self) -> dict:
        return {"os": self.os, "browser": self.browser}
