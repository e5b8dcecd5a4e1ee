"""
Configuration module for the Partner Application Bot.
Loads environment variables and provides settings.
"""
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Bot configuration
    BOT_TOKEN: str = Field(default="", description="Telegram Bot Token")

    # Backend API
    API_BASE_URL: str = Field(
        default="http://localhost:5000/api",
        description="Base URL of the CRM backend REST API"
    )
    API_TIMEOUT_SECONDS: float = Field(
        default=30.0,
        description="Total timeout for a single backend request"
    )

    # Branding fallback when the backend settings have no platform name
    PLATFORM_NAME: str = Field(
        default="",
        description="Platform name shown in bot messages"
    )

    # Timezone
    TIMEZONE: str = Field(
        default="Asia/Kolkata",
        description="Timezone used for year validation"
    )

    # Email verification
    OTP_LENGTH: int = Field(
        default=6,
        description="Number of digits in a verification code"
    )
    OTP_RESEND_COOLDOWN_SECONDS: int = Field(
        default=60,
        description="Seconds an applicant must wait before requesting a new code"
    )

    # Applicant sessions
    SESSION_IDLE_TIMEOUT_SECONDS: int = Field(
        default=6 * 60 * 60,
        description="Drop an unfinished application after this long without activity"
    )

    # Logging
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Minimum log level"
    )

    @property
    def api_base_url(self) -> str:
        """API base URL without a trailing slash."""
        return self.API_BASE_URL.rstrip("/")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


# Global settings instance
settings = Settings()
