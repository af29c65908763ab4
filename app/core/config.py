# app/core/config.py - Consolidated

import os
from functools import lru_cache
from typing import Optional
from pydantic import ConfigDict
from pydantic_settings import BaseSettings

from app.core.enums import ResponseMode


class Settings(BaseSettings):
    """
    Application settings.
    Loads values from environment variables (.env file)
    """
    # Database settings (audit table). Empty means audit rows only go to the log.
    DATABASE_URL: str = ""

    # Inbound webhook
    WEBHOOK_SECRET: str = ""
    WEBHOOK_EXPECTED_HOST: Optional[str] = None
    WEBHOOK_RESPONSE_MODE: ResponseMode = ResponseMode.ALWAYS_OK

    # Snipe-IT "Test Integration" button posts a fixed message to this channel
    TEST_PING_CHANNEL: str = "#endor"
    TEST_PING_MARKER: str = "integration with Snipe-IT is working"

    # Jamf Pro
    JAMF_URL: str = ""
    JAMF_USERNAME: str = ""
    JAMF_PASSWORD: str = ""
    JAMF_CLIENT_ID: str = ""
    JAMF_CLIENT_SECRET: str = ""
    JAMF_TOKEN_SAFETY_MARGIN_SECONDS: int = 300

    # Snipe-IT (tag -> serial lookups)
    SNIPEIT_URL: str = ""
    SNIPEIT_API_TOKEN: str = ""

    # Applied to every outbound call
    HTTP_TIMEOUT_SECONDS: float = 10.0

    # Basic Auth for operator routes
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD: str = ""

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    model_config = ConfigDict(
        env_file=os.environ.get('ENV_FILE', '.env') if os.path.exists('.env') else None,
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def async_database_url(self) -> str:
        """DATABASE_URL with the asyncpg driver selected"""
        url = self.DATABASE_URL
        if url.startswith('postgresql://'):
            url = url.replace('postgresql://', 'postgresql+asyncpg://', 1)
        return url


@lru_cache()
def get_settings():
    """Cached settings to avoid loading .env file for every request"""
    return Settings()

def clear_settings_cache():
    """Clear the settings cache - useful when switching between environments"""
    get_settings.cache_clear()

def get_webhook_secret():
    """Get the webhook secret for authentication"""
    return get_settings().WEBHOOK_SECRET
