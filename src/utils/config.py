"""
Configuration management using pydantic-settings.

Loads settings from environment variables and .env files.
Every credential the relay needs is required: a missing value stops the
process before it accepts any traffic.
"""

import logging
import sys
from functools import lru_cache

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Persistence
    database_path: str = Field(
        ...,
        description="Path of the SQLite file holding call logs and objections",
    )

    # Twilio Configuration
    twilio_account_sid: str = Field(..., description="Twilio Account SID")
    twilio_auth_token: str = Field(..., description="Twilio Auth Token")
    twilio_api_key: str = Field(..., description="Twilio API Key SID used to sign access tokens")
    twilio_api_secret: str = Field(..., description="Twilio API Key secret")
    twilio_app_sid: str = Field(
        ...,
        description="TwiML App SID that outgoing browser calls are routed through",
    )
    twilio_phone_number: str = Field(
        ...,
        description="Provisioned Twilio number presented as caller ID on dials",
    )

    # OpenAI Configuration
    openai_api_key: str = Field(..., description="OpenAI API key for objection suggestions")
    openai_model: str = Field(
        default="gpt-3.5-turbo",
        description="Chat completion model used for objection suggestions",
    )

    # Access token
    token_identity: str = Field(
        default="caller",
        description="Client identity embedded in every issued access token",
    )
    token_ttl: int = Field(default=3600, description="Access token lifetime in seconds")

    # Server Configuration
    frontend_url: str = Field(
        default="http://localhost:3000",
        description="Browser origin allowed by CORS",
    )
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=3001, description="Server port")
    debug: bool = Field(default=False, description="Enable debug mode")

    @field_validator(
        "database_path",
        "twilio_account_sid",
        "twilio_auth_token",
        "twilio_api_key",
        "twilio_api_secret",
        "twilio_app_sid",
        "twilio_phone_number",
        "openai_api_key",
    )
    @classmethod
    def require_non_empty(cls, value: str) -> str:
        """Treat blank values in .env the same as missing ones."""
        if not value or not value.strip():
            raise ValueError("must not be empty")
        return value.strip()


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to avoid re-reading environment on every call.
    Raises pydantic.ValidationError when required settings are missing.
    """
    return Settings()


def load_settings() -> Settings:
    """
    Load settings or terminate the process.

    Missing or empty required values are logged one per line and the
    process exits with status 1.
    """
    try:
        return get_settings()
    except ValidationError as e:
        for error in e.errors():
            field_name = ".".join(str(part) for part in error["loc"]) or "settings"
            logger.error(f"Invalid configuration: {field_name.upper()} - {error['msg']}")
        logger.error("Refusing to start with incomplete configuration")
        sys.exit(1)
