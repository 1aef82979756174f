"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING
    )

    database_url: str = Field(
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    secret_key: str = Field(
        description="Secret key used to verify the JWT tokens presented to the stream endpoints",
        min_length=1,
    )
    access_token_expire_minutes: int = Field(
        default=60,
        description="Number of minutes before access tokens expire",
        gt=0,
    )
    replica_database_url: str | None = Field(
        default=None,
        description="Read replica used for eventually consistent reads such as throttle counts",
    )
    shard_database_urls: dict[str, str] = Field(
        default_factory=dict,
        description="Connection URLs keyed by shard name; unknown shards use the primary database",
    )
    pending_duplicate_message_window_hours: int = Field(
        default=6,
        description="Trailing window in which undelivered duplicate messages are cancelled",
        gt=0,
    )
    throttle_window_hours: int = Field(
        default=24,
        description="Trailing window used to count recent email messages per user",
        gt=0,
    )
    default_max_messages_per_day: int = Field(
        default=50,
        description="Daily message cap applied to users without an explicit value",
        gt=0,
    )
    default_locale: str = Field(
        default="en",
        description="Locale used when neither the course, the user nor the account define one",
        min_length=2,
    )
    app_timezone: str = Field(
        default="UTC",
        description="Timezone used for timestamps and digest scheduling",
    )
    daily_digest_hour: int = Field(
        default=18,
        description="Local hour of the day at which daily digests become due",
        ge=0,
        le=23,
    )
    sendgrid_api_key: str | None = Field(
        default=None,
        description="SendGrid API key used for sending email messages via the REST API",
    )
    sendgrid_sender: str | None = Field(
        default=None,
        description="Email address that will appear as the sender of email messages",
        min_length=3,
    )

    @model_validator(mode="after")
    def _validate_sendgrid_pair(self) -> "Settings":
        if bool(self.sendgrid_api_key) ^ bool(self.sendgrid_sender):
            raise ValueError(
                "SENDGRID_API_KEY and SENDGRID_SENDER must both be provided to enable email"
            )
        if self.sendgrid_sender and "@" not in self.sendgrid_sender:
            raise ValueError("SENDGRID_SENDER must be a valid email address")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
