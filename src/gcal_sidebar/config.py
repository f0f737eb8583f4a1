"""Application configuration.

Configuration is loaded from environment variables using pydantic-settings.
Credentials (the Mattermost access token) should be provided via environment
variables, not config files.

## Required Environment Variables

- SITE_URL: Base URL of the Mattermost server
- MATTERMOST_USER_ID: Mattermost user the panel acts for

## Optional Environment Variables

- MATTERMOST_TOKEN: Personal access token sent as a Bearer token
- PLUGIN_ID: Calendar plugin ID (default: com.mattermost.gcal)
- REAUTH_FOCUS_DELAY_SECONDS: Delay before re-checking after focus (default: 0.5)
- LOG_LEVEL: Logging level for the CLI (default: INFO)

## Example .env file

```
SITE_URL=https://chat.example.com
MATTERMOST_USER_ID=8x7f3kq1ntd5mcy9w6e4o2hjza
MATTERMOST_TOKEN=your-personal-access-token
```
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from gcal_sidebar.models.event import ViewSelection


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Mattermost
    site_url: str = Field(
        ...,
        description="Base URL of the Mattermost server",
    )
    plugin_id: str = Field(
        default="com.mattermost.gcal",
        description="ID of the calendar plugin serving the events API",
    )
    mattermost_user_id: str = Field(
        ...,
        min_length=1,
        description="Mattermost user ID sent with every plugin request",
    )
    mattermost_token: str | None = None

    # HTTP
    request_timeout_seconds: float = Field(default=30.0, gt=0, le=300)
    request_retry_attempts: int = Field(default=3, ge=1, le=10)

    # Panel behaviour
    default_view: ViewSelection = ViewSelection.TODAY
    reauth_focus_delay_seconds: float = Field(
        default=0.5,
        ge=0,
        le=10,
        description="Delay after window focus before re-checking the session",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept lowercase log level names."""
        return v.upper() if isinstance(v, str) else v

    @field_validator("site_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Ensure site URL has no trailing slash."""
        return v.rstrip("/") if isinstance(v, str) else v

    @property
    def plugin_url(self) -> str:
        """Base URL of the calendar plugin's HTTP routes."""
        return f"{self.site_url}/plugins/{self.plugin_id}"

    @property
    def connect_url(self) -> str:
        """OAuth entry point opened when the user signs in."""
        return f"{self.plugin_url}/oauth2/connect"


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are loaded once and cached. To reload, clear the cache:
    ```python
    get_settings.cache_clear()
    ```
    """
    return Settings()


def get_settings_uncached() -> Settings:
    """Get fresh settings without caching.

    Useful for testing when environment variables change.
    """
    return Settings()
