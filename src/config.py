# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Application settings loaded from the environment."""

from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PRODUCTION = "production"


class Settings(BaseSettings):
    """Runtime configuration.

    Values come from environment variables (case-insensitive) or a local
    ``.env`` file. They are read once at process start.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "TenantDesk"
    environment: str = PRODUCTION
    database_url: str = "sqlite:///./tenantdesk.db"
    secret_key: str = "change-me"
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:5173"]

    # Session cookie lifetime
    session_expiry_days: int = 7
    session_cookie_secure: bool = False

    # Resolved principals are cached per user for this long
    principal_cache_ttl_seconds: int = 300
    principal_cache_max_size: int = 1000

    # Fabricates a fixed super-admin principal. Never allowed in production.
    dev_auth_bypass: bool = False

    @property
    def is_production(self) -> bool:
        """Return True when running as a production deployment."""
        return self.environment.strip().lower() == PRODUCTION

    @model_validator(mode="after")
    def check_dev_bypass(self) -> "Settings":
        if self.dev_auth_bypass and self.is_production:
            raise ValueError("DEV_AUTH_BYPASS cannot be enabled in production")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()


settings = get_settings()
