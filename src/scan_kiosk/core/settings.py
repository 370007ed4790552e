"""Application settings and configuration.

This module defines all configuration options for the kiosk scan service.
Settings are loaded from environment variables with sensible defaults.
"""

from __future__ import annotations

from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

TOKEN_PLACEHOLDER = "{token}"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    The presence of ``DATABASE_URL`` switches persistence from the JSON files
    in ``DATA_DIR`` to the relational store.
    """

    # Application metadata
    app_name: str = Field(default="Scan Kiosk", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Persistence
    database_url: str | None = Field(default=None, alias="DATABASE_URL")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")
    data_dir: Path = Field(default=Path("data"), alias="DATA_DIR")

    # Token ledger and day bucketing
    kiosk_timezone: str = Field(default="Australia/Brisbane", alias="KIOSK_TIMEZONE")
    token_seed: int = Field(default=1000, ge=0, alias="TOKEN_SEED")

    # Redirect target and public links
    game_url: str = Field(default="https://flashka.onrender.com", alias="GAME_URL")
    public_base_url: str | None = Field(default=None, alias="PUBLIC_BASE_URL")
    poster_refresh_seconds: int = Field(default=5, ge=1, alias="POSTER_REFRESH_SECONDS")

    # Shared secret for the stats views; unset means stats are public
    admin_key: str | None = Field(default=None, alias="ADMIN_KEY")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("kiosk_timezone")
    @classmethod
    def _check_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {value!r}") from exc
        return value

    @field_validator("database_url", "public_base_url", "admin_key", mode="before")
    @classmethod
    def _blank_is_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def backend_name(self) -> str:
        """Return ``"sql"`` when a database is configured, otherwise ``"file"``."""
        return "sql" if self.database_url else "file"

    @property
    def sqlalchemy_database_url(self) -> str | None:
        """Return the database URL with an explicit SQLAlchemy driver.

        Hosted Postgres providers hand out ``postgres://`` URLs; SQLAlchemy
        needs ``postgresql+psycopg://`` to pick the psycopg 3 driver.

        Returns:
            The normalised URL, or None when no database is configured
        """
        url = self.database_url
        if url is None:
            return None
        url = url.strip()
        if url.startswith("postgres://"):
            return "postgresql+psycopg://" + url[len("postgres://"):]
        if url.startswith("postgresql://"):
            return "postgresql+psycopg://" + url[len("postgresql://"):]
        return url

    def game_target(self, token: int) -> str:
        """Return the redirect target for a first-use scan of ``token``."""
        return self.game_url.replace(TOKEN_PLACEHOLDER, str(token))


settings = Settings()


def get_settings() -> Settings:
    """Return the process-wide settings (overridable as a FastAPI dependency)."""
    return settings
