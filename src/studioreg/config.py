"""Runtime configuration for the registration engine."""

from __future__ import annotations

from datetime import date  # noqa: TC003 - pydantic needs it at runtime
from decimal import Decimal
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings read from ``STUDIOREG_*`` environment variables or ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="STUDIOREG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database: SQLite path, ":memory:", or a full SQLAlchemy URL
    database_url: str = "studioreg.db"

    # HTTP server
    host: str = "127.0.0.1"
    port: int = Field(default=8000, ge=1, le=65535)

    # Logging
    log_dir: str = "logs"
    log_level: str = "INFO"

    # Drop-in bundles
    bundle_max_classes: int = Field(default=3, ge=1)
    bundle_week_gate_cutoff: date | None = None

    # Waitlist
    waitlist_expires_hours: int = Field(default=48, ge=1)
    portal_base_url: str = "http://localhost:8000"

    # Packages
    crew_house_combo_price: Decimal = Field(default=Decimal("200.00"), ge=0)

    # Transactional email API (unset URL disables delivery)
    email_api_url: str | None = None
    email_api_key: str | None = None
    email_sender: str = "registrations@localhost"

    @field_validator("database_url")
    @classmethod
    def use_psycopg_driver(cls, v: str) -> str:
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+psycopg://", 1)
        if v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql+psycopg://", 1)
        return v


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
