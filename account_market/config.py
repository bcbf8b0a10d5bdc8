"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process
    - Money settings are Decimal, never float

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Open policy questions (credential delivery timing, withdrawal note handling)
      are settings rather than constants so deployments can pick either behaviour
"""

from decimal import Decimal
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://market:market@db:5432/market"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosted Postgres provides postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Marketplace economics
    platform_fee_rate: Decimal = Field(Decimal("0.05"), ge=0, lt=1)
    escrow_hold_hours: int = Field(24, ge=0)
    dispute_window_hours: int = Field(24, ge=0)

    # on_demand: credentials released by the delivery endpoint only
    # immediate: stamped as delivered at checkout
    credential_delivery_mode: Literal["on_demand", "immediate"] = "on_demand"

    # preserve: omitted admin notes keep the stored note; clear: set to NULL
    withdrawal_notes_policy: Literal["preserve", "clear"] = "preserve"

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
