"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process
    - organization_id_prefix is uppercase ASCII letters only

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
    - admin_api_key empty by default: operator access stays disabled until configured
"""

import re
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://gatherwise:gatherwise@db:5432/gatherwise"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting providers hand out postgres:// URLs; asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str):
            if v.startswith("postgres://"):
                return v.replace("postgres://", "postgresql+asyncpg://", 1)
            if v.startswith("postgresql://"):
                return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Organization identifiers
    organization_id_prefix: str = "GW"
    organization_id_max_attempts: int = 100

    @field_validator("organization_id_prefix")
    @classmethod
    def check_prefix(cls, v: str) -> str:
        if not re.fullmatch(r"[A-Z]+", v):
            raise ValueError("organization_id_prefix must be uppercase letters")
        return v

    # Administration
    admin_api_key: str = ""

    # Accounts
    trial_days: int = 7
    login_max_attempts: int = 5
    lockout_minutes: int = 30

    # Anthropic (AI assistant)
    anthropic_api_key: str = "sk-ant-placeholder"
    anthropic_max_retries: int = 3
    anthropic_timeout_seconds: int = 60
    anthropic_base_delay_ms: int = 1000
    anthropic_max_delay_ms: int = 30_000
    assistant_model: str = "claude-sonnet-4-5"
    assistant_max_tokens: int = 1024

    # API
    cors_origins: list[str] = ["http://localhost:3000"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
