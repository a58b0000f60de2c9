"""Application configuration using pydantic-settings pattern."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "Attendance Reconciliation"
    app_version: str = "0.1.0"
    app_env: str = Field(default="development")
    log_level: str = Field(default="INFO")

    # Anthropic (LLM oracle for name adjudication)
    anthropic_api_key: str | None = Field(default=None)
    anthropic_model: str = Field(default="claude-sonnet-4-5")
    adjudication_temperature: float = Field(default=0.2, ge=0.0, le=1.0)
    adjudication_max_retries: int = Field(
        default=2,
        ge=0,
        description="Retries after the first adjudication attempt",
    )
    adjudication_backoff_seconds: float = Field(
        default=2.0,
        ge=0.0,
        description="Exponential backoff multiplier (2s, then 4s)",
    )

    # Matching thresholds
    admission_threshold: float = Field(
        default=0.2,
        ge=0.0,
        description="Minimum rule-based score before the oracle is consulted",
    )
    presence_threshold_minutes: int = Field(
        default=30,
        ge=0,
        description="Minutes in the call required to count as present",
    )

    # Candidate generation
    candidate_strategy: Literal["rule", "embedding"] = Field(default="rule")
    openai_api_key: str | None = Field(default=None)
    embedding_model: str = Field(default="text-embedding-3-small")
    embedding_cache_max_age_days: int = Field(default=7, ge=0)

    # Database (Turso) for the embedding cache
    turso_database_url: str | None = Field(default=None)
    turso_auth_token: str | None = Field(default=None)

    # Roster source
    roster_csv_path: str | None = Field(default=None)
    roster_spreadsheet_id: str | None = Field(default=None)
    roster_sheet_name: str = Field(default="Mentee")
    google_sheets_credentials: str | None = Field(default=None)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
