"""
Configuration Utility - Environment Variables Management

Centralized configuration loading from .env files using pydantic-settings.
Type-safe access to all environment variables with validation.

Usage:
    from utils.config import settings

    base_url = settings.BASE_URL
    mapping = settings.sheet_job_mapping()
"""

from functools import lru_cache
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Task API Configuration
    BASE_URL: str = Field(default="")
    API_USERNAME: str = Field(default="")
    API_PASSWORD: str = Field(default="")
    API_TIMEOUT: float | None = Field(default=None)

    # Fetch Configuration
    PAGE_LIMIT: int = Field(default=10, ge=1)
    DETAIL_BATCH_SIZE: int = Field(default=5, ge=1)
    DETAIL_MAX_RETRIES: int = Field(default=10, ge=0)
    QUESTIONNAIRE_MAX_RETRIES: int = Field(default=0, ge=0)
    RETRY_DELAY_SECONDS: float = Field(default=1.0, ge=0)
    MAX_PAGES: int | None = Field(default=None, ge=1)

    # Google Sheets Configuration
    GAUTH_KEY_FILE_PATH: str = Field(default="")
    SPREADSHEET_ID: str = Field(default="")
    GSHEET_TO_JOB_MAPPING: dict[str, list[str]] = Field(default_factory=dict)
    JOB_IDS: list[str] = Field(default_factory=list)
    DEFAULT_SHEET_NAME: str = Field(default="Sheet1")

    # Row Configuration
    TQ_QUESTIONTITLE_NAME: str = Field(default="")
    TQ_QUESTIONTITLE_CLASS: str = Field(default="")
    DISPLAY_TIMEZONE: str = Field(default="Asia/Singapore")

    # Scheduler Configuration
    RUN_ONCE: bool = Field(default=True)
    EXPORT_SCHEDULE_CRON: str = Field(default="0 3 * * *")

    # Logging Configuration
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="json")

    # Application Metadata
    APP_NAME: str = Field(default="labeling-sheet-export")
    APP_VERSION: str = Field(default="0.1.0")

    @field_validator("GSHEET_TO_JOB_MAPPING", mode="before")
    @classmethod
    def coerce_mapping_job_ids(cls, v: Any) -> Any:
        """Job ids are opaque; accept numbers from the JSON mapping as strings."""
        if isinstance(v, dict):
            return {
                str(sheet): [str(job_id) for job_id in job_ids]
                for sheet, job_ids in v.items()
            }
        return v

    @field_validator("JOB_IDS", mode="before")
    @classmethod
    def coerce_job_ids(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [str(job_id) for job_id in v]
        return v

    def sheet_job_mapping(self) -> dict[str, list[str]]:
        """Return the sheet name → job ids grouping for an export run.

        Ungrouped JOB_IDS are written to DEFAULT_SHEET_NAME when no explicit
        mapping is configured.
        """
        if self.GSHEET_TO_JOB_MAPPING:
            return dict(self.GSHEET_TO_JOB_MAPPING)
        if self.JOB_IDS:
            return {self.DEFAULT_SHEET_NAME: list(self.JOB_IDS)}
        return {}


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Singleton Settings instance
    """
    return Settings()


# Global settings instance
settings = get_settings()
