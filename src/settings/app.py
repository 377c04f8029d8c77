"""Application settings powered by Pydantic BaseSettings."""

from pathlib import Path
from typing import Annotated

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.collectors.constants import (
    DEFAULT_PAGE_DELAY_SECONDS,
    DEFAULT_PER_PAGE,
    DEFAULT_TAG_DELAY_SECONDS,
    FOREM_API_BASE_URL,
)


class AppSettings(BaseSettings):
    """Centralized environment configuration.

    Every field can be overridden with a ``CHALLENGE_``-prefixed environment
    variable or a ``.env`` file in the working directory.
    """

    model_config = SettingsConfigDict(
        env_prefix="CHALLENGE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_base_url: str = FOREM_API_BASE_URL
    data_dir: Path = Path("public") / "data"
    backup_dir: Path = Path("backup")
    cache_dir: Path = Path(".cache") / "relevance"
    per_page: Annotated[int, Field(ge=1, le=1000)] = DEFAULT_PER_PAGE
    page_delay_seconds: Annotated[float, Field(ge=0.0, le=60.0)] = (
        DEFAULT_PAGE_DELAY_SECONDS
    )
    tag_delay_seconds: Annotated[float, Field(ge=0.0, le=600.0)] = (
        DEFAULT_TAG_DELAY_SECONDS
    )
    user_agent: Annotated[str, Field(min_length=1, max_length=500)] = (
        "challenge-submissions/1.0"
    )
    timeout_seconds: Annotated[float, Field(ge=1.0, le=300.0)] = 30.0
    forem_api_key: str | None = Field(
        default=None, validation_alias="FOREM_API_KEY"
    )


def get_settings() -> AppSettings:
    """Get a settings instance."""
    return AppSettings()
