"""Configuration and settings for mcq-check.

Loads settings from environment variables (prefix ``MCQ_CHECK_``) and an
optional ``.env`` file. CLI flags override these values.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CheckSettings(BaseSettings):
    """Runtime settings for a validation run."""

    # Worker threads for per-record processing (1 = sequential)
    max_workers: int = Field(default=4, ge=1)

    # Run the typesetting engine over accepted records (advisory only)
    deep_latex: bool = False

    log_level: str = "INFO"
    json_indent: int = Field(default=2, ge=0)

    model_config = SettingsConfigDict(
        env_prefix="MCQ_CHECK_",
        env_file=".env",
        extra="ignore",
    )


@lru_cache
def get_settings() -> CheckSettings:
    """Get cached settings instance."""
    return CheckSettings()
