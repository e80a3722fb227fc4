"""Central configuration for the verse practice engine."""

from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", extra="ignore", populate_by_name=True
    )

    # Practice session settings
    max_rounds: int = Field(default=3, ge=1)
    # "practice" lets a wrong answer resolve the blank; "strict" blocks until correct
    practice_mode: Literal["strict", "practice"] = "practice"
    blank_chars_per_line: int = Field(default=35, ge=1)

    # Translation matching for scripts without word separators
    unsegmented_min_length: int = 10
    unsegmented_prefix_length: int = Field(default=5, ge=2, le=6)

    # Gemini API Settings (optional feedback collaborator)
    gemini_api_key: str | None = Field(
        default=None, validation_alias=AliasChoices("GEMINI_API_KEY", "GOOGLE_API_KEY")
    )
    model_name: str = "gemini-2.5-flash"
    feedback_temperature: float = 0.4
    feedback_max_output_tokens: int = 4000
    # Limit Gemini thinking depth; set None to use model default
    feedback_thinking_budget: int | None = 256

    # Summary cache
    summary_cache_enabled: bool = True
    summary_cache_dir: str = ".cache/summaries"
    summary_cache_size_mb: int = 50
