"""API configuration settings."""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from pitch_core.config import DEFAULT_MODEL, CompletionConfig
from pitch_core.models import SamplingParams


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Pitch Coach API"
    debug: bool = False

    # Database
    database_url: str = "sqlite:///./pitch_coach.db"

    # Security
    secret_key: str = "change-this-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    secure_cookies: bool = False

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # LLM
    openai_api_key: Optional[str] = None
    model: str = DEFAULT_MODEL
    max_tokens: int = 2000
    draft_temperature: float = 0.7
    parse_temperature: float = 0.3
    analysis_temperature: float = 0.4
    analysis_max_tokens: int = 4000

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    def completion_config(self) -> CompletionConfig:
        """Language model settings for the completion client."""
        return CompletionConfig(
            model=self.model,
            api_key=self.openai_api_key,
            temperature=self.draft_temperature,
            max_tokens=self.max_tokens,
        )

    @property
    def draft_sampling(self) -> SamplingParams:
        return SamplingParams(temperature=self.draft_temperature, max_tokens=self.max_tokens)

    @property
    def parse_sampling(self) -> SamplingParams:
        return SamplingParams(temperature=self.parse_temperature, max_tokens=self.max_tokens)

    @property
    def analysis_sampling(self) -> SamplingParams:
        return SamplingParams(temperature=self.analysis_temperature, max_tokens=self.analysis_max_tokens)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
