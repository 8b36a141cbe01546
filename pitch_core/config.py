"""Configuration management using Pydantic and environment variables."""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from .exceptions import MissingCredentialsError

# Load environment variables
load_dotenv()

DEFAULT_MODEL = "openai/gpt-4o"


class CompletionConfig(BaseModel):
    """Language model configuration."""

    model: str = Field(default=DEFAULT_MODEL, description="Provider-prefixed model name")
    api_key: Optional[str] = Field(default=None, description="API key for the model provider")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=2000, gt=0)

    @field_validator("model")
    @classmethod
    def add_provider_prefix(cls, v: str) -> str:
        """Bare OpenAI model names get the provider prefix the client expects."""
        v = v.strip()
        if "/" not in v:
            return f"openai/{v}"
        return v

    @field_validator("api_key", mode="before")
    @classmethod
    def blank_key_is_missing(cls, v):
        """An empty OPENAI_API_KEY counts as not set."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def validate_credentials(self) -> None:
        """Raise if the model cannot be called with this configuration."""
        if not self.api_key:
            raise MissingCredentialsError("OPENAI_API_KEY environment variable is not set")

    @classmethod
    def from_env(cls) -> "CompletionConfig":
        """Load configuration from environment variables."""
        return cls(
            model=os.getenv("MODEL", DEFAULT_MODEL),
            api_key=os.getenv("OPENAI_API_KEY"),
            temperature=float(os.getenv("TEMPERATURE", "0.7")),
            max_tokens=int(os.getenv("MAX_TOKENS", "2000")),
        )
