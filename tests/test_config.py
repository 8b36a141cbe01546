"""Tests for configuration loading."""

import pytest
from pydantic import ValidationError

from pitch_api.config import Settings
from pitch_core.config import DEFAULT_MODEL, CompletionConfig
from pitch_core.exceptions import MissingCredentialsError


class TestCompletionConfig:
    """Test the language model config."""

    def test_defaults(self):
        """Test default values."""
        config = CompletionConfig()
        assert config.model == DEFAULT_MODEL
        assert config.api_key is None
        assert config.temperature == 0.7
        assert config.max_tokens == 2000

    @pytest.mark.parametrize(
        "model,expected",
        [("gpt-4o-mini", "openai/gpt-4o-mini"), (" gpt-4o ", "openai/gpt-4o"), ("anthropic/claude-x", "anthropic/claude-x")],
    )
    def test_provider_prefix(self, model, expected):
        """Test bare model names get the openai prefix."""
        assert CompletionConfig(model=model).model == expected

    @pytest.mark.parametrize("key", ["", "  "])
    def test_blank_key_is_missing(self, key):
        """Test a blank key counts as not configured."""
        config = CompletionConfig(api_key=key)
        assert config.api_key is None
        with pytest.raises(MissingCredentialsError) as exc_info:
            config.validate_credentials()
        assert "OPENAI_API_KEY" in str(exc_info.value)

    def test_key_present(self):
        """Test a configured key passes the credential check."""
        CompletionConfig(api_key="sk-test").validate_credentials()

    @pytest.mark.parametrize("field,value", [("temperature", 2.5), ("temperature", -0.1), ("max_tokens", 0)])
    def test_bounds(self, field, value):
        """Test sampling bounds are enforced."""
        with pytest.raises(ValidationError):
            CompletionConfig(**{field: value})

    def test_from_env(self, monkeypatch):
        """Test loading from environment variables."""
        monkeypatch.setenv("MODEL", "gpt-4o-mini")
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        monkeypatch.setenv("TEMPERATURE", "0.2")
        monkeypatch.setenv("MAX_TOKENS", "900")

        config = CompletionConfig.from_env()
        assert config.model == "openai/gpt-4o-mini"
        assert config.api_key == "sk-env"
        assert config.temperature == 0.2
        assert config.max_tokens == 900


class TestSettings:
    """Test API settings."""

    def test_sampling_profiles(self):
        """Test each operation gets its own sampling parameters."""
        settings = Settings(
            draft_temperature=0.7,
            parse_temperature=0.3,
            analysis_temperature=0.4,
            max_tokens=1500,
            analysis_max_tokens=3000,
        )
        assert settings.draft_sampling.temperature == 0.7
        assert settings.parse_sampling.temperature == 0.3
        assert settings.parse_sampling.max_tokens == 1500
        assert settings.analysis_sampling.temperature == 0.4
        assert settings.analysis_sampling.max_tokens == 3000
        assert settings.draft_sampling.json_mode is True

    def test_completion_config(self):
        """Test the completion config is derived from settings."""
        config = Settings(openai_api_key="sk-x", model="gpt-4o-mini").completion_config()
        assert config.api_key == "sk-x"
        assert config.model == "openai/gpt-4o-mini"

    def test_reads_environment(self, monkeypatch):
        """Test settings come from environment variables."""
        monkeypatch.setenv("ACCESS_TOKEN_EXPIRE_MINUTES", "5")
        monkeypatch.setenv("PARSE_TEMPERATURE", "0.1")
        settings = Settings()
        assert settings.access_token_expire_minutes == 5
        assert settings.parse_temperature == 0.1
