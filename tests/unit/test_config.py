"""Unit tests for application settings."""

import pytest
from pydantic import ValidationError

from catgpt.config import Settings


class TestSettings:
    """Test cases for Settings."""

    def test_defaults(self) -> None:
        """Test default values."""
        settings = Settings(_env_file=None)

        assert settings.max_conversations == 1000
        assert settings.conversation_ttl_hours == 24
        assert settings.max_messages_per_conversation == 500
        assert settings.min_delay_ms == 20
        assert settings.max_delay_ms == 800
        assert settings.random_seed is None
        assert settings.port == 7342

    def test_environment_override(self, monkeypatch) -> None:
        """Test values are read from the environment."""
        monkeypatch.setenv("MAX_CONVERSATIONS", "25")
        monkeypatch.setenv("RANDOM_SEED", "7")

        settings = Settings(_env_file=None)

        assert settings.max_conversations == 25
        assert settings.random_seed == 7

    def test_log_level_normalized(self) -> None:
        """Test log level validation."""
        assert Settings(_env_file=None, log_level="debug").log_level == "DEBUG"
        with pytest.raises(ValidationError):
            Settings(_env_file=None, log_level="chatty")

    def test_delay_bounds_validated(self) -> None:
        """Test that min delay cannot exceed max delay."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, min_delay_ms=500, max_delay_ms=100)

    def test_overrides_file_must_exist(self, tmp_path) -> None:
        """Test complexity overrides path validation."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, complexity_overrides_file=str(tmp_path / "missing.json"))

        existing = tmp_path / "overrides.json"
        existing.write_text("{}")
        assert Settings(_env_file=None, complexity_overrides_file=str(existing)).complexity_overrides_file == str(existing)

    def test_production_validation(self) -> None:
        """Test production configuration checks."""
        settings = Settings(
            _env_file=None,
            environment="production",
            debug=True,
            stream_delay_scale=0.0,
            random_seed=1,
        )

        assert settings.is_production()
        assert len(settings.validate_production_config()) == 3

    def test_development_skips_production_validation(self) -> None:
        """Test that non-production environments report no errors."""
        settings = Settings(_env_file=None, debug=True)

        assert not settings.is_production()
        assert settings.validate_production_config() == []
