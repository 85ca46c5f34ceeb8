"""
Tests for adalloc.config module.
"""
import pytest

from adalloc.config import (
    AIConfig,
    AppConfig,
    ConfigurationError,
    LoggingConfig,
    StorageConfig,
    validate_config,
)


class TestEnvironment:
    """Values are read from the environment at construction."""

    def test_ai_key(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-env")
        monkeypatch.setenv("ADALLOC_AI_TIMEOUT", "15")
        ai = AIConfig()
        assert ai.is_configured
        assert ai.timeout_seconds == 15.0

    def test_data_dir(self, monkeypatch, tmp_path):
        monkeypatch.setenv("ADALLOC_DATA_DIR", str(tmp_path))
        storage = StorageConfig()
        assert storage.data_dir == str(tmp_path)
        assert storage.customers_key == "adalloc-customers"

    def test_log_format(self, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "JSON")
        assert LoggingConfig().json_format is True


class TestValidateConfig:
    def test_missing_key_is_fine_by_default(self):
        validate_config(AppConfig(ai=AIConfig(api_key="")))

    def test_require_ai(self):
        with pytest.raises(ConfigurationError) as exc_info:
            validate_config(AppConfig(ai=AIConfig(api_key="")), require_ai=True)
        assert "ANTHROPIC_API_KEY" in str(exc_info.value)

    def test_bad_timeout_and_level(self):
        app_config = AppConfig(
            ai=AIConfig(api_key="k", timeout_seconds=0),
            logging=LoggingConfig(level="LOUD"),
        )
        with pytest.raises(ConfigurationError) as exc_info:
            validate_config(app_config)
        message = str(exc_info.value)
        assert "ADALLOC_AI_TIMEOUT" in message
        assert "LOUD" in message
