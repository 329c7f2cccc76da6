"""
Tests for environment-driven settings
"""

import pytest
from pydantic import ValidationError

from uplift_worker.core.config import LearningSettings, LoggingSettings, Settings
from uplift_worker.core.exceptions import ConfigurationError


class TestSettings:
    def test_retired_keys_are_ignored(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("DATABASE_HEALTH_CHECK_INTERVAL", "5")

        config = Settings()

        assert "ENVIRONMENT" not in Settings.model_fields
        assert "DATABASE_HEALTH_CHECK_INTERVAL" not in Settings.model_fields
        assert not hasattr(config, "DATABASE_HEALTH_CHECK_INTERVAL")

    def test_connect_timeout_from_env(self, monkeypatch):
        monkeypatch.setenv("DATABASE_CONNECT_TIMEOUT", "3")

        assert Settings().DATABASE_CONNECT_TIMEOUT == 3

    def test_weights_must_sum_to_one(self):
        config = Settings(learning=LearningSettings(SIMILARITY_JACCARD_WEIGHT=0.9))

        with pytest.raises(ConfigurationError):
            config.validate_configuration()

    def test_defaults_validate(self):
        Settings().validate_configuration()

    def test_log_format_normalized(self):
        assert LoggingSettings(LOG_FORMAT=" JSON ").LOG_FORMAT == "json"

    def test_unknown_log_format_rejected(self):
        with pytest.raises(ValidationError):
            LoggingSettings(LOG_FORMAT="xml")
