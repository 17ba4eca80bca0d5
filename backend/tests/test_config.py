"""Tests for seo_intel.config and seo_intel.logging_config."""

import logging
from unittest.mock import patch

from seo_intel.config import Settings, get_settings, reset_settings
from seo_intel.logging_config import setup_logging


class TestSettings:
    def test_defaults(self):
        settings = Settings(_env_file=None)
        assert settings.crawl_request_timeout == 10.0
        assert settings.ai_enabled is True
        assert settings.ai_call_delay_ms == 100
        assert settings.crawl_user_agent.startswith("SEO-Optimizer-Bot/1.0")

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("CLAUDE_MODEL", "env-model")
        monkeypatch.setenv("AI_ENABLED", "false")
        settings = Settings(_env_file=None)
        assert settings.claude_model == "env-model"
        assert settings.ai_enabled is False

    def test_cached_until_reset(self):
        reset_settings()
        first = get_settings()
        assert get_settings() is first
        reset_settings()
        assert get_settings() is not first
        reset_settings()


class TestSetupLogging:
    def test_explicit_level(self):
        with patch("seo_intel.logging_config.logging.basicConfig") as basic_config:
            setup_logging("debug")
        assert basic_config.call_args.kwargs["level"] == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_level_from_settings(self):
        with patch("seo_intel.logging_config.get_settings") as mock_settings, patch(
            "seo_intel.logging_config.logging.basicConfig"
        ) as basic_config:
            mock_settings.return_value = Settings(_env_file=None, log_level="ERROR")
            setup_logging()
        assert basic_config.call_args.kwargs["level"] == logging.ERROR
