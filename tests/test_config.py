# =============================================================================
# tests/test_config.py - Settings Tests
# =============================================================================
# Run with: pytest tests/test_config.py -v
# =============================================================================

import pytest
from pydantic import ValidationError

from app.config import Settings


def _settings(**values) -> Settings:
    return Settings(_env_file=None, **values)


class TestSettings:
    """Tests for the Settings model."""

    def test_missing_erp_settings(self):
        settings = _settings(ERP_API_URL="https://erp.test", ERP_API_KEY="  ", ERP_API_SECRET="")

        assert settings.missing_erp_settings == ["ERP_API_KEY", "ERP_API_SECRET"]

    def test_fully_configured(self):
        settings = _settings(ERP_API_URL="https://erp.test", ERP_API_KEY="k", ERP_API_SECRET="s")

        assert settings.missing_erp_settings == []

    def test_defaults(self):
        settings = _settings()

        assert settings.DEFAULT_CURRENCY == "ETB"
        assert settings.ERP_TIMEOUT_SECONDS is None
        assert settings.max_upload_size_bytes == 10 * 1024 * 1024

    def test_cors_origins_list(self):
        settings = _settings(CORS_ORIGINS="http://localhost:3000, https://erp-ui.example.com")

        assert settings.cors_origins_list == ["http://localhost:3000", "https://erp-ui.example.com"]

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            _settings(ERP_TIMEOUT_SECONDS=0)

    def test_empty_env_var_is_unset(self, monkeypatch):
        """VAR= in the environment counts as not configured."""
        monkeypatch.setenv("ERP_API_KEY", "")

        settings = _settings()

        assert "ERP_API_KEY" in settings.missing_erp_settings
