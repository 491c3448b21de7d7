"""Tests unitarios para la configuración de la aplicación."""

import pytest
from pydantic import ValidationError

from esim_bridge.core.config import Settings
from esim_bridge.core.logging_config import get_logging_configuration
from tests.fakes import build_settings

REQUIRED = [
    "SHOPIFY_STORE_URL",
    "SHOPIFY_ACCESS_TOKEN",
    "SHOPIFY_WEBHOOK_SECRET",
    "MAYA_BASE_URL",
    "MAYA_API_KEY",
    "MAYA_API_SECRET",
]


class TestSettings:
    """Tests para Settings."""

    def test_defaults(self, settings):
        assert settings.PORT == 3000
        assert settings.SHOPIFY_API_VERSION == "2024-07"
        assert settings.ESIM_PRODUCT_TYPE == "eSIM"
        assert settings.ESIM_VENDOR == "Maya Mobile"
        assert settings.ENABLE_SCHEDULED_SYNC is False
        assert settings.CRON_SECRET is None

    def test_store_url_is_normalized(self, settings):
        assert settings.SHOPIFY_STORE_URL == "https://test-store.myshopify.com"
        assert settings.shopify_api_base_url == "https://test-store.myshopify.com/admin/api/2024-07"

    def test_trailing_slashes_are_removed(self):
        settings = build_settings(SHOPIFY_STORE_URL="https://shop.myshopify.com/", MAYA_BASE_URL="https://maya.test/")

        assert settings.SHOPIFY_STORE_URL == "https://shop.myshopify.com"
        assert settings.MAYA_BASE_URL == "https://maya.test"

    @pytest.mark.parametrize("missing", REQUIRED)
    def test_required_values(self, missing, monkeypatch):
        monkeypatch.delenv(missing, raising=False)
        values = {name: "value" for name in REQUIRED if name != missing}

        with pytest.raises(ValidationError):
            Settings(_env_file=None, **values)

    @pytest.mark.parametrize("field", ["SHOPIFY_ACCESS_TOKEN", "SHOPIFY_WEBHOOK_SECRET", "MAYA_API_SECRET"])
    def test_blank_credentials_are_rejected(self, field):
        with pytest.raises(ValidationError):
            build_settings(**{field: "   "})

    def test_log_level_and_environment_are_normalized(self):
        settings = build_settings(LOG_LEVEL="debug", ENVIRONMENT="Production")

        assert settings.LOG_LEVEL == "DEBUG"
        assert settings.is_production is True

    @pytest.mark.parametrize(
        "overrides",
        [
            {"LOG_LEVEL": "verbose"},
            {"ENVIRONMENT": "qa"},
            {"PORT": 70000},
            {"SYNC_INTERVAL_MINUTES": 0},
            {"READ_MAX_RETRIES": -1},
        ],
    )
    def test_invalid_values_are_rejected(self, overrides):
        with pytest.raises(ValidationError):
            build_settings(**overrides)

    def test_zero_read_retries_is_allowed(self):
        assert build_settings(READ_MAX_RETRIES=0).READ_MAX_RETRIES == 0

    def test_auth_headers(self, settings):
        assert settings.get_shopify_headers()["X-Shopify-Access-Token"] == "shpat_test"
        assert settings.get_maya_headers()["X-Auth-Token"] == "maya-secret"


class TestLoggingConfiguration:
    """Tests para la configuración de logging."""

    def test_console_only_without_log_file(self, settings):
        config = get_logging_configuration(settings)

        assert list(config["handlers"]) == ["console"]
        assert config["root"]["handlers"] == ["console"]

    def test_file_handlers_with_log_file(self, tmp_path):
        settings = build_settings(LOG_FILE_PATH=str(tmp_path / "app.log"), ENVIRONMENT="production")

        config = get_logging_configuration(settings)

        assert set(config["root"]["handlers"]) == {"console", "file", "error_file", "json_file"}
        assert config["handlers"]["error_file"]["filename"].endswith("app_errors.log")
