"""
Unit tests for AppConfig.

Tests environment variable handling, the settings file and validation.
"""

import json

import pytest

from mclaren_api.config import AppConfig, load_connection_strings
from mclaren_api.constants import DEFAULT_SQLITE_CONNECTION
from mclaren_api.exceptions import ConfigurationError

ENV_VARS = [
    "MCLAREN_ENVIRONMENT",
    "ASPNETCORE_ENVIRONMENT",
    "SQLITE_CONNECTION",
    "AZURE_SQL_CONNECTION",
    "MCLAREN_SETTINGS_FILE",
    "MCLAREN_ENFORCE_HTTPS",
    "MCLAREN_CREATE_SCHEMA",
    "MCLAREN_SEED_DATA",
    "DB_POOL_SIZE",
    "DB_MAX_OVERFLOW",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    def test_defaults(self):
        config = AppConfig()
        assert config.environment == "Development"
        assert config.is_development
        assert not config.is_production
        assert config.sqlite_connection == DEFAULT_SQLITE_CONNECTION
        assert config.cloud_sql_connection == ""
        assert config.enforce_https is True
        assert config.create_schema is True
        assert config.seed_data is False
        assert config.pool_size == 5
        assert config.max_overflow == 10
        assert config.log_level == "INFO"

    def test_explicit_values_win(self, monkeypatch):
        monkeypatch.setenv("MCLAREN_ENVIRONMENT", "Production")
        config = AppConfig(environment="Staging", enforce_https=False, max_overflow=0)
        assert config.environment == "Staging"
        assert config.enforce_https is False
        assert config.max_overflow == 0


class TestEnvironmentVariables:
    def test_environment_variable(self, monkeypatch):
        monkeypatch.setenv("MCLAREN_ENVIRONMENT", "Production")
        assert AppConfig().is_production

    def test_legacy_environment_variable(self, monkeypatch):
        monkeypatch.setenv("ASPNETCORE_ENVIRONMENT", "Production")
        assert AppConfig().environment == "Production"

    def test_primary_variable_takes_precedence(self, monkeypatch):
        monkeypatch.setenv("ASPNETCORE_ENVIRONMENT", "Production")
        monkeypatch.setenv("MCLAREN_ENVIRONMENT", "Development")
        assert AppConfig().environment == "Development"

    def test_environment_comparison_is_exact(self, monkeypatch):
        monkeypatch.setenv("MCLAREN_ENVIRONMENT", "production")
        assert not AppConfig().is_production

    def test_connection_strings(self, monkeypatch):
        monkeypatch.setenv("SQLITE_CONNECTION", "sqlite:///./local.db")
        monkeypatch.setenv("AZURE_SQL_CONNECTION", "postgresql://u:p@db/mclaren")
        config = AppConfig()
        assert config.sqlite_connection == "sqlite:///./local.db"
        assert config.cloud_sql_connection == "postgresql://u:p@db/mclaren"

    def test_flags(self, monkeypatch):
        monkeypatch.setenv("MCLAREN_ENFORCE_HTTPS", "false")
        monkeypatch.setenv("MCLAREN_SEED_DATA", "yes")
        config = AppConfig()
        assert config.enforce_https is False
        assert config.seed_data is True

    def test_pool_settings(self, monkeypatch):
        monkeypatch.setenv("DB_POOL_SIZE", "20")
        monkeypatch.setenv("DB_MAX_OVERFLOW", "0")
        config = AppConfig()
        assert config.pool_size == 20
        assert config.max_overflow == 0

    def test_invalid_integer(self, monkeypatch):
        monkeypatch.setenv("DB_POOL_SIZE", "many")
        with pytest.raises(ConfigurationError) as exc_info:
            AppConfig()
        assert exc_info.value.config_key == "DB_POOL_SIZE"


class TestSettingsFile:
    def test_reads_connection_strings(self, tmp_path):
        settings = tmp_path / "appsettings.json"
        settings.write_text(
            json.dumps(
                {
                    "ConnectionStrings": {
                        "SQLiteConnection": "sqlite:///./from-file.db",
                        "AzureSQLConnection": "postgresql://u:p@cloud/mclaren",
                    }
                }
            )
        )
        config = AppConfig(settings_file=str(settings))
        assert config.sqlite_connection == "sqlite:///./from-file.db"
        assert config.cloud_sql_connection == "postgresql://u:p@cloud/mclaren"

    def test_environment_variable_beats_file(self, tmp_path, monkeypatch):
        settings = tmp_path / "appsettings.json"
        settings.write_text(json.dumps({"ConnectionStrings": {"SQLiteConnection": "sqlite:///a"}}))
        monkeypatch.setenv("SQLITE_CONNECTION", "sqlite:///b")
        assert AppConfig(settings_file=str(settings)).sqlite_connection == "sqlite:///b"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_connection_strings(str(tmp_path / "missing.json"))

    def test_invalid_json(self, tmp_path):
        settings = tmp_path / "appsettings.json"
        settings.write_text("{not json")
        with pytest.raises(ConfigurationError, match="Invalid JSON"):
            load_connection_strings(str(settings))

    def test_no_file(self):
        assert load_connection_strings(None) == {}


class TestValidation:
    def test_development_is_valid(self):
        AppConfig(environment="Development").validate()

    def test_production_requires_cloud_connection(self):
        with pytest.raises(ConfigurationError) as exc_info:
            AppConfig(environment="Production").validate()
        assert exc_info.value.config_key == "AZURE_SQL_CONNECTION"

    def test_production_with_cloud_connection(self):
        AppConfig(
            environment="Production", cloud_sql_connection="postgresql://u:p@db/mclaren"
        ).validate()

    def test_unknown_scheme(self):
        with pytest.raises(ConfigurationError, match="Unsupported database URL scheme"):
            AppConfig(sqlite_connection="mysql://localhost/db").validate()

    def test_pool_size_must_be_positive(self):
        config = AppConfig(pool_size=0)
        assert config.pool_size == 0
        with pytest.raises(ConfigurationError) as exc_info:
            config.validate()
        assert exc_info.value.config_key == "DB_POOL_SIZE"

    def test_max_overflow_must_not_be_negative(self):
        with pytest.raises(ConfigurationError):
            AppConfig(max_overflow=-1).validate()
