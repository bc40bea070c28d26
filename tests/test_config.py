"""
Tests for configuration loading.
"""
import pytest

from lodgedesk import config as config_module
from lodgedesk.adapters.http_adapter import HTTPBookingAdapter
from lodgedesk.adapters.sqlite_adapter import SQLiteBookingAdapter
from lodgedesk.config import EnvironmentLodgeDeskConfig, get_config, set_config
from lodgedesk.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def reset_config(monkeypatch):
    for key in (
        "LODGEDESK_CONFIG",
        "LODGEDESK_BACKEND",
        "LODGEDESK_API_URL",
        "LODGEDESK_TIMEOUT",
        "LODGEDESK_DATABASE_URL",
        "LODGEDESK_CANCELLATION_CUTOFF_DAYS",
        "LODGEDESK_LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)
    set_config(None)
    yield
    set_config(None)


class NotAConfig:
    pass


class TestEnvironmentConfig:

    def test_defaults(self):
        config = EnvironmentLodgeDeskConfig()
        assert config.get_backend() == "http"
        assert config.get_api_url() == "http://localhost:3000/api"
        assert config.get_request_timeout() == 30
        assert config.get_cancellation_cutoff_days() == 2
        assert config.get_log_level() == "INFO"

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("LODGEDESK_API_URL", "https://pousada.example/api")
        monkeypatch.setenv("LODGEDESK_CANCELLATION_CUTOFF_DAYS", "3")
        monkeypatch.setenv("LODGEDESK_LOG_LEVEL", "debug")
        config = EnvironmentLodgeDeskConfig()
        assert config.get_api_url() == "https://pousada.example/api"
        assert config.get_cancellation_cutoff_days() == 3
        assert config.get_log_level() == "DEBUG"

    def test_invalid_integer_falls_back(self, monkeypatch):
        monkeypatch.setenv("LODGEDESK_TIMEOUT", "soon")
        assert EnvironmentLodgeDeskConfig().get_request_timeout() == 30

    def test_unknown_backend(self, monkeypatch):
        monkeypatch.setenv("LODGEDESK_BACKEND", "postgres")
        with pytest.raises(ConfigurationError):
            EnvironmentLodgeDeskConfig().get_backend()

    def test_http_adapter(self):
        adapter = EnvironmentLodgeDeskConfig().create_adapter()
        assert isinstance(adapter, HTTPBookingAdapter)
        adapter.close()

    def test_sqlite_adapter(self, monkeypatch, tmp_path):
        monkeypatch.setenv("LODGEDESK_BACKEND", "sqlite")
        monkeypatch.setenv("LODGEDESK_DATABASE_URL", f"sqlite:///{tmp_path / 'desk.db'}")
        adapter = EnvironmentLodgeDeskConfig().create_adapter()
        assert isinstance(adapter, SQLiteBookingAdapter)
        assert adapter.list_rooms() == []


class TestConfigClassLoading:

    def test_default_class(self):
        assert isinstance(get_config(), EnvironmentLodgeDeskConfig)
        assert get_config() is get_config()

    def test_set_config(self):
        custom = EnvironmentLodgeDeskConfig()
        set_config(custom)
        assert get_config() is custom

    @pytest.mark.parametrize(
        "path",
        [
            "nodots",
            "lodgedesk.missing_module.Config",
            "lodgedesk.config.MissingConfig",
            "test_config.NotAConfig",
        ],
    )
    def test_invalid_class_path(self, monkeypatch, path):
        monkeypatch.setenv(config_module.CONFIG_ENV_KEY, path)
        with pytest.raises(ConfigurationError):
            get_config()
