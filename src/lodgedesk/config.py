from __future__ import annotations

import importlib
import os
import logging
from typing import Optional, Type

from dotenv import load_dotenv

from lodgedesk.base_config import LodgeDeskConfig
from lodgedesk.adapters.base import BookingAdapter
from lodgedesk.adapters.http_adapter import DEFAULT_API_URL, HTTPBookingAdapter
from lodgedesk.adapters.sqlite_adapter import SQLiteBookingAdapter
from lodgedesk.exceptions import ConfigurationError
from lodgedesk.rules import DEFAULT_CANCELLATION_CUTOFF_DAYS


DEFAULT_CONFIG_CLASS = "lodgedesk.config.EnvironmentLodgeDeskConfig"
CONFIG_ENV_KEY = "LODGEDESK_CONFIG"
BACKENDS = ("http", "sqlite")

logger = logging.getLogger(__name__)

load_dotenv()


def _import_config_class(path: str) -> Type[LodgeDeskConfig]:
    try:
        module_path, class_name = path.rsplit(".", 1)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid config path '{path}'") from exc

    try:
        module = importlib.import_module(module_path)
    except ImportError as exc:
        raise ConfigurationError(f"Could not import module '{module_path}'") from exc

    try:
        cls = getattr(module, class_name)
    except AttributeError as exc:
        raise ConfigurationError(f"Config class '{class_name}' not found in '{module_path}'") from exc

    if not isinstance(cls, type) or not issubclass(cls, LodgeDeskConfig):
        raise ConfigurationError(f"{path} is not a subclass of LodgeDeskConfig")

    return cls


class EnvironmentLodgeDeskConfig(LodgeDeskConfig):
    """Default configuration that reads from environment variables."""

    def __init__(self) -> None:
        self._env = os.environ

    def _get_int(self, key: str, default: int) -> int:
        try:
            return int(self._env.get(key, str(default)))
        except (TypeError, ValueError):
            logger.warning(f"Invalid integer for {key}, using {default}")
            return default

    def get_backend(self) -> str:
        backend = self._env.get("LODGEDESK_BACKEND", "http").lower()
        if backend not in BACKENDS:
            raise ConfigurationError(f"Unknown LODGEDESK_BACKEND '{backend}'. Expected one of {BACKENDS}")
        return backend

    def get_api_url(self) -> str:
        return self._env.get("LODGEDESK_API_URL", DEFAULT_API_URL)

    def get_request_timeout(self) -> int:
        return self._get_int("LODGEDESK_TIMEOUT", 30)

    def get_database_url(self) -> str:
        return self._env.get("LODGEDESK_DATABASE_URL", "sqlite:///lodgedesk.db")

    def get_cancellation_cutoff_days(self) -> int:
        return self._get_int("LODGEDESK_CANCELLATION_CUTOFF_DAYS", DEFAULT_CANCELLATION_CUTOFF_DAYS)

    def get_username(self) -> Optional[str]:
        return self._env.get("LODGEDESK_USERNAME")

    def get_password(self) -> Optional[str]:
        return self._env.get("LODGEDESK_PASSWORD")

    def get_log_level(self) -> str:
        return self._env.get("LODGEDESK_LOG_LEVEL", "INFO").upper()

    def create_adapter(self) -> BookingAdapter:
        if self.get_backend() == "sqlite":
            adapter = SQLiteBookingAdapter(
                self.get_database_url(),
                cancellation_cutoff_days=self.get_cancellation_cutoff_days(),
            )
            adapter.init()
            return adapter
        return HTTPBookingAdapter(self.get_api_url(), timeout=self.get_request_timeout())


_CONFIG: Optional[LodgeDeskConfig] = None


def get_config() -> LodgeDeskConfig:
    global _CONFIG
    if _CONFIG is None:
        class_path = os.getenv(CONFIG_ENV_KEY, DEFAULT_CONFIG_CLASS)
        cls = _import_config_class(class_path)
        _CONFIG = cls()
    return _CONFIG


def set_config(config: Optional[LodgeDeskConfig]) -> None:
    global _CONFIG
    _CONFIG = config
