"""Application configuration module.

Reads settings from environment variables with defaults suited to a single
dashboard process. A ``.env`` file in the working directory is honoured.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from core.constants import DEFAULT_DATA_DIR, CacheDefaults, DatabaseDefaults, RemoteStoreDefaults
from core.exceptions import ConfigurationError

load_dotenv()


def _get_bool(name: str, default: bool = False) -> bool:
    """Get boolean from environment variable."""
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes", "on"}


def _get_int(name: str, default: int) -> int:
    """Get integer from environment variable with fallback."""
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_optional_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from exc


def _get_str(name: str, default: str = "") -> str:
    """Get string from environment variable."""
    return os.getenv(name, default)


@dataclass(frozen=True)
class Config:
    environment: str
    debug: bool
    web_host: str
    web_port: int
    secret_key: str
    admin_username: str
    admin_password: str
    database_path: str
    data_folder: str
    log_folder: str
    db_pool_size: int
    db_busy_timeout: int
    remote_store_url: str
    remote_store_key: str
    remote_store_table: str
    remote_store_timeout: int
    ledger_cache_ttl: int
    random_seed: Optional[int]

    @property
    def remote_store_enabled(self) -> bool:
        return bool(self.remote_store_url and self.remote_store_key)


def load_config() -> Config:
    """Load application configuration from environment variables.

    Returns:
        Config: Application configuration with validated values

    Raises:
        ConfigurationError: If a value cannot be interpreted
    """
    config = Config(
        environment=_get_str("ENVIRONMENT", "development"),
        debug=_get_bool("DEBUG", False),
        web_host=_get_str("WEB_HOST", "0.0.0.0"),
        web_port=_get_int("WEB_PORT", 5000),
        secret_key=_get_str("SECRET_KEY", "change_me_in_production"),
        admin_username=_get_str("ADMIN_USERNAME", "admin"),
        admin_password=_get_str("ADMIN_PASSWORD", "123456"),
        database_path=_get_str("DATABASE_PATH", "data/raffle.sqlite"),
        data_folder=_get_str("DATA_FOLDER", str(DEFAULT_DATA_DIR)),
        log_folder=_get_str("LOG_FOLDER", "logs"),
        db_pool_size=_get_int("DB_POOL_SIZE", DatabaseDefaults.POOL_SIZE),
        db_busy_timeout=_get_int("DB_BUSY_TIMEOUT", DatabaseDefaults.BUSY_TIMEOUT),
        remote_store_url=_get_str("REMOTE_STORE_URL", "").rstrip("/"),
        remote_store_key=_get_str("REMOTE_STORE_KEY", ""),
        remote_store_table=_get_str("REMOTE_STORE_TABLE", RemoteStoreDefaults.TABLE),
        remote_store_timeout=_get_int("REMOTE_STORE_TIMEOUT", RemoteStoreDefaults.TIMEOUT),
        ledger_cache_ttl=_get_int("LEDGER_CACHE_TTL", CacheDefaults.LEDGER_TTL),
        random_seed=_get_optional_int("RANDOM_SEED"),
    )

    if config.db_pool_size < 1:
        raise ConfigurationError("DB_POOL_SIZE must be at least 1")

    return config
