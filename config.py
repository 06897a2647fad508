"""Application configuration classes."""

from __future__ import annotations

import os
import re

CURRENCY_CODE_PATTERN = re.compile(r"^[A-Z]{3}$")


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name)
    return value if value is not None else default


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "fixer-rate-cache"
    SECRET_KEY = _get_env("SECRET_KEY", "change-me")
    SQLALCHEMY_DATABASE_URI = _get_env("DATABASE_URL", "sqlite:///fixer-rate-cache.db")

    FIXER_API_BASE_URL = _get_env("FIXER_API_BASE_URL", "https://data.fixer.io/api")
    FIXER_DEFAULT_ACCESS_KEY: str | None = os.getenv("FIXER_DEFAULT_ACCESS_KEY") or None
    FIXER_CONNECT_TIMEOUT_SECONDS = float(_get_env("FIXER_CONNECT_TIMEOUT_SECONDS", "10"))
    FIXER_READ_TIMEOUT_SECONDS = float(_get_env("FIXER_READ_TIMEOUT_SECONDS", "30"))
    FIXER_MAX_RETRIES = int(_get_env("FIXER_MAX_RETRIES", "3"))
    FIXER_BACKOFF_SECONDS = float(_get_env("FIXER_BACKOFF_SECONDS", "0.5"))
    FIXER_BACKOFF_MULTIPLIER = float(_get_env("FIXER_BACKOFF_MULTIPLIER", "1.5"))
    FIXER_BACKOFF_MAX_SECONDS = float(_get_env("FIXER_BACKOFF_MAX_SECONDS", "15"))
    FIXER_BACKOFF_JITTER = float(_get_env("FIXER_BACKOFF_JITTER", "0"))
    RATE_PROVIDER = _get_env("RATE_PROVIDER", "fixer")

    DEFAULT_BASE_CURRENCY = _get_env("DEFAULT_BASE_CURRENCY", "EUR")
    DEFAULT_SYMBOLS = _get_env("DEFAULT_SYMBOLS", "USD,GBP,CAD")

    LOG_LEVEL = _get_env("LOG_LEVEL", "INFO")
    LOG_JSON_ENABLED = _get_env("LOG_JSON_ENABLED", "false").lower() == "true"
    LOG_FORMAT = _get_env("LOG_FORMAT", "%(asctime)s %(levelname)s [%(name)s] %(message)s")


class DevelopmentConfig(BaseConfig):
    """Configuration for local development."""

    DEBUG = True
    TESTING = False


class TestingConfig(BaseConfig):
    """Configuration used by the test suite."""

    DEBUG = False
    TESTING = True
    FIXER_BACKOFF_SECONDS = 0.0
    FIXER_BACKOFF_MAX_SECONDS = 0.0


class ProductionConfig(BaseConfig):
    """Configuration for production deployments."""

    DEBUG = False
    TESTING = False


CONFIG_BY_ENV = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config(config_name: str | None = None) -> type[BaseConfig]:
    """Return the config class for the requested environment.

    Args:
        config_name: Optional explicit config identifier. If omitted, the
            APP_ENV environment variable is consulted.

    Raises:
        KeyError: If the requested configuration is not defined.
        ValueError: If retry or currency settings are unusable.
    """

    env_candidate = config_name if config_name is not None else os.getenv("APP_ENV", "development")
    env_name = (env_candidate or "development").lower()
    try:
        config_cls = CONFIG_BY_ENV[env_name]
    except KeyError as exc:
        raise KeyError(f"Unknown APP_ENV '{env_name}'") from exc

    _validate_retry_settings(config_cls)
    _validate_defaults(config_cls)
    return config_cls


def _validate_retry_settings(config_cls: type[BaseConfig]) -> None:
    if config_cls.FIXER_MAX_RETRIES < 0:
        raise ValueError(
            f"FIXER_MAX_RETRIES must be zero or positive, got {config_cls.FIXER_MAX_RETRIES}"
        )
    if config_cls.FIXER_BACKOFF_MULTIPLIER < 1:
        raise ValueError(
            f"FIXER_BACKOFF_MULTIPLIER must be at least 1, got {config_cls.FIXER_BACKOFF_MULTIPLIER}"
        )
    if config_cls.FIXER_BACKOFF_SECONDS < 0 or config_cls.FIXER_BACKOFF_MAX_SECONDS < 0:
        raise ValueError("Backoff delays cannot be negative.")


def _validate_defaults(config_cls: type[BaseConfig]) -> None:
    base = (config_cls.DEFAULT_BASE_CURRENCY or "").strip().upper()
    if not CURRENCY_CODE_PATTERN.match(base):
        raise ValueError(
            f"DEFAULT_BASE_CURRENCY must be a 3-letter code, got '{config_cls.DEFAULT_BASE_CURRENCY}'"
        )
    config_cls.DEFAULT_BASE_CURRENCY = base
