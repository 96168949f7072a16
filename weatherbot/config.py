"""
Configuration management for the Weather Relay Bot.
Settings come from the environment (.env locally, real env vars on Render).
An optional TOML file named by BOT_CONFIG_FILE overrides them at startup.
"""

import os
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List

from dotenv import load_dotenv
import toml

# Render injects variables itself; a stray .env must not shadow them there
if not os.getenv("RENDER"):
    load_dotenv()

DEFAULT_PORT = 8080
DEFAULT_WEBHOOK_PATH = "/bot"


class ConfigError(ValueError):
    """A mandatory setting is missing or invalid."""


def _as_bool(v: Any) -> bool:
    if isinstance(v, bool):
        return v
    return str(v).lower() in ("true", "1", "yes")


def _env_number(name: str, default: Any, cast: Callable[[str], Any], errors: List[str]) -> Any:
    """Read a numeric variable; a bad value is recorded in errors and the default kept."""
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError:
        errors.append(f"{name} must be a number, got '{raw}'")
        return default


class Config:
    """
    Application configuration.
    Keys are read from the environment at import time and may be overwritten
    by set_runtime_config (TOML file) before validation.
    """

    # Unparseable numeric variables, reported by validate()
    ENV_ERRORS: List[str] = []

    BOT_TOKEN: str = os.getenv("TELEGRAM_BOT_TOKEN", "")

    WEATHER_API_URL: str = os.getenv("WEATHER_API_URL", "")
    WEATHER_API_METHOD: str = (os.getenv("WEATHER_API_METHOD", "GET") or "GET").upper()
    EXCHANGE_API_URL: str = os.getenv("EXCHANGE_API_URL", "")
    USER_SERVICE_URL: str = os.getenv("USER_SERVICE_URL", "")

    WEBHOOK_URL: str = os.getenv("WEBHOOK_URL", "")
    WEBHOOK_PATH: str = os.getenv("WEBHOOK_PATH", DEFAULT_WEBHOOK_PATH) or DEFAULT_WEBHOOK_PATH
    WEBHOOK_SECRET: str = os.getenv("WEBHOOK_SECRET", "")
    PORT: int = _env_number("PORT", DEFAULT_PORT, int, ENV_ERRORS)

    UPSTREAM_TIMEOUT_SECONDS: float = _env_number("UPSTREAM_TIMEOUT_SECONDS", 15.0, float, ENV_ERRORS)
    UPSTREAM_MAX_ATTEMPTS: int = _env_number("UPSTREAM_MAX_ATTEMPTS", 3, int, ENV_ERRORS)
    UPSTREAM_RETRY_DELAY_SECONDS: float = _env_number("UPSTREAM_RETRY_DELAY_SECONDS", 3.0, float, ENV_ERRORS)

    UPDATE_QUEUE_SIZE: int = _env_number("UPDATE_QUEUE_SIZE", 100, int, ENV_ERRORS)
    POLL_TIMEOUT_SECONDS: int = _env_number("POLL_TIMEOUT_SECONDS", 60, int, ENV_ERRORS)

    LOG_LEVEL: str = (os.getenv("LOG_LEVEL", "INFO") or "INFO").upper()
    DEBUG_MODE: bool = _as_bool(os.getenv("DEBUG_MODE", "false"))

    @classmethod
    def set_runtime_config(cls, config: Dict[str, Any]) -> None:
        """Overwrite config from a parsed TOML mapping. Unknown keys are ignored."""
        if "bot_token" in config:
            cls.BOT_TOKEN = str(config["bot_token"] or "")
        if "weather_api_url" in config:
            cls.WEATHER_API_URL = str(config["weather_api_url"] or "")
        if "weather_api_method" in config:
            cls.WEATHER_API_METHOD = str(config["weather_api_method"] or "GET").upper()
        if "exchange_api_url" in config:
            cls.EXCHANGE_API_URL = str(config["exchange_api_url"] or "")
        if "user_service_url" in config:
            cls.USER_SERVICE_URL = str(config["user_service_url"] or "")
        if "webhook_url" in config:
            cls.WEBHOOK_URL = str(config["webhook_url"] or "")
        if "webhook_path" in config:
            cls.WEBHOOK_PATH = str(config["webhook_path"] or DEFAULT_WEBHOOK_PATH)
        if "webhook_secret" in config:
            cls.WEBHOOK_SECRET = str(config["webhook_secret"] or "")
        if "port" in config:
            cls.PORT = int(config["port"] or DEFAULT_PORT)
        if "upstream_timeout_seconds" in config:
            cls.UPSTREAM_TIMEOUT_SECONDS = float(config["upstream_timeout_seconds"])
        if "upstream_max_attempts" in config:
            cls.UPSTREAM_MAX_ATTEMPTS = int(config["upstream_max_attempts"])
        if "upstream_retry_delay_seconds" in config:
            cls.UPSTREAM_RETRY_DELAY_SECONDS = float(config["upstream_retry_delay_seconds"])
        if "update_queue_size" in config:
            cls.UPDATE_QUEUE_SIZE = int(config["update_queue_size"])
        if "poll_timeout_seconds" in config:
            cls.POLL_TIMEOUT_SECONDS = int(config["poll_timeout_seconds"])
        if "log_level" in config:
            cls.LOG_LEVEL = (str(config["log_level"] or "INFO")).upper()
        if "debug_mode" in config:
            cls.DEBUG_MODE = _as_bool(config["debug_mode"])

    @classmethod
    def load_file(cls, path: str) -> None:
        """
        Apply a TOML override file.

        Raises:
            ConfigError: if the file is missing or is not valid TOML
        """
        file_path = Path(path)
        if not file_path.is_file():
            raise ConfigError(f"Config file not found: {path}")
        try:
            parsed = toml.loads(file_path.read_text(encoding="utf-8"))
        except toml.TomlDecodeError as e:
            raise ConfigError(f"Invalid TOML in {path}: {e}") from e
        try:
            cls.set_runtime_config(parsed)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid value in {path}: {e}") from e

    @classmethod
    def is_webhook_mode(cls) -> bool:
        """Push mode when a callback URL is configured, long polling otherwise."""
        return bool(cls.WEBHOOK_URL)

    @classmethod
    def validate(cls) -> List[str]:
        """
        Validate configuration and return list of errors.
        Returns empty list if configuration is valid.
        """
        errors = list(cls.ENV_ERRORS)

        if not cls.BOT_TOKEN:
            errors.append("TELEGRAM_BOT_TOKEN is required")

        if not cls.WEATHER_API_URL:
            errors.append("WEATHER_API_URL is required")

        if cls.WEATHER_API_METHOD not in ("GET", "POST"):
            errors.append("WEATHER_API_METHOD must be GET or POST")

        if cls.WEBHOOK_URL and not cls.WEBHOOK_URL.startswith(("http://", "https://")):
            errors.append("WEBHOOK_URL must be an http(s) URL")

        if not cls.WEBHOOK_PATH.startswith("/"):
            errors.append("WEBHOOK_PATH must start with '/'")

        if not 0 < cls.PORT < 65536:
            errors.append("PORT must be between 1 and 65535")

        if cls.UPSTREAM_TIMEOUT_SECONDS <= 0:
            errors.append("UPSTREAM_TIMEOUT_SECONDS must be positive")

        if cls.UPSTREAM_MAX_ATTEMPTS < 1:
            errors.append("UPSTREAM_MAX_ATTEMPTS must be at least 1")

        if cls.UPSTREAM_RETRY_DELAY_SECONDS < 0:
            errors.append("UPSTREAM_RETRY_DELAY_SECONDS cannot be negative")

        if cls.UPDATE_QUEUE_SIZE < 1:
            errors.append("UPDATE_QUEUE_SIZE must be at least 1")

        if cls.POLL_TIMEOUT_SECONDS < 0:
            errors.append("POLL_TIMEOUT_SECONDS cannot be negative")

        return errors

    @classmethod
    def setup_logging(cls) -> None:
        """Configure logging based on settings."""
        log_level = getattr(logging, cls.LOG_LEVEL, logging.INFO)

        logging.basicConfig(
            level=log_level,
            format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            handlers=[logging.StreamHandler()]
        )

        # Reduce noise from external libraries
        library_level = logging.DEBUG if cls.DEBUG_MODE else logging.WARNING
        logging.getLogger("httpx").setLevel(library_level)
        logging.getLogger("httpcore").setLevel(library_level)
        logging.getLogger("telegram").setLevel(library_level)
        logging.getLogger("aiohttp.access").setLevel(library_level)
