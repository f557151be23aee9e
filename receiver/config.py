"""Runtime configuration for the webhook receiver."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from dotenv import load_dotenv

load_dotenv()

T = TypeVar("T")

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080
DEFAULT_READ_TIMEOUT = 15.0
DEFAULT_WRITE_TIMEOUT = 15.0
DEFAULT_IDLE_TIMEOUT = 60.0

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}
_LOG_LEVELS = {"CRITICAL", "FATAL", "ERROR", "WARN", "WARNING", "INFO", "DEBUG", "NOTSET"}


class ConfigError(RuntimeError):
    """Raised when an environment variable holds an unusable value."""


def _read_env(
    name: str,
    *,
    cast: Optional[Callable[[str], T]] = None,
    default: Optional[T] = None,
) -> Optional[T]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    value = value.strip()
    if cast is None:
        return value  # type: ignore[return-value]
    try:
        return cast(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Environment variable {name} has invalid value {value!r}") from exc


def _parse_bool(raw: str) -> bool:
    lowered = raw.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(raw)


def parse_port(raw: str) -> int:
    port = int(raw)
    if not 0 < port < 65536:
        raise ValueError(raw)
    return port


def parse_log_level(raw: str) -> str:
    level = raw.upper()
    if level not in _LOG_LEVELS:
        raise ValueError(raw)
    return level


def _parse_seconds(raw: str) -> float:
    seconds = float(raw)
    if seconds <= 0:
        raise ValueError(raw)
    return seconds


@dataclass(frozen=True)
class Settings:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    validate_json: bool = True
    health_enabled: bool = True
    read_timeout: float = DEFAULT_READ_TIMEOUT
    write_timeout: float = DEFAULT_WRITE_TIMEOUT
    idle_timeout: float = DEFAULT_IDLE_TIMEOUT
    log_level: str = "INFO"

    @property
    def addr(self) -> str:
        return f"{self.host}:{self.port}"


def load_settings() -> Settings:
    """Build :class:`Settings` from the process environment.

    Unset or empty variables fall back to their defaults; malformed values
    raise :class:`ConfigError` naming the offending variable.
    """

    return Settings(
        host=_read_env("HOST", default=DEFAULT_HOST),
        port=_read_env("PORT", cast=parse_port, default=DEFAULT_PORT),
        validate_json=_read_env("WEBHOOK_VALIDATE_JSON", cast=_parse_bool, default=True),
        health_enabled=_read_env("HEALTH_ENABLED", cast=_parse_bool, default=True),
        read_timeout=_read_env("READ_TIMEOUT", cast=_parse_seconds, default=DEFAULT_READ_TIMEOUT),
        write_timeout=_read_env("WRITE_TIMEOUT", cast=_parse_seconds, default=DEFAULT_WRITE_TIMEOUT),
        idle_timeout=_read_env("IDLE_TIMEOUT", cast=_parse_seconds, default=DEFAULT_IDLE_TIMEOUT),
        log_level=_read_env("LOG_LEVEL", cast=parse_log_level, default="INFO"),
    )


__all__ = ["ConfigError", "Settings", "load_settings", "parse_log_level", "parse_port"]
