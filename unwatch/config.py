"""Runtime settings loaded once from the process environment."""

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional


class ConfigurationError(Exception):
    """Raised when required settings are missing or invalid."""
    pass


DEFAULT_API_URL = "https://api.github.com"
MAX_PAGE_SIZE = 100
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    """Settings shared by the GitHub client and the subscription service."""

    github_token: str = field(repr=False)
    api_url: str = DEFAULT_API_URL
    page_size: int = MAX_PAGE_SIZE
    http_timeout: float = 30.0
    log_file: Optional[str] = None
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read from. If None, uses os.environ.

        Returns:
            Populated settings

        Raises:
            ConfigurationError: If GITHUB_TOKEN is unset or a value is invalid
        """
        if environ is None:
            environ = os.environ

        token = environ.get("GITHUB_TOKEN", "").strip()
        if not token:
            raise ConfigurationError("must set GITHUB_TOKEN")

        page_size = _parse_int(environ, "UNWATCH_PAGE_SIZE", MAX_PAGE_SIZE)
        if not 1 <= page_size <= MAX_PAGE_SIZE:
            raise ConfigurationError(
                f"UNWATCH_PAGE_SIZE must be between 1 and {MAX_PAGE_SIZE}, got {page_size}"
            )

        http_timeout = _parse_float(environ, "UNWATCH_HTTP_TIMEOUT", 30.0)
        if http_timeout <= 0:
            raise ConfigurationError("UNWATCH_HTTP_TIMEOUT must be positive")

        log_level = environ.get("UNWATCH_LOG_LEVEL", "WARNING").upper()
        if log_level not in LOG_LEVELS:
            raise ConfigurationError(f"UNWATCH_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")

        return cls(
            github_token=token,
            api_url=environ.get("GITHUB_API_URL", DEFAULT_API_URL).rstrip("/"),
            page_size=page_size,
            http_timeout=http_timeout,
            log_file=environ.get("UNWATCH_LOG_FILE") or None,
            log_level=log_level,
        )


def _parse_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


def _parse_float(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = environ.get(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None
