"""Application settings and environment-driven overrides."""

import os
import typing as t
from dataclasses import dataclass, fields, replace
from enum import Enum

DEFAULT_BASE_URL = "https://api.apify.com"


class Environment(Enum):
    """Runtime environment for the application.

    Kept small and explicit to support simple environment-driven behaviour
    (log format) without introducing configuration dependencies.
    """

    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class LogLevel(str, Enum):
    """Log levels accepted by loguru."""

    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    SUCCESS = "SUCCESS"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass(frozen=True)
class Settings:
    """Settings container used to bootstrap the client.

    Holds the process-level concerns (environment, logging) plus the
    client-level defaults that every call inherits unless it overrides them.
    """

    environment: Environment = Environment.PRODUCTION
    log_level: LogLevel = LogLevel.INFO
    base_url: str = DEFAULT_BASE_URL
    token: str | None = None
    exp_backoff_millis: int = 500
    exp_backoff_max_repeats: int = 8

    @classmethod
    def from_env(cls, environ: t.Mapping[str, str] | None = None) -> "Settings":
        """Build settings from ``APIFY_*`` environment variables."""
        env = os.environ if environ is None else environ
        return build_settings(
            environment=(
                Environment(env["APIFY_ENV"].lower()) if "APIFY_ENV" in env else None
            ),
            log_level=(
                LogLevel(env["APIFY_LOG_LEVEL"].upper())
                if "APIFY_LOG_LEVEL" in env
                else None
            ),
            base_url=env.get("APIFY_API_BASE_URL"),
            token=env.get("APIFY_TOKEN"),
        )

    def call_defaults(self) -> dict[str, t.Any]:
        """Client-level default options merged under every call."""
        return {
            "base_url": self.base_url,
            "token": self.token,
            "exp_backoff_millis": self.exp_backoff_millis,
            "exp_backoff_max_repeats": self.exp_backoff_max_repeats,
        }


def build_settings(**overrides: t.Any) -> Settings:
    """Create Settings, applying only the overrides that are not None.

    Unknown keys raise TypeError, same as the dataclass constructor.
    """
    known = {f.name for f in fields(Settings)}
    unknown = set(overrides) - known
    if unknown:
        raise TypeError(f"Unknown settings: {', '.join(sorted(unknown))}")
    applied = {key: value for key, value in overrides.items() if value is not None}
    return replace(Settings(), **applied)
