"""Logging setup built on loguru.

Loguru exposes a single global logger, so configuration here is global too.
Components never configure logging themselves: they ask for a logger with
``get_logger(__name__)`` and the first request configures defaults lazily.
"""

import sys
import typing as t

from loguru import logger

from ..config.settings import Environment, LogLevel, Settings

if t.TYPE_CHECKING:
    import loguru

_DEVELOPMENT_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan> - <level>{message}</level>"
)

_configured = False


def configure_logger(
    level: LogLevel | str = LogLevel.INFO,
    environment: Environment = Environment.PRODUCTION,
) -> None:
    """Replace loguru's handlers with one configured for the environment.

    Production emits JSON lines; everything else uses a coloured human format.
    """
    global _configured

    level_name = level.value if isinstance(level, LogLevel) else str(level).upper()

    logger.remove()
    logger.configure(extra={"name": "apify_http"})
    if environment == Environment.PRODUCTION:
        logger.add(sys.stderr, level=level_name, serialize=True)
    else:
        logger.add(
            sys.stderr,
            level=level_name,
            format=_DEVELOPMENT_FORMAT,
            colorize=environment == Environment.DEVELOPMENT,
            backtrace=environment == Environment.DEVELOPMENT,
            diagnose=False,
        )
    _configured = True


def setup_logging(settings: Settings) -> None:
    """Configure logging from application settings."""
    configure_logger(level=settings.log_level, environment=settings.environment)


def get_logger(name: str) -> "loguru.Logger":
    """Return the shared logger bound to ``name``, configuring defaults once."""
    if not _configured:
        configure_logger()
    return logger.bind(name=name)


def is_configured() -> bool:
    return _configured


def reset_logging() -> None:
    """Drop all handlers and forget configuration. Used by tests."""
    global _configured
    logger.remove()
    _configured = False
