"""Environment-aware logging configuration.

Configuration by environment:
- Local / Development: readable console output, optional file output
- Staging: structured console output plus file output when enabled
- Production: JSON console output at WARNING unless told otherwise
- Testing: a null handler at ERROR, see ``configure_testing_logging``
"""

import logging

from ..config.settings import EnvironmentOption, get_settings
from .handlers import create_console_handler, create_file_handler, create_null_handler


def setup_logging_configuration() -> None:
    """Configure the root logger from application settings.

    Called once, lazily, by the logger factory.
    """
    settings = get_settings()

    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    if settings.ENVIRONMENT == EnvironmentOption.PRODUCTION:
        handlers = _production_handlers(settings)
    elif settings.ENVIRONMENT == EnvironmentOption.STAGING:
        handlers = _staging_handlers(settings)
    else:
        handlers = _development_handlers(settings)

    for handler in handlers:
        root_logger.addHandler(handler)

    root_logger.setLevel(settings.LOG_LEVEL_INT)
    _configure_noisy_loggers(settings)


def _file_handler(settings) -> logging.Handler:
    return create_file_handler(
        filepath=settings.LOG_FILE_PATH,
        format_type="structured",
        level=logging.DEBUG,
        max_bytes=settings.LOG_FILE_MAX_SIZE,
        backup_count=settings.LOG_FILE_BACKUP_COUNT,
    )


def _development_handlers(settings) -> list[logging.Handler]:
    handlers = []

    if settings.LOG_CONSOLE_ENABLED:
        console_level = logging.DEBUG if settings.LOG_DEVELOPMENT_VERBOSE else settings.LOG_LEVEL_INT
        handlers.append(create_console_handler(format_type=settings.LOG_FORMAT, level=console_level, use_colors=True))

    if settings.LOG_FILE_ENABLED:
        handlers.append(_file_handler(settings))

    return handlers


def _staging_handlers(settings) -> list[logging.Handler]:
    handlers = []

    if settings.LOG_CONSOLE_ENABLED:
        handlers.append(create_console_handler(format_type="structured", level=settings.LOG_LEVEL_INT, use_colors=False))

    if settings.LOG_FILE_ENABLED:
        handlers.append(_file_handler(settings))

    return handlers


def _production_handlers(settings) -> list[logging.Handler]:
    handlers = []

    if settings.LOG_CONSOLE_ENABLED:
        console_level = logging.WARNING if settings.LOG_PRODUCTION_OPTIMIZE else settings.LOG_LEVEL_INT
        handlers.append(create_console_handler(format_type="json", level=console_level, use_colors=False))

    if settings.LOG_FILE_ENABLED:
        handlers.append(_file_handler(settings))

    return handlers


def _configure_noisy_loggers(settings) -> None:
    """Quiet third-party loggers unless SQL logging was asked for."""
    sql_level = logging.INFO if settings.LOG_SQL_QUERIES else logging.WARNING
    noisy_loggers = {
        "aiosqlite": logging.WARNING,
        "sqlalchemy.engine": sql_level,
        "sqlalchemy.pool": logging.WARNING,
        "uvicorn.access": logging.WARNING,
    }

    for logger_name, level in noisy_loggers.items():
        logging.getLogger(logger_name).setLevel(level)


def configure_testing_logging() -> None:
    """Configure minimal logging for test runs.

    Keeps pytest output free of application logs while still letting
    ``caplog`` capture records propagated from the package loggers.
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(create_null_handler())
    root_logger.setLevel(logging.ERROR)

    for logger_name in ("sqlalchemy.engine", "aiosqlite"):
        logging.getLogger(logger_name).setLevel(logging.ERROR)


def get_configured_logger(name: str) -> logging.Logger:
    """Return a logger that inherits the configured root handlers."""
    return logging.getLogger(name)


def reconfigure_logger_level(logger_name: str, level: int) -> None:
    """Change a single logger's level at runtime."""
    logging.getLogger(logger_name).setLevel(level)

    logging.getLogger(__name__).info(f"Logger level changed: {logger_name} -> {logging.getLevelName(level)}")
