"""Logger factory with lazy configuration and module auto-detection."""

import inspect
import logging
from threading import Lock
from typing import Any, MutableMapping, Optional, Tuple, Union

from ..config.settings import get_settings
from .config import get_configured_logger, setup_logging_configuration

_logging_configured = False
_configuration_lock = Lock()


class ContextLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that merges its bound context into each call's ``extra``."""

    def process(self, msg: str, kwargs: MutableMapping[str, Any]) -> Tuple[str, MutableMapping[str, Any]]:
        extra = kwargs.get("extra", {})
        adapter_extra = self.extra if isinstance(self.extra, dict) else {}
        kwargs["extra"] = {**adapter_extra, **extra} if isinstance(extra, dict) else adapter_extra
        return msg, kwargs


def get_logger(name: Optional[str] = None, **extra_context) -> Union[logging.Logger, logging.LoggerAdapter]:
    """Get a configured logger.

    Args:
        name: Logger name. If None, detected from the calling module.
        **extra_context: Context bound to every record from this logger.

    Returns:
        Configured logger instance ready for use.

    Example:
        ```python
        logger = get_logger(__name__)
        logger.info("Import finished", extra={"imported": 3})

        scan_logger = get_logger(__name__, component="scanner")
        scan_logger.debug("Skipping folder")  # record carries component=scanner
        ```
    """
    _ensure_logging_configured()

    if name is None:
        name = _detect_calling_module()

    base_logger = get_configured_logger(name)

    if extra_context:
        return ContextLoggerAdapter(base_logger, extra_context)
    return base_logger


def configure_logging() -> None:
    """Configure logging now instead of on the first ``get_logger`` call."""
    global _logging_configured

    with _configuration_lock:
        if not _logging_configured:
            setup_logging_configuration()
            _logging_configured = True

            settings = get_settings()
            logging.getLogger(__name__).debug(
                f"Logging configured for {settings.ENVIRONMENT.value} environment",
                extra={
                    "log_level": settings.LOG_LEVEL,
                    "log_format": settings.LOG_FORMAT,
                    "console_enabled": settings.LOG_CONSOLE_ENABLED,
                    "file_enabled": settings.LOG_FILE_ENABLED,
                },
            )


def mark_logging_configured() -> None:
    """Stop the factory from overriding a configuration installed elsewhere (tests, scripts)."""
    global _logging_configured

    with _configuration_lock:
        _logging_configured = True


def _ensure_logging_configured() -> None:
    if not _logging_configured:
        configure_logging()


def _detect_calling_module() -> str:
    """Return the ``__name__`` of the module that called ``get_logger``."""
    frame = inspect.currentframe()

    try:
        for _ in range(2):
            if frame is None:
                break
            frame = frame.f_back

        if frame is not None:
            return str(frame.f_globals.get("__name__", "unknown"))
        return "unknown"

    finally:
        del frame
