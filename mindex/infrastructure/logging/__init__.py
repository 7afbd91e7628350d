"""Centralized logging for mindex.

Usage:
    ```python
    from mindex.infrastructure.logging import get_logger

    logger = get_logger(__name__)
    logger.info("Catalog ready")
    ```
"""

from .config import configure_testing_logging, setup_logging_configuration
from .factory import configure_logging, get_logger, mark_logging_configured

__all__ = [
    "get_logger",
    "configure_logging",
    "configure_testing_logging",
    "mark_logging_configured",
    "setup_logging_configuration",
]
