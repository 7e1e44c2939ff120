"""
Logging configuration.

Configures the root logger once at application startup. Modules obtain
their own loggers with ``logging.getLogger(__name__)``.
"""

import logging
import sys
from typing import Optional

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Loggers that are too chatty at INFO for normal operation
_NOISY_LOGGERS = ("sqlalchemy.engine", "multipart", "httpx")


def configure_logging(level: str = "INFO", fmt: Optional[str] = None) -> None:
    """
    Configure root logging for the application.

    Args:
        level: Log level name (DEBUG, INFO, ...).
        fmt: Log record format string.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=fmt or DEFAULT_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    if level.upper() != "DEBUG":
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug("Logging configured at level %s", level)
