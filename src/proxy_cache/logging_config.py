"""Logging setup for the proxy service."""

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for the process.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ...)
    """
    logging.basicConfig(
        format=LOG_FORMAT,
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
