"""
Logging utilities for the API process and the command-line runner.

Provides a consistent logging format and configuration.
"""

import logging
import sys
from typing import TextIO


def configure_logging(level: str = "INFO", stream: TextIO = sys.stdout) -> None:
    """Configure root logging with the shared pipe-delimited format."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=stream,
    )
    # httpx logs every request at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)


__all__ = ["configure_logging"]
