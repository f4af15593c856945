"""
Centralized Logging Configuration

Configures one logging setup for scripts and the desk UI so store
fallbacks and dispatch actions land in the same place.

Features:
    - Combined console and file logging output
    - Process ID tagging
    - Reduced verbosity for external dependencies (redshift_connector)
"""

import logging
import sys
from pathlib import Path


LOG_FORMAT = "%(asctime)s - %(levelname)s - [PID:%(process)d] - %(name)s - %(message)s"
LOG_FILE = Path("shipping_desk.log")


def setup_logging(level: int = logging.INFO, log_file: Path | None = LOG_FILE) -> None:
    """
    Configure the global logging system.

    Args:
        level: Root log level (default INFO)
        log_file: File to append logs to; None logs to stdout only
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        handlers.insert(0, logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers)

    # Reduce verbosity from external libraries
    logging.getLogger("redshift_connector").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Return a logger for a module, typically called with __name__.

    Use this instead of logging.getLogger() so module loggers share the
    configuration above.
    """
    return logging.getLogger(name)


__all__ = [
    "setup_logging",
    "get_logger",
    "LOG_FORMAT",
    "LOG_FILE",
]
