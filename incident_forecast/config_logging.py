"""Logging configuration for the incident forecasting package.

Messages go to stdout with a timestamped format. A run can additionally be
recorded to a log file; calling :func:`setup_logging` again replaces the
handlers of the previous call, so the command line can raise the level after
modules have already created their loggers.
"""

from __future__ import annotations

import logging
from pathlib import Path
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: int = logging.INFO, *, log_file: Path | str | None = None) -> None:
    """Configure the root logger.

    Args:
        level: Logging level (default: INFO).
        log_file: Optional file that receives the same records as stdout.
            Its parent directory is created if needed.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, encoding="utf-8"))

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=handlers,
        force=True,
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for the given module name.

    Logging is configured with the defaults only if nothing configured the
    root logger yet.

    Args:
        name: Module name (typically __name__).

    Returns:
        Logger instance.
    """
    if not logging.getLogger().handlers:
        setup_logging()
    return logging.getLogger(name)
