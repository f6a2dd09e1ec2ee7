"""Logging utilities for srcindex commands."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "srcindex"
_CONSOLE_FORMAT = "[srcindex] %(levelname)s %(message)s"
_VERBOSE_CONSOLE_FORMAT = "[srcindex:%(component)s] %(levelname)s %(message)s"


class _ComponentFilter(logging.Filter):
    """Expose the logger name below ``srcindex.`` as ``%(component)s``."""

    def filter(self, record: logging.LogRecord) -> bool:
        prefix = f"{_LOGGER_NAME}."
        name = record.name
        record.component = name[len(prefix):] if name.startswith(prefix) else "main"
        return True


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a component logger under the srcindex hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, quiet: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Configure console output (and an optional file sink) for one CLI run.

    ``quiet`` keeps only warnings, which is where undiscoverable directories
    are reported; ``verbose`` adds the per-file decisions.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.addFilter(_ComponentFilter())
    stream_handler.setFormatter(
        logging.Formatter(_VERBOSE_CONSOLE_FORMAT if verbose else _CONSOLE_FORMAT)
    )
    logger.addHandler(stream_handler)

    if log_file is not None:
        # The file always records everything, whatever the console level.
        logger.setLevel(logging.DEBUG)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


__all__ = ["configure_logging", "get_logger"]
