"""Logging utilities for pk3cache.

Module loggers live under ``pk3cache.*``. Once :func:`configure_logging`
ran, their records are forwarded to the active reporter so library code can
log while the CLI decides how output looks.
"""

from __future__ import annotations

import logging

from .reporting import get_reporter

_LOGGER_NAME = "pk3cache"

__all__ = ["get_logger", "configure_logging"]


class ReporterHandler(logging.Handler):
    """Maps stdlib levels onto reporter messages (DEBUG needs ``-vv``)."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
        except Exception:  # pragma: no cover
            self.handleError(record)
            return
        rep = get_reporter()
        if record.levelno >= logging.ERROR:
            rep.error(msg)
        elif record.levelno >= logging.WARNING:
            rep.warning(msg)
        elif record.levelno >= logging.INFO:
            rep.status(msg)
        else:
            rep.verbose(msg, level=2)


def get_logger(name: str | None = None) -> logging.Logger:
    return logging.getLogger(f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME)


def configure_logging(verbosity: int = 0) -> None:
    logger = get_logger()
    logger.setLevel(logging.DEBUG if verbosity >= 1 else logging.INFO)
    for h in list(logger.handlers):
        if isinstance(h, ReporterHandler):
            logger.removeHandler(h)
    handler = ReporterHandler()
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
