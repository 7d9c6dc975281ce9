"""Logging setup shared by the CLI and the migration pipeline."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, MutableMapping, Tuple

_LOGGER_NAME = "animate_upgrade"
_CONSOLE_FORMAT = "[animate-upgrade] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(source)s]: %(message)s"


class _SourceDefault(logging.Filter):
    """Gives records logged outside a file's migration a placeholder ``source``."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "source"):
            record.source = "-"
        return True


class SourceLogAdapter(logging.LoggerAdapter):
    """Prefixes messages with the file being migrated and tags the record with it."""

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> Tuple[Any, MutableMapping[str, Any]]:
        source = self.extra["source"]
        kwargs.setdefault("extra", {})["source"] = source
        return f"{source}: {msg}", kwargs


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``animate_upgrade.<name>``, or the package logger when no name is given."""
    if not name:
        return logging.getLogger(_LOGGER_NAME)
    return logging.getLogger(f"{_LOGGER_NAME}.{name}")


def source_logger(logger: logging.Logger, source: Path | str) -> SourceLogAdapter:
    """Wrap ``logger`` so every message names ``source``."""
    return SourceLogAdapter(logger, {"source": str(source)})


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Send package log records to stderr and, optionally, to ``log_file``.

    Calling this again replaces the handlers installed by the previous call.
    The file sink records which source file each message belongs to.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = get_logger()
    logger.setLevel(level)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.addHandler(_handler(logging.StreamHandler(), level, _CONSOLE_FORMAT))
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = _handler(logging.FileHandler(log_file, encoding="utf-8"), level, _FILE_FORMAT)
        file_handler.addFilter(_SourceDefault())
        logger.addHandler(file_handler)
    return logger


def _handler(handler: logging.Handler, level: int, fmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


__all__ = ["SourceLogAdapter", "configure_logging", "get_logger", "source_logger"]
