"""
Structured JSON Logging.

Every log line is one JSON object, written to stdout and to a rotating
file (``AppConfig.LOG_FILE``).  Two context fields get first-class keys
because the client attaches them to almost every call:

    ``event``    machine-readable event name (``"LOGIN"``, ``"JOB_CREATED"``)
    ``user_id``  Supabase UUID of the signed-in user

Any other ``extra`` fields are collected under ``context``.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional, TextIO, Union

ROOT_LOGGER_NAME: str = "uwezo"

# Context fields promoted to top-level keys of the JSON entry.
_PROMOTED_FIELDS: tuple[str, ...] = ("event", "user_id")


def qualified_name(name: str) -> str:
    """Place *name* under the ``uwezo`` logger namespace."""
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return name
    return f"{ROOT_LOGGER_NAME}.{name}"


class JSONFormatter(logging.Formatter):
    """Render a ``LogRecord`` as a single JSON line.

    Keys: ``timestamp`` (UTC ISO-8601), ``level``, ``logger``, ``message``,
    then ``event`` / ``user_id`` when supplied, ``context`` for any other
    extras, and ``exception`` when ``exc_info`` was set.
    """

    _STANDARD_ATTRS: frozenset[str] = frozenset(
        logging.LogRecord(
            name="", level=0, pathname="", lineno=0, msg="", args=(), exc_info=None
        ).__dict__.keys()
    ) | {"message", "asctime", "taskName"}

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context: dict[str, Any] = {}
        for key, value in record.__dict__.items():
            if key in self._STANDARD_ATTRS:
                continue
            if key in _PROMOTED_FIELDS:
                entry[key] = value
            else:
                context[key] = value
        if context:
            entry["context"] = context

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            entry["exception"] = record.exc_text

        return json.dumps(entry, ensure_ascii=False, default=str)


class StructuredLogger:
    """Injectable wrapper around a namespaced ``logging.Logger``.

    Handlers are attached the first time a given name is seen; later
    instances with the same name share them.

    Parameters
    ----------
    name:
        Component name, e.g. ``"services"``.  Stored as ``uwezo.<name>``.
    level:
        Logging level; defaults to ``AppConfig.LOG_LEVEL``.
    stream:
        Console stream; defaults to ``sys.stdout``.
    log_file:
        Rotating log file; defaults to ``AppConfig.LOG_FILE``.
    max_bytes, backup_count:
        Rotation policy; default to the ``AppConfig`` values.
    """

    def __init__(
        self,
        name: str = ROOT_LOGGER_NAME,
        level: Optional[Union[int, str]] = None,
        stream: Optional[TextIO] = None,
        log_file: Optional[str] = None,
        max_bytes: Optional[int] = None,
        backup_count: Optional[int] = None,
    ) -> None:
        # Lazy import: config logs through the stdlib logger at import time.
        from uwezo.config import get_config
        cfg = get_config()

        resolved_level = level if level is not None else cfg.LOG_LEVEL
        self._logger: logging.Logger = logging.getLogger(qualified_name(name))
        self._logger.setLevel(resolved_level)
        self._logger.propagate = False

        if self._logger.handlers:
            return

        formatter = JSONFormatter()
        console = logging.StreamHandler(stream or sys.stdout)
        console.setFormatter(formatter)
        self._logger.addHandler(console)

        target = Path(log_file or cfg.LOG_FILE)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                filename=str(target),
                maxBytes=max_bytes if max_bytes is not None else cfg.LOG_MAX_BYTES,
                backupCount=backup_count if backup_count is not None else cfg.LOG_BACKUP_COUNT,
                encoding="utf-8",
            )
        except OSError as exc:
            self._logger.warning(
                "Log file %s is not writable (%s); logging to console only.", target, exc,
            )
        else:
            file_handler.setFormatter(formatter)
            self._logger.addHandler(file_handler)

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    @property
    def name(self) -> str:
        return self._logger.name

    def debug(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.error(msg, *args, **kwargs)

    def critical(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.critical(msg, *args, **kwargs)


def get_logger(name: str = ROOT_LOGGER_NAME) -> StructuredLogger:
    return StructuredLogger(name=name)
