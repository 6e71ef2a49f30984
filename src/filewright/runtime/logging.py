# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Structured logging for :mod:`filewright`.

Every record the package emits names an ``event`` (``host.create_file``,
``sandbox.violation``, ...) and carries a ``context`` mapping. Paths in the
context are rendered as plain strings so handlers never see path objects.

The package only attaches handlers when :func:`configure_logging` is called,
and then only to the ``filewright`` logger, never the root logger.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping, MutableMapping
from datetime import UTC, datetime
from typing import Any, cast, override

__all__ = [
    "PACKAGE_LOGGER",
    "StructuredLogger",
    "configure_logging",
    "get_logger",
]

PACKAGE_LOGGER = "filewright"

_LOG_LEVEL_ENV = "FILEWRIGHT_LOG_LEVEL"
_LOG_FORMAT_ENV = "FILEWRIGHT_LOG_FORMAT"
_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s %(event)s %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class StructuredLogger(logging.LoggerAdapter[logging.Logger]):
    """Logger adapter that requires an ``event`` on every record.

    The adapter's own context (usually ``{"component": ...}``) is merged
    under the per-call ``context`` mapping.
    """

    def __init__(
        self,
        logger: logging.Logger,
        *,
        context: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(logger, dict(context or {}))

    @override
    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        event = kwargs.pop("event", None)
        if not isinstance(event, str) or not event:
            raise TypeError("Structured logs require an 'event' name.")
        if kwargs.get("extra"):
            raise TypeError("Pass structured fields through 'context', not 'extra'.")

        inline = kwargs.pop("context", None)
        if inline is not None and not isinstance(inline, Mapping):
            raise TypeError("context must be a mapping when provided.")
        payload = {**cast(Mapping[str, object], self.extra), **(inline or {})}

        kwargs["extra"] = {
            "event": event,
            "context": {key: _plain(value) for key, value in payload.items()},
        }
        return msg, kwargs


def get_logger(
    name: str,
    *,
    context: Mapping[str, object] | None = None,
) -> StructuredLogger:
    """Return a :class:`StructuredLogger` for the module ``name``."""

    return StructuredLogger(logging.getLogger(name), context=context)


def configure_logging(
    *,
    level: int | str | None = None,
    json_mode: bool | None = None,
    env: Mapping[str, str] | None = None,
    force: bool = False,
) -> logging.Logger:
    """Attach a stderr handler to the ``filewright`` logger.

    ``level`` and ``json_mode`` fall back to ``FILEWRIGHT_LOG_LEVEL`` and
    ``FILEWRIGHT_LOG_FORMAT`` (``json`` for one JSON object per line,
    anything else for text). A handler installed by an earlier call is kept
    unless ``force=True``; the level is always updated.

    Returns:
        The configured package logger.
    """
    env = env if env is not None else os.environ
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(_coerce_level(level or env.get(_LOG_LEVEL_ENV)))

    if json_mode is None:
        json_mode = env.get(_LOG_FORMAT_ENV, "").lower() == "json"

    installed = [h for h in logger.handlers if isinstance(h, _PackageHandler)]
    if installed and not force:
        return logger
    for handler in installed:
        logger.removeHandler(handler)
        handler.close()

    handler = _PackageHandler()
    handler.setFormatter(_JsonFormatter() if json_mode else _TextFormatter())
    logger.addHandler(handler)
    return logger


class _PackageHandler(logging.StreamHandler):
    """Stderr handler owned by :func:`configure_logging`."""


class _TextFormatter(logging.Formatter):
    """One line per record with the context appended as ``key=value`` pairs."""

    def __init__(self) -> None:
        super().__init__(_TEXT_FORMAT, _DATE_FORMAT)

    @override
    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "event"):
            record.event = "-"
        line = super().format(record)
        context = getattr(record, "context", None) or {}
        pairs = " ".join(f"{key}={value}" for key, value in context.items())
        return f"{line} {pairs}" if pairs else line


class _JsonFormatter(logging.Formatter):
    """Renders structured records as compact JSON."""

    @override
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        event = getattr(record, "event", None)
        if event is not None:
            payload["event"] = event
        context = getattr(record, "context", None)
        if context:
            payload["context"] = context
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=_plain, separators=(",", ":"))


def _plain(value: object) -> object:
    if isinstance(value, os.PathLike):
        return os.fspath(cast(os.PathLike[str], value))
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    return str(value)


def _coerce_level(level: int | str | None) -> int:
    if level is None or level == "":
        return logging.INFO
    if isinstance(level, int):
        return level
    value = logging.getLevelNamesMapping().get(level.upper())
    if value is None:
        msg = f"Unknown log level: {level!r}"
        raise TypeError(msg)
    return value
