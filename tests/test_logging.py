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
"""Tests for structured logging helpers."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from contextlib import contextmanager

import pytest

from filewright import DirectoryPath, FilePath
from filewright.runtime.logging import (
    PACKAGE_LOGGER,
    _coerce_level,
    _JsonFormatter,
    _PackageHandler,
    _TextFormatter,
    configure_logging,
    get_logger,
)


class _CaptureHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__()
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


@contextmanager
def _capture(logger: logging.Logger) -> Iterator[list[logging.LogRecord]]:
    handler = _CaptureHandler()
    logger.addHandler(handler)
    try:
        yield handler.records
    finally:
        logger.removeHandler(handler)
        handler.close()


def _record(msg: str, *args: object) -> logging.LogRecord:
    return logging.LogRecord(
        name="filewright.tests",
        level=logging.WARNING,
        pathname=__file__,
        lineno=0,
        msg=msg,
        args=args,
        exc_info=None,
    )


@pytest.fixture(autouse=True)
def reset_package_logger() -> Iterator[None]:
    package = logging.getLogger(PACKAGE_LOGGER)
    root = logging.getLogger()
    original_handlers = list(package.handlers)
    original_level = package.level
    original_root_handlers = list(root.handlers)
    try:
        yield
    finally:
        for handler in package.handlers:
            if handler not in original_handlers:
                handler.close()
        package.handlers = original_handlers
        package.setLevel(original_level)
        root.handlers = original_root_handlers


class TestStructuredLogger:
    """Test the event and context schema."""

    def test_records_carry_event_and_merged_context(self) -> None:
        logger = get_logger("filewright.tests", context={"component": "unit"})
        logger.logger.setLevel(logging.INFO)

        with _capture(logger.logger) as records:
            logger.info("structured", event="tests.event", context={"attempt": 1})

        assert len(records) == 1
        assert records[0].event == "tests.event"
        assert records[0].context == {"component": "unit", "attempt": 1}
        assert records[0].getMessage() == "structured"

    def test_call_context_overrides_component_context(self) -> None:
        logger = get_logger("filewright.tests", context={"component": "unit"})
        logger.logger.setLevel(logging.INFO)

        with _capture(logger.logger) as records:
            logger.info("override", event="tests.event", context={"component": "x"})

        assert records[0].context == {"component": "x"}

    def test_paths_in_context_become_strings(self) -> None:
        logger = get_logger("filewright.tests")
        logger.logger.setLevel(logging.INFO)

        with _capture(logger.logger) as records:
            logger.info(
                "paths",
                event="tests.paths",
                context={
                    "file": FilePath.parse("/srv/data/a.txt"),
                    "dir": DirectoryPath.parse("/srv"),
                    "count": 2,
                },
            )

        assert records[0].context == {
            "file": "/srv/data/a.txt",
            "dir": "/srv",
            "count": 2,
        }

    def test_event_is_required(self) -> None:
        logger = get_logger("filewright.tests")
        logger.logger.setLevel(logging.INFO)

        with pytest.raises(TypeError, match="event"):
            logger.info("missing-event")

    def test_extra_is_rejected(self) -> None:
        logger = get_logger("filewright.tests")
        logger.logger.setLevel(logging.INFO)

        with pytest.raises(TypeError, match="context"):
            logger.info("extra", event="tests.extra", extra={"count": 2})

    def test_context_must_be_a_mapping(self) -> None:
        logger = get_logger("filewright.tests")
        logger.logger.setLevel(logging.INFO)

        with pytest.raises(TypeError, match="mapping"):
            logger.info("bad", event="tests.bad", context=["not", "a", "map"])


def test_library_loggers_carry_component_context(
    caplog: pytest.LogCaptureFixture,
) -> None:
    from filewright import Directory

    caplog.set_level(logging.DEBUG, logger=PACKAGE_LOGGER)

    _ = Directory.create("made", "throw_error")

    events = [(record.event, record.context["component"]) for record in caplog.records]
    assert ("host.create_directory", "host") in events


class TestConfigureLogging:
    """Test handler installation on the package logger."""

    def test_installs_one_handler_on_package_logger(self) -> None:
        root_handlers = list(logging.getLogger().handlers)

        logger = configure_logging(level="DEBUG", env={})
        again = configure_logging(level="WARNING", env={})

        assert logger is again is logging.getLogger(PACKAGE_LOGGER)
        installed = [h for h in logger.handlers if isinstance(h, _PackageHandler)]
        assert len(installed) == 1
        assert isinstance(installed[0].formatter, _TextFormatter)
        assert logger.level == logging.WARNING
        assert logging.getLogger().handlers == root_handlers

    def test_force_swaps_the_formatter(self) -> None:
        _ = configure_logging(env={})
        logger = configure_logging(force=True, env={"FILEWRIGHT_LOG_FORMAT": "json"})

        formatters = [type(h.formatter) for h in logger.handlers]
        assert _JsonFormatter in formatters
        assert _TextFormatter not in formatters

    def test_reads_level_from_env(self) -> None:
        logger = configure_logging(env={"FILEWRIGHT_LOG_LEVEL": "warning"})

        assert logger.level == logging.WARNING

    def test_leaves_foreign_handlers_alone(self) -> None:
        package = logging.getLogger(PACKAGE_LOGGER)
        foreign = logging.NullHandler()
        package.addHandler(foreign)

        _ = configure_logging(force=True, env={})

        assert foreign in package.handlers


class TestFormatters:
    """Test text and JSON rendering."""

    def test_json_renders_event_and_context(self) -> None:
        record = _record("Rejected %s", "/etc")
        record.event = "sandbox.violation"
        record.context = {"root": "/srv"}

        payload = json.loads(_JsonFormatter().format(record))

        assert payload["message"] == "Rejected /etc"
        assert payload["event"] == "sandbox.violation"
        assert payload["context"] == {"root": "/srv"}
        assert payload["level"] == "WARNING"

    def test_text_appends_context_pairs(self) -> None:
        record = _record("Removed %s", "/srv/a.txt")
        record.event = "host.remove_entry"
        record.context = {"component": "host", "kind": "file"}

        line = _TextFormatter().format(record)

        assert "host.remove_entry Removed /srv/a.txt" in line
        assert line.endswith("component=host kind=file")

    def test_text_tolerates_plain_records(self) -> None:
        line = _TextFormatter().format(_record("plain"))

        assert line.endswith("WARNING filewright.tests - plain")


def test_coerce_level() -> None:
    assert _coerce_level(None) == logging.INFO
    assert _coerce_level("") == logging.INFO
    assert _coerce_level(logging.ERROR) == logging.ERROR
    assert _coerce_level("debug") == logging.DEBUG
    with pytest.raises(TypeError):
        _ = _coerce_level("chatty")
