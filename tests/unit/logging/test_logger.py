# tests/unit/logging/test_logger.py - v2
"""Tests for logging/logger.py - logger factory and formatters."""

from __future__ import annotations

import io
import json
import logging
import sys

from capprobe.core.errors import ProbeError
from capprobe.logging.context import clear_context, set_probe_context
from capprobe.logging.logger import JsonFormatter, TextFormatter, get_logger, setup_logging


def _record(msg: str, level: int = logging.INFO, exc: BaseException | None = None) -> logging.LogRecord:
    exc_info = None
    if exc is not None:
        try:
            raise exc
        except BaseException:
            exc_info = sys.exc_info()
    return logging.LogRecord(
        name="capprobe.probe.coordinator", level=level, pathname="", lineno=0,
        msg=msg, args=(), exc_info=exc_info,
    )


class TestJsonFormatter:
    def setup_method(self):
        clear_context()

    def teardown_method(self):
        clear_context()

    def test_format_basic(self):
        parsed = json.loads(JsonFormatter().format(_record("Hello")))
        assert parsed["level"] == "INFO"
        assert parsed["message"] == "Hello"
        assert parsed["logger"] == "capprobe.probe.coordinator"
        assert "timestamp" in parsed
        assert "binary_path" not in parsed

    def test_format_with_context(self):
        set_probe_context("/usr/bin/tool", "prefer_cache", "p1")
        parsed = json.loads(JsonFormatter().format(_record("test msg")))
        assert parsed["binary_path"] == "/usr/bin/tool"
        assert parsed["policy"] == "prefer_cache"
        assert parsed["probe_id"] == "p1"

    def test_probe_error_kind(self):
        record = _record("failed", logging.WARNING, ProbeError("timeout", "/usr/bin/tool"))
        parsed = json.loads(JsonFormatter().format(record))
        assert parsed["error_kind"] == "timeout"
        assert "ProbeError" in parsed["exception"]

    def test_other_exception(self):
        parsed = json.loads(JsonFormatter().format(_record("x", exc=RuntimeError("boom"))))
        assert "error_kind" not in parsed
        assert "RuntimeError: boom" in parsed["exception"]

    def test_extra_data(self):
        record = _record("x")
        record.data = {"features": 3}
        assert json.loads(JsonFormatter().format(record))["data"] == {"features": 3}


class TestTextFormatter:
    def teardown_method(self):
        clear_context()

    def test_format_basic(self):
        output = TextFormatter().format(_record("Hello text"))
        assert "Hello text" in output
        assert "INFO" in output
        assert " probe.coordinator " in output

    def test_format_with_context(self):
        set_probe_context("/usr/bin/tool", "refresh", "p42")
        output = TextFormatter().format(_record("probing"))
        assert "[p42]" in output
        assert "(refresh)" in output

    def test_probe_error_kind(self):
        output = TextFormatter().format(
            _record("failed", logging.WARNING, ProbeError("not_found", "/x")),
        )
        assert "<not_found>" in output.splitlines()[0]


class TestGetLogger:
    def test_returns_logger(self):
        logger = get_logger("test_module")
        assert logger.name == "capprobe.test_module"


class TestSetupLogging:
    def teardown_method(self):
        root = logging.getLogger("capprobe")
        for handler in list(root.handlers):
            handler.close()
        root.handlers.clear()
        root.setLevel(logging.NOTSET)

    def test_setup_json(self):
        root = setup_logging(level="DEBUG", log_format="json")
        assert root is logging.getLogger("capprobe")
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JsonFormatter)

    def test_setup_text(self):
        root = setup_logging(level="WARNING", log_format="text")
        assert root.level == logging.WARNING
        assert isinstance(root.handlers[0].formatter, TextFormatter)

    def test_reinit_does_not_duplicate(self):
        setup_logging()
        setup_logging()
        assert len(logging.getLogger("capprobe").handlers) == 1

    def test_custom_stream(self):
        stream = io.StringIO()
        setup_logging(log_format="json", stream=stream)
        get_logger("tests").info("to the stream")
        assert json.loads(stream.getvalue())["message"] == "to the stream"

    def test_with_log_file(self, tmp_path):
        setup_logging(log_file=str(tmp_path / "logs" / "capprobe.log"), rotation="1MB")
        assert len(logging.getLogger("capprobe").handlers) == 2
        assert (tmp_path / "logs").is_dir()
