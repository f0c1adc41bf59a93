"""Tests for maskvault.core.logging."""

from __future__ import annotations

import json
import logging
import sys

import pytest

from maskvault.core.logging import (
    JSONFormatter,
    RequestLogger,
    RequestScopeFilter,
    TextFormatter,
    configure_logging,
    current_request,
    request_scope,
)


def _record(msg: str = "hello", level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord("maskvault.test", level, __file__, 10, msg, None, None)


class TestRequestScope:
    def test_scope_sets_and_resets(self):
        assert current_request() is None
        with request_scope("identity_sign", "https://a.example") as scope:
            assert current_request() is scope
            assert scope.method == "identity_sign"
            assert scope.origin == "https://a.example"
        assert current_request() is None

    def test_nested_scope_restores_outer(self):
        with request_scope("identity_add", "https://maskvault.app") as outer:
            with request_scope("identity_sign", "https://a.example"):
                pass
            assert current_request() is outer

    def test_each_scope_gets_own_id(self):
        with request_scope("identity_sign", "https://a.example") as first:
            pass
        with request_scope("identity_sign", "https://a.example") as second:
            pass
        assert first.request_id != second.request_id


class TestFormatters:
    def test_json_formatter_without_request(self):
        data = json.loads(JSONFormatter().format(_record()))
        assert data["message"] == "hello"
        assert data["level"] == "INFO"
        assert data["logger"] == "maskvault.test"
        assert "request" not in data

    def test_json_formatter_carries_request(self):
        with request_scope("identity_sign", "https://a.example") as scope:
            data = json.loads(JSONFormatter().format(_record()))
        assert data["request"] == {"id": scope.request_id, "method": "identity_sign", "origin": "https://a.example"}

    def test_json_formatter_extra_and_exception(self):
        record = _record()
        record.extra_data = {"success": False}
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record.exc_info = sys.exc_info()
        data = json.loads(JSONFormatter().format(record))
        assert data["extra"] == {"success": False}
        assert "RuntimeError: boom" in data["exception"]

    def test_filter_keeps_request_for_late_formatting(self):
        record = _record()
        with request_scope("identity_link_request", "https://a.example"):
            assert RequestScopeFilter().filter(record) is True
        data = json.loads(JSONFormatter().format(record))
        assert data["request"]["method"] == "identity_link_request"

    def test_text_formatter_tags_request(self):
        with request_scope("identity_sign", "https://a.example"):
            line = TextFormatter().format(_record())
        assert "maskvault.test [identity_sign https://a.example] hello" in line

    def test_text_formatter_without_request(self):
        line = TextFormatter().format(_record())
        assert line.endswith("maskvault.test hello")


class TestConfigureLogging:
    @pytest.fixture(autouse=True)
    def _restore_root(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_json_format_from_env(self, clean_env):
        clean_env.setenv("MASKVAULT_LOG_FORMAT", "json")

        configure_logging(level="DEBUG")

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JSONFormatter)

    def test_text_format_and_log_file(self, clean_env, tmp_path):
        log_file = tmp_path / "maskvault.log"

        configure_logging(level="INFO", json_format=False, log_file=str(log_file))
        with request_scope("statistics_get", "https://maskvault.app"):
            logging.getLogger("maskvault.test").info("written")
        for handler in logging.getLogger().handlers:
            handler.flush()

        root = logging.getLogger()
        assert isinstance(root.handlers[0].formatter, TextFormatter)
        entry = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert entry["message"] == "written"
        assert entry["request"]["method"] == "statistics_get"
        root.handlers[-1].close()


class TestRequestLogger:
    def test_sanitize_redacts_sensitive_fields(self):
        logger = RequestLogger()
        out = logger._sanitize({"challenge": b"\x01", "salt": None, "with_origin": "https://b.example"})
        assert out == {"challenge": "[REDACTED]", "salt": "[REDACTED]", "with_origin": "https://b.example"}

    def test_sanitize_bytes_and_long_strings(self):
        logger = RequestLogger()
        out = logger._sanitize({"blob": b"\x00" * 4, "text": "x" * 600, "items": [b"ab"]})
        assert out["blob"] == "<4 bytes>"
        assert out["text"].endswith("...") and len(out["text"]) == 503
        assert out["items"] == ["<2 bytes>"]

    def test_log_request_and_result(self, caplog):
        logger = RequestLogger(logging.getLogger("maskvault.requests.test"))
        with caplog.at_level(logging.DEBUG, logger="maskvault.requests.test"):
            with request_scope("identity_sign", "https://a.example"):
                logger.log_request({"challenge": b"\x01"})
                logger.log_result(True, 1.5)

        assert caplog.records[0].getMessage() == "Request: identity_sign from https://a.example"
        assert caplog.records[0].extra_data["arguments"] == {"challenge": "[REDACTED]"}
        assert caplog.records[1].getMessage() == "Result: identity_sign -> success (1.5ms)"
