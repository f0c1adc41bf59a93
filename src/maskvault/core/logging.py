# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Logging for maskvault hosts.

Every record logged while a request is handled carries that request's id,
method and calling origin. :func:`request_scope` publishes them in a context
variable; the formatters here read them back, so module code keeps logging
through plain ``logging.getLogger(__name__)``.

Provides:
- ``TextFormatter`` for terminals, ``JSONFormatter`` for files and collectors
- ``configure_logging()`` driven by the ``MASKVAULT_LOG_*`` settings
- ``RequestLogger``, which records each request with key material redacted
"""

from __future__ import annotations

import json
import logging
import sys
import uuid
from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any


@dataclass(frozen=True)
class RequestScope:
    """The request whose handling is in progress."""

    request_id: str
    method: str
    origin: str

    def to_dict(self) -> dict[str, str]:
        return {"id": self.request_id, "method": self.method, "origin": self.origin}


_current_request: ContextVar[RequestScope | None] = ContextVar("maskvault_request", default=None)


def current_request() -> RequestScope | None:
    return _current_request.get()


@contextmanager
def request_scope(method: str, origin: str) -> Generator[RequestScope, None, None]:
    """Tag every record logged inside the block with ``method`` and ``origin``."""
    scope = RequestScope(request_id=uuid.uuid4().hex[:12], method=method, origin=origin)
    token = _current_request.set(scope)
    try:
        yield scope
    finally:
        _current_request.reset(token)


def _scope_of(record: logging.LogRecord) -> RequestScope | None:
    return getattr(record, "request", None) or _current_request.get()


class RequestScopeFilter(logging.Filter):
    """Stamps the current request onto records at emit time.

    Handlers that format later (queues, buffers) still see the request the
    record was logged under.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request", None) is None:
            record.request = _current_request.get()
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        scope = _scope_of(record)
        if scope is not None:
            entry["request"] = scope.to_dict()
        extra = getattr(record, "extra_data", None)
        if extra:
            entry["extra"] = extra
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """``time level logger [method origin] message``"""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)-7s %(name)s %(request_tag)s%(message)s",
            datefmt="%H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        scope = _scope_of(record)
        record.request_tag = f"[{scope.method} {scope.origin}] " if scope else ""
        return super().format(record)


def configure_logging(
    level: str | int | None = None,
    json_format: bool | None = None,
    log_file: str | None = None,
) -> None:
    """Install maskvault's handlers on the root logger.

    Args:
        level: Log level; defaults to ``MASKVAULT_LOG_LEVEL``.
        json_format: JSON on stderr instead of text; defaults to
            ``MASKVAULT_LOG_FORMAT == "json"``.
        log_file: Extra JSON log file; defaults to ``MASKVAULT_LOG_FILE``.
    """
    from .config import get_config

    config = get_config()

    level = level or config.log_level
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    if json_format is None:
        json_format = config.log_format.lower() == "json"
    log_file = log_file or config.log_file

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(JSONFormatter() if json_format else TextFormatter())
    console_handler.addFilter(RequestScopeFilter())
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(JSONFormatter())
        file_handler.addFilter(RequestScopeFilter())
        root_logger.addHandler(file_handler)


class RequestLogger:
    """Logs inbound requests and their outcome.

    Method and origin come from the enclosing :func:`request_scope`; salts,
    challenges and anything key-like are redacted from the arguments.
    """

    SENSITIVE_PARAMS = {
        "salt",
        "challenge",
        "seed",
        "secret",
        "key",
    }

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger("maskvault.requests")

    def log_request(self, arguments: dict[str, Any], level: int = logging.DEBUG) -> None:
        scope = current_request()
        label = f"{scope.method} from {scope.origin}" if scope else "request"
        self.logger.log(
            level,
            f"Request: {label}",
            extra={"extra_data": {"arguments": self._sanitize(arguments)}},
        )

    def log_result(self, success: bool, duration_ms: float | None = None, level: int = logging.DEBUG) -> None:
        scope = current_request()
        msg = f"Result: {scope.method if scope else 'request'} -> {'success' if success else 'failure'}"
        if duration_ms is not None:
            msg += f" ({duration_ms:.1f}ms)"
        self.logger.log(
            level,
            msg,
            extra={"extra_data": {"success": success, "duration_ms": duration_ms}},
        )

    def _sanitize(self, data: Any) -> Any:
        """Recursively redact sensitive fields and shorten bulky values."""
        if isinstance(data, dict):
            return {
                key: "[REDACTED]" if any(s in key.lower() for s in self.SENSITIVE_PARAMS) else self._sanitize(value)
                for key, value in data.items()
            }
        if isinstance(data, list):
            return [self._sanitize(item) for item in data]
        if isinstance(data, bytes):
            return f"<{len(data)} bytes>"
        if isinstance(data, str) and len(data) > 500:
            return data[:500] + "..."
        return data


request_logger = RequestLogger()
