"""Tests for the service log format."""

from __future__ import annotations

import logging
import re

from logging_config import HealthCheckFilter, ISO8601Formatter


def record(msg: str, level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord(name="test", level=level, pathname="", lineno=0, msg=msg, args=(), exc_info=None)


class TestISO8601Formatter:
    def test_format(self):
        output = ISO8601Formatter(source="reservation").format(record("reservation 3 approved"))

        pattern = r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z \[reservation\] INFO reservation 3 approved$"
        assert re.match(pattern, output), output


class TestHealthCheckFilter:
    def test_drops_health_access_log(self):
        assert not HealthCheckFilter().filter(record('127.0.0.1 - "GET /health HTTP/1.1" 200'))

    def test_keeps_other_requests(self):
        assert HealthCheckFilter().filter(record('127.0.0.1 - "GET /reserve?date=2024-01-01 HTTP/1.1" 200'))

    def test_keeps_health_at_debug(self):
        assert HealthCheckFilter().filter(record('"GET /health HTTP/1.1" 200', level=logging.DEBUG))
