"""
Unit tests for logger.py - formatters and keyword context.
"""

import json
import logging
import pytest

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from logger import AppLogger, ConsoleFormatter, StructuredFormatter, get_logger
from tests.report import report


class ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def captured():
    app_logger = get_logger("tests.captured")
    handler = ListHandler()
    app_logger.logger.addHandler(handler)
    app_logger.logger.setLevel(logging.DEBUG)
    yield app_logger, handler.records
    app_logger.logger.removeHandler(handler)


class TestAppLogger:
    """Test suite for AppLogger."""

    def setup_method(self):
        report.log_section("TESTING: logger.py - AppLogger")

    def test_get_logger_cached(self):
        report.log_test_start("logger.py", "get_logger", "cached")

        try:
            assert get_logger("tests.cached") is get_logger("tests.cached")
            assert isinstance(get_logger("tests.cached"), AppLogger)

            report.log_test_pass("logger.py", "get_logger", "cached", "One AppLogger per name")
        except Exception as e:
            report.log_test_fail("logger.py", "get_logger", "cached", str(e))
            raise

    def test_keyword_context_attached(self, captured):
        report.log_test_start("logger.py", "AppLogger.info", "keyword_context")

        try:
            app_logger, records = captured
            app_logger.info("Session created", session_id="abcd1234", live_sessions=3)

            record = records[-1]
            assert record.getMessage() == "Session created"
            assert record.extra_data == {"session_id": "abcd1234", "live_sessions": 3}

            report.log_test_pass("logger.py", "AppLogger.info", "keyword_context", "Context stored on record")
        except Exception as e:
            report.log_test_fail("logger.py", "AppLogger.info", "keyword_context", str(e))
            raise

    def test_session_event_truncates_id(self, captured):
        report.log_test_start("logger.py", "AppLogger.session_event", "truncated_id")

        try:
            app_logger, records = captured
            app_logger.session_event("expired", "0123456789abcdef")

            record = records[-1]
            assert record.getMessage() == "Session expired"
            assert record.extra_data["session_id"] == "01234567"

            report.log_test_pass("logger.py", "AppLogger.session_event", "truncated_id", "Ids shortened in logs")
        except Exception as e:
            report.log_test_fail("logger.py", "AppLogger.session_event", "truncated_id", str(e))
            raise

    def test_jira_call_levels(self, captured):
        report.log_test_start("logger.py", "AppLogger.jira_call", "levels")

        try:
            app_logger, records = captured
            app_logger.jira_call("/rest/api/2/search", 200, 12.345)
            app_logger.jira_call("/rest/api/2/search", 401, 3.0)
            app_logger.jira_call("/rest/api/2/search", None, 3.0)

            assert [r.levelno for r in records[-3:]] == [logging.INFO, logging.WARNING, logging.WARNING]
            assert records[-3].extra_data["duration_ms"] == 12.35

            report.log_test_pass("logger.py", "AppLogger.jira_call", "levels", "Failures logged as warnings")
        except Exception as e:
            report.log_test_fail("logger.py", "AppLogger.jira_call", "levels", str(e))
            raise


class TestFormatters:
    """Test suite for the console and JSON formatters."""

    def setup_method(self):
        report.log_section("TESTING: logger.py - formatters")

    def _record(self):
        record = logging.LogRecord("proxy", logging.INFO, "", 0, "hello", (), None)
        record.extra_data = {"status": 200}
        return record

    def test_structured_formatter(self):
        report.log_test_start("logger.py", "StructuredFormatter", "json")

        try:
            data = json.loads(StructuredFormatter().format(self._record()))

            assert data["message"] == "hello"
            assert data["level"] == "INFO"
            assert data["data"] == {"status": 200}
            assert data["timestamp"].endswith("Z")

            report.log_test_pass("logger.py", "StructuredFormatter", "json", "One JSON object per record")
        except Exception as e:
            report.log_test_fail("logger.py", "StructuredFormatter", "json", str(e))
            raise

    def test_console_formatter(self):
        report.log_test_start("logger.py", "ConsoleFormatter", "text")

        try:
            line = ConsoleFormatter().format(self._record())

            assert "proxy: hello" in line
            assert "status=200" in line

            report.log_test_pass("logger.py", "ConsoleFormatter", "text", "Context appended")
        except Exception as e:
            report.log_test_fail("logger.py", "ConsoleFormatter", "text", str(e))
            raise
