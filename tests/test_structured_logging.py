"""Tests for structured logging processors."""

import json
import logging

import structlog

from shared.observability import reset_request_id, set_request_id, setup_logging
from shared.observability.logging import (
    JSONRenderer, RequestIDProcessor, SecurityProcessor, request_id,
)


class TestSecurityProcessor:
    """Test cases for sensitive field redaction."""

    def test_redacts_default_fields(self):
        processor = SecurityProcessor()

        event = processor(None, "info", {"event": "login", "password": "x", "user": "bob"})

        assert event["password"] == "[REDACTED]"
        assert event["user"] == "bob"

    def test_redacts_nested_values(self):
        processor = SecurityProcessor(["authorization"])

        event = processor(
            None,
            "info",
            {
                "event": "forward",
                "headers": {"Authorization": "Bearer abc", "Accept": "*/*"},
                "items": [{"authorization": "x"}, "plain"],
            },
        )

        assert event["headers"] == {"Authorization": "[REDACTED]", "Accept": "*/*"}
        assert event["items"] == [{"authorization": "[REDACTED]"}, "plain"]

    def test_custom_fields_replace_defaults(self):
        processor = SecurityProcessor(["api_secret"])

        event = processor(None, "info", {"password": "kept", "api_secret": "gone"})

        assert event["password"] == "kept"
        assert event["api_secret"] == "[REDACTED]"


class TestRequestIDProcessor:
    """Test cases for request ID injection."""

    def test_added_when_set(self):
        token = set_request_id("req-1")
        try:
            event = RequestIDProcessor()(None, "info", {"event": "x"})
            assert event["request_id"] == "req-1"
            assert request_id.get() == "req-1"
        finally:
            reset_request_id(token)

        assert request_id.get() is None

    def test_absent_when_unset(self):
        event = RequestIDProcessor()(None, "info", {"event": "x"})
        assert "request_id" not in event


class TestJSONRenderer:
    """Test cases for the JSON renderer."""

    def test_renders_single_line(self):
        line = JSONRenderer()(None, "info", {"event": "started", "level": "info"})

        data = json.loads(line)
        assert data["event"] == "started"
        assert data["level"] == "INFO"
        assert "timestamp" in data
        assert "\n" not in line


class TestSetupLogging:
    """Test cases for logging setup."""

    def test_json_output(self, caplog):
        setup_logging("query-gateway", level="INFO", format_type="json")
        caplog.set_level(logging.INFO)

        structlog.get_logger().info("hello", token="secret-value", route="/api/info")

        data = json.loads(caplog.messages[-1])
        assert data["event"] == "hello"
        assert data["service"] == "query-gateway"
        assert data["route"] == "/api/info"
        assert data["token"] == "[REDACTED]"

    def test_level_filtering(self, caplog):
        setup_logging("query-gateway", level="WARNING", format_type="json")
        caplog.set_level(logging.INFO)

        structlog.get_logger().info("quiet")

        assert not any("quiet" in message for message in caplog.messages)

    def test_logger_levels_applied(self):
        setup_logging("query-gateway", logger_levels={"httpx": "ERROR"})

        assert logging.getLogger("httpx").level == logging.ERROR
