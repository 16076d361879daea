"""Tests for the logging formatters and context adapter."""

import json
import logging
import sys

from app.core.logging import (
    DevelopmentFormatter,
    JSONFormatter,
    get_context_logger,
    request_id_var,
)


def make_record(msg: str = "Import finished", **extra) -> logging.LogRecord:
    record = logging.LogRecord("app.services.import_service", logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    def test_includes_request_id_and_extra_fields(self):
        token = request_id_var.set("req-123")
        try:
            output = JSONFormatter().format(make_record(extra_fields={"user_id": 7}))
        finally:
            request_id_var.reset(token)

        data = json.loads(output)
        assert data["message"] == "Import finished"
        assert data["level"] == "INFO"
        assert data["request_id"] == "req-123"
        assert data["user_id"] == 7

    def test_no_request_id_outside_requests(self):
        data = json.loads(JSONFormatter().format(make_record()))
        assert "request_id" not in data


class TestDevelopmentFormatter:
    def test_appends_traceback(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = make_record(msg="failed")
            record.exc_info = sys.exc_info()

        output = DevelopmentFormatter().format(record)

        assert "failed" in output
        assert "ValueError: boom" in output


class TestContextLogger:
    def test_call_fields_merge_over_context(self):
        adapter = get_context_logger("app.test", user_id=1, import_id="a")

        _, kwargs = adapter.process(
            "progress", {"extra": {"extra_fields": {"import_id": "b", "row": 3}}}
        )

        assert kwargs["extra"]["extra_fields"] == {"user_id": 1, "import_id": "b", "row": 3}
