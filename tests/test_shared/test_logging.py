"""Tests for structured JSON logging."""
from __future__ import annotations

import json
import logging

from src.shared.constants import INSIGHTS_SERVICE_NAME
from src.shared.logging import JSONFormatter, setup_logging, trace_context, trace_id_var


def _record(message: str = "hello", exc_info=None) -> logging.LogRecord:
    return logging.LogRecord(
        name="src.graph_insights.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=exc_info,
    )


class TestJSONFormatter:
    def test_fields(self):
        entry = json.loads(JSONFormatter(service_name="graph-insights").format(_record()))

        assert entry["level"] == "INFO"
        assert entry["service_name"] == "graph-insights"
        assert entry["logger"] == "src.graph_insights.test"
        assert entry["message"] == "hello"
        assert entry["trace_id"] == ""
        assert "exception" not in entry

    def test_exception_included(self):
        try:
            raise ValueError("boom")
        except ValueError as exc:
            record = _record(exc_info=(type(exc), exc, exc.__traceback__))
        entry = json.loads(JSONFormatter().format(record))
        assert entry["exception"] == "boom"

    def test_trace_id_included(self):
        with trace_context("abc-123"):
            entry = json.loads(JSONFormatter().format(_record()))
        assert entry["trace_id"] == "abc-123"


class TestTraceContext:
    def test_generates_and_restores(self):
        assert trace_id_var.get() == ""
        with trace_context() as trace_id:
            assert trace_id
            assert trace_id_var.get() == trace_id
        assert trace_id_var.get() == ""

    def test_nested(self):
        with trace_context("outer"):
            with trace_context("inner"):
                assert trace_id_var.get() == "inner"
            assert trace_id_var.get() == "outer"


class TestSetupLogging:
    def test_configures_single_json_handler(self):
        logger = setup_logging("graph-insights-test", level="debug")
        setup_logging("graph-insights-test", level="debug")

        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, JSONFormatter)

    def test_unknown_level_falls_back_to_info(self):
        logger = setup_logging("graph-insights-test-2", level="loud")
        assert logger.level == logging.INFO

    def test_defaults_to_insights_service_name(self):
        logger = setup_logging(logger_name="graph-insights-test-3")
        formatter = logger.handlers[0].formatter

        assert logger.name == "graph-insights-test-3"
        assert formatter.service_name == INSIGHTS_SERVICE_NAME
        assert JSONFormatter().service_name == INSIGHTS_SERVICE_NAME

    def test_package_logger_covers_module_loggers(self):
        parent = setup_logging("graph-insights", logger_name="graph_insights_pkg")
        child = logging.getLogger("graph_insights_pkg.services.density")

        assert child.getEffectiveLevel() == logging.INFO
        assert child.parent is parent
