"""
Tests for the logging and error classification utilities.
"""

from __future__ import annotations

import logging

import httpx
import pytest

from fanbot.llm.exceptions import (
    ChatHTTPError,
    LLMError,
    NoStreamBody,
    StreamTimeoutError,
    TransportFailure,
)
from fanbot.logging_utils import (
    ContextualLogger,
    ErrorClassifier,
    configure_logging,
    log_operation,
    operation_context,
)


class TestErrorClassifier:
    """Test error categories."""

    @pytest.mark.parametrize(
        ("error", "category"),
        [
            (NoStreamBody("no body"), "no_stream_body"),
            (ChatHTTPError("HTTP_500", status_code=500), "http_status_error"),
            (StreamTimeoutError("TIMEOUT_1ms"), "timeout_error"),
            (TimeoutError("slow"), "timeout_error"),
            (TransportFailure("reset"), "transport_error"),
            (httpx.ConnectError("refused"), "transport_error"),
            (ConnectionError("refused"), "transport_error"),
            (LLMError("other"), "llm_error"),
            (ValueError("bad"), "parameter_error"),
            (RuntimeError("?"), "unknown_error"),
        ],
    )
    def test_classify_error(self, error, category):
        assert ErrorClassifier.classify_error(error) == category


class TestDecorators:
    """Test logging decorators and context managers."""

    @pytest.mark.asyncio
    async def test_log_operation_success(self):

        @log_operation("test_operation", log_timing=True, log_result=True)
        async def successful_function():
            return "success"

        assert await successful_function() == "success"
        assert successful_function.__name__ == "successful_function"

    @pytest.mark.asyncio
    async def test_log_operation_with_error(self):

        @log_operation("test_operation", log_args=True)
        async def failing_function(value):
            raise ValueError(f"Test error {value}")

        with pytest.raises(ValueError, match="Test error 3"):
            await failing_function(3)

    @pytest.mark.asyncio
    async def test_operation_context_yields_bound_logger(self):
        base = ContextualLogger({"component": "assistant"})

        async with operation_context("test_operation", log=base, context={"k": "v"}) as log:
            log.info("inside")

        assert log.base_context == {
            "component": "assistant", "operation": "test_operation", "k": "v"
        }

    @pytest.mark.asyncio
    async def test_operation_context_logs_category_and_reraises(self):
        recorded: list[tuple[str, dict]] = []

        class RecordingLogger(ContextualLogger):
            def bind(self, **context):
                return RecordingLogger({**self.base_context, **context})

            def error(self, message, **context):
                recorded.append((message, {**self.base_context, **context}))

        with pytest.raises(NoStreamBody, match="no body"):
            async with operation_context("test_operation", log=RecordingLogger()):
                raise NoStreamBody("no body")

        [(message, context)] = recorded
        assert message == "Operation failed"
        assert context["operation"] == "test_operation"
        assert context["error_category"] == "no_stream_body"
        assert context["error_type"] == "NoStreamBody"


class TestContextualLogger:
    """Test context binding."""

    def test_bind_merges_context(self):
        base = ContextualLogger({"component": "assistant"})
        bound = base.bind(model="m")

        assert bound.base_context == {"component": "assistant", "model": "m"}
        assert base.base_context == {"component": "assistant"}
        bound.info("message", extra="x")


class TestConfigureLogging:
    """Test stdlib level configuration."""

    def test_sets_root_level(self):
        configure_logging({"level": "debug"})
        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.WARNING

        configure_logging({"level": "INFO", "log_http_requests": True})
        assert logging.getLogger().level == logging.INFO

    def test_unknown_level_rejected(self):
        with pytest.raises(ValueError, match="Unknown logging level"):
            configure_logging({"level": "chatty"})
