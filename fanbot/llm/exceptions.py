"""
Error handling for LLM chat streaming.

This module provides the error taxonomy surfaced to callers:
- HTTP status failures with the response detail
- Missing response bodies
- Transport failures wrapping the underlying cause
- Overall answer deadlines

Malformed stream records are never raised; the reader skips them.
Cancellation is reported as ``StreamOutcome.CANCELLED``, not raised.
"""

from __future__ import annotations


class LLMError(Exception):
    """Base LLM error with rich context."""

    def __init__(
        self,
        message: str,
        provider: str = "ollama",
        model: str = "unknown",
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.model = model
        self.status_code = status_code


class ChatHTTPError(LLMError):
    """The chat endpoint answered with a non-success status."""


class NoStreamBody(LLMError):
    """The response carries no body to stream from."""


class TransportFailure(LLMError):
    """Reading from the transport failed for a reason other than cancellation."""

    def __init__(self, message: str, cause: BaseException | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.cause = cause


class StreamTimeoutError(LLMError):
    """The full answer did not arrive within the configured deadline."""
