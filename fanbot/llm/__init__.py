"""
Ollama chat integration for FanBot.

This package provides:
- Chat request dataclasses
- Word-by-word NDJSON stream reading with cancellation
- The error taxonomy surfaced to the assistant

The HTTP client lives in ``fanbot.llm.client``.
"""

from __future__ import annotations

from .exceptions import (
    ChatHTTPError,
    LLMError,
    NoStreamBody,
    StreamTimeoutError,
    TransportFailure,
)
from .models import ChatRequest, LLMMessage, MessageRole
from .streaming import NDJSONTokenReader, StreamOutcome, read_token_stream

__all__ = [
    "ChatHTTPError",
    "ChatRequest",
    # Exceptions
    "LLMError",
    # Core models
    "LLMMessage",
    "MessageRole",
    # Streaming
    "NDJSONTokenReader",
    "NoStreamBody",
    "StreamOutcome",
    "StreamTimeoutError",
    "TransportFailure",
    "read_token_stream",
]
