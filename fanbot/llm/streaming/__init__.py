"""
Streaming support for the Ollama chat client.

This package contains:
- NDJSON line framing and record parsing
- Word-by-word token emission
- Cooperative cancellation
"""

from __future__ import annotations

from .models import StreamOutcome, StreamRecord, StreamState, StreamingStats
from .parser import NDJSONTokenReader, TokenSink, read_token_stream

__all__ = [
    "NDJSONTokenReader",
    "StreamOutcome",
    "StreamRecord",
    "StreamState",
    "StreamingStats",
    "TokenSink",
    "read_token_stream",
]
