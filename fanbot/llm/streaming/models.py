"""
Streaming-specific dataclasses for the NDJSON token reader.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Splits on whitespace runs while keeping them as separate pieces
WORD_BOUNDARY = re.compile(r"(\s+)")


class StreamOutcome(Enum):
    """How a token stream terminated."""
    COMPLETED = "completed"  # completion flag observed
    ENDED = "ended"  # transport ran out of bytes first
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class StreamRecord:
    """One decoded NDJSON line."""
    content: str
    done: bool

    @classmethod
    def from_json(cls, obj: Any) -> StreamRecord:
        """Read ``message.content`` and ``done``; any other shape is tolerated."""
        if not isinstance(obj, dict):
            return cls(content="", done=False)

        message = obj.get("message")
        content = message.get("content") if isinstance(message, dict) else None
        if not content:
            content = ""
        elif not isinstance(content, str):
            content = str(content)

        return cls(content=content, done=bool(obj.get("done")))


@dataclass
class StreamState:
    """Per-invocation buffers; created fresh for every read."""
    line_buffer: str = ""
    pending: str = ""

    def take_lines(self, text: str) -> list[str]:
        """Append decoded text and return every complete line.

        The trailing piece without a newline stays in ``line_buffer``.
        """
        self.line_buffer += text
        *lines, self.line_buffer = self.line_buffer.split("\n")
        return lines

    def take_words(self) -> list[str]:
        """Split pending text and return every piece but the last."""
        parts = WORD_BOUNDARY.split(self.pending)
        self.pending = parts.pop()
        return [part for part in parts if part]

    def flush(self) -> str:
        """Return and clear all pending text."""
        remainder, self.pending = self.pending, ""
        return remainder


@dataclass
class StreamingStats:
    """Counters for one reader, accumulated across invocations."""
    streams: int = 0
    records: int = 0
    malformed_lines: int = 0
    tokens: int = 0
    outcomes: dict[str, int] = field(default_factory=dict)

    def record_outcome(self, outcome: StreamOutcome) -> None:
        self.streams += 1
        self.outcomes[outcome.value] = self.outcomes.get(outcome.value, 0) + 1

    def as_dict(self) -> dict[str, Any]:
        return {
            "streams": self.streams,
            "records": self.records,
            "malformed_lines": self.malformed_lines,
            "tokens": self.tokens,
            "outcomes": dict(self.outcomes),
        }
