"""
Chat request dataclasses for the Ollama ``/api/chat`` endpoint.

This module provides:
- Message roles
- Message structures
- The streaming request payload
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class MessageRole(Enum):
    """Ollama chat message roles."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class LLMMessage:
    """A single role/content pair."""
    role: MessageRole
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}


@dataclass
class ChatRequest:
    """Complete chat request structure."""
    model: str
    messages: list[LLMMessage] = field(default_factory=list)
    stream: bool = True

    def to_payload(self) -> dict[str, Any]:
        """Build the JSON body posted to ``/api/chat``."""
        return {
            "model": self.model,
            "messages": [message.to_dict() for message in self.messages],
            "stream": self.stream,
        }
