"""
Assistant Service for FanBot.

This module handles the business logic of one chat session:
- FAQ answers from the static table
- Word-by-word Ollama answers with stop support and a deadline
- Turning stops and failures into transcript messages
"""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Callable
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from fanbot.faq import FaqResponder
from fanbot.llm.exceptions import LLMError, StreamTimeoutError
from fanbot.llm.streaming import StreamOutcome
from fanbot.logging_utils import ContextualLogger, operation_context


class AssistantMode(str, Enum):
    """Where answers come from."""
    FAQ = "faq"
    OLLAMA = "ollama"


class ChatMessage(BaseModel):
    """
    One entry of the visible conversation.
    Assistant messages are updated in place while an answer streams.
    """
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


class AssistantService:
    """
    Single-session conversation orchestrator
    1. Takes the user's question
    2. Answers from the FAQ table or streams an answer from Ollama
    3. Lets the user stop a streaming answer
    4. Reports failures as assistant messages
    """

    class AssistantServiceConfig(BaseModel):
        model_config = ConfigDict(arbitrary_types_allowed=True)

        llm_client: Any  # OllamaChatClient
        faq: FaqResponder
        assistant_config: dict[str, Any]
        streaming_config: dict[str, Any]
        on_update: Callable[[ChatMessage], None] | None = None

    def __init__(
        self,
        service_config: AssistantService.AssistantServiceConfig,
    ):
        self.llm_client = service_config.llm_client
        self.faq = service_config.faq
        self.on_update = service_config.on_update

        assistant_config = service_config.assistant_config
        self.mode = AssistantMode(assistant_config["default_mode"])
        self.stopped_message: str = assistant_config["stopped_message"]
        self.error_message: str = assistant_config["error_message"]
        self.response_timeout: float = service_config.streaming_config[
            "response_timeout"
        ]

        self._messages: list[ChatMessage] = [
            ChatMessage(role="assistant", content=self.faq.default_message)
        ]
        self._cancel_event: asyncio.Event | None = None
        self._log = ContextualLogger({"component": "assistant"})

    @property
    def messages(self) -> list[ChatMessage]:
        return list(self._messages)

    @property
    def is_busy(self) -> bool:
        """True while an Ollama answer is streaming."""
        return self._cancel_event is not None

    @property
    def model(self) -> str:
        return self.llm_client.model

    def set_mode(self, mode: AssistantMode | str) -> None:
        self.mode = AssistantMode(mode)
        self._log.info("Assistant mode changed", mode=self.mode.value)

    def stop(self) -> bool:
        """Request the streaming answer to stop; False when idle."""
        if self._cancel_event is None:
            return False
        self._cancel_event.set()
        return True

    async def send(self, text: str) -> ChatMessage | None:
        """
        Answer ``text`` and return the final assistant message.

        Returns None for blank input or while another answer is streaming.
        """
        prompt = text.strip()
        if not prompt or self.is_busy:
            return None

        self._append("user", prompt)

        if self.mode is AssistantMode.FAQ:
            return self._append("assistant", self.faq.respond(prompt))

        return await self._stream_answer(prompt)

    async def _stream_answer(self, prompt: str) -> ChatMessage:
        answer = self._append("assistant", "")
        cancel_event = asyncio.Event()
        self._cancel_event = cancel_event

        def on_token(token: str) -> None:
            answer.content += token
            if self.on_update is not None:
                self.on_update(answer)

        try:
            async with operation_context(
                "assistant_answer", log=self._log,
                context={"model": self.model, "answer_id": answer.id},
            ) as log:
                try:
                    async with asyncio.timeout(self.response_timeout):
                        outcome = await self.llm_client.stream_chat(
                            self.llm_client.build_messages(prompt),
                            on_token,
                            cancel_event=cancel_event,
                        )
                except TimeoutError as e:
                    raise StreamTimeoutError(
                        f"TIMEOUT_{int(self.response_timeout * 1000)}ms",
                        model=self.model,
                    ) from e
        except LLMError as e:
            self._discard_if_empty(answer)
            return self._append(
                "assistant",
                self.error_message.format(model=self.model, detail=str(e)),
            )
        finally:
            self._cancel_event = None

        if outcome is StreamOutcome.CANCELLED:
            log.info("Answer stopped by user", chars=len(answer.content))
            self._discard_if_empty(answer)
            return self._append("assistant", self.stopped_message)

        if not answer.content.strip():
            log.warning("Empty answer, using default message")
            answer.content = self.faq.default_message

        log.info("Answer completed", outcome=outcome.value, chars=len(answer.content))
        return answer

    def _append(self, role: Literal["user", "assistant"], content: str) -> ChatMessage:
        message = ChatMessage(role=role, content=content)
        self._messages.append(message)
        return message

    def _discard_if_empty(self, message: ChatMessage) -> None:
        if not message.content and message in self._messages:
            self._messages.remove(message)
