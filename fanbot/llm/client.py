"""
HTTP client for the Ollama chat endpoint.

Issues the streaming ``POST /api/chat`` request and hands the response body to
the NDJSON token reader.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from typing import Any

import httpx

from fanbot.logging_utils import log_operation

from .exceptions import ChatHTTPError, LLMError, TransportFailure
from .models import ChatRequest, LLMMessage, MessageRole
from .streaming import NDJSONTokenReader, StreamOutcome, TokenSink

HTTP_NO_CONTENT = 204


class OllamaChatClient:
    """HTTP client for streamed Ollama chat completions."""

    def __init__(
        self,
        config: dict[str, Any],
        http_config: dict[str, Any] | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        chunk_size: int | None = None,
    ) -> None:
        required_keys = ["base_url", "model", "system_prompt"]
        for key in required_keys:
            if key not in config:
                raise ValueError(
                    f"Required LLM configuration parameter '{key}' not found. "
                    "All LLM parameters must be explicitly configured."
                )

        self.config: dict[str, Any] = config
        self.model: str = config["model"]
        self.chunk_size = chunk_size
        self.reader = NDJSONTokenReader()

        self._owns_client = client is None
        if client is None:
            http_config = http_config or {}
            timeout = httpx.Timeout(
                http_config.get("read_timeout", 60.0),
                connect=http_config.get("connect_timeout", 10.0),
                write=http_config.get("write_timeout", 10.0),
                pool=http_config.get("pool_timeout", 10.0),
            )
            client = httpx.AsyncClient(base_url=config["base_url"], timeout=timeout)
        self.client: httpx.AsyncClient = client

    def build_messages(self, prompt: str) -> list[LLMMessage]:
        """System prompt followed by the user's question."""
        return [
            LLMMessage(MessageRole.SYSTEM, self.config["system_prompt"]),
            LLMMessage(MessageRole.USER, prompt),
        ]

    @log_operation("ollama_stream_chat")
    async def stream_chat(
        self,
        messages: Iterable[LLMMessage],
        on_token: TokenSink,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> StreamOutcome:
        """
        Stream a chat completion word by word into ``on_token``.

        Raises:
            ChatHTTPError: The endpoint answered with a non-success status
            NoStreamBody: The response has no body
            TransportFailure: Connecting or reading failed
        """
        request = ChatRequest(model=self.model, messages=list(messages))

        try:
            async with self.client.stream(
                "POST", "/api/chat", json=request.to_payload()
            ) as response:
                if not response.is_success:
                    detail = (await response.aread()).decode("utf-8", "replace")
                    raise ChatHTTPError(
                        f"HTTP_{response.status_code} "
                        f"{detail.strip() or response.reason_phrase}",
                        model=self.model,
                        status_code=response.status_code,
                    )

                body = None
                if response.status_code != HTTP_NO_CONTENT:
                    body = response.aiter_bytes(self.chunk_size)

                return await self.reader.read(
                    body, on_token, cancel_event=cancel_event
                )

        except httpx.HTTPError as e:
            raise TransportFailure(
                f"HTTP error: {e!s}", cause=e, model=self.model
            ) from e
        except LLMError as e:
            e.model = self.model
            raise

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> OllamaChatClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
