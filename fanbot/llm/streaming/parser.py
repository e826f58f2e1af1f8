"""
NDJSON token reader for Ollama chat streams.

Turns the raw byte stream of ``/api/chat`` into word-granularity text
fragments delivered to a synchronous sink:
- Incremental, stateful decoding (multi-byte characters may straddle chunks)
- Newline framing with a single retained partial line
- Silent recovery from malformed lines
- Cooperative cancellation at the single suspension point
"""

from __future__ import annotations

import asyncio
import codecs
import json
from collections.abc import AsyncIterable, AsyncIterator, Callable, Iterable

import structlog

from ..exceptions import NoStreamBody, TransportFailure
from .models import StreamOutcome, StreamRecord, StreamState, StreamingStats

logger = structlog.get_logger(__name__)

TokenSink = Callable[[str], None]

# Returned by _next_chunk in place of bytes
_END = object()
_CANCELLED = object()


class NDJSONTokenReader:
    """Word-by-word reader for newline-delimited JSON chat completions.

    Buffers are per call to ``read``; only ``stats`` outlives a call.
    """

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding
        self.stats = StreamingStats()

    async def read(
        self,
        body: AsyncIterable[bytes] | None,
        on_token: TokenSink,
        *,
        cancel_event: asyncio.Event | None = None,
        decoder: codecs.IncrementalDecoder | None = None,
    ) -> StreamOutcome:
        """
        Consume ``body`` until completion, end of stream or cancellation.

        Args:
            body: Raw response chunks; ``None`` when the response has no body
            on_token: Called once per emitted fragment, in order
            cancel_event: Set by the caller to abandon the read
            decoder: Stateful decoder; a fresh UTF-8 one by default

        Returns:
            How the stream terminated

        Raises:
            NoStreamBody: ``body`` is None; nothing is read or emitted
            TransportFailure: Reading a chunk failed
        """
        if body is None:
            raise NoStreamBody("Response has no body to stream")

        if decoder is None:
            decoder = codecs.getincrementaldecoder(self.encoding)(errors="replace")

        state = StreamState()
        chunks = aiter(body)

        try:
            while True:
                if cancel_event is not None and cancel_event.is_set():
                    return self._finish(StreamOutcome.CANCELLED, state)

                try:
                    chunk = await _next_chunk(chunks, cancel_event)
                except Exception as e:
                    raise TransportFailure(f"Stream read failed: {e}", cause=e) from e

                if chunk is _CANCELLED:
                    return self._finish(StreamOutcome.CANCELLED, state)
                if chunk is _END:
                    break

                lines = state.take_lines(decoder.decode(chunk))
                if self._process_lines(state, lines, on_token):
                    return self._finish(StreamOutcome.COMPLETED, state)

            # A trailing line without newline is never a record
            lines = state.take_lines(decoder.decode(b"", final=True))
            if state.line_buffer:
                logger.debug(
                    "Dropping unterminated line", chars=len(state.line_buffer)
                )
            state.line_buffer = ""
            if self._process_lines(state, lines, on_token):
                return self._finish(StreamOutcome.COMPLETED, state)

            self._emit([state.flush()], on_token)
            return self._finish(StreamOutcome.ENDED, state)

        finally:
            aclose = getattr(chunks, "aclose", None)
            if aclose is not None:
                await aclose()

    def _process_lines(
        self, state: StreamState, lines: Iterable[str], on_token: TokenSink
    ) -> bool:
        """Parse complete lines; return True once a completion flag is seen."""
        for line in lines:
            trimmed = line.strip()
            if not trimmed:
                continue

            try:
                obj = json.loads(trimmed)
            except json.JSONDecodeError:
                self.stats.malformed_lines += 1
                logger.debug("Skipping malformed stream line", line=trimmed[:120])
                continue

            record = StreamRecord.from_json(obj)
            self.stats.records += 1

            if record.content:
                state.pending += record.content
                self._emit(state.take_words(), on_token)

            if record.done:
                self._emit([state.flush()], on_token)
                return True

        return False

    def _emit(self, pieces: Iterable[str], on_token: TokenSink) -> None:
        for piece in pieces:
            if piece:
                on_token(piece)
                self.stats.tokens += 1

    def _finish(self, outcome: StreamOutcome, state: StreamState) -> StreamOutcome:
        if outcome is StreamOutcome.CANCELLED and state.pending:
            logger.debug("Discarding pending text", pending_chars=len(state.pending))
        state.pending = ""
        state.line_buffer = ""
        self.stats.record_outcome(outcome)
        logger.debug("Token stream finished", outcome=outcome.value)
        return outcome

    def get_stats(self) -> dict:
        """Get streaming statistics for monitoring."""
        return self.stats.as_dict()

    def reset_stats(self) -> None:
        """Reset statistics counters."""
        self.stats = StreamingStats()


async def _read_one(chunks: AsyncIterator[bytes]) -> object:
    try:
        return await anext(chunks)
    except StopAsyncIteration:
        return _END


async def _next_chunk(
    chunks: AsyncIterator[bytes], cancel_event: asyncio.Event | None
) -> object:
    """Await the next chunk, racing it against ``cancel_event``."""
    if cancel_event is None:
        return await _read_one(chunks)

    read = asyncio.ensure_future(_read_one(chunks))
    cancelled = asyncio.ensure_future(cancel_event.wait())
    try:
        await asyncio.wait({read, cancelled}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        cancelled.cancel()
        if not read.done():
            read.cancel()
        await asyncio.gather(read, cancelled, return_exceptions=True)

    if cancel_event.is_set():
        return _CANCELLED
    return read.result()


async def read_token_stream(
    body: AsyncIterable[bytes] | None,
    on_token: TokenSink,
    *,
    cancel_event: asyncio.Event | None = None,
    decoder: codecs.IncrementalDecoder | None = None,
) -> StreamOutcome:
    """Read one NDJSON chat stream with a throwaway reader."""
    return await NDJSONTokenReader().read(
        body, on_token, cancel_event=cancel_event, decoder=decoder
    )
