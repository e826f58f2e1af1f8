"""
Terminal entry point for the FanBot assistant.
"""

from __future__ import annotations

import asyncio
import signal
import sys
from collections.abc import Callable
from typing import TextIO

from fanbot.assistant_service import AssistantMode, AssistantService, ChatMessage
from fanbot.config import Configuration
from fanbot.faq import FaqResponder
from fanbot.llm.client import OllamaChatClient
from fanbot.logging_utils import configure_logging, logger

QUIT_COMMAND = "/quit"
MODE_COMMANDS = {f"/{mode.value}": mode for mode in AssistantMode}


class TerminalRenderer:
    """Prints streamed answers as they grow, then the final message."""

    def __init__(self, out: TextIO = sys.stdout) -> None:
        self.out = out
        self._open_id: str | None = None
        self._shown = 0

    def on_update(self, message: ChatMessage) -> None:
        if self._open_id != message.id:
            self._open_id = message.id
            self._shown = 0
        self.out.write(message.content[self._shown:])
        self.out.flush()
        self._shown = len(message.content)

    def show(self, message: ChatMessage) -> None:
        if self._open_id == message.id:
            self.out.write(message.content[self._shown:] + "\n")
        else:
            if self._open_id is not None:
                self.out.write("\n")
            self.out.write(message.content + "\n")
        self.out.flush()
        self._open_id = None
        self._shown = 0


def create_assistant(
    config: Configuration,
    llm_client: OllamaChatClient,
    on_update: Callable[[ChatMessage], None] | None = None,
) -> AssistantService:
    """Create the assistant service from configuration."""
    assistant_config = config.get_assistant_config()
    faq = FaqResponder.from_file(assistant_config["faq_path"])

    logger.info(
        "Assistant configured",
        mode=assistant_config["default_mode"],
        model=llm_client.model,
        faq_entries=len(faq.entries),
    )
    return AssistantService(
        AssistantService.AssistantServiceConfig(
            llm_client=llm_client,
            faq=faq,
            assistant_config=assistant_config,
            streaming_config=config.get_streaming_config(),
            on_update=on_update,
        )
    )


async def answer(service: AssistantService, question: str) -> ChatMessage | None:
    """Answer one question; Ctrl-C stops a streaming answer."""
    handles_sigint = sys.platform != "win32"
    if handles_sigint:
        asyncio.get_running_loop().add_signal_handler(signal.SIGINT, service.stop)
    try:
        return await service.send(question)
    finally:
        if handles_sigint:
            asyncio.get_running_loop().remove_signal_handler(signal.SIGINT)


def chat_loop(
    runner: asyncio.Runner,
    service: AssistantService,
    renderer: TerminalRenderer,
    input_func: Callable[[str], str] = input,
) -> None:
    """Read questions until /quit, end of input or Ctrl-C at the prompt."""
    renderer.show(service.messages[0])
    while True:
        try:
            line = input_func("> ")
        except (EOFError, KeyboardInterrupt):
            break

        command = line.strip()
        if command == QUIT_COMMAND:
            break
        if command in MODE_COMMANDS:
            service.set_mode(MODE_COMMANDS[command])
            renderer.out.write(f"Mode: {service.mode.value}\n")
            continue

        reply = runner.run(answer(service, command))
        if reply is not None:
            renderer.show(reply)


def main() -> None:
    """Main entry point - interactive terminal chat."""
    config = Configuration()
    configure_logging(config.get_logging_config())

    renderer = TerminalRenderer()
    llm_client = OllamaChatClient(
        config.get_llm_config(),
        config.get_http_client_config(),
        chunk_size=config.get_streaming_config().get("chunk_size"),
    )

    with asyncio.Runner() as runner:
        try:
            service = create_assistant(config, llm_client, renderer.on_update)
            chat_loop(runner, service, renderer)
        finally:
            runner.run(llm_client.close())
            logger.info("FanBot shutdown complete")


if __name__ == "__main__":
    main()
