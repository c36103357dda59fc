"""Playground chat: streamed turns against a system prompt under test."""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from typing import Protocol

import structlog

from prompt_craft.core.errors import ExternalServiceError, ValidationError
from prompt_craft.core.models import ChatMessage

logger = structlog.get_logger()


class ChatBackend(Protocol):
    def stream_chat(
        self,
        system_prompt: str,
        history: Sequence[ChatMessage],
        message: str,
        image: str | None = None,
    ) -> AsyncIterator[str]: ...


class ChatDriver:
    """Runs single chat turns and never lets a backend failure escape."""

    def __init__(self, backend: ChatBackend) -> None:
        self.backend = backend

    async def send_turn(
        self,
        system_prompt: str,
        history: Sequence[ChatMessage],
        user_message: str,
        image: str | None = None,
    ) -> AsyncIterator[str]:
        """Yield response fragments in arrival order.

        ``history`` holds prior turns only. On any failure one ``Error: ...``
        fragment is yielded and the stream ends. Each call is a fresh request.
        """
        try:
            async for fragment in self.backend.stream_chat(
                system_prompt, list(history), user_message, image=image
            ):
                yield fragment
        except ExternalServiceError as e:
            logger.warning("chat.stream_failed", error=e.message)
            yield f"Error: Could not get response from AI. Details: {e.message}"
        except Exception as e:
            logger.exception("chat.stream_crashed")
            yield f"Error: Could not get response from AI. Details: {e}"


class ChatSession:
    """A playground conversation with a session-local system prompt.

    Edits to ``system_prompt`` here are never saved back to the prompt.
    """

    def __init__(self, driver: ChatDriver, system_prompt: str) -> None:
        self.driver = driver
        self.system_prompt = system_prompt
        self.transcript: list[ChatMessage] = []

    async def send(self, text: str, image: str | None = None) -> AsyncIterator[str]:
        """Add the user turn, then grow a model turn fragment by fragment."""
        if not text.strip() and not image:
            raise ValidationError("Type a message or attach an image.")
        history = list(self.transcript)
        self.transcript.append(ChatMessage(role="user", text=text, image=image))
        reply = ChatMessage(role="model", text="")
        self.transcript.append(reply)
        async for fragment in self.driver.send_turn(
            self.system_prompt, history, text, image=image
        ):
            reply.text += fragment
            yield fragment

    @property
    def last_reply(self) -> str:
        if self.transcript and self.transcript[-1].role == "model":
            return self.transcript[-1].text
        return ""

    def reset(self) -> None:
        self.transcript = []
