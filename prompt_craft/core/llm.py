"""AI capability: chat streaming, suggestions, and prompt extraction.

Talks to an OpenAI-compatible chat-completions gateway. Every failure,
including a missing credential, raises ExternalServiceError.
"""

from __future__ import annotations

import json
from collections.abc import AsyncIterator, Sequence
from functools import lru_cache
from typing import Any

import httpx
import pydantic
import structlog

from prompt_craft.config import get_settings
from prompt_craft.core.errors import ExternalServiceError
from prompt_craft.core.instructions import (
    PARSE_INSTRUCTION,
    PROMPT_CONFIG_SCHEMA,
    SUGGEST_INSTRUCTION,
)
from prompt_craft.core.models import CONFIG_FIELDS, ChatMessage, PromptConfig, coerce_personality

logger = structlog.get_logger()

COMPLETIONS_PATH = "/v1/chat/completions"
ROLE_MAP = {"user": "user", "model": "assistant"}


def _delta_text(chunk: dict[str, Any]) -> str:
    choices = chunk.get("choices") or []
    if not choices:
        return ""
    delta = choices[0].get("delta") or {}
    return delta.get("content") or ""


def _content(text: str, image: str | None) -> str | list[dict[str, Any]]:
    """Plain text, or image-then-text parts when an image is attached."""
    if not image:
        return text
    parts: list[dict[str, Any]] = [{"type": "image_url", "image_url": {"url": image}}]
    if text:
        parts.append({"type": "text", "text": text})
    return parts


def _message_text(data: dict[str, Any]) -> str:
    try:
        return data["choices"][0]["message"]["content"] or ""
    except (KeyError, IndexError, TypeError) as e:
        raise ExternalServiceError("The AI backend returned an unexpected response.") from e


class LLMClient:
    """Async client for the generative-AI gateway."""

    def __init__(
        self,
        gateway_url: str,
        api_key: str,
        model: str,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.gateway_url = gateway_url.rstrip("/")
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self._transport = transport

    def _require_key(self) -> None:
        if not self.api_key:
            raise ExternalServiceError("API key is not configured.")

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.gateway_url,
            headers={"Authorization": f"Bearer {self.api_key}"},
            timeout=self.timeout,
            transport=self._transport,
        )

    async def _complete(self, payload: dict[str, Any]) -> str:
        self._require_key()
        try:
            async with self._client() as client:
                resp = await client.post(COMPLETIONS_PATH, json={"model": self.model, **payload})
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as e:
            logger.warning("llm.call_failed", status=e.response.status_code)
            raise ExternalServiceError(
                f"The AI backend returned an error ({e.response.status_code})."
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("llm.call_failed", error=str(e))
            raise ExternalServiceError(f"Could not reach the AI backend: {e}") from e
        return _message_text(data)

    async def stream_chat(
        self,
        system_prompt: str,
        history: Sequence[ChatMessage],
        message: str,
        image: str | None = None,
    ) -> AsyncIterator[str]:
        """Yield response fragments for one chat turn, in arrival order.

        ``image`` is a base64 data URL sent ahead of the message text.
        """
        self._require_key()
        messages = [{"role": "system", "content": system_prompt}]
        messages += [
            {"role": ROLE_MAP[m.role], "content": _content(m.text, m.image)} for m in history
        ]
        messages.append({"role": "user", "content": _content(message, image)})
        payload = {"model": self.model, "messages": messages, "stream": True}

        try:
            async with self._client() as client:
                async with client.stream("POST", COMPLETIONS_PATH, json=payload) as resp:
                    if resp.status_code >= 400:
                        body = (await resp.aread()).decode("utf-8", errors="replace")
                        raise ExternalServiceError(
                            f"The AI backend returned an error ({resp.status_code}): {body[:200]}"
                        )
                    async for line in resp.aiter_lines():
                        line = line.strip()
                        if not line.startswith("data:"):
                            continue
                        data = line[5:].strip()
                        if data == "[DONE]":
                            break
                        try:
                            chunk = json.loads(data)
                        except json.JSONDecodeError:
                            logger.warning("llm.bad_chunk", chunk=data[:100])
                            continue
                        text = _delta_text(chunk)
                        if text:
                            yield text
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"Could not reach the AI backend: {e}") from e

    async def suggest(self, field: str, current_value: str) -> str:
        """One-shot improvement suggestion for a single config field."""
        instruction = SUGGEST_INSTRUCTION.format(field=field, current=current_value or "(empty)")
        return await self._complete({"messages": [{"role": "user", "content": instruction}]})

    async def parse_to_config(self, text: str) -> PromptConfig:
        """Extract a structured config from free text.

        The returned personality is always one of the four allowed values.
        """
        content = await self._complete(
            {
                "messages": [
                    {"role": "user", "content": PARSE_INSTRUCTION.format(text=text)}
                ],
                "response_format": {
                    "type": "json_schema",
                    "json_schema": {"name": "prompt_config", "schema": PROMPT_CONFIG_SCHEMA},
                },
            }
        )
        try:
            raw = json.loads(content)
        except json.JSONDecodeError as e:
            raise ExternalServiceError("The AI backend did not return valid JSON.") from e
        if not isinstance(raw, dict):
            raise ExternalServiceError("The AI backend did not return a JSON object.")

        fields = {k: raw.get(k) for k in CONFIG_FIELDS}
        fields["personality"] = coerce_personality(raw.get("personality"))
        try:
            return PromptConfig(**fields)
        except pydantic.ValidationError as e:
            raise ExternalServiceError(f"The AI backend returned an unusable config: {e}") from e


@lru_cache
def get_llm_client() -> LLMClient:
    """Get cached AI client built from settings."""
    settings = get_settings()
    return LLMClient(
        gateway_url=settings.llm_gateway,
        api_key=settings.llm_api_key,
        model=settings.llm_model,
        timeout=settings.llm_timeout,
    )
