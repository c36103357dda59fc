"""Tests for the AI gateway client, using an httpx mock transport."""

from __future__ import annotations

import json

import httpx
import pytest

from prompt_craft.core.errors import ExternalServiceError
from prompt_craft.core.llm import LLMClient
from prompt_craft.core.models import ChatMessage, Personality
from prompt_craft.core.parser import PromptParser


def _client(handler, api_key: str = "test-key") -> LLMClient:
    return LLMClient(
        gateway_url="http://gateway.test",
        api_key=api_key,
        model="test-model",
        transport=httpx.MockTransport(handler),
    )


def _completion(content: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def _sse(*chunks: str) -> bytes:
    lines = [
        f"data: {json.dumps({'choices': [{'delta': {'content': c}}]})}\n\n" for c in chunks
    ]
    lines.append("data: [DONE]\n\n")
    return "".join(lines).encode()


class TestStreamChat:
    @pytest.mark.asyncio
    async def test_fragments_in_order(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            seen["auth"] = request.headers["Authorization"]
            return httpx.Response(200, content=_sse("Hel", "lo"))

        llm = _client(handler)
        history = [ChatMessage(role="user", text="hi"), ChatMessage(role="model", text="hey")]
        fragments = [f async for f in llm.stream_chat("Be kind.", history, "how are you?")]

        assert fragments == ["Hel", "lo"]
        assert seen["auth"] == "Bearer test-key"
        assert seen["body"]["stream"] is True
        assert seen["body"]["messages"] == [
            {"role": "system", "content": "Be kind."},
            {"role": "user", "content": "hi"},
            {"role": "assistant", "content": "hey"},
            {"role": "user", "content": "how are you?"},
        ]

    @pytest.mark.asyncio
    async def test_image_sent_as_content_part(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, content=_sse("A cat."))

        image = "data:image/png;base64,iVBORw=="
        history = [ChatMessage(role="user", text="", image=image)]
        llm = _client(handler)
        [f async for f in llm.stream_chat("s", history, "and this?", image=image)]

        messages = seen["body"]["messages"]
        assert messages[1]["content"] == [{"type": "image_url", "image_url": {"url": image}}]
        assert messages[2]["content"] == [
            {"type": "image_url", "image_url": {"url": image}},
            {"type": "text", "text": "and this?"},
        ]

    @pytest.mark.asyncio
    async def test_http_error(self):
        llm = _client(lambda request: httpx.Response(500, text="boom"))
        with pytest.raises(ExternalServiceError):
            [f async for f in llm.stream_chat("s", [], "m")]

    @pytest.mark.asyncio
    async def test_missing_key(self):
        llm = _client(lambda request: httpx.Response(200), api_key="")
        with pytest.raises(ExternalServiceError, match="API key is not configured"):
            [f async for f in llm.stream_chat("s", [], "m")]


class TestSuggest:
    @pytest.mark.asyncio
    async def test_returns_text(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=_completion("A better mission."))

        llm = _client(handler)
        assert await llm.suggest("mission", "help people") == "A better mission."
        assert "help people" in seen["body"]["messages"][0]["content"]
        assert seen["body"]["model"] == "test-model"

    @pytest.mark.asyncio
    async def test_gateway_error(self):
        llm = _client(lambda request: httpx.Response(503))
        with pytest.raises(ExternalServiceError, match="503"):
            await llm.suggest("mission", "")


class TestParseToConfig:
    @pytest.mark.asyncio
    async def test_parses_json(self):
        payload = {
            "persona": "You are Bob",
            "mission": "",
            "skills": ["x"],
            "boundaries": [],
            "personality": "Casual",
            "format": "",
            "reference": "",
        }
        llm = _client(lambda request: httpx.Response(200, json=_completion(json.dumps(payload))))
        config = await llm.parse_to_config("Identity: You are Bob")
        assert config.persona == "You are Bob"
        assert config.skills == ["x"]
        assert config.personality is Personality.CASUAL

    @pytest.mark.asyncio
    async def test_unknown_personality_coerced(self):
        payload = {"persona": "P", "personality": "casual"}
        llm = _client(lambda request: httpx.Response(200, json=_completion(json.dumps(payload))))
        config = await llm.parse_to_config("text")
        assert config.personality is Personality.PROFESSIONAL

    @pytest.mark.asyncio
    async def test_non_list_skills(self):
        payload = {"persona": "P", "skills": 5, "personality": "Casual"}
        llm = _client(lambda request: httpx.Response(200, json=_completion(json.dumps(payload))))
        with pytest.raises(ExternalServiceError, match="unusable config"):
            await llm.parse_to_config("Identity: P")

    @pytest.mark.asyncio
    async def test_non_list_skills_through_parser(self):
        payload = {"persona": "P", "skills": 5, "personality": "Casual"}
        llm = _client(lambda request: httpx.Response(200, json=_completion(json.dumps(payload))))
        with pytest.raises(ExternalServiceError, match="Failed to parse prompt with AI"):
            await PromptParser(llm).parse("Identity: P")

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        llm = _client(lambda request: httpx.Response(200, json=_completion("not json")))
        with pytest.raises(ExternalServiceError):
            await llm.parse_to_config("text")

    @pytest.mark.asyncio
    async def test_non_object_json(self):
        llm = _client(lambda request: httpx.Response(200, json=_completion("[1, 2]")))
        with pytest.raises(ExternalServiceError):
            await llm.parse_to_config("text")
