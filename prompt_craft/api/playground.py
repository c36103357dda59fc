"""Playground endpoints: assemble a config and stream test chats."""

from __future__ import annotations

import json
from collections.abc import AsyncIterator

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from prompt_craft.api.models import AssembleRequest, AssembleResponse, ChatRequest
from prompt_craft.core.assembler import assemble
from prompt_craft.core.chat import ChatDriver
from prompt_craft.core.llm import LLMClient, get_llm_client

router = APIRouter()


def get_chat_driver(llm: LLMClient = Depends(get_llm_client)) -> ChatDriver:
    return ChatDriver(llm)


@router.post("/assemble", response_model=AssembleResponse)
async def assemble_prompt(data: AssembleRequest) -> AssembleResponse:
    """Render a config as system prompt text without saving anything."""
    return AssembleResponse(system_prompt=assemble(data.config))


async def _sse(fragments: AsyncIterator[str]) -> AsyncIterator[str]:
    async for fragment in fragments:
        yield f"data: {json.dumps({'text': fragment})}\n\n"
    yield "data: [DONE]\n\n"


@router.post("/chat")
async def chat(
    data: ChatRequest,
    driver: ChatDriver = Depends(get_chat_driver),
) -> StreamingResponse:
    """Stream one chat turn as Server-Sent Events.

    Each event carries ``{"text": fragment}``; the stream ends with ``[DONE]``.
    Backend failures arrive as a single ``Error: ...`` fragment.
    """
    fragments = driver.send_turn(
        data.system_prompt, data.history, data.message, image=data.image
    )
    return StreamingResponse(
        _sse(fragments),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
    )
