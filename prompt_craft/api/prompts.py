"""Prompt endpoints: CRUD plus guided/direct editing."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from prompt_craft.api.context import get_session_context
from prompt_craft.api.libraries import get_library_manager
from prompt_craft.api.models import (
    ConfigUpdate,
    ParseRequest,
    PromptCreate,
    PromptResponse,
    SuggestRequest,
    SuggestResponse,
    TextUpdate,
    UseTemplateRequest,
)
from prompt_craft.core.editor import EditMode, PromptEditor
from prompt_craft.core.library import LibraryManager
from prompt_craft.core.llm import LLMClient, get_llm_client
from prompt_craft.core.models import SessionContext
from prompt_craft.core.parser import PromptParser
from prompt_craft.core.registry import PromptRegistry, get_registry

router = APIRouter()


def get_parser(llm: LLMClient = Depends(get_llm_client)) -> PromptParser:
    return PromptParser(llm)


@router.post("", response_model=PromptResponse, status_code=201)
async def create_prompt(
    data: PromptCreate,
    ctx: SessionContext = Depends(get_session_context),
    registry: PromptRegistry = Depends(get_registry),
) -> PromptResponse:
    """Create a prompt with an initial version assembled from its config."""
    prompt = registry.create_prompt(data.library_id, data.name, ctx, config=data.config)
    return PromptResponse.from_prompt(prompt, mode=EditMode.GUIDED.value)


@router.get("", response_model=list[PromptResponse])
async def list_prompts(
    library_id: str,
    registry: PromptRegistry = Depends(get_registry),
) -> list[PromptResponse]:
    return [PromptResponse.from_prompt(p) for p in registry.list_prompts(library_id)]


@router.get("/{prompt_id}", response_model=PromptResponse)
async def get_prompt(
    prompt_id: str,
    registry: PromptRegistry = Depends(get_registry),
) -> PromptResponse:
    return PromptResponse.from_prompt(registry.require_prompt(prompt_id))


@router.delete("/{prompt_id}", status_code=204)
async def delete_prompt(
    prompt_id: str,
    registry: PromptRegistry = Depends(get_registry),
) -> None:
    registry.delete_prompt(prompt_id)


@router.put("/{prompt_id}/config", response_model=PromptResponse)
async def update_config(
    prompt_id: str,
    data: ConfigUpdate,
    registry: PromptRegistry = Depends(get_registry),
    parser: PromptParser = Depends(get_parser),
) -> PromptResponse:
    """Guided edit: change the config and re-assemble the text."""
    if data.config is None and data.field is None:
        raise HTTPException(status_code=422, detail="Provide either 'config' or 'field'")
    editor = PromptEditor(registry.require_prompt(prompt_id), parser, mode=EditMode.GUIDED)
    if data.config is not None:
        editor.replace_config(data.config)
    else:
        editor.update_config(data.field, data.value)
    editor.persist(registry)
    return PromptResponse.from_prompt(editor.prompt, mode=editor.mode.value)


@router.put("/{prompt_id}/text", response_model=PromptResponse)
async def update_text(
    prompt_id: str,
    data: TextUpdate,
    registry: PromptRegistry = Depends(get_registry),
) -> PromptResponse:
    """Direct edit: store the text as-is; the config is left stale."""
    prompt = registry.require_prompt(prompt_id)
    registry.update_prompt(prompt, system_prompt=data.system_prompt)
    return PromptResponse.from_prompt(prompt, mode=EditMode.DIRECT.value, config_stale=True)


@router.post("/{prompt_id}/parse", response_model=PromptResponse)
async def parse_prompt(
    prompt_id: str,
    data: ParseRequest,
    registry: PromptRegistry = Depends(get_registry),
    parser: PromptParser = Depends(get_parser),
) -> PromptResponse:
    """Parse the text into a config and switch back to guided editing."""
    editor = PromptEditor(registry.require_prompt(prompt_id), parser, mode=EditMode.DIRECT)
    if data.system_prompt is not None:
        editor.update_direct_text(data.system_prompt)
    await editor.parse_and_refine()
    editor.persist(registry)
    return PromptResponse.from_prompt(editor.prompt, mode=editor.mode.value)


@router.post("/{prompt_id}/suggest", response_model=SuggestResponse)
async def suggest(
    prompt_id: str,
    data: SuggestRequest,
    registry: PromptRegistry = Depends(get_registry),
    parser: PromptParser = Depends(get_parser),
    llm: LLMClient = Depends(get_llm_client),
) -> SuggestResponse:
    editor = PromptEditor(registry.require_prompt(prompt_id), parser, llm=llm)
    suggestion = await editor.suggest(data.field)
    return SuggestResponse(field=data.field, suggestion=suggestion)


@router.post("/{prompt_id}/use-template", response_model=PromptResponse)
async def use_template(
    prompt_id: str,
    data: UseTemplateRequest,
    registry: PromptRegistry = Depends(get_registry),
    parser: PromptParser = Depends(get_parser),
    manager: LibraryManager = Depends(get_library_manager),
) -> PromptResponse:
    """Copy a library template's text into the prompt. Versions are untouched."""
    editor = PromptEditor(registry.require_prompt(prompt_id), parser)
    manager.select(data.library)
    manager.use_template(data.usecase, editor)
    registry.update_prompt(editor.prompt, system_prompt=editor.system_prompt)
    return PromptResponse.from_prompt(
        editor.prompt, mode=editor.mode.value, config_stale=editor.config_stale
    )
