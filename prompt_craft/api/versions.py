"""Version ledger endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from prompt_craft.api.context import get_session_context
from prompt_craft.api.models import (
    PromptResponse,
    VersionCreate,
    VersionDeleteResponse,
    VersionResponse,
    VersionTagUpdate,
)
from prompt_craft.core.models import SessionContext
from prompt_craft.core.registry import PromptRegistry, get_registry
from prompt_craft.core.vcs import VersionControl, get_vcs

router = APIRouter()


@router.get("/{prompt_id}/versions", response_model=list[VersionResponse])
async def list_versions(
    prompt_id: str,
    registry: PromptRegistry = Depends(get_registry),
) -> list[VersionResponse]:
    """Version history, newest first."""
    prompt = registry.require_prompt(prompt_id)
    return [VersionResponse.from_version(v) for v in prompt.versions]


@router.post("/{prompt_id}/versions", response_model=VersionResponse, status_code=201)
async def save_version(
    prompt_id: str,
    data: VersionCreate,
    ctx: SessionContext = Depends(get_session_context),
    registry: PromptRegistry = Depends(get_registry),
    vcs: VersionControl = Depends(get_vcs),
) -> VersionResponse:
    """Snapshot the prompt's current text (or the given text) as a new version."""
    prompt = registry.require_prompt(prompt_id)
    text = data.system_prompt if data.system_prompt is not None else prompt.system_prompt
    version = vcs.save_version(prompt, text, ctx)
    return VersionResponse.from_version(version)


@router.post("/{prompt_id}/versions/{version_id}/restore", response_model=PromptResponse)
async def restore_version(
    prompt_id: str,
    version_id: str,
    registry: PromptRegistry = Depends(get_registry),
    vcs: VersionControl = Depends(get_vcs),
) -> PromptResponse:
    """Copy a past version's text into the current prompt. The config is not re-parsed."""
    prompt = registry.require_prompt(prompt_id)
    vcs.restore_version(prompt, version_id)
    registry.update_prompt(prompt, system_prompt=prompt.system_prompt)
    return PromptResponse.from_prompt(prompt, mode="direct", config_stale=True)


@router.put("/{prompt_id}/versions/{version_id}/tag", response_model=VersionResponse)
async def tag_version(
    prompt_id: str,
    version_id: str,
    data: VersionTagUpdate,
    registry: PromptRegistry = Depends(get_registry),
    vcs: VersionControl = Depends(get_vcs),
) -> VersionResponse:
    prompt = registry.require_prompt(prompt_id)
    return VersionResponse.from_version(vcs.tag_version(prompt, version_id, data.tag))


@router.delete("/{prompt_id}/versions/{version_id}", response_model=VersionDeleteResponse)
async def delete_version(
    prompt_id: str,
    version_id: str,
    confirm: bool = Query(default=False),
    registry: PromptRegistry = Depends(get_registry),
    vcs: VersionControl = Depends(get_vcs),
) -> VersionDeleteResponse:
    """Delete a version. Requires ``?confirm=true``; the last version cannot go."""
    prompt = registry.require_prompt(prompt_id)
    current = vcs.delete_version(prompt, version_id, confirmed=confirm)
    return VersionDeleteResponse(
        current=VersionResponse.from_version(current) if current else None
    )
