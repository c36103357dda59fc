"""Library (category) and template endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from prompt_craft.api.context import get_session_context
from prompt_craft.api.models import (
    LibraryCreate,
    LibraryRename,
    LibraryResponse,
    TemplateBody,
    TemplateResponse,
)
from prompt_craft.core.library import LibraryManager
from prompt_craft.core.models import PromptTemplate, SessionContext
from prompt_craft.db.repository import StoreRepository, get_repository

router = APIRouter()


def get_library_manager(
    ctx: SessionContext = Depends(get_session_context),
    store: StoreRepository = Depends(get_repository),
) -> LibraryManager:
    """A manager loaded with the session's current view."""
    manager = LibraryManager(store, ctx)
    manager.refresh()
    return manager


@router.get("", response_model=list[LibraryResponse])
async def list_libraries(
    manager: LibraryManager = Depends(get_library_manager),
) -> list[LibraryResponse]:
    """List every library visible to the user, with its templates."""
    return [LibraryResponse.from_library(lib) for lib in manager.libraries]


@router.post("", response_model=LibraryResponse, status_code=201)
async def create_library(
    data: LibraryCreate,
    manager: LibraryManager = Depends(get_library_manager),
) -> LibraryResponse:
    library = manager.create_category(data.name, team_id=data.team_id)
    return LibraryResponse.from_library(library)


@router.put("/{name}", response_model=LibraryResponse)
async def rename_library(
    name: str,
    data: LibraryRename,
    manager: LibraryManager = Depends(get_library_manager),
) -> LibraryResponse:
    manager.rename_category(name, data.name)
    return LibraryResponse.from_library(manager.require(data.name))


@router.delete("/{name}", status_code=204)
async def delete_library(
    name: str,
    confirm: bool = Query(default=False),
    manager: LibraryManager = Depends(get_library_manager),
) -> None:
    """Delete a library and all its templates. Requires ``?confirm=true``."""
    manager.delete_category(name, confirmed=confirm)


@router.post("/{name}/templates", response_model=TemplateResponse, status_code=201)
async def create_template(
    name: str,
    data: TemplateBody,
    manager: LibraryManager = Depends(get_library_manager),
) -> TemplateResponse:
    manager.select(name)
    template = manager.create_template(PromptTemplate(usecase=data.usecase, prompt=data.prompt))
    return TemplateResponse(**template.model_dump())


@router.put("/{name}/templates/{usecase}", response_model=LibraryResponse)
async def update_template(
    name: str,
    usecase: str,
    data: TemplateBody,
    manager: LibraryManager = Depends(get_library_manager),
) -> LibraryResponse:
    """Update a template's text, renaming it when the usecase changes."""
    manager.select(name)
    manager.update_template(usecase, PromptTemplate(usecase=data.usecase, prompt=data.prompt))
    return LibraryResponse.from_library(manager.selected)


@router.delete("/{name}/templates/{usecase}", status_code=204)
async def delete_template(
    name: str,
    usecase: str,
    confirm: bool = Query(default=False),
    manager: LibraryManager = Depends(get_library_manager),
) -> None:
    manager.select(name)
    manager.delete_template(usecase, confirmed=confirm)
