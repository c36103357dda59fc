"""Main API router — aggregates all endpoint modules."""

from fastapi import APIRouter

from prompt_craft.api.libraries import router as libraries_router
from prompt_craft.api.playground import router as playground_router
from prompt_craft.api.prompts import router as prompts_router
from prompt_craft.api.team import router as team_router
from prompt_craft.api.versions import router as versions_router

api_router = APIRouter()

api_router.include_router(libraries_router, prefix="/libraries", tags=["libraries"])
api_router.include_router(prompts_router, prefix="/prompts", tags=["prompts"])
api_router.include_router(versions_router, prefix="/prompts", tags=["versions"])
api_router.include_router(playground_router, tags=["playground"])
api_router.include_router(team_router, prefix="/team", tags=["team"])
