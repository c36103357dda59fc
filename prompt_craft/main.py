"""FastAPI application entry point."""

from __future__ import annotations

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from prompt_craft.api.context import studio_error_handler
from prompt_craft.api.router import api_router
from prompt_craft.config import get_settings
from prompt_craft.core.errors import StudioError
from prompt_craft.utils.logging import setup_logging

logger = structlog.get_logger()

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan — startup and shutdown."""
    settings = get_settings()
    setup_logging(settings.log_level)
    logger.info("promptcraft.starting", port=settings.port)
    if not settings.llm_api_key:
        logger.warning("promptcraft.llm_unconfigured")
    yield
    logger.info("promptcraft.shutdown")


app = FastAPI(
    title="PromptCraft Studio",
    description="Build, test, version, and organize system prompts for AI agents",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(StudioError, studio_error_handler)
app.include_router(api_router, prefix="/api/v1")


@app.get("/")
async def root():
    """Service info endpoint."""
    return {"service": "promptcraft", "version": VERSION}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "service": "promptcraft", "version": VERSION}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=get_settings().port)
