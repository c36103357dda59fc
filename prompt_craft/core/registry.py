"""Prompt Registry — CRUD operations for versioned prompts."""

from __future__ import annotations

from functools import lru_cache

import structlog

from prompt_craft.core.assembler import assemble
from prompt_craft.core.errors import NotFoundError, ValidationError
from prompt_craft.core.models import DEFAULT_CONFIG, Prompt, PromptConfig, SessionContext
from prompt_craft.db.repository import StoreRepository, get_repository

logger = structlog.get_logger()


class PromptRegistry:
    """Manages prompt lifecycle — create, read, update, delete."""

    def __init__(self, store: StoreRepository) -> None:
        self.store = store

    def create_prompt(
        self,
        library_id: str,
        name: str,
        ctx: SessionContext,
        config: PromptConfig | None = None,
    ) -> Prompt:
        """Create a prompt whose text and first version come from its config."""
        name = name.strip()
        if not name:
            raise ValidationError("A prompt needs a name.")
        config = config or DEFAULT_CONFIG.model_copy(deep=True)
        prompt = self.store.create_prompt(
            library_id=library_id,
            name=name,
            system_prompt=assemble(config),
            config=config,
            ctx=ctx,
        )
        logger.info("prompt.created", prompt_id=prompt.id, library_id=library_id)
        return prompt

    def get_prompt(self, prompt_id: str) -> Prompt | None:
        """Get a prompt with its versions, newest first."""
        return self.store.get_prompt(prompt_id)

    def require_prompt(self, prompt_id: str) -> Prompt:
        prompt = self.get_prompt(prompt_id)
        if prompt is None:
            raise NotFoundError(f"Prompt '{prompt_id}' not found.")
        return prompt

    def list_prompts(self, library_id: str) -> list[Prompt]:
        return self.store.list_prompts(library_id)

    def update_prompt(
        self,
        prompt: Prompt,
        system_prompt: str | None = None,
        config: PromptConfig | None = None,
    ) -> Prompt:
        """Write the current text and/or config; local state changes only on success."""
        self.store.update_prompt(prompt.id, system_prompt=system_prompt, config=config)
        if system_prompt is not None:
            prompt.system_prompt = system_prompt
        if config is not None:
            prompt.config = config
        logger.info(
            "prompt.updated",
            prompt_id=prompt.id,
            text=system_prompt is not None,
            config=config is not None,
        )
        return prompt

    def delete_prompt(self, prompt_id: str) -> None:
        """Delete a prompt; its versions go with it."""
        self.require_prompt(prompt_id)
        self.store.delete_prompt(prompt_id)
        logger.info("prompt.deleted", prompt_id=prompt_id)


@lru_cache
def get_registry() -> PromptRegistry:
    """Get cached registry instance."""
    return PromptRegistry(get_repository())
