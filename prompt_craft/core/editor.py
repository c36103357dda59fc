"""Prompt editor: keeps a prompt's config and text in sync.

Two modes:

- GUIDED: the config is authoritative; every config edit re-assembles the text.
- DIRECT: the text is authoritative; the config is stale until the text is
  parsed again, which is the only way back to GUIDED with a new config.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

import pydantic
import structlog

from prompt_craft.core.assembler import assemble
from prompt_craft.core.errors import ExternalServiceError, InvariantViolation, ValidationError
from prompt_craft.core.llm import LLMClient
from prompt_craft.core.models import CONFIG_FIELDS, Prompt, PromptConfig
from prompt_craft.core.parser import PromptParser
from prompt_craft.core.registry import PromptRegistry

logger = structlog.get_logger()

SUGGESTIBLE_FIELDS = ("persona", "mission", "skills", "boundaries", "format")


class EditMode(str, Enum):
    GUIDED = "guided"
    DIRECT = "direct"


class PromptEditor:
    """Session-local editing state for one prompt."""

    def __init__(
        self,
        prompt: Prompt,
        parser: PromptParser,
        mode: EditMode = EditMode.GUIDED,
        llm: LLMClient | None = None,
    ) -> None:
        self.prompt = prompt
        self.parser = parser
        self.llm = llm
        self.mode = mode
        self.config_stale = mode is EditMode.DIRECT

    @property
    def config(self) -> PromptConfig:
        return self.prompt.config

    @property
    def system_prompt(self) -> str:
        return self.prompt.system_prompt

    # --- Mode switches ---

    def switch_to_direct(self) -> None:
        """Make the current text the editable source of truth. No data changes."""
        self.mode = EditMode.DIRECT

    def switch_to_guided(self) -> None:
        """Return to field editing when the config still matches the text.

        Once the text has been edited directly only ``parse_and_refine`` (or
        an explicit ``discard_direct_edits``) leads back to guided mode.
        """
        if self.config_stale:
            raise InvariantViolation(
                "The prompt text has changed. Parse it to return to guided editing."
            )
        self.mode = EditMode.GUIDED

    def discard_direct_edits(self) -> str:
        """Drop unparsed text edits and re-derive the text from the config."""
        self.prompt.system_prompt = assemble(self.prompt.config)
        self.mode = EditMode.GUIDED
        self.config_stale = False
        logger.info("editor.direct_edits_discarded", prompt_id=self.prompt.id)
        return self.prompt.system_prompt

    # --- Guided edits ---

    def update_config(self, field: str, value: Any) -> str:
        """Change one config field and re-assemble the text."""
        if field not in CONFIG_FIELDS:
            raise ValidationError(f"Unknown prompt field '{field}'.")
        data = self.prompt.config.model_dump()
        data[field] = value
        try:
            config = PromptConfig(**data)
        except pydantic.ValidationError as e:
            raise ValidationError(f"Invalid value for '{field}': {e.errors()[0]['msg']}") from e
        return self.replace_config(config)

    def replace_config(self, config: PromptConfig) -> str:
        if self.mode is not EditMode.GUIDED:
            raise InvariantViolation("Structured fields can only be edited in guided mode.")
        self.prompt.config = config
        self.prompt.system_prompt = assemble(config)
        return self.prompt.system_prompt

    # --- Direct edits ---

    def update_direct_text(self, text: str) -> None:
        if self.mode is not EditMode.DIRECT:
            raise InvariantViolation("Free text can only be edited in direct mode.")
        self.prompt.system_prompt = text
        self.config_stale = True

    async def parse_and_refine(self) -> PromptConfig:
        """Parse the current text and adopt the result as the guided config.

        On failure the error propagates and config and mode are unchanged.
        """
        config = await self.parser.parse(self.prompt.system_prompt)
        self.prompt.config = config
        self.config_stale = False
        self.mode = EditMode.GUIDED
        logger.info("editor.parsed", prompt_id=self.prompt.id)
        return config

    def use_template(self, text: str) -> None:
        """Replace the current text with template text. Versions are untouched."""
        self.prompt.system_prompt = text
        self.mode = EditMode.DIRECT
        self.config_stale = True
        logger.info("editor.template_used", prompt_id=self.prompt.id)

    # --- Helpers ---

    async def suggest(self, field: str) -> str:
        """Ask the AI for one improvement suggestion on a field."""
        if field not in SUGGESTIBLE_FIELDS:
            raise ValidationError(f"Suggestions are not available for '{field}'.")
        if self.llm is None:
            raise ExternalServiceError("No AI backend is available for suggestions.")
        value = getattr(self.prompt.config, field)
        current = ", ".join(value) if isinstance(value, list) else value
        return await self.llm.suggest(field, current)

    def persist(self, registry: PromptRegistry) -> Prompt:
        """Write the current text and config to the store."""
        return registry.update_prompt(
            self.prompt,
            system_prompt=self.prompt.system_prompt,
            config=self.prompt.config,
        )
