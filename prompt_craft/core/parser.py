"""Prompt parser: free text back into a structured config."""

from __future__ import annotations

from typing import Protocol

import structlog

from prompt_craft.core.errors import ExternalServiceError, ValidationError
from prompt_craft.core.models import PromptConfig, coerce_personality

logger = structlog.get_logger()


class ConfigExtractor(Protocol):
    async def parse_to_config(self, text: str) -> PromptConfig: ...


class PromptParser:
    """Extracts a PromptConfig from prompt text via the AI capability."""

    def __init__(self, extractor: ConfigExtractor) -> None:
        self.extractor = extractor

    async def parse(self, text: str) -> PromptConfig:
        if not text.strip():
            raise ValidationError("There is no prompt text to parse.")

        try:
            config = await self.extractor.parse_to_config(text)
        except ExternalServiceError as e:
            logger.warning("parser.failed", error=e.message)
            raise ExternalServiceError(f"Failed to parse prompt with AI. {e.message}") from e

        normalized = config.model_copy(
            update={"personality": coerce_personality(config.personality)}
        )
        logger.info("parser.parsed", personality=normalized.personality.value)
        return normalized
