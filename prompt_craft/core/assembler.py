"""Prompt assembler: turns a structured config into system prompt text."""

from __future__ import annotations

from prompt_craft.core.models import PromptConfig

SECTION_SEPARATOR = "\n\n"


def assemble(config: PromptConfig) -> str:
    """Render a config as free text.

    A section is emitted only when its field is non-empty, always in the order
    identity, mission, skills, boundaries, personality, format, reference.
    """
    parts: list[str] = []
    if config.persona:
        parts.append(f"Identity: {config.persona}")
    if config.mission:
        parts.append(f"Mission: {config.mission}")
    if config.skills:
        parts.append(f"Skills: You are proficient in {', '.join(config.skills)}.")
    if config.boundaries:
        parts.append("Boundaries:\n- " + "\n- ".join(config.boundaries))
    if config.personality:
        parts.append(f"Personality: Maintain a {config.personality.value.lower()} tone.")
    if config.format:
        parts.append(f"Format: {config.format}")
    if config.reference:
        parts.append(f"Reference Context:\n---\n{config.reference}\n---")
    return SECTION_SEPARATOR.join(parts)
