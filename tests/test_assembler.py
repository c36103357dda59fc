"""Tests for config → text assembly."""

from __future__ import annotations

from prompt_craft.core.assembler import assemble
from prompt_craft.core.models import DEFAULT_CONFIG, PromptConfig


def test_blank_config_assembles_to_empty():
    assert assemble(PromptConfig.blank()) == ""


def test_only_non_empty_sections(bob_config):
    assert assemble(bob_config) == (
        "Identity: You are Bob\n\n"
        "Skills: You are proficient in x.\n\n"
        "Personality: Maintain a casual tone."
    )


def test_full_config_section_order():
    config = PromptConfig(
        persona="P",
        mission="M",
        skills=["a", "b"],
        boundaries=["no x", "no y"],
        personality="Formal",
        format="F",
        reference="R",
    )
    assert assemble(config) == (
        "Identity: P\n\n"
        "Mission: M\n\n"
        "Skills: You are proficient in a, b.\n\n"
        "Boundaries:\n- no x\n- no y\n\n"
        "Personality: Maintain a formal tone.\n\n"
        "Format: F\n\n"
        "Reference Context:\n---\nR\n---"
    )


def test_default_config():
    text = assemble(DEFAULT_CONFIG)
    assert text.startswith("Identity: You are a helpful assistant.")
    assert "Personality: Maintain a professional tone." in text
    assert "Reference Context" not in text


def test_deterministic(bob_config):
    assert assemble(bob_config) == assemble(bob_config.model_copy(deep=True))
