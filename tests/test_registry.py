"""Tests for prompt CRUD."""

from __future__ import annotations

import pytest

from prompt_craft.core.assembler import assemble
from prompt_craft.core.errors import NotFoundError, PersistenceError, ValidationError
from prompt_craft.core.models import DEFAULT_CONFIG, PromptConfig


class TestCreatePrompt:
    def test_create_with_default_config(self, registry, library, ctx):
        prompt = registry.create_prompt(library.id, "Helper", ctx)
        assert prompt.name == "Helper"
        assert prompt.config == DEFAULT_CONFIG
        assert prompt.system_prompt == assemble(DEFAULT_CONFIG)
        assert len(prompt.versions) == 1
        assert prompt.versions[0].prompt == prompt.system_prompt

    def test_create_with_config(self, registry, library, ctx, bob_config):
        prompt = registry.create_prompt(library.id, "Bob", ctx, config=bob_config)
        assert prompt.system_prompt.startswith("Identity: You are Bob")

    def test_empty_name_rejected(self, registry, library, ctx, mock_db):
        with pytest.raises(ValidationError):
            registry.create_prompt(library.id, "  ", ctx)
        assert mock_db.rows("prompts") == []

    def test_version_failure_rolls_back(self, registry, library, ctx, mock_db):
        mock_db.fail_on.add(("insert", "prompt_versions"))
        with pytest.raises(PersistenceError):
            registry.create_prompt(library.id, "Helper", ctx)
        assert mock_db.rows("prompts") == []


class TestReadPrompts:
    def test_get_includes_versions(self, registry, library, ctx):
        created = registry.create_prompt(library.id, "Helper", ctx)
        loaded = registry.get_prompt(created.id)
        assert loaded.id == created.id
        assert [v.id for v in loaded.versions] == [v.id for v in created.versions]

    def test_get_missing(self, registry):
        assert registry.get_prompt("nope") is None
        with pytest.raises(NotFoundError):
            registry.require_prompt("nope")

    def test_list_by_library(self, registry, library, ctx):
        registry.create_prompt(library.id, "B", ctx)
        registry.create_prompt(library.id, "A", ctx)
        assert [p.name for p in registry.list_prompts(library.id)] == ["A", "B"]


class TestUpdatePrompt:
    def test_update_text_and_config(self, registry, library, ctx, bob_config):
        prompt = registry.create_prompt(library.id, "Helper", ctx)
        registry.update_prompt(prompt, system_prompt="new text", config=bob_config)
        loaded = registry.get_prompt(prompt.id)
        assert loaded.system_prompt == "new text"
        assert loaded.config == bob_config

    def test_update_does_not_add_version(self, registry, library, ctx):
        prompt = registry.create_prompt(library.id, "Helper", ctx)
        registry.update_prompt(prompt, system_prompt="edited")
        assert len(registry.get_prompt(prompt.id).versions) == 1

    def test_failed_update_leaves_local_state(self, registry, library, ctx, mock_db):
        prompt = registry.create_prompt(library.id, "Helper", ctx)
        original = prompt.system_prompt
        mock_db.fail_on.add(("update", "prompts"))
        with pytest.raises(PersistenceError):
            registry.update_prompt(prompt, system_prompt="edited", config=PromptConfig.blank())
        assert prompt.system_prompt == original
        assert prompt.config == DEFAULT_CONFIG


class TestDeletePrompt:
    def test_delete_cascades_versions(self, registry, library, ctx, mock_db):
        prompt = registry.create_prompt(library.id, "Helper", ctx)
        registry.delete_prompt(prompt.id)
        assert registry.get_prompt(prompt.id) is None
        assert mock_db.rows("prompt_versions") == []

    def test_delete_missing(self, registry):
        with pytest.raises(NotFoundError):
            registry.delete_prompt("nope")
