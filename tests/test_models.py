"""Tests for domain models and config coercion."""

from __future__ import annotations

import pydantic
import pytest

from prompt_craft.core.models import (
    DEFAULT_CONFIG,
    ChatMessage,
    Library,
    Personality,
    PromptConfig,
    PromptTemplate,
    coerce_personality,
)


class TestCoercePersonality:
    def test_exact_match_kept(self):
        for value in ("Professional", "Casual", "Enthusiastic", "Formal"):
            assert coerce_personality(value).value == value

    def test_case_sensitive(self):
        assert coerce_personality("casual") is Personality.PROFESSIONAL

    def test_unknown_and_missing(self):
        assert coerce_personality("Sarcastic") is Personality.PROFESSIONAL
        assert coerce_personality(None) is Personality.PROFESSIONAL
        assert coerce_personality(3) is Personality.PROFESSIONAL


class TestPromptConfig:
    def test_defaults(self):
        config = PromptConfig()
        assert config.persona == ""
        assert config.skills == []
        assert config.personality is Personality.PROFESSIONAL

    def test_blank_has_no_personality(self):
        assert PromptConfig.blank().personality is None

    def test_invalid_personality_coerced(self):
        assert PromptConfig(personality="Grumpy").personality is Personality.PROFESSIONAL

    def test_none_lists_become_empty(self):
        config = PromptConfig(skills=None, boundaries=None, persona=None)
        assert config.skills == []
        assert config.boundaries == []
        assert config.persona == ""

    def test_string_becomes_single_item_list(self):
        assert PromptConfig(skills="python").skills == ["python"]

    def test_non_list_rejected(self):
        with pytest.raises(pydantic.ValidationError):
            PromptConfig(skills=5)
        with pytest.raises(pydantic.ValidationError):
            PromptConfig(boundaries={"a": 1})

    def test_tuple_accepted(self):
        assert PromptConfig(skills=("a", "b")).skills == ["a", "b"]

    def test_row_round_trip_drops_unknown_keys(self):
        row = {**DEFAULT_CONFIG.to_row(), "temperature": 0.3}
        config = PromptConfig.from_row(row)
        assert config == DEFAULT_CONFIG

    def test_from_empty_row(self):
        assert PromptConfig.from_row(None) == PromptConfig()

    def test_to_row_serializes_enum(self):
        assert PromptConfig(personality="Formal").to_row()["personality"] == "Formal"


class TestLibrary:
    def test_find_template_case_insensitive(self):
        lib = Library(
            id="l1",
            name="General AI",
            templates=[PromptTemplate(usecase="Summarize Text", prompt="...")],
        )
        assert lib.find_template("summarize text") is lib.templates[0]
        assert lib.find_template("Brainstorm") is None


class TestChatMessage:
    def test_image_data_url(self):
        msg = ChatMessage(role="user", image="data:image/png;base64,iVBORw==")
        assert msg.text == ""

    def test_image_must_be_data_url(self):
        with pytest.raises(pydantic.ValidationError):
            ChatMessage(role="user", text="hi", image="file:///etc/passwd")
        with pytest.raises(pydantic.ValidationError):
            ChatMessage(role="user", image="data:text/plain;base64,aGk=")
