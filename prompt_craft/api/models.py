"""Pydantic request/response models for the API."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, model_validator

from prompt_craft.core.models import (
    IMAGE_DATA_URL,
    ChatMessage,
    Library,
    Prompt,
    PromptConfig,
    PromptVersion,
    VersionTag,
)


# --- Libraries ---


class LibraryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    team_id: str | None = None


class LibraryRename(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)


class TemplateBody(BaseModel):
    usecase: str = Field(..., min_length=1, max_length=200)
    prompt: str = ""


class TemplateResponse(BaseModel):
    id: str | None = None
    usecase: str
    prompt: str


class LibraryResponse(BaseModel):
    id: str
    name: str
    team_id: str | None = None
    templates: list[TemplateResponse] = Field(default_factory=list)

    @classmethod
    def from_library(cls, library: Library) -> LibraryResponse:
        return cls(
            id=library.id,
            name=library.name,
            team_id=library.team_id,
            templates=[TemplateResponse(**t.model_dump()) for t in library.templates],
        )


# --- Prompts ---


class PromptCreate(BaseModel):
    """Create a new prompt. Without a config the default one is used."""

    library_id: str
    name: str = Field(..., min_length=1, max_length=200)
    config: PromptConfig | None = None


class ConfigUpdate(BaseModel):
    """Guided edit: either a whole config or a single field."""

    config: PromptConfig | None = None
    field: str | None = None
    value: Any = None


class TextUpdate(BaseModel):
    """Direct edit of the prompt text."""

    system_prompt: str


class ParseRequest(BaseModel):
    """Parse the given text, or the prompt's current text when omitted."""

    system_prompt: str | None = None


class SuggestRequest(BaseModel):
    field: str


class SuggestResponse(BaseModel):
    field: str
    suggestion: str


class UseTemplateRequest(BaseModel):
    library: str
    usecase: str


class VersionResponse(BaseModel):
    id: str
    prompt_id: str
    prompt: str
    created_at: datetime
    tag: VersionTag | None = None

    @classmethod
    def from_version(cls, version: PromptVersion) -> VersionResponse:
        return cls(**version.model_dump(exclude={"user_id"}))


class PromptResponse(BaseModel):
    id: str
    name: str
    library_id: str
    system_prompt: str
    config: PromptConfig
    versions: list[VersionResponse] = Field(default_factory=list)
    mode: str | None = None
    config_stale: bool = False

    @classmethod
    def from_prompt(
        cls, prompt: Prompt, mode: str | None = None, config_stale: bool = False
    ) -> PromptResponse:
        return cls(
            id=prompt.id,
            name=prompt.name,
            library_id=prompt.library_id,
            system_prompt=prompt.system_prompt,
            config=prompt.config,
            versions=[VersionResponse.from_version(v) for v in prompt.versions],
            mode=mode,
            config_stale=config_stale,
        )


# --- Versions ---


class VersionCreate(BaseModel):
    """Save a version; defaults to the prompt's current text."""

    system_prompt: str | None = None


class VersionTagUpdate(BaseModel):
    tag: VersionTag | None = None


class VersionDeleteResponse(BaseModel):
    current: VersionResponse | None = None


# --- Playground ---


class AssembleRequest(BaseModel):
    config: PromptConfig


class AssembleResponse(BaseModel):
    system_prompt: str


class ChatRequest(BaseModel):
    system_prompt: str
    message: str = ""
    image: str | None = Field(default=None, pattern=IMAGE_DATA_URL)
    history: list[ChatMessage] = Field(default_factory=list)

    @model_validator(mode="after")
    def _message_or_image(self) -> ChatRequest:
        if not self.message.strip() and not self.image:
            raise ValueError("Provide a message, an image, or both")
        return self


# --- Team ---


class InviteCreate(BaseModel):
    email: str = Field(..., min_length=3)
    role: str = Field("editor", pattern=r"^(editor|viewer)$")


class MemberResponse(BaseModel):
    user_id: str
    role: str
    full_name: str | None = None


class TeamResponse(BaseModel):
    id: str | None = None
    name: str | None = None
    members: list[MemberResponse] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    error: str
    message: str
