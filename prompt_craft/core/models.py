"""Domain models for prompts, versions, libraries, and chat turns."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator


class Personality(str, Enum):
    PROFESSIONAL = "Professional"
    CASUAL = "Casual"
    ENTHUSIASTIC = "Enthusiastic"
    FORMAL = "Formal"


class VersionTag(str, Enum):
    PRODUCTION = "Production"
    BETA = "Beta"
    TEST = "Test"


PERSONALITIES = tuple(p.value for p in Personality)

CONFIG_FIELDS = (
    "persona",
    "mission",
    "skills",
    "boundaries",
    "personality",
    "format",
    "reference",
)


def coerce_personality(value: Any) -> Personality:
    """Map any externally supplied tone onto one of the four allowed values.

    Matching is exact and case-sensitive; anything else becomes Professional.
    """
    if isinstance(value, Personality):
        return value
    if isinstance(value, str) and value in PERSONALITIES:
        return Personality(value)
    return Personality.PROFESSIONAL


class PromptConfig(BaseModel):
    """Structured view of a system prompt.

    ``personality`` may be explicitly ``None`` to describe a blank config with
    no tone section; every other value outside the enum is coerced to
    Professional.
    """

    persona: str = ""
    mission: str = ""
    skills: list[str] = Field(default_factory=list)
    boundaries: list[str] = Field(default_factory=list)
    personality: Personality | None = Personality.PROFESSIONAL
    format: str = ""
    reference: str = ""

    @field_validator("persona", "mission", "format", "reference", mode="before")
    @classmethod
    def _text_or_empty(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value)

    @field_validator("skills", "boundaries", mode="before")
    @classmethod
    def _list_or_empty(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return [value] if value else []
        if not isinstance(value, (list, tuple)):
            raise ValueError(f"expected a list of strings, got {type(value).__name__}")
        return [str(v) for v in value]

    @field_validator("personality", mode="before")
    @classmethod
    def _coerce_personality(cls, value: Any) -> Personality | None:
        if value is None:
            return None
        return coerce_personality(value)

    @classmethod
    def blank(cls) -> PromptConfig:
        """A config with every field empty, tone included."""
        return cls(personality=None)

    @classmethod
    def from_row(cls, data: dict[str, Any] | None) -> PromptConfig:
        """Build from a stored JSON column; unknown keys are dropped."""
        data = data or {}
        return cls(**{k: v for k, v in data.items() if k in CONFIG_FIELDS})

    def to_row(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


DEFAULT_CONFIG = PromptConfig(
    persona="You are a helpful assistant.",
    mission="Your primary goal is to assist the user with their requests.",
    skills=["a wide range of topics"],
    boundaries=["You must not engage in harmful or unethical discussions."],
    personality=Personality.PROFESSIONAL,
    format="Respond in clear, easy-to-read text.",
)


class PromptVersion(BaseModel):
    """Immutable snapshot of a prompt's text."""

    model_config = {"frozen": True}

    id: str
    prompt_id: str
    prompt: str
    created_at: datetime
    tag: VersionTag | None = None
    user_id: str | None = None


class Prompt(BaseModel):
    """A versioned prompt: current text, current config, and its history."""

    id: str
    name: str
    library_id: str
    system_prompt: str = ""
    config: PromptConfig = Field(default_factory=PromptConfig)
    versions: list[PromptVersion] = Field(default_factory=list)
    user_id: str | None = None
    created_at: datetime | None = None

    def find_version(self, version_id: str) -> PromptVersion | None:
        for version in self.versions:
            if version.id == version_id:
                return version
        return None


class PromptTemplate(BaseModel):
    """Static, copyable prompt text inside a library."""

    usecase: str
    prompt: str = ""
    id: str | None = None


class Library(BaseModel):
    """A named category of templates."""

    id: str
    name: str
    user_id: str | None = None
    team_id: str | None = None
    templates: list[PromptTemplate] = Field(default_factory=list)

    def find_template(self, usecase: str) -> PromptTemplate | None:
        wanted = usecase.lower()
        for template in self.templates:
            if template.usecase.lower() == wanted:
                return template
        return None


IMAGE_DATA_URL = r"^data:image/[\w.+-]+;base64,[A-Za-z0-9+/=\s]+$"


class ChatMessage(BaseModel):
    """One chat turn. A user turn may carry an image as a base64 data URL."""

    role: str = Field(..., pattern=r"^(user|model)$")
    text: str = ""
    image: str | None = Field(default=None, pattern=IMAGE_DATA_URL)


class SessionContext(BaseModel):
    """The acting user and the teams whose libraries they can see."""

    user_id: str
    team_ids: list[str] = Field(default_factory=list)
