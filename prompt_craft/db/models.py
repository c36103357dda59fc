"""Database models / type definitions.

These mirror the Supabase tables for type safety in Python code.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel


class LibraryRow(BaseModel):
    """Row from the prompt_libraries table."""

    id: str
    name: str
    user_id: str
    team_id: str | None = None
    created_at: datetime | None = None


class PromptRow(BaseModel):
    """Row from the prompts table. Library templates are rows here too."""

    id: str
    name: str
    system_prompt: str = ""
    config: dict[str, Any] | None = None
    library_id: str
    user_id: str | None = None
    created_at: datetime | None = None


class VersionRow(BaseModel):
    """Row from the prompt_versions table."""

    id: str
    prompt_id: str
    prompt: str
    tag: str | None = None
    user_id: str | None = None
    created_at: datetime


class TeamRow(BaseModel):
    """Row from the teams table."""

    id: str
    name: str
    owner_id: str
    created_at: datetime | None = None


class TeamMemberRow(BaseModel):
    """Row from the team_members table, joined with profiles."""

    id: str
    user_id: str
    team_id: str
    role: str
    full_name: str | None = None
    created_at: datetime | None = None


class InviteRow(BaseModel):
    """Row from the invites table."""

    id: str
    team_id: str
    email: str
    role: str
    invited_by: str
    accepted: bool = False
    created_at: datetime | None = None
