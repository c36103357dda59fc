"""Store repository: the table-level operations the studio core depends on.

Each method is one logical write or read. Any failure from the Supabase
client surfaces as a PersistenceError and nothing is applied.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from functools import lru_cache
from typing import Any

import structlog

from prompt_craft.core.errors import PersistenceError
from prompt_craft.core.models import (
    Library,
    Prompt,
    PromptConfig,
    PromptTemplate,
    PromptVersion,
    SessionContext,
    VersionTag,
)
from prompt_craft.db.client import SupabaseClient, get_supabase_client
from prompt_craft.db.models import (
    InviteRow,
    LibraryRow,
    PromptRow,
    TeamMemberRow,
    TeamRow,
    VersionRow,
)

logger = structlog.get_logger()

LIBRARIES = "prompt_libraries"
PROMPTS = "prompts"
VERSIONS = "prompt_versions"
TEAMS = "teams"
MEMBERS = "team_members"
INVITES = "invites"
PROFILES = "profiles"

TEMPLATE_FIELDS = {"usecase": "name", "prompt": "system_prompt"}


@contextmanager
def _store_call(operation: str, **context: Any) -> Iterator[None]:
    try:
        yield
    except PersistenceError:
        raise
    except Exception as e:
        logger.error("store.call_failed", operation=operation, error=str(e), **context)
        raise PersistenceError(f"Could not {operation}: {e}", cause=e) from e


def _to_version(row: dict[str, Any]) -> PromptVersion:
    data = VersionRow(**row)
    return PromptVersion(
        id=str(data.id),
        prompt_id=str(data.prompt_id),
        prompt=data.prompt,
        created_at=data.created_at,
        tag=data.tag,
        user_id=data.user_id,
    )


def _to_template(row: dict[str, Any]) -> PromptTemplate:
    data = PromptRow(**row)
    return PromptTemplate(id=str(data.id), usecase=data.name, prompt=data.system_prompt)


def newest_first(versions: list[PromptVersion]) -> list[PromptVersion]:
    """Order versions newest first.

    Input is expected in insertion order; among equal timestamps the most
    recently inserted version comes first.
    """
    return sorted(reversed(versions), key=lambda v: v.created_at, reverse=True)


class StoreRepository:
    """Libraries, templates, prompts, versions, and team rows in Supabase."""

    def __init__(self, db: SupabaseClient) -> None:
        self.db = db

    # --- Libraries ---

    def get_libraries(self, ctx: SessionContext) -> list[Library]:
        """All libraries visible to the user: personal ones plus their teams'."""
        with _store_call("load libraries", user_id=ctx.user_id):
            rows: dict[str, dict[str, Any]] = {}
            for row in self.db.select(LIBRARIES, filters={"user_id": ctx.user_id}):
                rows[str(row["id"])] = row
            for team_id in ctx.team_ids:
                for row in self.db.select(LIBRARIES, filters={"team_id": team_id}):
                    rows[str(row["id"])] = row

            libraries = []
            for row in sorted(rows.values(), key=lambda r: r["name"].lower()):
                lib = LibraryRow(**row)
                templates = [
                    _to_template(p)
                    for p in self.db.select(PROMPTS, filters={"library_id": lib.id})
                ]
                libraries.append(
                    Library(
                        id=str(lib.id),
                        name=lib.name,
                        user_id=lib.user_id,
                        team_id=lib.team_id,
                        templates=templates,
                    )
                )
        return libraries

    def create_library(
        self, name: str, ctx: SessionContext, team_id: str | None = None
    ) -> Library:
        with _store_call("create library", name=name):
            row = self.db.insert(
                LIBRARIES, {"name": name, "user_id": ctx.user_id, "team_id": team_id}
            )
        lib = LibraryRow(**row)
        return Library(id=str(lib.id), name=lib.name, user_id=lib.user_id, team_id=lib.team_id)

    def rename_library(self, library_id: str, name: str) -> None:
        with _store_call("rename library", library_id=library_id):
            self.db.update(LIBRARIES, library_id, {"name": name})

    def delete_library(self, library_id: str) -> None:
        with _store_call("delete library", library_id=library_id):
            self.db.delete(LIBRARIES, library_id)

    # --- Templates ---

    def create_template(
        self, library_id: str, usecase: str, text: str, ctx: SessionContext
    ) -> PromptTemplate:
        with _store_call("create template", library_id=library_id, usecase=usecase):
            row = self.db.insert(
                PROMPTS,
                {
                    "name": usecase,
                    "system_prompt": text,
                    "config": {},
                    "library_id": library_id,
                    "user_id": ctx.user_id,
                },
            )
        return _to_template(row)

    def update_template(self, template_id: str, fields: dict[str, Any]) -> None:
        """Apply usecase/prompt changes in a single row update."""
        data = {TEMPLATE_FIELDS[k]: v for k, v in fields.items() if k in TEMPLATE_FIELDS}
        if not data:
            return
        with _store_call("update template", template_id=template_id):
            self.db.update(PROMPTS, template_id, data)

    def delete_template(self, template_id: str) -> None:
        with _store_call("delete template", template_id=template_id):
            self.db.delete(PROMPTS, template_id)

    # --- Prompts ---

    def create_prompt(
        self,
        library_id: str,
        name: str,
        system_prompt: str,
        config: PromptConfig,
        ctx: SessionContext,
    ) -> Prompt:
        """Create a prompt together with its initial version.

        If the initial version cannot be written the prompt row is removed
        again so the store never holds a versionless prompt.
        """
        with _store_call("create prompt", library_id=library_id, name=name):
            row = self.db.insert(
                PROMPTS,
                {
                    "name": name,
                    "system_prompt": system_prompt,
                    "config": config.to_row(),
                    "library_id": library_id,
                    "user_id": ctx.user_id,
                },
            )
        prompt_id = str(row["id"])
        try:
            version = self.add_version(prompt_id, system_prompt, ctx)
        except PersistenceError:
            with _store_call("roll back prompt", prompt_id=prompt_id):
                self.db.delete(PROMPTS, prompt_id)
            raise
        prompt = self._to_prompt(row)
        prompt.versions = [version]
        return prompt

    def get_prompt(self, prompt_id: str) -> Prompt | None:
        with _store_call("load prompt", prompt_id=prompt_id):
            rows = self.db.select(PROMPTS, filters={"id": prompt_id})
        if not rows:
            return None
        prompt = self._to_prompt(rows[0])
        prompt.versions = self.list_versions(prompt.id)
        return prompt

    def list_prompts(self, library_id: str) -> list[Prompt]:
        with _store_call("list prompts", library_id=library_id):
            rows = self.db.select(PROMPTS, filters={"library_id": library_id}, order_by="name")
        return [self._to_prompt(r) for r in rows]

    def update_prompt(
        self,
        prompt_id: str,
        system_prompt: str | None = None,
        config: PromptConfig | None = None,
    ) -> None:
        data: dict[str, Any] = {}
        if system_prompt is not None:
            data["system_prompt"] = system_prompt
        if config is not None:
            data["config"] = config.to_row()
        if not data:
            return
        with _store_call("update prompt", prompt_id=prompt_id):
            self.db.update(PROMPTS, prompt_id, data)

    def delete_prompt(self, prompt_id: str) -> None:
        with _store_call("delete prompt", prompt_id=prompt_id):
            self.db.delete(PROMPTS, prompt_id)

    @staticmethod
    def _to_prompt(row: dict[str, Any]) -> Prompt:
        data = PromptRow(**row)
        return Prompt(
            id=str(data.id),
            name=data.name,
            library_id=str(data.library_id),
            system_prompt=data.system_prompt,
            config=PromptConfig.from_row(data.config),
            user_id=data.user_id,
            created_at=data.created_at,
        )

    # --- Versions ---

    def list_versions(self, prompt_id: str) -> list[PromptVersion]:
        with _store_call("load versions", prompt_id=prompt_id):
            rows = self.db.select(
                VERSIONS, filters={"prompt_id": prompt_id}, order_by="created_at"
            )
        return newest_first([_to_version(r) for r in rows])

    def add_version(self, prompt_id: str, text: str, ctx: SessionContext) -> PromptVersion:
        with _store_call("save version", prompt_id=prompt_id):
            row = self.db.insert(
                VERSIONS, {"prompt_id": prompt_id, "user_id": ctx.user_id, "prompt": text}
            )
        return _to_version(row)

    def tag_version(self, version_id: str, tag: VersionTag | None) -> None:
        with _store_call("tag version", version_id=version_id):
            self.db.update(VERSIONS, version_id, {"tag": tag.value if tag else None})

    def delete_version(self, version_id: str) -> None:
        with _store_call("delete version", version_id=version_id):
            self.db.delete(VERSIONS, version_id)

    # --- Teams ---

    def get_memberships(self, user_id: str) -> list[TeamMemberRow]:
        with _store_call("load team memberships", user_id=user_id):
            rows = self.db.select(MEMBERS, filters={"user_id": user_id})
        return [TeamMemberRow(**r) for r in rows]

    def get_team(self, team_id: str) -> TeamRow | None:
        with _store_call("load team", team_id=team_id):
            rows = self.db.select(TEAMS, filters={"id": team_id})
        return TeamRow(**rows[0]) if rows else None

    def list_members(self, team_id: str) -> list[TeamMemberRow]:
        with _store_call("load team members", team_id=team_id):
            rows = self.db.select(MEMBERS, filters={"team_id": team_id}, order_by="created_at")
            members = []
            for row in rows:
                profiles = self.db.select(PROFILES, filters={"id": row["user_id"]})
                full_name = profiles[0].get("full_name") if profiles else None
                members.append(TeamMemberRow(**{**row, "full_name": full_name}))
        return members

    def create_invite(self, team_id: str, email: str, role: str, invited_by: str) -> InviteRow:
        with _store_call("create invite", team_id=team_id):
            row = self.db.insert(
                INVITES,
                {
                    "team_id": team_id,
                    "email": email,
                    "role": role,
                    "invited_by": invited_by,
                    "accepted": False,
                },
            )
        return InviteRow(**row)


@lru_cache
def get_repository() -> StoreRepository:
    """Get cached repository instance."""
    return StoreRepository(get_supabase_client())
