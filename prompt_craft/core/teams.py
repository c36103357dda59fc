"""Team directory: the acting user's team, its members, and invites."""

from __future__ import annotations

from functools import lru_cache

import structlog

from prompt_craft.core.errors import NotFoundError, ValidationError
from prompt_craft.core.models import SessionContext
from prompt_craft.db.models import InviteRow, TeamMemberRow, TeamRow
from prompt_craft.db.repository import StoreRepository, get_repository

logger = structlog.get_logger()

INVITE_ROLES = ("editor", "viewer")


class TeamDirectory:
    def __init__(self, store: StoreRepository) -> None:
        self.store = store

    def team_ids(self, user_id: str) -> list[str]:
        return [m.team_id for m in self.store.get_memberships(user_id)]

    def context_for(self, user_id: str) -> SessionContext:
        """Build the session context that decides which libraries are visible."""
        return SessionContext(user_id=user_id, team_ids=self.team_ids(user_id))

    def get_team_for_user(self, ctx: SessionContext) -> TeamRow | None:
        """The first team the user belongs to, if any."""
        for team_id in ctx.team_ids:
            team = self.store.get_team(team_id)
            if team is not None:
                return team
        return None

    def list_members(self, team_id: str) -> list[TeamMemberRow]:
        return self.store.list_members(team_id)

    def create_invite(
        self, team_id: str, email: str, role: str, ctx: SessionContext
    ) -> InviteRow:
        email = email.strip()
        if not email:
            raise ValidationError("An invite needs an email address.")
        if role not in INVITE_ROLES:
            raise ValidationError(f"Invite role must be one of: {', '.join(INVITE_ROLES)}.")
        if team_id not in ctx.team_ids:
            raise NotFoundError(f"Team '{team_id}' not found.")
        invite = self.store.create_invite(team_id, email, role, invited_by=ctx.user_id)
        logger.info("team.invited", team_id=team_id, role=role)
        return invite


@lru_cache
def get_team_directory() -> TeamDirectory:
    return TeamDirectory(get_repository())
