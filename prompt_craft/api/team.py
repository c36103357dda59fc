"""Team endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from prompt_craft.api.context import get_session_context
from prompt_craft.api.models import InviteCreate, MemberResponse, TeamResponse
from prompt_craft.core.errors import NotFoundError
from prompt_craft.core.models import SessionContext
from prompt_craft.core.teams import TeamDirectory, get_team_directory

router = APIRouter()


@router.get("", response_model=TeamResponse)
async def get_team(
    ctx: SessionContext = Depends(get_session_context),
    teams: TeamDirectory = Depends(get_team_directory),
) -> TeamResponse:
    """The user's team and its members; empty when they have none."""
    team = teams.get_team_for_user(ctx)
    if team is None:
        return TeamResponse()
    members = [
        MemberResponse(user_id=m.user_id, role=m.role, full_name=m.full_name)
        for m in teams.list_members(team.id)
    ]
    return TeamResponse(id=team.id, name=team.name, members=members)


@router.post("/invites", status_code=201)
async def create_invite(
    data: InviteCreate,
    ctx: SessionContext = Depends(get_session_context),
    teams: TeamDirectory = Depends(get_team_directory),
) -> dict:
    team = teams.get_team_for_user(ctx)
    if team is None:
        raise NotFoundError("You are not a member of any team.")
    invite = teams.create_invite(team.id, data.email, data.role, ctx)
    return {"id": invite.id, "email": invite.email, "role": invite.role, "team_id": team.id}
