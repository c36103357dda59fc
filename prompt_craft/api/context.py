"""Request-scoped dependencies: the acting session and error mapping."""

from __future__ import annotations

import structlog
from fastapi import Depends, Header, Request
from fastapi.responses import JSONResponse

from prompt_craft.core.errors import (
    ConfirmationRequired,
    DuplicateNameError,
    ExternalServiceError,
    InvariantViolation,
    NotFoundError,
    PersistenceError,
    StudioError,
    ValidationError,
)
from prompt_craft.core.models import SessionContext
from prompt_craft.core.teams import TeamDirectory, get_team_directory

logger = structlog.get_logger()

STATUS_CODES: dict[type[StudioError], int] = {
    ConfirmationRequired: 428,
    ValidationError: 422,
    DuplicateNameError: 409,
    NotFoundError: 404,
    InvariantViolation: 409,
    PersistenceError: 502,
    ExternalServiceError: 502,
}


def status_for(error: StudioError) -> int:
    for cls in type(error).__mro__:
        if cls in STATUS_CODES:
            return STATUS_CODES[cls]
    return 500


async def studio_error_handler(request: Request, exc: StudioError) -> JSONResponse:
    status = status_for(exc)
    logger.info("api.error", path=request.url.path, kind=exc.kind, status=status)
    return JSONResponse(status_code=status, content={"error": exc.kind, "message": exc.message})


def get_session_context(
    x_user_id: str = Header(..., alias="X-User-ID"),
    teams: TeamDirectory = Depends(get_team_directory),
) -> SessionContext:
    """The acting user, with the teams whose libraries they may see."""
    return teams.context_for(x_user_id)
