"""Coder and team directory endpoints.

GET  /coders             -- coders, filtered by search text and skill.
GET  /teams              -- teams, filtered by search text.
POST /follows/{id}       -- follow a profile (authenticated).
"""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query

from app.core.auth import CurrentUser, get_current_user
from app.core.constants import MSG_CODERS_FAILED, MSG_FOLLOW_FAILED, MSG_TEAMS_FAILED
from app.models.profile import CoderCard
from app.models.team import TeamCard
from app.services.browse import (
    ALL_SKILLS,
    fetch_coders,
    fetch_teams,
    filter_coders,
    filter_teams,
    follow,
    to_coder_card,
    to_team_card,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/coders", response_model=list[CoderCard])
async def list_coders(
    search: str = Query(default="", description="Matches name, bio, or location"),
    skill: str = Query(default=ALL_SKILLS, description="Skill name, or 'all'"),
) -> list[CoderCard]:
    """Return coder cards, highest XP first."""
    try:
        coders = fetch_coders()
    except Exception as exc:
        logger.error("list_coders_failed", extra={"error_message": str(exc)})
        raise HTTPException(status_code=500, detail=MSG_CODERS_FAILED) from exc

    return [to_coder_card(c) for c in filter_coders(coders, search, skill)]


@router.get("/teams", response_model=list[TeamCard])
async def list_teams(
    search: str = Query(default="", description="Matches name or description"),
) -> list[TeamCard]:
    """Return team cards, newest first."""
    try:
        teams = fetch_teams()
    except Exception as exc:
        logger.error("list_teams_failed", extra={"error_message": str(exc)})
        raise HTTPException(status_code=500, detail=MSG_TEAMS_FAILED) from exc

    return [to_team_card(t) for t in filter_teams(teams, search)]


@router.post("/follows/{profile_id}", status_code=201, response_model=list[CoderCard])
async def follow_profile(
    profile_id: UUID,
    user: CurrentUser = Depends(get_current_user),
) -> list[CoderCard]:
    """Follow *profile_id* and return the refreshed coder cards."""
    try:
        coders = follow(user.id, profile_id)
    except Exception as exc:
        logger.error(
            "follow_profile_failed",
            extra={
                "follower_id": str(user.id),
                "following_id": str(profile_id),
                "error_message": str(exc),
            },
        )
        raise HTTPException(status_code=500, detail=MSG_FOLLOW_FAILED) from exc

    return [to_coder_card(c) for c in coders]
