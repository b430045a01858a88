"""Coder and team directory service.

Fetches the public directory from Supabase and applies the search / skill
filters in Python, the same way the browse screen narrows what it already
loaded.
"""

from __future__ import annotations

import logging
import re
from uuid import UUID

from app.core.constants import CODER_CARD_SKILLS, CODER_SELECT, TEAM_SELECT
from app.db.supabase import get_supabase
from app.models.enums import UserRole
from app.models.profile import CoderCard, FollowCreate, Profile
from app.models.team import Team, TeamCard

logger = logging.getLogger(__name__)

ALL_SKILLS = "all"


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

def fetch_coders() -> list[Profile]:
    """Return every coder profile with skills, highest XP first."""
    client = get_supabase()
    result = (
        client.table("profiles")
        .select(CODER_SELECT)
        .eq("role", UserRole.coder.value)
        .order("xp", desc=True)
        .execute()
    )
    return [Profile(**row) for row in result.data or []]


def fetch_teams() -> list[Team]:
    """Return every team with owner and members, newest first."""
    client = get_supabase()
    result = (
        client.table("teams")
        .select(TEAM_SELECT)
        .order("created_at", desc=True)
        .execute()
    )
    return [Team(**row) for row in result.data or []]


def follow(follower_id: UUID, following_id: UUID) -> list[Profile]:
    """Follow a profile and return the refreshed coder list.

    The refetch picks up the follower count maintained by the backend.
    """
    payload = FollowCreate(follower_id=follower_id, following_id=following_id)
    client = get_supabase()
    client.table("follows").insert(payload.model_dump(mode="json")).execute()
    logger.info(
        "profile_followed",
        extra={"follower_id": str(follower_id), "following_id": str(following_id)},
    )
    return fetch_coders()


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------

def _contains(value: str | None, term: str) -> bool:
    return value is not None and term in value.lower()


def normalize_skill(name: str) -> str:
    """Lowercase and drop punctuation, so ``Node.js`` becomes ``nodejs``."""
    return re.sub(r"[^a-z0-9+#]", "", name.lower())


def filter_coders(
    coders: list[Profile],
    search: str = "",
    skill: str = ALL_SKILLS,
) -> list[Profile]:
    """Narrow *coders* by free-text search and skill."""
    term = search.lower()
    wanted_skill = normalize_skill(skill) if skill and skill != ALL_SKILLS else None

    matches: list[Profile] = []
    for coder in coders:
        if term and not (
            _contains(coder.full_name, term)
            or _contains(coder.bio, term)
            or _contains(coder.location, term)
        ):
            continue
        if wanted_skill and not any(
            normalize_skill(name) == wanted_skill for name in coder.skill_names
        ):
            continue
        matches.append(coder)
    return matches


def filter_teams(teams: list[Team], search: str = "") -> list[Team]:
    """Narrow *teams* by free-text search on name and description."""
    term = search.lower()
    if not term:
        return list(teams)
    return [
        team
        for team in teams
        if _contains(team.name, term) or _contains(team.description, term)
    ]


# ---------------------------------------------------------------------------
# Cards
# ---------------------------------------------------------------------------

def format_hourly_rate(hourly_rate: int | None) -> str | None:
    """Render a rate stored in cents as whole dollars per hour."""
    if not hourly_rate:
        return None
    return f"${hourly_rate / 100:.0f}/hr"


def to_coder_card(coder: Profile) -> CoderCard:
    names = coder.skill_names
    return CoderCard(
        id=coder.id,
        full_name=coder.full_name,
        avatar_url=coder.avatar_url,
        bio=coder.bio,
        location=coder.location,
        xp=coder.xp,
        followers_count=coder.followers_count,
        is_verified=coder.is_verified,
        hourly_rate_display=format_hourly_rate(coder.hourly_rate),
        skills=names[:CODER_CARD_SKILLS],
        more_skills=max(len(names) - CODER_CARD_SKILLS, 0),
    )


def to_team_card(team: Team) -> TeamCard:
    return TeamCard(
        id=team.id,
        name=team.name,
        description=team.description,
        logo_url=team.logo_url,
        member_count=len(team.team_members),
        active_since=team.created_at.year,
        owner_name=team.owner.full_name if team.owner else None,
        owner_avatar_url=team.owner.avatar_url if team.owner else None,
    )
