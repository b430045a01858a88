"""Pydantic models for the ``teams`` and ``team_members`` tables."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.models.profile import Profile


class TeamMember(BaseModel):
    """Membership row with its embedded profile."""
    role: str
    profiles: Profile | None = None


class Team(BaseModel):
    """Full team record returned from the database."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    owner_id: UUID | None = None
    name: str
    description: str | None = None
    logo_url: str | None = None
    created_at: datetime
    owner: Profile | None = None
    team_members: list[TeamMember] = Field(default_factory=list)


class TeamCard(BaseModel):
    """Directory card for one team."""
    id: UUID
    name: str
    description: str | None = None
    logo_url: str | None = None
    member_count: int = 0
    active_since: int
    owner_name: str | None = None
    owner_avatar_url: str | None = None
