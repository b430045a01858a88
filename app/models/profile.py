"""Pydantic models for the ``profiles`` table and its skill embeds."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import UserRole


class Skill(BaseModel):
    """A row of the ``skills`` lookup table."""
    name: str
    category: str | None = None


class SkillLink(BaseModel):
    """Join row (``user_skills`` / ``project_skills``) with its embedded skill."""
    skills: Skill


class ProfileSummary(BaseModel):
    """Display fields embedded on messages, projects, and participants."""
    full_name: str | None = None
    avatar_url: str | None = None
    role: UserRole | None = None


class Profile(BaseModel):
    """Full profile record returned from the database."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    full_name: str
    avatar_url: str | None = None
    role: UserRole
    bio: str | None = None
    location: str | None = None
    xp: int = 0
    followers_count: int = 0
    hourly_rate: int | None = None  # cents
    is_verified: bool = False
    created_at: datetime | None = None
    user_skills: list[SkillLink] = Field(default_factory=list)

    @property
    def skill_names(self) -> list[str]:
        return [link.skills.name for link in self.user_skills]


class CoderCard(BaseModel):
    """Directory card for one coder."""
    id: UUID
    full_name: str
    avatar_url: str | None = None
    bio: str | None = None
    location: str | None = None
    xp: int = 0
    followers_count: int = 0
    is_verified: bool = False
    hourly_rate_display: str | None = None
    skills: list[str] = Field(default_factory=list)
    more_skills: int = 0


class FollowCreate(BaseModel):
    """Payload for inserting a ``follows`` row."""
    follower_id: UUID
    following_id: UUID
