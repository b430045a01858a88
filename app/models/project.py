"""Pydantic models for the ``projects`` and ``project_applications`` tables."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.models.enums import ApplicationStatus, ProjectStatus
from app.models.profile import Profile, ProfileSummary, SkillLink


class ProjectCreate(BaseModel):
    """Form payload for posting a new project."""
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    budget_min: int | None = Field(default=None, ge=0)
    budget_max: int | None = Field(default=None, ge=0)
    timeline: str | None = None
    skill_ids: list[UUID] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_budget_range(self) -> "ProjectCreate":
        if (
            self.budget_min is not None
            and self.budget_max is not None
            and self.budget_min > self.budget_max
        ):
            raise ValueError("budget_min must not exceed budget_max")
        return self


class Project(BaseModel):
    """Full project record returned from the database."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    hirer_id: UUID
    title: str
    description: str
    budget_min: int | None = None
    budget_max: int | None = None
    timeline: str | None = None
    status: ProjectStatus = ProjectStatus.open
    created_at: datetime
    project_skills: list[SkillLink] = Field(default_factory=list)
    hirer: ProfileSummary | None = None


class ProjectCard(BaseModel):
    """Project as rendered in the browse / my-projects lists."""
    id: UUID
    title: str
    description: str
    hirer_name: str | None = None
    status: ProjectStatus
    status_label: str
    budget: str
    timeline: str | None = None
    skills: list[str] = Field(default_factory=list)
    more_skills: int = 0
    created_at: datetime


class ApplicationRequest(BaseModel):
    """Optional request body when applying to a project."""
    message: str | None = None


class ApplicationCreate(BaseModel):
    """Payload for inserting a project application."""
    project_id: UUID
    coder_id: UUID
    message: str


class Application(BaseModel):
    """Full project_applications record returned from the database.

    ``projects`` is embedded on the coder's own list, ``coder`` on the
    hirer's per-project list.
    """
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    project_id: UUID
    coder_id: UUID
    message: str | None = None
    status: ApplicationStatus = ApplicationStatus.pending
    created_at: datetime
    projects: dict[str, Any] | None = None
    coder: Profile | None = None
