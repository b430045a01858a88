"""Project board service.

Hirers post projects and review applicants; coders browse open
projects and apply.  Uniqueness of an application per (project, coder) is a
database constraint: a duplicate insert fails with Postgres code ``23505``
and is reported back as ``AlreadyAppliedError``.
"""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from postgrest.exceptions import APIError

from app.core.config import settings
from app.core.constants import (
    BUDGET_NOT_SPECIFIED,
    MY_APPLICATIONS_SELECT,
    PROJECT_APPLICATIONS_SELECT,
    PROJECT_CARD_SKILLS,
    PROJECT_SELECT,
    UNIQUE_VIOLATION,
)
from app.db.supabase import get_supabase
from app.models.enums import ProjectStatus
from app.models.project import (
    Application,
    ApplicationCreate,
    Project,
    ProjectCard,
    ProjectCreate,
)

logger = logging.getLogger(__name__)


class AlreadyAppliedError(Exception):
    """The coder already has an application on this project."""


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------

def fetch_open_projects() -> list[Project]:
    """Return open projects, newest first."""
    client = get_supabase()
    result = (
        client.table("projects")
        .select(PROJECT_SELECT)
        .eq("status", ProjectStatus.open.value)
        .order("created_at", desc=True)
        .execute()
    )
    return [Project(**row) for row in result.data or []]


def fetch_my_projects(hirer_id: UUID) -> list[Project]:
    """Return every project posted by *hirer_id*, newest first."""
    client = get_supabase()
    result = (
        client.table("projects")
        .select(PROJECT_SELECT)
        .eq("hirer_id", str(hirer_id))
        .order("created_at", desc=True)
        .execute()
    )
    return [Project(**row) for row in result.data or []]


def fetch_project(project_id: UUID) -> Project | None:
    client = get_supabase()
    result = (
        client.table("projects")
        .select(PROJECT_SELECT)
        .eq("id", str(project_id))
        .limit(1)
        .execute()
    )
    if not result.data:
        return None
    return Project(**result.data[0])


def create_project(hirer_id: UUID, payload: ProjectCreate) -> dict[str, Any]:
    """Insert an open project and link its skills; return the project row."""
    client = get_supabase()
    row = payload.model_dump(mode="json", exclude={"skill_ids"})
    row["hirer_id"] = str(hirer_id)
    row["status"] = ProjectStatus.open.value

    result = client.table("projects").insert(row).execute()
    project = result.data[0]

    if payload.skill_ids:
        client.table("project_skills").insert(
            [
                {"project_id": project["id"], "skill_id": str(skill_id)}
                for skill_id in payload.skill_ids
            ]
        ).execute()

    logger.info(
        "project_created",
        extra={
            "project_id": project["id"],
            "hirer_id": str(hirer_id),
            "skills": len(payload.skill_ids),
        },
    )
    return project


# ---------------------------------------------------------------------------
# Applications
# ---------------------------------------------------------------------------

def apply_to_project(
    project_id: UUID,
    coder_id: UUID,
    message: str | None = None,
) -> dict[str, Any]:
    """Submit an application and return the created row.

    Raises ``AlreadyAppliedError`` on the unique (project, coder)
    constraint; any other ``APIError`` propagates unchanged.
    """
    payload = ApplicationCreate(
        project_id=project_id,
        coder_id=coder_id,
        message=(message or "").strip() or settings.DEFAULT_APPLICATION_MESSAGE,
    )
    client = get_supabase()
    try:
        result = (
            client.table("project_applications")
            .insert(payload.model_dump(mode="json"))
            .execute()
        )
    except APIError as exc:
        if exc.code == UNIQUE_VIOLATION:
            raise AlreadyAppliedError(str(project_id)) from exc
        raise

    logger.info(
        "application_submitted",
        extra={"project_id": str(project_id), "coder_id": str(coder_id)},
    )
    rows = result.data or []
    return rows[0] if rows else payload.model_dump(mode="json")


def fetch_my_applications(coder_id: UUID) -> list[Application]:
    """Return the coder's applications with project title and hirer name."""
    client = get_supabase()
    result = (
        client.table("project_applications")
        .select(MY_APPLICATIONS_SELECT)
        .eq("coder_id", str(coder_id))
        .order("created_at", desc=True)
        .execute()
    )
    return [Application(**row) for row in result.data or []]


def fetch_project_applications(project_id: UUID) -> list[Application]:
    """Return the applications to one project with each coder's profile."""
    client = get_supabase()
    result = (
        client.table("project_applications")
        .select(PROJECT_APPLICATIONS_SELECT)
        .eq("project_id", str(project_id))
        .order("created_at", desc=True)
        .execute()
    )
    return [Application(**row) for row in result.data or []]


# ---------------------------------------------------------------------------
# Presentation
# ---------------------------------------------------------------------------

def format_budget(budget_min: int | None, budget_max: int | None) -> str:
    if budget_min and budget_max:
        return f"${budget_min} - ${budget_max}"
    if budget_min:
        return f"From ${budget_min}"
    if budget_max:
        return f"Up to ${budget_max}"
    return BUDGET_NOT_SPECIFIED


def to_project_card(project: Project) -> ProjectCard:
    names = [link.skills.name for link in project.project_skills]
    return ProjectCard(
        id=project.id,
        title=project.title,
        description=project.description,
        hirer_name=project.hirer.full_name if project.hirer else None,
        status=project.status,
        status_label=project.status.label,
        budget=format_budget(project.budget_min, project.budget_max),
        timeline=project.timeline,
        skills=names[:PROJECT_CARD_SKILLS],
        more_skills=max(len(names) - PROJECT_CARD_SKILLS, 0),
        created_at=project.created_at,
    )
