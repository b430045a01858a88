"""Project board endpoints.

GET  /                      -- open projects.
POST /                      -- post a project (hirers).
GET  /mine                  -- projects posted by the caller (hirers).
GET  /applications/mine     -- the caller's applications (coders).
GET  /{id}/applications     -- applications to one of the caller's projects.
POST /{id}/applications     -- apply to a project (coders).
"""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from app.core.auth import CurrentUser, get_current_user, require_role
from app.core.constants import (
    MSG_ALREADY_APPLIED,
    MSG_APPLICATIONS_FAILED,
    MSG_APPLIED,
    MSG_APPLY_FAILED,
    MSG_PROJECT_CREATE_FAILED,
    MSG_PROJECTS_FAILED,
)
from app.models.enums import UserRole
from app.models.project import (
    Application,
    ApplicationRequest,
    ProjectCard,
    ProjectCreate,
)
from app.services.projects import (
    AlreadyAppliedError,
    apply_to_project,
    create_project,
    fetch_my_applications,
    fetch_my_projects,
    fetch_open_projects,
    fetch_project,
    fetch_project_applications,
    to_project_card,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=list[ProjectCard])
async def list_open_projects(
    user: CurrentUser = Depends(get_current_user),
) -> list[ProjectCard]:
    """Return open projects, newest first."""
    try:
        projects = fetch_open_projects()
    except Exception as exc:
        logger.error(
            "list_open_projects_failed",
            extra={"user_id": str(user.id), "error_message": str(exc)},
        )
        raise HTTPException(status_code=500, detail=MSG_PROJECTS_FAILED) from exc

    return [to_project_card(p) for p in projects]


@router.post("/", status_code=201)
async def post_project(
    body: ProjectCreate,
    user: CurrentUser = Depends(get_current_user),
) -> dict[str, Any]:
    """Post a new open project. Hirers only."""
    require_role(user, UserRole.hirer)
    try:
        return create_project(user.id, body)
    except Exception as exc:
        logger.error(
            "post_project_failed",
            extra={"hirer_id": str(user.id), "error_message": str(exc)},
        )
        raise HTTPException(status_code=500, detail=MSG_PROJECT_CREATE_FAILED) from exc


@router.get("/mine", response_model=list[ProjectCard])
async def list_my_projects(
    user: CurrentUser = Depends(get_current_user),
) -> list[ProjectCard]:
    """Return the caller's posted projects. Hirers only."""
    require_role(user, UserRole.hirer)
    try:
        projects = fetch_my_projects(user.id)
    except Exception as exc:
        logger.error(
            "list_my_projects_failed",
            extra={"hirer_id": str(user.id), "error_message": str(exc)},
        )
        raise HTTPException(status_code=500, detail=MSG_PROJECTS_FAILED) from exc

    return [to_project_card(p) for p in projects]


@router.get("/applications/mine", response_model=list[Application])
async def list_my_applications(
    user: CurrentUser = Depends(get_current_user),
) -> list[Application]:
    """Return the caller's applications. Coders only."""
    require_role(user, UserRole.coder)
    try:
        return fetch_my_applications(user.id)
    except Exception as exc:
        logger.error(
            "list_my_applications_failed",
            extra={"coder_id": str(user.id), "error_message": str(exc)},
        )
        raise HTTPException(status_code=500, detail=MSG_APPLICATIONS_FAILED) from exc


@router.get("/{project_id}/applications", response_model=list[Application])
async def list_project_applications(
    project_id: UUID,
    user: CurrentUser = Depends(get_current_user),
) -> list[Application]:
    """Return applications to a project owned by the caller."""
    try:
        project = fetch_project(project_id)
    except Exception as exc:
        logger.error(
            "fetch_project_failed",
            extra={"project_id": str(project_id), "error_message": str(exc)},
        )
        raise HTTPException(status_code=500, detail=MSG_APPLICATIONS_FAILED) from exc

    if project is None:
        raise HTTPException(status_code=404, detail="Project not found")
    if project.hirer_id != user.id:
        raise HTTPException(status_code=403, detail="Not your project")

    try:
        return fetch_project_applications(project_id)
    except Exception as exc:
        logger.error(
            "list_project_applications_failed",
            extra={"project_id": str(project_id), "error_message": str(exc)},
        )
        raise HTTPException(status_code=500, detail=MSG_APPLICATIONS_FAILED) from exc


@router.post("/{project_id}/applications", status_code=201)
async def apply(
    project_id: UUID,
    body: ApplicationRequest | None = None,
    user: CurrentUser = Depends(get_current_user),
) -> dict[str, Any]:
    """Apply to a project. Coders only.

    A second application to the same project answers 409.
    """
    require_role(user, UserRole.coder)
    message = body.message if body else None

    try:
        application = apply_to_project(project_id, user.id, message)
    except AlreadyAppliedError as exc:
        raise HTTPException(status_code=409, detail=MSG_ALREADY_APPLIED) from exc
    except Exception as exc:
        logger.error(
            "apply_to_project_failed",
            extra={
                "project_id": str(project_id),
                "coder_id": str(user.id),
                "error_message": str(exc),
            },
        )
        raise HTTPException(status_code=500, detail=MSG_APPLY_FAILED) from exc

    return {"message": MSG_APPLIED, "application": application}
