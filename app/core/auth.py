"""Bearer-token identity resolution against Supabase Auth.

The API never issues or verifies tokens itself: the JWT obtained by the
front end is handed to ``auth.get_user`` and the returned user id becomes
the identity that scopes every query.
"""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from app.core.constants import MSG_PROFILE_FAILED
from app.db.supabase import get_supabase
from app.models.enums import UserRole
from app.models.profile import Profile

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


class AuthError(Exception):
    """Raised when a token does not resolve to a signed-in user."""


class CurrentUser(BaseModel):
    """The signed-in identity."""
    id: UUID
    email: str | None = None


def resolve_user(token: str) -> CurrentUser:
    """Resolve *token* to the signed-in user or raise ``AuthError``."""
    if not token:
        raise AuthError("missing token")
    try:
        response = get_supabase().auth.get_user(token)
    except Exception as exc:
        logger.warning("auth_get_user_failed", extra={"error_message": str(exc)})
        raise AuthError("invalid token") from exc

    user = getattr(response, "user", None)
    if user is None:
        raise AuthError("invalid token")
    return CurrentUser(id=UUID(str(user.id)), email=getattr(user, "email", None))


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> CurrentUser:
    """FastAPI dependency: the signed-in user, or 401."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    try:
        return resolve_user(credentials.credentials)
    except AuthError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        ) from exc


def get_profile(user_id: UUID) -> Profile | None:
    """Fetch the profile row of *user_id*, or ``None`` if it does not exist."""
    client = get_supabase()
    result = (
        client.table("profiles")
        .select("*")
        .eq("id", str(user_id))
        .limit(1)
        .execute()
    )
    if not result.data:
        return None
    return Profile(**result.data[0])


def require_role(user: CurrentUser, role: UserRole) -> Profile:
    """Return the user's profile if it has *role*, otherwise raise 403."""
    try:
        profile = get_profile(user.id)
    except Exception as exc:
        logger.error(
            "require_role_failed",
            extra={
                "user_id": str(user.id),
                "role": role.value,
                "error_message": str(exc),
            },
        )
        raise HTTPException(status_code=500, detail=MSG_PROFILE_FAILED) from exc

    if profile is None or profile.role != role:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Only {role.value}s can do this",
        )
    return profile
