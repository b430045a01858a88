"""Builders for Supabase mocks and backend rows used across test modules."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock
from uuid import UUID, uuid4

USER_ID: UUID = uuid4()
OTHER_ID: UUID = uuid4()

_CHAIN_METHODS = (
    "select", "insert", "upsert", "update", "delete", "eq", "neq",
    "limit", "order", "in_", "single",
)


def chainable_table_mock(data: Any = None) -> MagicMock:
    """Return a table mock whose query methods chain and whose ``execute``
    yields ``data``."""
    m = MagicMock()
    for method in _CHAIN_METHODS:
        getattr(m, method).return_value = m
    m.execute.return_value = MagicMock(data=data if data is not None else [])
    return m


def supabase_with_tables(tables: dict[str, MagicMock]) -> MagicMock:
    """Return a client mock dispatching ``table(name)`` to *tables*."""
    client = MagicMock()
    client.table.side_effect = lambda name: tables.get(name, chainable_table_mock())
    return client


def participant_row(user_id: UUID, name: str, avatar: str | None = None) -> dict[str, Any]:
    return {
        "user_id": str(user_id),
        "profiles": {"full_name": name, "avatar_url": avatar, "role": "coder"},
    }


def conversation_row(
    participants: list[dict[str, Any]],
    conversation_id: UUID | None = None,
    last_message: str | None = None,
) -> dict[str, Any]:
    messages = []
    if last_message is not None:
        messages.append(
            {
                "id": str(uuid4()),
                "content": last_message,
                "created_at": "2026-03-01T10:00:00+00:00",
                "sender": {"full_name": "Someone", "avatar_url": None},
            }
        )
    return {
        "id": str(conversation_id or uuid4()),
        "created_at": "2026-03-01T09:00:00+00:00",
        "updated_at": "2026-03-01T10:00:00+00:00",
        "conversation_participants": participants,
        "messages": messages,
    }


def message_row(
    conversation_id: UUID,
    content: str = "hello",
    sender_id: UUID | None = None,
    message_id: UUID | None = None,
) -> dict[str, Any]:
    return {
        "id": str(message_id or uuid4()),
        "conversation_id": str(conversation_id),
        "sender_id": str(sender_id or OTHER_ID),
        "content": content,
        "created_at": "2026-03-01T10:05:00+00:00",
        "sender": {"full_name": "Grace Hopper", "avatar_url": None},
    }


def coder_row(
    name: str,
    skills: list[str] | None = None,
    bio: str | None = None,
    location: str | None = None,
    xp: int = 0,
    hourly_rate: int | None = None,
) -> dict[str, Any]:
    return {
        "id": str(uuid4()),
        "full_name": name,
        "avatar_url": None,
        "role": "coder",
        "bio": bio,
        "location": location,
        "xp": xp,
        "followers_count": 3,
        "hourly_rate": hourly_rate,
        "is_verified": False,
        "user_skills": [
            {"skills": {"name": s, "category": "dev"}} for s in (skills or [])
        ],
    }


def project_row(
    title: str = "Build a landing page",
    hirer_id: UUID | None = None,
    status: str = "open",
    budget_min: int | None = 500,
    budget_max: int | None = 1500,
    skills: list[str] | None = None,
) -> dict[str, Any]:
    return {
        "id": str(uuid4()),
        "hirer_id": str(hirer_id or OTHER_ID),
        "title": title,
        "description": "Looking for a React developer",
        "budget_min": budget_min,
        "budget_max": budget_max,
        "timeline": "2 weeks",
        "status": status,
        "created_at": "2026-02-20T12:00:00+00:00",
        "project_skills": [
            {"skills": {"name": s, "category": "dev"}} for s in (skills or [])
        ],
        "hirer": {"full_name": "Hiro Hirer", "avatar_url": None},
    }
