"""Conversation and message queries for the inbox.

Every function here is a single round trip (or a short sequence of them)
to Supabase.  Failures are not caught: ``postgrest.exceptions.APIError``
propagates to the router, which logs it and answers with a generic message.
"""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from app.core.constants import (
    CONVERSATION_SELECT,
    MESSAGE_SELECT,
    UNKNOWN_CONVERSATION_NAME,
)
from app.db.supabase import get_supabase
from app.models.message import (
    Conversation,
    ConversationSummary,
    Message,
    MessageCreate,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Conversation list
# ---------------------------------------------------------------------------

def filter_user_conversations(
    conversations: list[Conversation],
    user_id: UUID,
) -> list[Conversation]:
    """Keep the conversations in which *user_id* is a participant.

    Row-level security on the backend is what actually restricts access;
    this only trims what the inbox lists.
    """
    return [
        conv
        for conv in conversations
        if any(p.user_id == user_id for p in conv.conversation_participants)
    ]


def fetch_conversations(user_id: UUID) -> list[Conversation]:
    """Return the user's conversations, most recently updated first."""
    client = get_supabase()
    result = (
        client.table("conversations")
        .select(CONVERSATION_SELECT)
        .order("updated_at", desc=True)
        .execute()
    )
    conversations = [Conversation(**row) for row in result.data or []]
    return filter_user_conversations(conversations, user_id)


def conversation_display_name(conversation: Conversation, user_id: UUID) -> str:
    """Comma-joined names of everyone in *conversation* except *user_id*."""
    names = [
        p.profiles.full_name
        for p in conversation.conversation_participants
        if p.user_id != user_id and p.profiles and p.profiles.full_name
    ]
    return ", ".join(names) or UNKNOWN_CONVERSATION_NAME


def conversation_avatar(conversation: Conversation, user_id: UUID) -> str | None:
    """Avatar of the first other participant, if any."""
    for participant in conversation.conversation_participants:
        if participant.user_id != user_id:
            return participant.profiles.avatar_url if participant.profiles else None
    return None


def summarize_conversation(
    conversation: Conversation,
    user_id: UUID,
) -> ConversationSummary:
    """Build the list entry *user_id* sees for *conversation*."""
    last_message = conversation.messages[0].content if conversation.messages else None
    return ConversationSummary(
        id=conversation.id,
        name=conversation_display_name(conversation, user_id),
        avatar_url=conversation_avatar(conversation, user_id),
        last_message=last_message,
        updated_at=conversation.updated_at,
    )


def start_conversation(user_id: UUID, participant_id: UUID) -> Conversation:
    """Create a conversation between *user_id* and *participant_id*.

    Raises ``ValueError`` when both identities are the same.
    """
    if user_id == participant_id:
        raise ValueError("Cannot start a conversation with yourself")

    client = get_supabase()
    created = client.table("conversations").insert({}).execute()
    conversation_id = created.data[0]["id"]

    client.table("conversation_participants").insert(
        [
            {"conversation_id": conversation_id, "user_id": str(user_id)},
            {"conversation_id": conversation_id, "user_id": str(participant_id)},
        ]
    ).execute()

    logger.info(
        "conversation_started",
        extra={
            "conversation_id": conversation_id,
            "user_id": str(user_id),
            "participant_id": str(participant_id),
        },
    )
    return Conversation(**created.data[0])


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------

def load_messages(conversation_id: UUID) -> list[Message]:
    """Return every message of a conversation, oldest first."""
    client = get_supabase()
    result = (
        client.table("messages")
        .select(MESSAGE_SELECT)
        .eq("conversation_id", str(conversation_id))
        .order("created_at")
        .execute()
    )
    return [Message(**row) for row in result.data or []]


def fetch_message(message_id: UUID) -> Message | None:
    """Return one message with sender display fields, or ``None``."""
    client = get_supabase()
    result = (
        client.table("messages")
        .select(MESSAGE_SELECT)
        .eq("id", str(message_id))
        .limit(1)
        .execute()
    )
    if not result.data:
        return None
    return Message(**result.data[0])


def send_message(
    conversation_id: UUID,
    sender_id: UUID,
    content: str,
) -> dict[str, Any] | None:
    """Insert a message and return the created row.

    Blank content is a no-op: nothing is sent and ``None`` is returned.
    """
    text = content.strip()
    if not text:
        return None

    payload = MessageCreate(
        conversation_id=conversation_id,
        sender_id=sender_id,
        content=text,
    )
    client = get_supabase()
    result = (
        client.table("messages")
        .insert(payload.model_dump(mode="json"))
        .execute()
    )
    rows = result.data or []
    return rows[0] if rows else None
