"""Live state of one mounted inbox.

An ``InboxSession`` holds what the messaging screen shows: the user's
conversation list, the selected conversation, and that conversation's
messages.  It is driven by user commands (select, send, refresh) and by
row-insert notifications from the realtime feed.
"""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from app.models.message import Conversation, ConversationSummary, Message
from app.services.messages import (
    fetch_conversations,
    fetch_message,
    load_messages,
    send_message,
    summarize_conversation,
)

logger = logging.getLogger(__name__)


class InboxSession:
    """Conversation list plus the visible thread for one user."""

    def __init__(self, user_id: UUID) -> None:
        self.user_id = user_id
        self.conversations: list[Conversation] = []
        self.selected_conversation_id: UUID | None = None
        self.messages: list[Message] = []

    def refresh_conversations(self) -> list[ConversationSummary]:
        self.conversations = fetch_conversations(self.user_id)
        return self.summaries()

    def summaries(self) -> list[ConversationSummary]:
        return [summarize_conversation(c, self.user_id) for c in self.conversations]

    def select_conversation(self, conversation_id: UUID) -> list[Message]:
        """Open *conversation_id*, replacing the visible thread."""
        self.selected_conversation_id = conversation_id
        self.messages = load_messages(conversation_id)
        return self.messages

    def send(self, content: str) -> dict[str, Any] | None:
        """Send *content* into the open conversation.

        The sent row is not appended here; it comes back through
        ``handle_insert`` like any other participant's message.
        """
        if self.selected_conversation_id is None:
            return None
        return send_message(self.selected_conversation_id, self.user_id, content)

    def handle_insert(self, record: dict[str, Any]) -> Message | None:
        """Apply a row-insert notification for the ``messages`` table.

        Returns the appended message, or ``None`` when the row belongs to a
        conversation other than the open one.
        """
        conversation_id = record.get("conversation_id")
        if (
            self.selected_conversation_id is None
            or conversation_id is None
            or UUID(str(conversation_id)) != self.selected_conversation_id
        ):
            return None

        message = fetch_message(UUID(str(record["id"])))
        if message is None:
            logger.warning(
                "inserted_message_not_found",
                extra={"message_id": str(record["id"])},
            )
            return None

        self.messages.append(message)
        return message
