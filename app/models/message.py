"""Pydantic models for conversations, participants, and messages.

The ``sender`` and ``profiles`` fields are PostgREST embeds of the
``profiles`` table, so they carry display fields only.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.models.profile import ProfileSummary


class Message(BaseModel):
    """Full message record with the sender's display fields."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    conversation_id: UUID
    sender_id: UUID
    content: str
    created_at: datetime
    sender: ProfileSummary | None = None


class MessagePreview(BaseModel):
    """Message embedded on a conversation for the list preview."""
    id: UUID
    content: str
    created_at: datetime
    sender: ProfileSummary | None = None


class MessageCreate(BaseModel):
    """Payload for inserting a message."""
    conversation_id: UUID
    sender_id: UUID
    content: str


class MessageSendRequest(BaseModel):
    """Request body for sending a message."""
    content: str


class Participant(BaseModel):
    """``conversation_participants`` row with the embedded profile."""
    user_id: UUID
    profiles: ProfileSummary | None = None


class Conversation(BaseModel):
    """Full conversation record with participants and message previews."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    created_at: datetime | None = None
    updated_at: datetime | None = None
    conversation_participants: list[Participant] = Field(default_factory=list)
    messages: list[MessagePreview] = Field(default_factory=list)


class ConversationSummary(BaseModel):
    """Conversation list entry as seen by one participant."""
    id: UUID
    name: str
    avatar_url: str | None = None
    last_message: str | None = None
    updated_at: datetime | None = None


class ConversationStartRequest(BaseModel):
    """Request body for starting a conversation with another profile."""
    participant_id: UUID
