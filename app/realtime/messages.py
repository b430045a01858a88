"""Realtime subscription to ``messages`` inserts.

Wraps the Supabase realtime channel API so the inbox socket only deals
with plain row dicts.  The realtime client keeps one channel per topic,
so every subscription gets a topic of its own.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any
from uuid import uuid4

from app.core.config import settings
from app.db.supabase import get_async_supabase

logger = logging.getLogger(__name__)

InsertHandler = Callable[[dict[str, Any]], None]


def extract_record(payload: dict[str, Any]) -> dict[str, Any] | None:
    """Pull the inserted row out of a ``postgres_changes`` payload."""
    data = payload.get("data")
    if isinstance(data, dict) and isinstance(data.get("record"), dict):
        return data["record"]
    if isinstance(payload.get("new"), dict):
        return payload["new"]
    if isinstance(payload.get("record"), dict):
        return payload["record"]
    return None


def subscription_topic() -> str:
    """A channel topic unique to one subscription."""
    return f"{settings.MESSAGES_CHANNEL}:{uuid4()}"


async def subscribe_message_inserts(on_insert: InsertHandler) -> Any:
    """Call *on_insert* with each row inserted into ``public.messages``."""

    def _callback(payload: dict[str, Any]) -> None:
        record = extract_record(payload)
        if record is None:
            logger.warning("realtime_payload_without_record")
            return
        on_insert(record)

    client = await get_async_supabase()
    channel = client.channel(subscription_topic())
    await channel.on_postgres_changes(
        "INSERT",
        schema="public",
        table="messages",
        callback=_callback,
    ).subscribe()
    logger.info("realtime_subscribed", extra={"channel": channel.topic})
    return channel


async def unsubscribe(channel: Any) -> None:
    """Remove *channel* from the async client."""
    client = await get_async_supabase()
    await client.remove_channel(channel)
    logger.info("realtime_unsubscribed", extra={"channel": channel.topic})
