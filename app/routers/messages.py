"""Direct-messaging endpoints.

GET  /conversations                  -- the caller's conversations.
POST /conversations                  -- start a conversation with a profile.
GET  /conversations/{id}/messages    -- one conversation's thread.
POST /conversations/{id}/messages    -- send a message.
WS   /ws?token=...                   -- live inbox backed by the realtime feed.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any
from uuid import UUID

from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Query,
    Response,
    WebSocket,
    WebSocketDisconnect,
    status,
)

from app.core.auth import AuthError, CurrentUser, get_current_user, resolve_user
from app.core.constants import (
    MSG_CONVERSATION_START_FAILED,
    MSG_CONVERSATIONS_FAILED,
    MSG_INVALID_COMMAND,
    MSG_LIVE_UPDATES_FAILED,
    MSG_MESSAGES_FAILED,
    MSG_SEND_FAILED,
)
from app.models.message import (
    ConversationStartRequest,
    ConversationSummary,
    Message,
    MessageSendRequest,
)
from app.realtime.messages import subscribe_message_inserts, unsubscribe
from app.services.inbox import InboxSession
from app.services.messages import (
    fetch_conversations,
    load_messages,
    send_message,
    start_conversation,
    summarize_conversation,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# REST
# ---------------------------------------------------------------------------

@router.get("/conversations", response_model=list[ConversationSummary])
async def list_conversations(
    user: CurrentUser = Depends(get_current_user),
) -> list[ConversationSummary]:
    """Return the caller's conversations, most recently updated first."""
    try:
        conversations = fetch_conversations(user.id)
    except Exception as exc:
        logger.error(
            "list_conversations_failed",
            extra={"user_id": str(user.id), "error_message": str(exc)},
        )
        raise HTTPException(status_code=500, detail=MSG_CONVERSATIONS_FAILED) from exc

    return [summarize_conversation(c, user.id) for c in conversations]


@router.post("/conversations", status_code=201, response_model=ConversationSummary)
async def create_conversation(
    body: ConversationStartRequest,
    user: CurrentUser = Depends(get_current_user),
) -> ConversationSummary:
    """Start a conversation between the caller and ``participant_id``."""
    try:
        conversation = start_conversation(user.id, body.participant_id)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:
        logger.error(
            "create_conversation_failed",
            extra={
                "user_id": str(user.id),
                "participant_id": str(body.participant_id),
                "error_message": str(exc),
            },
        )
        raise HTTPException(
            status_code=500, detail=MSG_CONVERSATION_START_FAILED
        ) from exc

    return summarize_conversation(conversation, user.id)


@router.get("/conversations/{conversation_id}/messages", response_model=list[Message])
async def list_messages(
    conversation_id: UUID,
    user: CurrentUser = Depends(get_current_user),
) -> list[Message]:
    """Return a conversation's messages, oldest first."""
    try:
        return load_messages(conversation_id)
    except Exception as exc:
        logger.error(
            "list_messages_failed",
            extra={
                "user_id": str(user.id),
                "conversation_id": str(conversation_id),
                "error_message": str(exc),
            },
        )
        raise HTTPException(status_code=500, detail=MSG_MESSAGES_FAILED) from exc


@router.post("/conversations/{conversation_id}/messages", status_code=201)
async def post_message(
    conversation_id: UUID,
    body: MessageSendRequest,
    user: CurrentUser = Depends(get_current_user),
) -> Any:
    """Send a message. Blank content sends nothing and answers 204."""
    try:
        row = send_message(conversation_id, user.id, body.content)
    except Exception as exc:
        logger.error(
            "post_message_failed",
            extra={
                "user_id": str(user.id),
                "conversation_id": str(conversation_id),
                "error_message": str(exc),
            },
        )
        raise HTTPException(status_code=500, detail=MSG_SEND_FAILED) from exc

    if row is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return row


# ---------------------------------------------------------------------------
# Live inbox
# ---------------------------------------------------------------------------

def _dump(items: list[Any]) -> list[dict[str, Any]]:
    return [item.model_dump(mode="json") for item in items]


async def _send_error(websocket: WebSocket, detail: str) -> None:
    await websocket.send_json({"type": "error", "detail": detail})


async def _send_conversations(websocket: WebSocket, session: InboxSession) -> None:
    try:
        summaries = session.refresh_conversations()
    except Exception as exc:
        logger.error(
            "inbox_conversations_failed",
            extra={"user_id": str(session.user_id), "error_message": str(exc)},
        )
        await _send_error(websocket, MSG_CONVERSATIONS_FAILED)
        return
    await websocket.send_json({"type": "conversations", "conversations": _dump(summaries)})


async def _handle_command(
    websocket: WebSocket,
    session: InboxSession,
    command: dict[str, Any],
) -> None:
    action = command.get("action") if isinstance(command, dict) else None

    if action == "refresh":
        await _send_conversations(websocket, session)

    elif action == "select":
        try:
            conversation_id = UUID(str(command.get("conversation_id")))
        except ValueError:
            await _send_error(websocket, "Invalid conversation id")
            return
        try:
            messages = session.select_conversation(conversation_id)
        except Exception as exc:
            logger.error(
                "inbox_select_failed",
                extra={
                    "user_id": str(session.user_id),
                    "conversation_id": str(conversation_id),
                    "error_message": str(exc),
                },
            )
            await _send_error(websocket, MSG_MESSAGES_FAILED)
            return
        await websocket.send_json(
            {
                "type": "messages",
                "conversation_id": str(conversation_id),
                "messages": _dump(messages),
            }
        )

    elif action == "send":
        try:
            session.send(str(command.get("content") or ""))
        except Exception as exc:
            logger.error(
                "inbox_send_failed",
                extra={
                    "user_id": str(session.user_id),
                    "conversation_id": str(session.selected_conversation_id),
                    "error_message": str(exc),
                },
            )
            await _send_error(websocket, MSG_SEND_FAILED)

    else:
        await _send_error(websocket, f"Unknown action: {action}")


async def _forward_inserts(
    websocket: WebSocket,
    session: InboxSession,
    inserts: asyncio.Queue[dict[str, Any]],
) -> None:
    """Drain realtime inserts into the session and push appended messages."""
    while True:
        record = await inserts.get()
        try:
            message = session.handle_insert(record)
        except Exception as exc:
            logger.error(
                "inbox_fetch_message_failed",
                extra={"message_id": str(record.get("id")), "error_message": str(exc)},
            )
            continue
        if message is not None:
            await websocket.send_json(
                {"type": "message", "message": message.model_dump(mode="json")}
            )


@router.websocket("/ws")
async def inbox_socket(websocket: WebSocket, token: str = Query(default="")) -> None:
    """One mounted inbox: a realtime subscription for the socket's lifetime."""
    try:
        user = resolve_user(token)
    except AuthError:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    session = InboxSession(user_id=user.id)
    loop = asyncio.get_running_loop()
    inserts: asyncio.Queue[dict[str, Any]] = asyncio.Queue()

    def _enqueue(record: dict[str, Any]) -> None:
        loop.call_soon_threadsafe(inserts.put_nowait, record)

    try:
        channel = await subscribe_message_inserts(_enqueue)
    except Exception as exc:
        logger.error(
            "inbox_subscribe_failed",
            extra={"user_id": str(user.id), "error_message": str(exc)},
        )
        await _send_error(websocket, MSG_LIVE_UPDATES_FAILED)
        await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
        return

    forwarder = asyncio.create_task(_forward_inserts(websocket, session, inserts))

    try:
        await _send_conversations(websocket, session)
        while True:
            text = await websocket.receive_text()
            try:
                command = json.loads(text)
            except ValueError:
                logger.warning(
                    "inbox_command_invalid",
                    extra={"user_id": str(user.id), "frame": text[:200]},
                )
                await _send_error(websocket, MSG_INVALID_COMMAND)
                continue
            await _handle_command(websocket, session, command)
    except WebSocketDisconnect:
        logger.info("inbox_disconnected", extra={"user_id": str(user.id)})
    finally:
        forwarder.cancel()
        await asyncio.gather(forwarder, return_exceptions=True)
        await unsubscribe(channel)
