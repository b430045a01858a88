"""Unit tests for the live inbox: session state, realtime feed, and socket."""

from __future__ import annotations

import asyncio
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from tests.helpers import (
    OTHER_ID,
    USER_ID,
    conversation_row,
    message_row,
    participant_row,
)


def _messages(conversation_id, *contents: str) -> list:
    from app.models.message import Message

    return [Message(**message_row(conversation_id, c)) for c in contents]


# ---------------------------------------------------------------------------
# InboxSession
# ---------------------------------------------------------------------------


class TestSelectConversation:
    """Selecting a conversation replaces the visible thread."""

    @patch("app.services.inbox.load_messages")
    def test_switching_replaces_messages(self, mock_load: MagicMock) -> None:
        from app.services.inbox import InboxSession

        first, second = uuid4(), uuid4()
        mock_load.side_effect = [
            _messages(first, "a1", "a2"),
            _messages(second, "b1"),
        ]
        session = InboxSession(USER_ID)

        session.select_conversation(first)
        result = session.select_conversation(second)

        assert [m.content for m in result] == ["b1"]
        assert [m.content for m in session.messages] == ["b1"]
        assert session.selected_conversation_id == second

    @patch("app.services.inbox.load_messages")
    def test_reselecting_same_conversation_does_not_duplicate(
        self, mock_load: MagicMock
    ) -> None:
        from app.services.inbox import InboxSession

        conv = uuid4()
        mock_load.side_effect = lambda cid: _messages(conv, "x", "y")
        session = InboxSession(USER_ID)

        session.select_conversation(conv)
        session.select_conversation(conv)

        assert len(session.messages) == 2


class TestHandleInsert:
    """Row-insert notifications only touch the open conversation."""

    @patch("app.services.inbox.fetch_message")
    @patch("app.services.inbox.load_messages")
    def test_insert_for_open_conversation_is_appended(
        self, mock_load: MagicMock, mock_fetch: MagicMock
    ) -> None:
        from app.models.message import Message
        from app.services.inbox import InboxSession

        conv = uuid4()
        mock_load.return_value = _messages(conv, "old")
        new_row = message_row(conv, "new")
        mock_fetch.return_value = Message(**new_row)
        session = InboxSession(USER_ID)
        session.select_conversation(conv)

        appended = session.handle_insert(
            {"id": new_row["id"], "conversation_id": str(conv), "content": "new"}
        )

        assert appended is not None
        assert appended.sender is not None
        assert [m.content for m in session.messages] == ["old", "new"]
        mock_fetch.assert_called_once()

    @patch("app.services.inbox.fetch_message")
    @patch("app.services.inbox.load_messages")
    def test_insert_for_other_conversation_is_ignored(
        self, mock_load: MagicMock, mock_fetch: MagicMock
    ) -> None:
        from app.services.inbox import InboxSession

        conv = uuid4()
        mock_load.return_value = _messages(conv, "old")
        session = InboxSession(USER_ID)
        session.select_conversation(conv)

        result = session.handle_insert(
            {"id": str(uuid4()), "conversation_id": str(uuid4()), "content": "x"}
        )

        assert result is None
        assert [m.content for m in session.messages] == ["old"]
        mock_fetch.assert_not_called()

    @patch("app.services.inbox.fetch_message")
    def test_insert_with_nothing_selected_is_ignored(
        self, mock_fetch: MagicMock
    ) -> None:
        from app.services.inbox import InboxSession

        session = InboxSession(USER_ID)

        assert session.handle_insert(
            {"id": str(uuid4()), "conversation_id": str(uuid4())}
        ) is None
        assert session.messages == []
        mock_fetch.assert_not_called()

    @patch("app.services.inbox.fetch_message", return_value=None)
    @patch("app.services.inbox.load_messages")
    def test_vanished_row_is_not_appended(
        self, mock_load: MagicMock, _mock_fetch: MagicMock
    ) -> None:
        from app.services.inbox import InboxSession

        conv = uuid4()
        mock_load.return_value = []
        session = InboxSession(USER_ID)
        session.select_conversation(conv)

        assert session.handle_insert(
            {"id": str(uuid4()), "conversation_id": str(conv)}
        ) is None
        assert session.messages == []


class TestSessionSend:
    @patch("app.services.inbox.send_message")
    def test_send_without_selection_is_noop(self, mock_send: MagicMock) -> None:
        from app.services.inbox import InboxSession

        assert InboxSession(USER_ID).send("hello") is None
        mock_send.assert_not_called()

    @patch("app.services.messages.get_supabase")
    @patch("app.services.inbox.load_messages", return_value=[])
    def test_blank_send_does_not_reach_backend(
        self, _mock_load: MagicMock, mock_get_supabase: MagicMock
    ) -> None:
        from app.services.inbox import InboxSession

        session = InboxSession(USER_ID)
        session.select_conversation(uuid4())

        assert session.send("   ") is None
        mock_get_supabase.assert_not_called()

    @patch("app.services.inbox.send_message")
    @patch("app.services.inbox.load_messages", return_value=[])
    def test_send_does_not_append_locally(
        self, _mock_load: MagicMock, mock_send: MagicMock
    ) -> None:
        from app.services.inbox import InboxSession

        conv = uuid4()
        mock_send.return_value = message_row(conv, "hi", sender_id=USER_ID)
        session = InboxSession(USER_ID)
        session.select_conversation(conv)

        session.send("hi")

        mock_send.assert_called_once_with(conv, USER_ID, "hi")
        assert session.messages == []


# ---------------------------------------------------------------------------
# Realtime feed
# ---------------------------------------------------------------------------


class TestExtractRecord:
    @pytest.mark.parametrize(
        "payload",
        [
            {"data": {"type": "INSERT", "record": {"id": "1"}}, "ids": [7]},
            {"new": {"id": "1"}, "eventType": "INSERT"},
            {"record": {"id": "1"}},
        ],
    )
    def test_known_payload_shapes(self, payload: dict[str, Any]) -> None:
        from app.realtime.messages import extract_record

        assert extract_record(payload) == {"id": "1"}

    def test_unknown_payload(self) -> None:
        from app.realtime.messages import extract_record

        assert extract_record({"data": {"type": "INSERT"}}) is None


class TestSubscribe:
    def test_subscribes_to_message_inserts(self) -> None:
        from app.realtime.messages import subscribe_message_inserts, unsubscribe

        channel = MagicMock()
        channel.on_postgres_changes.return_value = channel
        channel.subscribe = AsyncMock()
        client = MagicMock()
        client.channel.return_value = channel
        client.remove_channel = AsyncMock()
        received: list[dict[str, Any]] = []

        with patch(
            "app.realtime.messages.get_async_supabase",
            new=AsyncMock(return_value=client),
        ):
            async def scenario() -> None:
                subscribed = await subscribe_message_inserts(received.append)
                assert subscribed is channel
                await unsubscribe(subscribed)

            asyncio.run(scenario())

        topic = client.channel.call_args.args[0]
        assert topic.startswith("messages-channel:")
        args, kwargs = channel.on_postgres_changes.call_args
        assert args == ("INSERT",)
        assert kwargs["schema"] == "public"
        assert kwargs["table"] == "messages"
        channel.subscribe.assert_awaited_once()
        client.remove_channel.assert_awaited_once_with(channel)

        callback = kwargs["callback"]
        callback({"data": {"record": {"id": "m1", "conversation_id": "c1"}}})
        callback({"data": {}})
        assert received == [{"id": "m1", "conversation_id": "c1"}]


class TestSubscriptionsPerInbox:
    """Each open inbox owns its own realtime channel."""

    def test_closing_one_inbox_keeps_the_other_subscribed(self) -> None:
        from realtime import AsyncRealtimeChannel, AsyncRealtimeClient

        from app.realtime.messages import subscribe_message_inserts, unsubscribe

        first_inbox: list[dict[str, Any]] = []
        second_inbox: list[dict[str, Any]] = []

        async def scenario() -> None:
            realtime = AsyncRealtimeClient(
                "http://localhost:54321/realtime/v1", token="anon-key"
            )
            with patch(
                "app.realtime.messages.get_async_supabase",
                new=AsyncMock(return_value=realtime),
            ), patch.object(
                AsyncRealtimeChannel, "subscribe", new=AsyncMock()
            ), patch.object(
                AsyncRealtimeChannel, "unsubscribe", new=AsyncMock()
            ):
                first = await subscribe_message_inserts(first_inbox.append)
                second = await subscribe_message_inserts(second_inbox.append)

                assert first.topic != second.topic
                assert set(realtime.channels) == {first.topic, second.topic}

                await unsubscribe(first)

                assert list(realtime.channels.values()) == [second]

                remaining = realtime.channels[second.topic]
                remaining.postgres_changes_callbacks[0].callback(
                    {"data": {"record": {"id": "m1", "conversation_id": "c1"}}}
                )

        asyncio.run(scenario())

        assert first_inbox == []
        assert second_inbox == [{"id": "m1", "conversation_id": "c1"}]


# ---------------------------------------------------------------------------
# WebSocket
# ---------------------------------------------------------------------------


@pytest.fixture()
def socket_patches():
    from app.core.auth import CurrentUser

    with patch(
        "app.routers.messages.resolve_user",
        return_value=CurrentUser(id=USER_ID),
    ), patch(
        "app.routers.messages.subscribe_message_inserts",
        new=AsyncMock(return_value=MagicMock()),
    ) as mock_subscribe, patch(
        "app.routers.messages.unsubscribe",
        new=AsyncMock(),
    ) as mock_unsubscribe, patch(
        "app.services.inbox.fetch_conversations"
    ) as mock_conversations, patch(
        "app.services.inbox.load_messages"
    ) as mock_load, patch(
        "app.services.inbox.fetch_message"
    ) as mock_fetch, patch(
        "app.services.inbox.send_message"
    ) as mock_send:
        yield {
            "subscribe": mock_subscribe,
            "unsubscribe": mock_unsubscribe,
            "conversations": mock_conversations,
            "load": mock_load,
            "fetch": mock_fetch,
            "send": mock_send,
        }


def _open_conversation(ws, socket_patches: dict[str, MagicMock], *contents: str) -> str:
    """Drain the initial list frame and select a fresh conversation."""
    conv = str(uuid4())
    socket_patches["load"].return_value = _messages(conv, *contents)
    ws.receive_json()
    ws.send_json({"action": "select", "conversation_id": conv})
    assert ws.receive_json()["type"] == "messages"
    return conv


class TestInboxSocket:
    def test_initial_conversations_and_select(
        self, test_client: TestClient, socket_patches: dict[str, MagicMock]
    ) -> None:
        from app.models.message import Conversation

        conv_row = conversation_row(
            [participant_row(USER_ID, "Me"), participant_row(OTHER_ID, "Grace")]
        )
        socket_patches["conversations"].return_value = [Conversation(**conv_row)]
        socket_patches["load"].return_value = _messages(conv_row["id"], "hey")

        with test_client.websocket_connect("/api/v1/messages/ws?token=jwt") as ws:
            first = ws.receive_json()
            assert first["type"] == "conversations"
            assert first["conversations"][0]["name"] == "Grace"

            ws.send_json({"action": "select", "conversation_id": conv_row["id"]})
            selected = ws.receive_json()
            assert selected["type"] == "messages"
            assert selected["conversation_id"] == conv_row["id"]
            assert [m["content"] for m in selected["messages"]] == ["hey"]

        socket_patches["subscribe"].assert_awaited_once()

    def test_unknown_action_reports_error(
        self, test_client: TestClient, socket_patches: dict[str, MagicMock]
    ) -> None:
        socket_patches["conversations"].return_value = []

        with test_client.websocket_connect("/api/v1/messages/ws?token=jwt") as ws:
            ws.receive_json()
            ws.send_json({"action": "dance"})
            error = ws.receive_json()

        assert error == {"type": "error", "detail": "Unknown action: dance"}

    def test_load_failure_reports_generic_error(
        self, test_client: TestClient, socket_patches: dict[str, MagicMock]
    ) -> None:
        socket_patches["conversations"].side_effect = Exception("rls")

        with test_client.websocket_connect("/api/v1/messages/ws?token=jwt") as ws:
            error = ws.receive_json()

        assert error == {"type": "error", "detail": "Failed to load conversations"}

    def test_invalid_token_is_rejected(self, test_client: TestClient) -> None:
        from app.core.auth import AuthError

        with patch("app.routers.messages.resolve_user", side_effect=AuthError("bad")):
            with pytest.raises(WebSocketDisconnect):
                with test_client.websocket_connect("/api/v1/messages/ws?token=bad"):
                    pass

    def test_non_json_frame_reports_invalid_command(
        self, test_client: TestClient, socket_patches: dict[str, MagicMock]
    ) -> None:
        socket_patches["conversations"].return_value = []

        with test_client.websocket_connect("/api/v1/messages/ws?token=jwt") as ws:
            ws.receive_json()
            ws.send_text("not json")
            error = ws.receive_json()

            ws.send_json({"action": "refresh"})
            still_open = ws.receive_json()

        assert error == {"type": "error", "detail": "Invalid command"}
        assert still_open["type"] == "conversations"

    def test_subscribe_failure_reports_error_and_closes(
        self, test_client: TestClient, socket_patches: dict[str, MagicMock]
    ) -> None:
        socket_patches["subscribe"].side_effect = Exception("realtime down")

        with test_client.websocket_connect("/api/v1/messages/ws?token=jwt") as ws:
            error = ws.receive_json()
            with pytest.raises(WebSocketDisconnect):
                ws.receive_json()

        assert error == {"type": "error", "detail": "Failed to connect to live updates"}
        socket_patches["conversations"].assert_not_called()
        socket_patches["unsubscribe"].assert_not_awaited()

    def test_insert_for_open_conversation_is_pushed(
        self, test_client: TestClient, socket_patches: dict[str, MagicMock]
    ) -> None:
        from app.models.message import Message

        socket_patches["conversations"].return_value = []

        with test_client.websocket_connect("/api/v1/messages/ws?token=jwt") as ws:
            conv = _open_conversation(ws, socket_patches, "old")
            on_insert = socket_patches["subscribe"].await_args.args[0]
            new_row = message_row(conv, "fresh", sender_id=OTHER_ID)
            socket_patches["fetch"].return_value = Message(**new_row)

            on_insert({"id": str(uuid4()), "conversation_id": str(uuid4())})
            on_insert({"id": new_row["id"], "conversation_id": conv})
            pushed = ws.receive_json()

        assert pushed["type"] == "message"
        assert pushed["message"]["content"] == "fresh"
        socket_patches["fetch"].assert_called_once()

    def test_insert_for_other_conversation_sends_nothing(
        self, test_client: TestClient, socket_patches: dict[str, MagicMock]
    ) -> None:
        socket_patches["conversations"].return_value = []

        with test_client.websocket_connect("/api/v1/messages/ws?token=jwt") as ws:
            _open_conversation(ws, socket_patches, "old")
            on_insert = socket_patches["subscribe"].await_args.args[0]

            on_insert({"id": str(uuid4()), "conversation_id": str(uuid4())})
            ws.send_json({"action": "refresh"})
            next_frame = ws.receive_json()

        assert next_frame["type"] == "conversations"
        socket_patches["fetch"].assert_not_called()

    def test_send_action_inserts_into_open_conversation(
        self, test_client: TestClient, socket_patches: dict[str, MagicMock]
    ) -> None:
        socket_patches["conversations"].return_value = []

        with test_client.websocket_connect("/api/v1/messages/ws?token=jwt") as ws:
            conv = _open_conversation(ws, socket_patches)
            ws.send_json({"action": "send", "content": "  hello  "})
            ws.send_json({"action": "refresh"})
            ws.receive_json()

        socket_patches["send"].assert_called_once_with(UUID(conv), USER_ID, "  hello  ")
