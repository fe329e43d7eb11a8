"""Unit tests for organized_ai.session.coordinator.SessionCoordinator.

Settings and sessions live in InMemoryBackend instances; the server is
simulated with respx.
"""
from __future__ import annotations

import asyncio
import json

import httpx
import pytest
import respx
from httpx import Response

from organized_ai.client.registry import ClientRegistry
from organized_ai.errors import (
    NetworkError,
    ProtocolError,
    ServerDisabledError,
    SessionNotFoundError,
)
from organized_ai.protocol.models import Message, MessageRole
from organized_ai.session.coordinator import SessionCoordinator
from organized_ai.session.store import SessionStore
from organized_ai.settings.manager import SettingsManager
from organized_ai.storage.memory import InMemoryBackend

FS = "http://localhost:5001"


def _reply(text: str) -> Response:
    return Response(200, json={"assistant_message": {"role": "assistant", "content": text}})


def _body(route: respx.Route, index: int = 0) -> dict:
    return json.loads(route.calls[index].request.content)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def settings() -> SettingsManager:
    manager = SettingsManager(InMemoryBackend())
    manager.enable_server("filesystem-mcp")
    return manager


@pytest.fixture()
def session_backend() -> InMemoryBackend:
    return InMemoryBackend()


@pytest.fixture()
def registry(settings: SettingsManager) -> ClientRegistry:
    return ClientRegistry(settings)


@pytest.fixture()
def coordinator(session_backend: InMemoryBackend, registry: ClientRegistry) -> SessionCoordinator:
    return SessionCoordinator(SessionStore(session_backend), registry)


# ---------------------------------------------------------------------------
# Local lifecycle
# ---------------------------------------------------------------------------


class TestLocalLifecycle:
    def test_create_session_is_local_only(
        self, coordinator: SessionCoordinator, session_backend: InMemoryBackend
    ) -> None:
        with respx.mock(assert_all_called=False) as router:
            route = router.route()
            session = coordinator.create_session("filesystem-mcp", "Files")

        assert session.title == "Files"
        assert session.context_id is None
        assert session_backend.save_count == 1
        assert not route.called

    def test_create_session_default_title(self, coordinator: SessionCoordinator) -> None:
        assert coordinator.create_session("filesystem-mcp").title == "New Conversation"

    def test_sessions_listed_in_creation_order(self, coordinator: SessionCoordinator) -> None:
        ids = [coordinator.create_session("filesystem-mcp", t).id for t in ("a", "b", "c")]
        assert [s.id for s in coordinator.list_sessions()] == ids

    def test_rename(self, coordinator: SessionCoordinator) -> None:
        session = coordinator.create_session("filesystem-mcp")
        assert coordinator.rename_session(session.id, "Renamed") is True
        assert coordinator.get_session(session.id).title == "Renamed"

    def test_rename_unknown_writes_nothing(
        self, coordinator: SessionCoordinator, session_backend: InMemoryBackend
    ) -> None:
        coordinator.create_session("filesystem-mcp")
        saves = session_backend.save_count
        assert coordinator.rename_session("ghost", "x") is False
        assert session_backend.save_count == saves

    def test_delete_twice(self, coordinator: SessionCoordinator) -> None:
        session = coordinator.create_session("filesystem-mcp")
        assert coordinator.delete_session(session.id) is True
        assert coordinator.delete_session(session.id) is False
        assert coordinator.get_session(session.id) is None

    def test_reset_context_unknown(self, coordinator: SessionCoordinator) -> None:
        assert coordinator.reset_context("ghost") is False


# ---------------------------------------------------------------------------
# send_message
# ---------------------------------------------------------------------------


class TestSendMessage:
    @pytest.mark.asyncio
    @respx.mock
    async def test_first_message_creates_context_with_history(
        self, coordinator: SessionCoordinator, registry: ClientRegistry
    ) -> None:
        create = respx.post(f"{FS}/context").mock(
            return_value=Response(200, json={"context_id": "ctx-1"})
        )
        run = respx.post(f"{FS}/context/ctx-1/run").mock(return_value=_reply("Hi!"))
        session = coordinator.create_session("filesystem-mcp")

        reply = await coordinator.send_message(session.id, "Hello")

        assert reply.role is MessageRole.ASSISTANT
        assert reply.content == "Hi!"
        assert _body(create) == {"messages": [{"role": "user", "content": "Hello"}]}
        assert run.call_count == 1
        stored = coordinator.get_session(session.id)
        assert stored.context_id == "ctx-1"
        assert [(m.role.value, m.content) for m in stored.messages] == [
            ("user", "Hello"),
            ("assistant", "Hi!"),
        ]
        await registry.aclose()

    @pytest.mark.asyncio
    @respx.mock
    async def test_later_messages_append_only_new_message(
        self, coordinator: SessionCoordinator, registry: ClientRegistry
    ) -> None:
        create = respx.post(f"{FS}/context").mock(
            return_value=Response(200, json={"context_id": "ctx-1"})
        )
        append = respx.post(f"{FS}/context/ctx-1/messages").mock(
            return_value=Response(200, json={"success": True})
        )
        respx.post(f"{FS}/context/ctx-1/run").mock(
            side_effect=[_reply("first"), _reply("second")]
        )
        session = coordinator.create_session("filesystem-mcp")

        await coordinator.send_message(session.id, "one")
        await coordinator.send_message(session.id, "two")

        assert create.call_count == 1
        assert _body(append) == {"messages": [{"role": "user", "content": "two"}]}
        assert len(coordinator.get_session(session.id).messages) == 4
        await registry.aclose()

    @pytest.mark.asyncio
    async def test_unknown_session_raises_without_writing(
        self, coordinator: SessionCoordinator, session_backend: InMemoryBackend
    ) -> None:
        with pytest.raises(SessionNotFoundError):
            await coordinator.send_message("ghost", "Hello")
        assert session_backend.save_count == 0

    @pytest.mark.asyncio
    async def test_disabled_server_keeps_user_message(
        self, coordinator: SessionCoordinator, settings: SettingsManager
    ) -> None:
        session = coordinator.create_session("browser-mcp")

        with pytest.raises(ServerDisabledError):
            await coordinator.send_message(session.id, "Open example.com")

        stored = coordinator.get_session(session.id)
        assert [m.content for m in stored.messages] == ["Open example.com"]
        assert stored.context_id is None

    @pytest.mark.asyncio
    @respx.mock
    async def test_run_failure_keeps_context_and_user_message(
        self,
        coordinator: SessionCoordinator,
        registry: ClientRegistry,
        session_backend: InMemoryBackend,
    ) -> None:
        respx.post(f"{FS}/context").mock(return_value=Response(200, json={"context_id": "ctx-1"}))
        respx.post(f"{FS}/context/ctx-1/run").mock(
            return_value=Response(500, json={"message": "model crashed"})
        )
        session = coordinator.create_session("filesystem-mcp")

        with pytest.raises(ProtocolError):
            await coordinator.send_message(session.id, "Hello")

        reloaded = SessionStore(session_backend).get(session.id)
        assert reloaded.context_id == "ctx-1"
        assert [m.role for m in reloaded.messages] == [MessageRole.USER]
        await registry.aclose()

    @pytest.mark.asyncio
    @respx.mock
    async def test_create_failure_then_retry_sends_full_history(
        self, coordinator: SessionCoordinator, registry: ClientRegistry
    ) -> None:
        create = respx.post(f"{FS}/context").mock(
            side_effect=[
                httpx.ConnectError("refused"),
                Response(200, json={"context_id": "ctx-9"}),
            ]
        )
        respx.post(f"{FS}/context/ctx-9/run").mock(return_value=_reply("back"))
        session = coordinator.create_session("filesystem-mcp")

        with pytest.raises(NetworkError):
            await coordinator.send_message(session.id, "first")
        assert coordinator.get_session(session.id).context_id is None

        await coordinator.send_message(session.id, "second")

        assert [m["content"] for m in _body(create, 1)["messages"]] == ["first", "second"]
        await registry.aclose()

    @pytest.mark.asyncio
    @respx.mock
    async def test_reset_context_reseeds_history(
        self, coordinator: SessionCoordinator, registry: ClientRegistry
    ) -> None:
        create = respx.post(f"{FS}/context").mock(
            side_effect=[
                Response(200, json={"context_id": "ctx-1"}),
                Response(200, json={"context_id": "ctx-2"}),
            ]
        )
        respx.post(f"{FS}/context/ctx-1/run").mock(return_value=_reply("a"))
        respx.post(f"{FS}/context/ctx-2/run").mock(return_value=_reply("b"))
        session = coordinator.create_session("filesystem-mcp")

        await coordinator.send_message(session.id, "one")
        assert coordinator.reset_context(session.id) is True
        await coordinator.send_message(session.id, "two")

        assert coordinator.get_session(session.id).context_id == "ctx-2"
        assert [m["content"] for m in _body(create, 1)["messages"]] == ["one", "a", "two"]
        await registry.aclose()

    @pytest.mark.asyncio
    @respx.mock
    async def test_sessions_sharing_a_server_keep_their_contexts(
        self, coordinator: SessionCoordinator, registry: ClientRegistry
    ) -> None:
        respx.post(f"{FS}/context").mock(
            side_effect=[
                Response(200, json={"context_id": "ctx-a"}),
                Response(200, json={"context_id": "ctx-b"}),
            ]
        )
        append_a = respx.post(f"{FS}/context/ctx-a/messages").mock(
            return_value=Response(200, json={"success": True})
        )
        run_a = respx.post(f"{FS}/context/ctx-a/run").mock(return_value=_reply("A"))
        run_b = respx.post(f"{FS}/context/ctx-b/run").mock(return_value=_reply("B"))
        first = coordinator.create_session("filesystem-mcp")
        second = coordinator.create_session("filesystem-mcp")

        await coordinator.send_message(first.id, "1")
        await coordinator.send_message(second.id, "2")
        await coordinator.send_message(first.id, "3")

        assert append_a.call_count == 1
        assert run_a.call_count == 2
        assert run_b.call_count == 1
        await registry.aclose()

    @pytest.mark.asyncio
    @respx.mock
    async def test_concurrent_sends_on_one_session_are_serialised(
        self, coordinator: SessionCoordinator, registry: ClientRegistry
    ) -> None:
        create = respx.post(f"{FS}/context").mock(
            return_value=Response(200, json={"context_id": "ctx-1"})
        )
        respx.post(f"{FS}/context/ctx-1/messages").mock(
            return_value=Response(200, json={"success": True})
        )
        respx.post(f"{FS}/context/ctx-1/run").mock(
            side_effect=[_reply("r1"), _reply("r2")]
        )
        session = coordinator.create_session("filesystem-mcp")

        await asyncio.gather(
            coordinator.send_message(session.id, "q1"),
            coordinator.send_message(session.id, "q2"),
        )

        roles = [m.role.value for m in coordinator.get_session(session.id).messages]
        assert roles == ["user", "assistant", "user", "assistant"]
        assert create.call_count == 1
        await registry.aclose()


# ---------------------------------------------------------------------------
# add_message
# ---------------------------------------------------------------------------


class TestAddMessage:
    @pytest.mark.asyncio
    async def test_add_message_syncs_without_running(
        self, coordinator: SessionCoordinator, registry: ClientRegistry
    ) -> None:
        with respx.mock(assert_all_called=False) as router:
            create = router.post(f"{FS}/context").mock(
                return_value=Response(200, json={"context_id": "ctx-1"})
            )
            run = router.post(f"{FS}/context/ctx-1/run")
            session = coordinator.create_session("filesystem-mcp")

            stored = await coordinator.add_message(
                session.id, Message(role=MessageRole.SYSTEM, content="Be terse")
            )

        assert stored.content == "Be terse"
        assert _body(create)["messages"][0]["role"] == "system"
        assert not run.called
        await registry.aclose()

    @pytest.mark.asyncio
    async def test_add_message_unknown_session(self, coordinator: SessionCoordinator) -> None:
        with pytest.raises(SessionNotFoundError):
            await coordinator.add_message("ghost", Message(role="user", content="x"))
