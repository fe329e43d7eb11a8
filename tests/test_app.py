"""End-to-end tests for the OrganizedAI facade.

Each test gets its own configuration directory under tmp_path; servers are
simulated with respx.
"""
from __future__ import annotations

import json
from pathlib import Path

import pytest
import respx
from httpx import Response

from organized_ai import (
    MissingApiKeysError,
    OrganizedAI,
    ProtocolError,
    ServerDisabledError,
    ServerNotFoundError,
)

GITHUB = "http://localhost:5002"
FS = "http://localhost:5001"


def _reply(text: str) -> Response:
    return Response(200, json={"assistant_message": {"role": "assistant", "content": text}})


@pytest.fixture()
def config_dir(tmp_path: Path) -> Path:
    return tmp_path / "home"


@pytest.fixture()
def app(config_dir: Path) -> OrganizedAI:
    return OrganizedAI(config_dir)


# ---------------------------------------------------------------------------
# Startup
# ---------------------------------------------------------------------------


class TestStartup:
    def test_creates_config_dir_and_settings(self, app: OrganizedAI, config_dir: Path) -> None:
        assert (config_dir / "settings.json").is_file()
        assert not (config_dir / "sessions.json").exists()
        assert len(app.get_all_server_settings()) == 5

    def test_catalog(self, app: OrganizedAI) -> None:
        ids = [server.id for server in app.get_predefined_servers()]
        assert ids == ["filesystem-mcp", "github-mcp", "google-mcp", "browser-mcp", "search-mcp"]

    def test_data_storage_path_relocates_sessions(self, config_dir: Path, tmp_path: Path) -> None:
        data_dir = tmp_path / "data"
        OrganizedAI(config_dir).update_general_settings(data_storage_path=str(data_dir))

        app = OrganizedAI(config_dir)
        app.create_session("filesystem-mcp")

        assert (data_dir / "sessions.json").is_file()
        assert not (config_dir / "sessions.json").exists()

    def test_repr(self, app: OrganizedAI) -> None:
        assert "home" in repr(app)


# ---------------------------------------------------------------------------
# Server enablement
# ---------------------------------------------------------------------------


class TestServers:
    def test_enable_disable_reenable(self, app: OrganizedAI) -> None:
        app.enable_server("filesystem-mcp")
        client = app.get_client("filesystem-mcp")

        app.enable_server("filesystem-mcp", False)
        with pytest.raises(ServerDisabledError):
            app.get_client("filesystem-mcp")

        app.enable_server("filesystem-mcp")
        assert app.get_client("filesystem-mcp") is not client

    def test_unknown_server(self, app: OrganizedAI) -> None:
        with pytest.raises(ServerNotFoundError):
            app.enable_server("nope")

    def test_url_change_rebuilds_client(self, app: OrganizedAI) -> None:
        app.enable_server("filesystem-mcp")
        app.get_client("filesystem-mcp")
        app.update_server_settings("filesystem-mcp", url="http://fs.internal:7000/")
        assert app.get_client("filesystem-mcp").server_url == "http://fs.internal:7000"


# ---------------------------------------------------------------------------
# Conversations
# ---------------------------------------------------------------------------


class TestConversations:
    @pytest.mark.asyncio
    @respx.mock
    async def test_github_conversation(self, app: OrganizedAI, config_dir: Path) -> None:
        create = respx.post(f"{GITHUB}/context").mock(
            return_value=Response(200, json={"context_id": "gh-ctx"})
        )
        append = respx.post(f"{GITHUB}/context/gh-ctx/messages").mock(
            return_value=Response(200, json={"success": True})
        )
        respx.post(f"{GITHUB}/context/gh-ctx/run").mock(
            side_effect=[_reply("api, web, cli"), _reply("web")]
        )

        with pytest.raises(MissingApiKeysError):
            app.enable_server("github-mcp")
        app.set_api_key("GITHUB_TOKEN", "ghp_secret")
        app.enable_server("github-mcp")
        session = app.create_session("github-mcp", "Repos")

        first = await app.send_message(session.id, "List my repos")
        assert first.content == "api, web, cli"
        assert create.call_count == 1
        assert len(json.loads(create.calls[0].request.content)["messages"]) == 1
        assert create.calls[0].request.headers["GITHUB_TOKEN"] == "ghp_secret"
        assert len(app.get_session(session.id).messages) == 2

        second = await app.send_message(session.id, "Filter to TypeScript")
        await app.aclose()

        assert second.content == "web"
        assert create.call_count == 1
        assert json.loads(append.calls[0].request.content) == {
            "messages": [{"role": "user", "content": "Filter to TypeScript"}]
        }
        stored = json.loads((config_dir / "sessions.json").read_text())
        assert stored[0]["contextId"] == "gh-ctx"
        assert [m["role"] for m in stored[0]["messages"]] == [
            "user", "assistant", "user", "assistant"
        ]

    @pytest.mark.asyncio
    @respx.mock
    async def test_sessions_survive_restart(self, app: OrganizedAI, config_dir: Path) -> None:
        respx.post(f"{FS}/context").mock(return_value=Response(200, json={"context_id": "c1"}))
        respx.post(f"{FS}/context/c1/run").mock(return_value=_reply("pong"))
        app.enable_server("filesystem-mcp")
        session = app.create_session("filesystem-mcp", "Ping")
        await app.send_message(session.id, "ping")
        await app.aclose()

        restarted = OrganizedAI(config_dir)
        restored = restarted.get_session(session.id)

        assert restored.title == "Ping"
        assert restored.context_id == "c1"
        assert restored.messages[-1].content == "pong"
        assert restarted.get_server_settings("filesystem-mcp").enabled is True

    @pytest.mark.asyncio
    @respx.mock
    async def test_failed_run_persists_user_message(
        self, app: OrganizedAI, config_dir: Path
    ) -> None:
        respx.post(f"{FS}/context").mock(return_value=Response(200, json={"context_id": "c1"}))
        respx.post(f"{FS}/context/c1/run").mock(return_value=Response(503, text="unavailable"))
        app.enable_server("filesystem-mcp")
        session = app.create_session("filesystem-mcp")

        with pytest.raises(ProtocolError) as exc_info:
            await app.send_message(session.id, "hello?")
        await app.aclose()

        assert exc_info.value.code == "API_ERROR"
        restored = OrganizedAI(config_dir).get_session(session.id)
        assert [m.content for m in restored.messages] == ["hello?"]

    def test_rename_unknown_leaves_file_untouched(self, app: OrganizedAI, config_dir: Path) -> None:
        app.create_session("filesystem-mcp", "Keep")
        before = (config_dir / "sessions.json").read_text()
        assert app.rename_session("ghost", "x") is False
        assert (config_dir / "sessions.json").read_text() == before

    def test_delete_then_delete_again(self, app: OrganizedAI) -> None:
        session = app.create_session("filesystem-mcp")
        assert app.delete_session(session.id) is True
        assert app.delete_session(session.id) is False
        assert app.list_sessions() == []


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------


class TestCallTool:
    @pytest.mark.asyncio
    @respx.mock
    async def test_creates_context_once(self, app: OrganizedAI) -> None:
        create = respx.post(f"{FS}/context").mock(
            return_value=Response(200, json={"context_id": "tool-ctx"})
        )
        call = respx.post(f"{FS}/context/tool-ctx/tools/call").mock(
            return_value=Response(200, json={"result": ["a.txt", "b.txt"]})
        )
        app.enable_server("filesystem-mcp")

        first = await app.call_tool("filesystem-mcp", "list_dir", {"path": "/tmp"})
        await app.call_tool("filesystem-mcp", "list_dir")
        await app.aclose()

        assert first.result == ["a.txt", "b.txt"]
        assert create.call_count == 1
        assert call.call_count == 2
        assert json.loads(call.calls[1].request.content) == {"name": "list_dir", "parameters": {}}
