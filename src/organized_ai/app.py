"""Application facade for organized-ai.

``OrganizedAI`` wires the settings manager, client registry, session store
and session coordinator over a configuration directory and exposes them
through one object.

Example
-------
::

    from organized_ai import OrganizedAI

    async with OrganizedAI() as app:
        app.enable_server("filesystem-mcp")
        session = app.create_session("filesystem-mcp", "File Explorer")
        reply = await app.send_message(session.id, "Hello!")
        print(reply.content)
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from organized_ai.client.client import OrganizedAIClient
from organized_ai.client.registry import ClientRegistry
from organized_ai.protocol.models import Message, ToolCallRequest, ToolCallResponse
from organized_ai.session.coordinator import SessionCoordinator
from organized_ai.session.state import Session
from organized_ai.session.store import SessionStore
from organized_ai.settings.manager import SettingsManager
from organized_ai.settings.models import GeneralSettings, PredefinedServer, ServerSettings
from organized_ai.storage.filesystem import DEFAULT_CONFIG_DIR, FilesystemBackend

logger = logging.getLogger(__name__)


class OrganizedAI:
    """One-stop entry point over settings, clients and sessions.

    ``settings.json`` lives in ``config_dir``; ``sessions.json`` lives there
    too unless the ``data_storage_path`` general setting points elsewhere.

    Parameters
    ----------
    config_dir:
        Configuration directory.  Defaults to ``~/.organized-ai``.
    timeout:
        Request timeout override for every client.  Defaults to the
        ``request_timeout`` general setting.
    """

    def __init__(self, config_dir: str | Path | None = None, *, timeout: float | None = None) -> None:
        self.config_dir = Path(config_dir).expanduser() if config_dir else DEFAULT_CONFIG_DIR
        if not self.config_dir.exists():
            logger.info("Creating configuration directory: %s", self.config_dir)
            self.config_dir.mkdir(parents=True, exist_ok=True)

        logger.info("Initializing settings manager")
        self.settings = SettingsManager(FilesystemBackend(self.config_dir))
        self.registry = ClientRegistry(self.settings, timeout=timeout)

        data_path = self.settings.get_general_settings().data_storage_path
        sessions_dir = Path(data_path).expanduser() if data_path else self.config_dir
        logger.info("Initializing session manager")
        self.store = SessionStore(FilesystemBackend(sessions_dir))
        self.sessions = SessionCoordinator(self.store, self.registry)

    async def aclose(self) -> None:
        await self.registry.aclose()

    async def __aenter__(self) -> OrganizedAI:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Servers
    # ------------------------------------------------------------------

    def get_server_settings(self, server_id: str) -> ServerSettings | None:
        return self.settings.get_server_settings(server_id)

    def get_all_server_settings(self) -> dict[str, ServerSettings]:
        return self.settings.get_all_server_settings()

    def update_server_settings(self, server_id: str, **changes: Any) -> ServerSettings:
        return self.registry.update_server_settings(server_id, **changes)

    def enable_server(self, server_id: str, enabled: bool = True) -> None:
        self.registry.enable_server(server_id, enabled)

    def get_predefined_servers(self) -> list[PredefinedServer]:
        return self.settings.get_predefined_servers()

    def get_client(self, server_id: str) -> OrganizedAIClient:
        return self.registry.get_client(server_id)

    # ------------------------------------------------------------------
    # API keys and environment variables
    # ------------------------------------------------------------------

    def get_api_key(self, key_name: str) -> str | None:
        return self.settings.get_api_key(key_name)

    def get_all_api_keys(self) -> dict[str, str]:
        return self.settings.get_all_api_keys()

    def set_api_key(self, key_name: str, value: str) -> None:
        logger.info("Setting API key %s", key_name)
        self.settings.set_api_key(key_name, value)

    def remove_api_key(self, key_name: str) -> None:
        logger.info("Removing API key %s", key_name)
        self.settings.remove_api_key(key_name)

    def get_environment_variable(self, name: str) -> str | None:
        return self.settings.get_environment_variable(name)

    def get_all_environment_variables(self) -> dict[str, str]:
        return self.settings.get_all_environment_variables()

    def set_environment_variable(self, name: str, value: str) -> None:
        logger.info("Setting environment variable %s", name)
        self.settings.set_environment_variable(name, value)

    def remove_environment_variable(self, name: str) -> None:
        logger.info("Removing environment variable %s", name)
        self.settings.remove_environment_variable(name)

    def get_general_settings(self) -> GeneralSettings:
        return self.settings.get_general_settings()

    def update_general_settings(self, **changes: Any) -> GeneralSettings:
        return self.settings.update_general_settings(**changes)

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def create_session(self, server_id: str, title: str | None = None) -> Session:
        return self.sessions.create_session(server_id, title)

    def get_session(self, session_id: str) -> Session | None:
        return self.sessions.get_session(session_id)

    def list_sessions(self) -> list[Session]:
        return self.sessions.list_sessions()

    async def send_message(self, session_id: str, content: str) -> Message:
        return await self.sessions.send_message(session_id, content)

    def rename_session(self, session_id: str, title: str) -> bool:
        return self.sessions.rename_session(session_id, title)

    def delete_session(self, session_id: str) -> bool:
        return self.sessions.delete_session(session_id)

    def reset_context(self, session_id: str) -> bool:
        return self.sessions.reset_context(session_id)

    # ------------------------------------------------------------------
    # Tools
    # ------------------------------------------------------------------

    async def call_tool(
        self,
        server_id: str,
        tool_name: str,
        parameters: dict[str, Any] | None = None,
    ) -> ToolCallResponse:
        """Call ``tool_name`` on ``server_id`` outside of any session.

        Uses the client's current context, creating an empty one first if
        the client has none.
        """
        logger.info("Calling tool %s on server %s", tool_name, server_id)
        client = self.registry.get_client(server_id)
        if client.get_current_context_id() is None:
            logger.debug("Creating new context for tool call")
            await client.create_context()
        return await client.call_tool(ToolCallRequest(name=tool_name, parameters=parameters or {}))

    def __repr__(self) -> str:
        return f"OrganizedAI(config_dir={str(self.config_dir)!r})"
