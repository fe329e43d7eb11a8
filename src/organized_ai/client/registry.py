"""Per-server client cache.

``ClientRegistry`` hands out one live ``OrganizedAIClient`` per enabled
server id, building it from the current settings on first request and
evicting it whenever that server's settings change or it is disabled.

Classes
-------
- ClientRegistry  — build, cache, and invalidate protocol clients
"""
from __future__ import annotations

import logging
from typing import Any

from organized_ai.client.client import OrganizedAIClient
from organized_ai.errors import ServerDisabledError, ServerNotFoundError
from organized_ai.settings.manager import SettingsManager
from organized_ai.settings.models import ServerSettings

logger = logging.getLogger(__name__)


class ClientRegistry:
    """Cache of protocol clients keyed by server id.

    Clients are shared by every session that targets the same server, so
    the context a client currently points at says nothing about which
    session last used it.

    Parameters
    ----------
    settings:
        Source of server definitions and API key values.
    timeout:
        Request timeout for constructed clients.  When None, the
        ``request_timeout`` general setting is read at construction time of
        each client.
    """

    def __init__(self, settings: SettingsManager, *, timeout: float | None = None) -> None:
        self._settings = settings
        self._timeout = timeout
        self._clients: dict[str, OrganizedAIClient] = {}
        self._retired: list[OrganizedAIClient] = []

    @property
    def settings(self) -> SettingsManager:
        return self._settings

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get_client(self, server_id: str) -> OrganizedAIClient:
        """Return the cached client for ``server_id``, building it if needed.

        Raises
        ------
        ServerNotFoundError
            If ``server_id`` has no settings entry.
        ServerDisabledError
            If the server is not enabled.
        """
        client = self._clients.get(server_id)
        if client is not None:
            return client

        server = self._settings.get_server_settings(server_id)
        if server is None:
            logger.error("Server with ID %s not found", server_id)
            raise ServerNotFoundError(server_id)
        if not server.enabled:
            logger.error("Server %s is not enabled", server.name)
            raise ServerDisabledError(server_id, server.name)

        client = self._build_client(server)
        self._clients[server_id] = client
        return client

    def _build_client(self, server: ServerSettings) -> OrganizedAIClient:
        headers: dict[str, str] = {}
        for key_name in server.required_api_keys:
            value = self._settings.get_api_key(key_name)
            if value:
                headers[key_name] = value

        timeout = self._timeout
        if timeout is None:
            timeout = self._settings.get_general_settings().request_timeout

        logger.debug("Creating new client for server %s (%s)", server.id, server.name)
        return OrganizedAIClient(server.url, headers=headers, timeout=timeout)

    # ------------------------------------------------------------------
    # Invalidation
    # ------------------------------------------------------------------

    def invalidate(self, server_id: str) -> bool:
        """Evict the cached client for ``server_id``.

        The evicted client is closed by ``aclose``.

        Returns
        -------
        bool
            True if a client was cached and has been evicted.
        """
        client = self._clients.pop(server_id, None)
        if client is None:
            return False
        logger.debug("Clearing cached client for server %s", server_id)
        self._retired.append(client)
        return True

    def update_server_settings(self, server_id: str, **changes: Any) -> ServerSettings:
        """Update settings for ``server_id`` and evict its cached client."""
        logger.info("Updating settings for server %s", server_id)
        updated = self._settings.update_server_settings(server_id, **changes)
        self.invalidate(server_id)
        return updated

    def enable_server(self, server_id: str, enabled: bool = True) -> None:
        """Enable or disable ``server_id``; disabling evicts its cached client."""
        logger.info("%s server %s", "Enabling" if enabled else "Disabling", server_id)
        try:
            self._settings.enable_server(server_id, enabled)
        except Exception as exc:
            logger.error(
                "Failed to %s server %s: %s", "enable" if enabled else "disable", server_id, exc
            )
            raise
        if not enabled:
            self.invalidate(server_id)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def aclose(self) -> None:
        """Close every live and retired client and empty the cache."""
        clients = [*self._clients.values(), *self._retired]
        self._clients.clear()
        self._retired.clear()
        for client in clients:
            await client.aclose()

    def __contains__(self, server_id: object) -> bool:
        return server_id in self._clients

    def __len__(self) -> int:
        return len(self._clients)

    def __repr__(self) -> str:
        return f"ClientRegistry(cached={sorted(self._clients)!r})"
