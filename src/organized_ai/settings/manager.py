"""Persistent key-value settings.

``SettingsManager`` owns the ``settings`` document: server definitions,
API keys, environment variables and general preferences.  It is plain
CRUD; the only rule it enforces is that a server can only be enabled once
all of its required API keys are set.

Classes
-------
- SettingsManager  — load, query, mutate and persist settings
"""
from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from organized_ai.errors import MissingApiKeysError, NotFoundError, ServerNotFoundError
from organized_ai.settings.models import (
    PREDEFINED_SERVERS,
    GeneralSettings,
    PredefinedServer,
    ServerSettings,
    Settings,
)
from organized_ai.storage.base import StorageBackend

logger = logging.getLogger(__name__)

SETTINGS_DOCUMENT = "settings"


class SettingsManager:
    """Read and write ``settings.json`` through a storage backend.

    Settings are loaded once on construction and mirrored to the backend
    after every mutation.  A missing or unreadable document yields default
    settings (the read failure is logged); on first launch the predefined
    server catalog is seeded, all servers disabled.

    Write failures are not swallowed: the backend raises
    ``PersistenceError`` and it propagates to the caller.

    Parameters
    ----------
    backend:
        Where the ``settings`` document lives.
    predefined_servers:
        Catalog used to seed first-launch settings.  Defaults to the
        built-in catalog.
    """

    def __init__(
        self,
        backend: StorageBackend,
        predefined_servers: tuple[PredefinedServer, ...] = PREDEFINED_SERVERS,
    ) -> None:
        self._backend = backend
        self._predefined_servers = predefined_servers
        self._settings = self._load()

        if not self._settings.servers:
            self._initialize_default_servers()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _load(self) -> Settings:
        if not self._backend.exists(SETTINGS_DOCUMENT):
            return Settings()
        try:
            raw = self._backend.load(SETTINGS_DOCUMENT)
            return Settings.model_validate_json(raw)
        except (OSError, KeyError, UnicodeDecodeError, ValidationError) as exc:
            logger.error("Failed to load settings: %s", exc)
            return Settings()

    def _save(self) -> None:
        payload = self._settings.model_dump_json(by_alias=True, indent=2)
        self._backend.save(SETTINGS_DOCUMENT, payload)

    def _initialize_default_servers(self) -> None:
        for server in self._predefined_servers:
            self._settings.servers[server.id] = server.to_server_settings()
        logger.info("Seeded %d predefined servers", len(self._predefined_servers))
        self._save()

    def reload(self) -> None:
        """Discard in-memory state and re-read the document."""
        self._settings = self._load()

    # ------------------------------------------------------------------
    # Servers
    # ------------------------------------------------------------------

    def _require_server(self, server_id: str) -> ServerSettings:
        server = self._settings.servers.get(server_id)
        if server is None:
            raise ServerNotFoundError(server_id)
        return server

    def get_server_settings(self, server_id: str) -> ServerSettings | None:
        """Return a copy of the settings for ``server_id``, or None if unknown."""
        server = self._settings.servers.get(server_id)
        return server.model_copy(deep=True) if server is not None else None

    def get_all_server_settings(self) -> dict[str, ServerSettings]:
        return {
            server_id: server.model_copy(deep=True)
            for server_id, server in self._settings.servers.items()
        }

    def update_server_settings(self, server_id: str, **changes: Any) -> ServerSettings:
        """Merge ``changes`` into the settings of ``server_id`` and persist.

        Parameters
        ----------
        server_id:
            The server to update.
        **changes:
            ``ServerSettings`` field names (``name``, ``url``,
            ``required_api_keys``, ``custom_settings``, ``enabled``).

        Returns
        -------
        ServerSettings
            A copy of the updated settings.

        Raises
        ------
        ServerNotFoundError
            If ``server_id`` is unknown.
        ValueError
            If ``changes`` names an unknown field or tries to change ``id``.
        MissingApiKeysError
            If ``changes`` turns ``enabled`` on while required keys are unset.
        """
        server = self._require_server(server_id)
        unknown = set(changes) - set(ServerSettings.model_fields)
        if unknown:
            raise ValueError(f"Unknown server settings: {', '.join(sorted(unknown))}")
        if changes.get("id", server_id) != server_id:
            raise ValueError("A server's id cannot be changed.")

        merged = ServerSettings.model_validate({**server.model_dump(), **changes})
        if merged.enabled and not server.enabled:
            self._check_required_keys(merged)
        self._settings.servers[server_id] = merged
        self._save()
        return merged.model_copy(deep=True)

    def _check_required_keys(self, server: ServerSettings) -> None:
        missing = [
            key for key in server.required_api_keys
            if not self._settings.api_keys.get(key)
        ]
        if missing:
            raise MissingApiKeysError(server.id, missing, server_name=server.name)

    def enable_server(self, server_id: str, enabled: bool = True) -> None:
        """Enable or disable ``server_id``.

        Enabling requires every name in ``required_api_keys`` to have a
        non-empty value.  The check happens here only: removing a key later
        does not disable an already enabled server.

        Raises
        ------
        ServerNotFoundError
            If ``server_id`` is unknown.
        MissingApiKeysError
            If enabling and one or more required keys are not set.
        """
        server = self._require_server(server_id)
        if enabled:
            self._check_required_keys(server)

        server.enabled = enabled
        self._save()

    # ------------------------------------------------------------------
    # API keys
    # ------------------------------------------------------------------

    def get_api_key(self, key_name: str) -> str | None:
        return self._settings.api_keys.get(key_name) or None

    def get_all_api_keys(self) -> dict[str, str]:
        return dict(self._settings.api_keys)

    def set_api_key(self, key_name: str, value: str) -> None:
        self._settings.api_keys[key_name] = value
        self._save()

    def remove_api_key(self, key_name: str) -> None:
        """Delete ``key_name`` from the store.

        Raises
        ------
        NotFoundError
            If no such key is stored.
        """
        if key_name not in self._settings.api_keys:
            raise NotFoundError(f"API key {key_name!r} not found.")
        del self._settings.api_keys[key_name]
        self._save()

    # ------------------------------------------------------------------
    # Environment variables
    # ------------------------------------------------------------------

    def get_environment_variable(self, name: str) -> str | None:
        return self._settings.environment_variables.get(name) or None

    def get_all_environment_variables(self) -> dict[str, str]:
        return dict(self._settings.environment_variables)

    def set_environment_variable(self, name: str, value: str) -> None:
        self._settings.environment_variables[name] = value
        self._save()

    def remove_environment_variable(self, name: str) -> None:
        if name not in self._settings.environment_variables:
            raise NotFoundError(f"Environment variable {name!r} not found.")
        del self._settings.environment_variables[name]
        self._save()

    # ------------------------------------------------------------------
    # General
    # ------------------------------------------------------------------

    def get_general_settings(self) -> GeneralSettings:
        return self._settings.general.model_copy()

    def update_general_settings(self, **changes: Any) -> GeneralSettings:
        """Merge ``changes`` into the general settings and persist.

        Raises
        ------
        ValueError
            If ``changes`` names an unknown field or fails validation.
        """
        unknown = set(changes) - set(GeneralSettings.model_fields)
        if unknown:
            raise ValueError(f"Unknown general settings: {', '.join(sorted(unknown))}")
        self._settings.general = GeneralSettings.model_validate(
            {**self._settings.general.model_dump(), **changes}
        )
        self._save()
        return self._settings.general.model_copy()

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    def get_predefined_servers(self) -> list[PredefinedServer]:
        return list(self._predefined_servers)

    def __repr__(self) -> str:
        return f"SettingsManager(backend={self._backend!r}, servers={len(self._settings.servers)})"
