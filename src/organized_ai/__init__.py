"""organized-ai — MCP context-protocol client with persistent sessions.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import organized_ai
>>> organized_ai.__version__
'0.1.0'
"""
from __future__ import annotations

# Errors
from organized_ai.errors import (
    MissingApiKeysError,
    NetworkError,
    NoActiveContextError,
    NotFoundError,
    OrganizedAIError,
    PersistenceError,
    PreconditionFailedError,
    ProtocolError,
    RequestTimeoutError,
    ServerDisabledError,
    ServerNotFoundError,
    SessionNotFoundError,
)

# Wire models
from organized_ai.protocol.models import (
    CreateContextRequest,
    Message,
    MessageRole,
    RunResponse,
    Tool,
    ToolCallRequest,
    ToolCallResponse,
)

# Storage
from organized_ai.storage.base import StorageBackend
from organized_ai.storage.filesystem import FilesystemBackend
from organized_ai.storage.memory import InMemoryBackend

# Settings
from organized_ai.settings.manager import SettingsManager
from organized_ai.settings.models import GeneralSettings, PredefinedServer, ServerSettings

# Clients
from organized_ai.client.client import OrganizedAIClient
from organized_ai.client.registry import ClientRegistry

# Sessions
from organized_ai.session.coordinator import SessionCoordinator
from organized_ai.session.serializer import SessionSerializer
from organized_ai.session.state import Session
from organized_ai.session.store import SessionStore

# Facade
from organized_ai.app import OrganizedAI

__version__: str = "0.1.0"

__all__ = [
    "__version__",
    # Errors
    "MissingApiKeysError",
    "NetworkError",
    "NoActiveContextError",
    "NotFoundError",
    "OrganizedAIError",
    "PersistenceError",
    "PreconditionFailedError",
    "ProtocolError",
    "RequestTimeoutError",
    "ServerDisabledError",
    "ServerNotFoundError",
    "SessionNotFoundError",
    # Wire models
    "CreateContextRequest",
    "Message",
    "MessageRole",
    "RunResponse",
    "Tool",
    "ToolCallRequest",
    "ToolCallResponse",
    # Storage
    "FilesystemBackend",
    "InMemoryBackend",
    "StorageBackend",
    # Settings
    "GeneralSettings",
    "PredefinedServer",
    "ServerSettings",
    "SettingsManager",
    # Clients
    "ClientRegistry",
    "OrganizedAIClient",
    # Sessions
    "Session",
    "SessionCoordinator",
    "SessionSerializer",
    "SessionStore",
    # Facade
    "OrganizedAI",
]
