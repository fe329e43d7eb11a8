"""Error hierarchy for organized-ai.

Every error raised by the library derives from ``OrganizedAIError`` and
carries a string ``code`` discriminant, so callers can either catch a
specific subclass or branch on ``exc.code``.

Classes
-------
- OrganizedAIError         — root of the hierarchy
- NotFoundError            — unknown session, server, API key, or variable
- SessionNotFoundError     — unknown session id
- ServerNotFoundError      — unknown server id
- PreconditionFailedError  — operation not allowed in the current state
- NoActiveContextError     — context-scoped call without a context
- ServerDisabledError      — client requested for a disabled server
- MissingApiKeysError      — enabling a server whose keys are not all set
- NetworkError             — transport-level failure
- RequestTimeoutError      — request exceeded the configured timeout
- ProtocolError            — server answered with an error body
- PersistenceError         — a settings or sessions file could not be written
"""
from __future__ import annotations

from typing import Any

import httpx

_DEFAULT_PROTOCOL_MESSAGE = "An error occurred with the MCP server"


class OrganizedAIError(Exception):
    """Base class for all library errors."""

    code: str = "UNKNOWN_ERROR"

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


# ---------------------------------------------------------------------------
# NotFound
# ---------------------------------------------------------------------------


class NotFoundError(OrganizedAIError, LookupError):
    """Raised when a named session, server, API key or variable is unknown."""

    code = "NOT_FOUND"


class SessionNotFoundError(NotFoundError):
    """Raised when a requested session does not exist in the store."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Session {session_id!r} not found.")


class ServerNotFoundError(NotFoundError):
    """Raised when a server id has no settings entry."""

    def __init__(self, server_id: str) -> None:
        self.server_id = server_id
        super().__init__(f"Server with ID {server_id!r} not found.")


# ---------------------------------------------------------------------------
# PreconditionFailed
# ---------------------------------------------------------------------------


class PreconditionFailedError(OrganizedAIError):
    """Raised when an operation is not allowed in the current state."""

    code = "PRECONDITION_FAILED"


class NoActiveContextError(PreconditionFailedError):
    """Raised by context-scoped client calls when no context is set."""

    def __init__(self) -> None:
        super().__init__(
            "No active context. Call create_context first or set the context ID."
        )


class ServerDisabledError(PreconditionFailedError):
    """Raised when a client is requested for a server that is not enabled."""

    def __init__(self, server_id: str, server_name: str | None = None) -> None:
        self.server_id = server_id
        super().__init__(f"Server {server_name or server_id!r} is not enabled.")


class MissingApiKeysError(PreconditionFailedError):
    """Raised when enabling a server whose required API keys are not all set."""

    def __init__(
        self,
        server_id: str,
        missing_keys: list[str],
        server_name: str | None = None,
    ) -> None:
        self.server_id = server_id
        self.missing_keys = list(missing_keys)
        super().__init__(
            f"Cannot enable server {server_name or server_id!r}. "
            f"Missing required API keys: {', '.join(missing_keys)}"
        )


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------


class NetworkError(OrganizedAIError):
    """Raised when the request never produced an HTTP response."""

    code = "NETWORK_ERROR"

    def __init__(self, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(f"Network error: {cause}")


class RequestTimeoutError(OrganizedAIError, TimeoutError):
    """Raised when a request exceeds the client's configured timeout."""

    code = "TIMEOUT_ERROR"

    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(f"Request timed out after {timeout:g}s")


class ProtocolError(OrganizedAIError):
    """Raised when the server responds with an error.

    Parameters
    ----------
    message:
        Server-supplied (or fallback) error message.
    code:
        Server-supplied error code, ``API_ERROR`` when absent.
    status_code:
        HTTP status of the response, if any.
    details:
        The decoded response body, kept for diagnostics.
    """

    code = "API_ERROR"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        status_code: int | None = None,
        details: Any = None,
    ) -> None:
        super().__init__(message, code=code)
        self.status_code = status_code
        self.details = details

    @classmethod
    def from_response(
        cls,
        response: httpx.Response,
        fallback_message: str = _DEFAULT_PROTOCOL_MESSAGE,
    ) -> ProtocolError:
        """Build an error from an HTTP error response.

        The message is taken from ``error.message`` or ``message`` in the
        JSON body, and the code from ``error.code`` or ``code``.
        """
        try:
            data = response.json()
        except ValueError:
            data = response.text or None

        message: str | None = None
        code: str | None = None
        if isinstance(data, dict):
            error = data.get("error")
            if isinstance(error, dict):
                message = error.get("message")
                code = error.get("code")
            message = message or data.get("message")
            code = code or data.get("code")

        return cls(
            str(message or fallback_message),
            code=str(code) if code else None,
            status_code=response.status_code,
            details=data,
        )


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


class PersistenceError(OrganizedAIError):
    """Raised when a settings or sessions document cannot be written."""

    code = "PERSISTENCE_ERROR"

    def __init__(self, path: object, cause: BaseException) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to write {path}: {cause}")
