"""Unit tests for organized_ai.errors."""
from __future__ import annotations

import httpx
import pytest

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


# ---------------------------------------------------------------------------
# Hierarchy and codes
# ---------------------------------------------------------------------------


class TestHierarchy:
    @pytest.mark.parametrize(
        "error, code",
        [
            (SessionNotFoundError("s1"), "NOT_FOUND"),
            (ServerNotFoundError("x"), "NOT_FOUND"),
            (NoActiveContextError(), "PRECONDITION_FAILED"),
            (ServerDisabledError("x"), "PRECONDITION_FAILED"),
            (MissingApiKeysError("x", ["K"]), "PRECONDITION_FAILED"),
            (NetworkError(OSError("boom")), "NETWORK_ERROR"),
            (RequestTimeoutError(5), "TIMEOUT_ERROR"),
            (ProtocolError("bad"), "API_ERROR"),
            (PersistenceError("/tmp/x.json", OSError("disk full")), "PERSISTENCE_ERROR"),
        ],
    )
    def test_codes(self, error: OrganizedAIError, code: str) -> None:
        assert isinstance(error, OrganizedAIError)
        assert error.code == code

    def test_not_found_is_lookup_error(self) -> None:
        assert isinstance(SessionNotFoundError("s1"), LookupError)
        assert isinstance(ServerNotFoundError("x"), NotFoundError)

    def test_preconditions_share_base(self) -> None:
        for error in (NoActiveContextError(), ServerDisabledError("x"), MissingApiKeysError("x", [])):
            assert isinstance(error, PreconditionFailedError)

    def test_timeout_is_builtin_timeout(self) -> None:
        assert isinstance(RequestTimeoutError(1.5), TimeoutError)

    def test_explicit_code_overrides_class_code(self) -> None:
        error = OrganizedAIError("x", code="CUSTOM")
        assert error.code == "CUSTOM"
        assert OrganizedAIError.code == "UNKNOWN_ERROR"


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------


class TestMessages:
    def test_session_not_found_message(self) -> None:
        error = SessionNotFoundError("abc")
        assert "abc" in str(error)
        assert error.session_id == "abc"

    def test_missing_keys_lists_names(self) -> None:
        error = MissingApiKeysError("github-mcp", ["GITHUB_TOKEN"], server_name="GitHub MCP")
        assert "GITHUB_TOKEN" in error.message
        assert "GitHub MCP" in error.message
        assert error.missing_keys == ["GITHUB_TOKEN"]

    def test_server_disabled_prefers_name(self) -> None:
        assert "GitHub MCP" in str(ServerDisabledError("github-mcp", "GitHub MCP"))

    def test_timeout_message(self) -> None:
        assert str(RequestTimeoutError(30.0)) == "Request timed out after 30s"

    def test_network_error_keeps_cause(self) -> None:
        cause = ConnectionRefusedError("refused")
        assert NetworkError(cause).cause is cause


# ---------------------------------------------------------------------------
# ProtocolError.from_response
# ---------------------------------------------------------------------------


class TestProtocolErrorFromResponse:
    def test_nested_error_object(self) -> None:
        response = httpx.Response(
            404, json={"error": {"message": "Context not found", "code": "CONTEXT_NOT_FOUND"}}
        )
        error = ProtocolError.from_response(response)
        assert error.message == "Context not found"
        assert error.code == "CONTEXT_NOT_FOUND"
        assert error.status_code == 404

    def test_flat_message_and_code(self) -> None:
        response = httpx.Response(400, json={"message": "bad input", "code": "BAD"})
        error = ProtocolError.from_response(response)
        assert error.message == "bad input"
        assert error.code == "BAD"

    def test_fallback_message_and_default_code(self) -> None:
        error = ProtocolError.from_response(httpx.Response(500, json={}))
        assert error.message == "An error occurred with the MCP server"
        assert error.code == "API_ERROR"

    def test_non_json_body_kept_as_details(self) -> None:
        error = ProtocolError.from_response(httpx.Response(502, text="Bad Gateway"))
        assert error.details == "Bad Gateway"
        assert error.status_code == 502
