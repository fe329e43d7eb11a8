"""HTTP client for one MCP context-protocol server.

``OrganizedAIClient`` wraps a single server endpoint.  It holds at most one
*current context id*; context-scoped calls (add messages, run, call tool,
run prompt) target that context unless an explicit ``context_id`` is
passed, and fail with ``NoActiveContextError`` when there is neither.

Usage::

    async with OrganizedAIClient("http://localhost:5001") as client:
        response = await client.chat("Hello!")
        print(response.assistant_message.content)

Classes
-------
- OrganizedAIClient  — async protocol client
"""
from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Mapping, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from organized_ai.errors import (
    NetworkError,
    NoActiveContextError,
    ProtocolError,
    RequestTimeoutError,
)
from organized_ai.protocol.models import (
    AddMessagesRequest,
    AddMessagesResponse,
    CreateContextRequest,
    CreateContextResponse,
    GetPromptResponse,
    ListPromptsResponse,
    Message,
    MessageRole,
    RunPromptRequest,
    RunPromptResponse,
    RunRequest,
    RunResponse,
    ServerInfo,
    Tool,
    ToolCallRequest,
    ToolCallResponse,
)
from organized_ai.settings.models import DEFAULT_REQUEST_TIMEOUT

logger = logging.getLogger(__name__)

_ModelT = TypeVar("_ModelT", bound=BaseModel)


class OrganizedAIClient:
    """Async client for a single MCP server.

    Parameters
    ----------
    server_url:
        Base URL of the server.  A trailing slash is removed.
    api_key:
        Optional bearer token sent as ``Authorization: Bearer <api_key>``.
    headers:
        Extra request headers, e.g. one per required API key.
    timeout:
        Per-request timeout in seconds.
    """

    def __init__(
        self,
        server_url: str,
        *,
        api_key: str | None = None,
        headers: Mapping[str, str] | None = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        self._server_url = server_url.rstrip("/")
        self._timeout = timeout

        merged = {"Content-Type": "application/json"}
        if api_key:
            merged["Authorization"] = f"Bearer {api_key}"
        merged.update(headers or {})
        self._headers = MappingProxyType(merged)

        self._current_context_id: str | None = None
        self._http: httpx.AsyncClient | None = None

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------

    @property
    def server_url(self) -> str:
        return self._server_url

    @property
    def headers(self) -> Mapping[str, str]:
        """Request headers; fixed at construction time."""
        return self._headers

    @property
    def timeout(self) -> float:
        return self._timeout

    def _get_http(self) -> httpx.AsyncClient:
        if self._http is None or self._http.is_closed:
            self._http = httpx.AsyncClient(
                base_url=self._server_url,
                headers=dict(self._headers),
                timeout=httpx.Timeout(self._timeout),
            )
        return self._http

    async def aclose(self) -> None:
        """Close the underlying HTTP connection pool."""
        if self._http is not None and not self._http.is_closed:
            await self._http.aclose()
        self._http = None

    async def __aenter__(self) -> OrganizedAIClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        response_model: type[_ModelT],
        payload: BaseModel | None = None,
    ) -> _ModelT:
        """Send one request and decode the response into ``response_model``.

        Raises
        ------
        RequestTimeoutError
            The request exceeded ``timeout``.
        NetworkError
            The request failed before a response was received.
        ProtocolError
            The server answered with status >= 400, or with a body that does
            not match ``response_model``.
        """
        body: dict[str, Any] | None = None
        if payload is not None:
            body = payload.model_dump(mode="json", exclude_none=True)
        elif method == "POST":
            body = {}

        try:
            response = await self._get_http().request(method, path, json=body)
        except httpx.TimeoutException as exc:
            logger.error("%s %s timed out after %ss", method, path, self._timeout)
            raise RequestTimeoutError(self._timeout) from exc
        except httpx.RequestError as exc:
            logger.error("%s %s failed: %s", method, path, exc)
            raise NetworkError(exc) from exc

        if response.status_code >= 400:
            error = ProtocolError.from_response(response)
            logger.error(
                "%s %s returned %d: %s", method, path, response.status_code, error.message
            )
            raise error

        try:
            return response_model.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise ProtocolError(
                f"Unexpected response from {method} {path}: {exc}",
                code="INVALID_RESPONSE",
                status_code=response.status_code,
                details=response.text,
            ) from exc

    # ------------------------------------------------------------------
    # Context id
    # ------------------------------------------------------------------

    @property
    def current_context_id(self) -> str | None:
        return self._current_context_id

    def get_current_context_id(self) -> str | None:
        return self._current_context_id

    def set_current_context_id(self, context_id: str) -> None:
        """Point subsequent context-scoped calls at ``context_id``.

        A client is shared by every session on the same server, so callers
        must set this before each context-scoped operation.
        """
        if not context_id:
            raise ValueError("context_id must be a non-empty string")
        self._current_context_id = context_id

    def _require_context(self, context_id: str | None) -> str:
        resolved = context_id or self._current_context_id
        if not resolved:
            raise NoActiveContextError()
        return resolved

    # ------------------------------------------------------------------
    # Server
    # ------------------------------------------------------------------

    async def get_server_info(self) -> ServerInfo:
        return await self._request("GET", "/info", ServerInfo)

    async def list_prompts(self) -> ListPromptsResponse:
        return await self._request("GET", "/prompts", ListPromptsResponse)

    async def get_prompt(self, prompt_id: str) -> GetPromptResponse:
        return await self._request("GET", f"/prompts/{prompt_id}", GetPromptResponse)

    # ------------------------------------------------------------------
    # Context-scoped operations
    # ------------------------------------------------------------------

    async def create_context(self, request: CreateContextRequest | None = None) -> str:
        """Create a context on the server and make it the current one.

        Returns
        -------
        str
            The server-assigned context id.
        """
        response = await self._request(
            "POST", "/context", CreateContextResponse, request or CreateContextRequest()
        )
        self._current_context_id = response.context_id
        logger.debug("Created context %s on %s", response.context_id, self._server_url)
        return response.context_id

    async def add_messages(
        self,
        request: AddMessagesRequest,
        *,
        context_id: str | None = None,
    ) -> AddMessagesResponse:
        target = self._require_context(context_id)
        return await self._request(
            "POST", f"/context/{target}/messages", AddMessagesResponse, request
        )

    async def run(
        self,
        request: RunRequest | None = None,
        *,
        context_id: str | None = None,
    ) -> RunResponse:
        """Run the model within the context and return its reply."""
        target = self._require_context(context_id)
        return await self._request("POST", f"/context/{target}/run", RunResponse, request)

    async def call_tool(
        self,
        request: ToolCallRequest,
        *,
        context_id: str | None = None,
    ) -> ToolCallResponse:
        target = self._require_context(context_id)
        return await self._request(
            "POST", f"/context/{target}/tools/call", ToolCallResponse, request
        )

    async def run_prompt(
        self,
        request: RunPromptRequest,
        *,
        context_id: str | None = None,
    ) -> RunPromptResponse:
        target = self._require_context(context_id)
        return await self._request(
            "POST", f"/context/{target}/prompts/run", RunPromptResponse, request
        )

    # ------------------------------------------------------------------
    # Convenience
    # ------------------------------------------------------------------

    async def chat(
        self,
        message: str,
        system: str | None = None,
        tools: list[Tool] | None = None,
    ) -> RunResponse:
        """Send ``message`` and run the model in one call.

        Creates a context (with ``system`` and ``tools``) on first use and
        appends to it afterwards.  Nothing is persisted locally; use
        ``SessionCoordinator`` for stored conversations.
        """
        user_message = Message(role=MessageRole.USER, content=message)
        if self._current_context_id is None:
            await self.create_context(
                CreateContextRequest(system=system, tools=tools, messages=[user_message])
            )
        else:
            await self.add_messages(AddMessagesRequest(messages=[user_message]))
        return await self.run()

    def __repr__(self) -> str:
        return (
            f"OrganizedAIClient(server_url={self._server_url!r}, "
            f"context_id={self._current_context_id!r})"
        )
