"""Wire models for the MCP context protocol.

All types are Pydantic BaseModel subclasses.  Field names match the wire
format (snake_case); optional fields left unset are omitted from request
bodies by ``OrganizedAIClient``.

Classes
-------
- MessageRole          — enum of conversational roles
- Message              — one conversational message
- Tool                 — a tool declaration attached to a context
- ServerInfo           — response of ``GET /info``
- CreateContextRequest / CreateContextResponse
- AddMessagesRequest / AddMessagesResponse
- RunRequest / RunResponse
- ToolError, ToolCall, ToolCallRequest, ToolCallResponse
- PromptSummary, ListPromptsResponse, GetPromptResponse
- RunPromptRequest / RunPromptResponse
"""
from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class MessageRole(str, Enum):
    """Roles a message can carry within a context."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class Message(BaseModel):
    """A single conversational message.

    Parameters
    ----------
    role:
        Who produced the message.
    content:
        The text payload.
    name:
        Optional participant name, passed through to the server.
    """

    role: MessageRole
    content: str
    name: str | None = None


class Tool(BaseModel):
    """A server-side callable declared when creating a context."""

    name: str
    description: str = ""
    parameters: dict[str, Any] = Field(default_factory=dict)


class ServerInfo(BaseModel):
    name: str
    version: str
    extensions: list[str] | None = None


# ---------------------------------------------------------------------------
# Context
# ---------------------------------------------------------------------------


class CreateContextRequest(BaseModel):
    """Initial payload for ``POST /context``."""

    messages: list[Message] | None = None
    tools: list[Tool] | None = None
    system: str | None = None
    roots: list[str] | None = None
    metadata: dict[str, Any] | None = None


class CreateContextResponse(BaseModel):
    context_id: str


class AddMessagesRequest(BaseModel):
    messages: list[Message]


class AddMessagesResponse(BaseModel):
    success: bool = True


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------


class ToolError(BaseModel):
    message: str
    code: str | None = None
    type: str | None = None


class ToolCall(BaseModel):
    """A tool invocation the model made while running."""

    name: str
    parameters: dict[str, Any] = Field(default_factory=dict)
    result: Any = None
    error: ToolError | None = None


class ToolCallRequest(BaseModel):
    name: str
    parameters: dict[str, Any] = Field(default_factory=dict)


class ToolCallResponse(BaseModel):
    result: Any = None
    error: ToolError | None = None


# ---------------------------------------------------------------------------
# Run
# ---------------------------------------------------------------------------


class RunRequest(BaseModel):
    messages: list[Message] | None = None
    metadata: dict[str, Any] | None = None


class RunResponse(BaseModel):
    """Result of running the model within a context.

    Parameters
    ----------
    assistant_message:
        The message the model produced.
    tool_calls:
        Tool invocations made during the run, if any.
    metadata:
        Free-form server metadata (usage, timings, ...).
    """

    assistant_message: Message
    tool_calls: list[ToolCall] | None = None
    metadata: dict[str, Any] | None = None


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------


class PromptSummary(BaseModel):
    id: str
    name: str
    description: str | None = None


class ListPromptsResponse(BaseModel):
    prompts: list[PromptSummary] = Field(default_factory=list)


class GetPromptResponse(BaseModel):
    id: str
    name: str
    description: str | None = None
    template: str
    parameters: dict[str, Any] | None = None


class RunPromptRequest(BaseModel):
    prompt_id: str
    arguments: dict[str, Any] | None = None
    metadata: dict[str, Any] | None = None


class RunPromptResponse(RunResponse):
    """Result of ``POST /context/{id}/prompts/run``; same shape as a run."""
