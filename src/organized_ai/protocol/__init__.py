"""Wire models for the MCP context protocol."""
from __future__ import annotations

from organized_ai.protocol.models import (
    AddMessagesRequest,
    AddMessagesResponse,
    CreateContextRequest,
    CreateContextResponse,
    GetPromptResponse,
    ListPromptsResponse,
    Message,
    MessageRole,
    PromptSummary,
    RunPromptRequest,
    RunPromptResponse,
    RunRequest,
    RunResponse,
    ServerInfo,
    Tool,
    ToolCall,
    ToolCallRequest,
    ToolCallResponse,
    ToolError,
)

__all__ = [
    "AddMessagesRequest",
    "AddMessagesResponse",
    "CreateContextRequest",
    "CreateContextResponse",
    "GetPromptResponse",
    "ListPromptsResponse",
    "Message",
    "MessageRole",
    "PromptSummary",
    "RunPromptRequest",
    "RunPromptResponse",
    "RunRequest",
    "RunResponse",
    "ServerInfo",
    "Tool",
    "ToolCall",
    "ToolCallRequest",
    "ToolCallResponse",
    "ToolError",
]
