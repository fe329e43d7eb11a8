"""Settings domain models.

Serialized with camelCase aliases so ``settings.json`` keeps the layout
``{servers, apiKeys, environmentVariables, general}``; Python code uses the
snake_case field names.

Classes
-------
- ServerSettings    — one configured MCP server
- GeneralSettings   — application-wide preferences
- Settings          — the whole ``settings.json`` document
- PredefinedServer  — a catalog entry used to seed first-launch settings
"""
from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

DEFAULT_REQUEST_TIMEOUT: float = 30.0

_CAMEL_CONFIG = {"alias_generator": to_camel, "populate_by_name": True}


class ServerSettings(BaseModel):
    """Connection settings for a single MCP server.

    Parameters
    ----------
    id:
        Stable identifier, e.g. ``"github-mcp"``.
    name:
        Display name.
    url:
        Base URL of the server.
    enabled:
        Whether clients may be built for this server.
    required_api_keys:
        Names of API keys that must be set before the server can be enabled.
        Their values are sent as request headers of the same name.
    custom_settings:
        Free-form per-server options.
    """

    id: str
    name: str
    url: str
    enabled: bool = False
    required_api_keys: list[str] = Field(default_factory=list)
    custom_settings: dict[str, Any] | None = None

    model_config = _CAMEL_CONFIG


class GeneralSettings(BaseModel):
    default_server_id: str | None = None
    log_level: Literal["debug", "info", "warn", "warning", "error"] = "info"
    data_storage_path: str | None = None
    request_timeout: float = Field(default=DEFAULT_REQUEST_TIMEOUT, gt=0)

    model_config = _CAMEL_CONFIG


class Settings(BaseModel):
    """The complete persisted settings document."""

    servers: dict[str, ServerSettings] = Field(default_factory=dict)
    api_keys: dict[str, str] = Field(default_factory=dict)
    environment_variables: dict[str, str] = Field(default_factory=dict)
    general: GeneralSettings = Field(default_factory=GeneralSettings)

    model_config = _CAMEL_CONFIG


class PredefinedServer(BaseModel):
    id: str
    name: str
    description: str
    default_url: str
    required_api_keys: list[str] = Field(default_factory=list)

    model_config = {**_CAMEL_CONFIG, "frozen": True}

    def to_server_settings(self) -> ServerSettings:
        """Return a disabled ``ServerSettings`` entry for this catalog item."""
        return ServerSettings(
            id=self.id,
            name=self.name,
            url=self.default_url,
            enabled=False,
            required_api_keys=list(self.required_api_keys),
        )


PREDEFINED_SERVERS: tuple[PredefinedServer, ...] = (
    PredefinedServer(
        id="filesystem-mcp",
        name="File System MCP",
        description="Access and manipulate local files",
        default_url="http://localhost:5001",
    ),
    PredefinedServer(
        id="github-mcp",
        name="GitHub MCP",
        description="Access GitHub repositories and APIs",
        default_url="http://localhost:5002",
        required_api_keys=["GITHUB_TOKEN"],
    ),
    PredefinedServer(
        id="google-mcp",
        name="Google Services MCP",
        description="Access Google services (Docs, Sheets, etc.)",
        default_url="http://localhost:5003",
        required_api_keys=["GOOGLE_CLIENT_ID", "GOOGLE_CLIENT_SECRET"],
    ),
    PredefinedServer(
        id="browser-mcp",
        name="Browser Automation MCP",
        description="Web browsing and automation capabilities",
        default_url="http://localhost:5004",
    ),
    PredefinedServer(
        id="search-mcp",
        name="Search MCP",
        description="Web search capabilities via various engines",
        default_url="http://localhost:5005",
        required_api_keys=["TAVILY_API_KEY", "SERPAPI_API_KEY"],
    ),
)
