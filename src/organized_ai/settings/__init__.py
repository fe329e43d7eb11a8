"""Settings subpackage.

Public surface
--------------
- SettingsManager   — persisted servers, API keys, env vars, preferences
- ServerSettings    — one configured MCP server
- GeneralSettings   — application-wide preferences
- Settings          — the whole settings document
- PredefinedServer  — catalog entry seeded on first launch
"""
from __future__ import annotations

from organized_ai.settings.manager import SettingsManager
from organized_ai.settings.models import (
    PREDEFINED_SERVERS,
    GeneralSettings,
    PredefinedServer,
    ServerSettings,
    Settings,
)

__all__ = [
    "PREDEFINED_SERVERS",
    "GeneralSettings",
    "PredefinedServer",
    "ServerSettings",
    "Settings",
    "SettingsManager",
]
