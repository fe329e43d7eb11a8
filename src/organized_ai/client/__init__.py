"""Protocol client subpackage.

Public surface
--------------
- OrganizedAIClient  — async HTTP client for one MCP server
- ClientRegistry     — one cached client per enabled server
"""
from __future__ import annotations

from organized_ai.client.client import OrganizedAIClient
from organized_ai.client.registry import ClientRegistry

__all__ = ["ClientRegistry", "OrganizedAIClient"]
