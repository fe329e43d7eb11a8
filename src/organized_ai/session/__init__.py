"""Session subpackage.

Public surface
--------------
- Session             — one persisted conversation
- SessionStore        — ordered CRUD over sessions, mirrored to storage
- SessionSerializer   — JSON/YAML round-trip of session lists
- SessionCoordinator  — session/remote-context lifecycle
"""
from __future__ import annotations

from organized_ai.session.coordinator import SessionCoordinator
from organized_ai.session.serializer import SessionSerializer
from organized_ai.session.state import DEFAULT_TITLE, Session
from organized_ai.session.store import SessionStore

__all__ = [
    "DEFAULT_TITLE",
    "Session",
    "SessionCoordinator",
    "SessionSerializer",
    "SessionStore",
]
