"""Session persistence.

``SessionStore`` keeps every session in an ordered in-memory map and
mirrors the whole collection to the ``sessions`` document on each
``save``.

Classes
-------
- SessionStore  — ordered CRUD over sessions backed by a StorageBackend
"""
from __future__ import annotations

import logging
from typing import Iterator

from pydantic import ValidationError

from organized_ai.errors import SessionNotFoundError
from organized_ai.session.serializer import SessionSerializer
from organized_ai.session.state import Session
from organized_ai.storage.base import StorageBackend

logger = logging.getLogger(__name__)

SESSIONS_DOCUMENT = "sessions"


class SessionStore:
    """Ordered collection of sessions mirrored to a storage backend.

    Sessions are loaded once on construction.  A missing document means an
    empty store; an unreadable one is logged and also yields an empty
    store.  Insertion order is conversation-list order and survives a
    save/reload round trip.

    Parameters
    ----------
    backend:
        Where the ``sessions`` document lives.
    serializer:
        Optional custom serializer.
    """

    def __init__(
        self,
        backend: StorageBackend,
        serializer: SessionSerializer | None = None,
    ) -> None:
        self._backend = backend
        self._serializer = serializer or SessionSerializer()
        self._sessions: dict[str, Session] = {}
        self.reload()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def reload(self) -> None:
        """Replace in-memory sessions with the persisted document."""
        self._sessions = {}
        if not self._backend.exists(SESSIONS_DOCUMENT):
            logger.info("No sessions file found. Starting with empty sessions.")
            return
        try:
            raw = self._backend.load(SESSIONS_DOCUMENT)
            sessions = self._serializer.from_json(raw)
        except (OSError, KeyError, UnicodeDecodeError, ValidationError) as exc:
            logger.error("Failed to load sessions: %s", exc)
            return
        self._sessions = {session.id: session for session in sessions}
        logger.info("Loaded %d sessions", len(self._sessions))

    def save(self) -> None:
        """Write every session to the backend, replacing the document.

        Raises
        ------
        PersistenceError
            If the backend cannot write the document.
        """
        payload = self._serializer.to_json(self._sessions.values())
        self._backend.save(SESSIONS_DOCUMENT, payload)
        logger.debug("Saved %d sessions", len(self._sessions))

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def add(self, session: Session) -> None:
        """Insert ``session`` (or replace the one with the same id)."""
        self._sessions[session.id] = session

    def get(self, session_id: str) -> Session:
        """Return the session for ``session_id``.

        Raises
        ------
        SessionNotFoundError
            If the id is unknown.
        """
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def find(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    def list(self) -> list[Session]:
        """Return all sessions in insertion order."""
        return list(self._sessions.values())

    def remove(self, session_id: str) -> bool:
        """Drop ``session_id`` from memory; returns whether it was present."""
        return self._sessions.pop(session_id, None) is not None

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __iter__(self) -> Iterator[Session]:
        return iter(list(self._sessions.values()))

    def __len__(self) -> int:
        return len(self._sessions)

    def __repr__(self) -> str:
        return f"SessionStore(backend={self._backend!r}, sessions={len(self._sessions)})"
