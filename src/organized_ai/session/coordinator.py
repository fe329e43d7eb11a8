"""Session/context lifecycle coordination.

``SessionCoordinator`` turns a user message into a persisted exchange with
the session's server.  It decides whether a remote context has to be
created or can be reused, keeps the local history in step with what was
sent and received, and persists the store after every mutation.

Exchange sequence for ``send_message``::

    resolve session -> append user message -> persist
      -> get client for session.server_id
      -> context_id is None ? create_context(full history) : add_messages([new])
      -> point client at session.context_id -> run
      -> append assistant message -> persist -> return it

A failure after the first persist leaves the user message in the history
without an assistant reply.  Nothing is rolled back.

Classes
-------
- SessionCoordinator  — create, exchange, rename, delete sessions
"""
from __future__ import annotations

import asyncio
import logging

from organized_ai.client.client import OrganizedAIClient
from organized_ai.client.registry import ClientRegistry
from organized_ai.errors import SessionNotFoundError
from organized_ai.protocol.models import (
    AddMessagesRequest,
    CreateContextRequest,
    Message,
    MessageRole,
)
from organized_ai.session.state import DEFAULT_TITLE, Session
from organized_ai.session.store import SessionStore

logger = logging.getLogger(__name__)

_PREVIEW_CHARS = 30


class SessionCoordinator:
    """Coordinate local sessions with remote contexts.

    Concurrent ``send_message``/``add_message`` calls for the same session
    are serialised by a per-session ``asyncio.Lock`` held for the whole
    exchange.  Calls for different sessions may interleave; they never rely
    on a shared client's current context because every context-scoped call
    also passes the session's context id explicitly.

    Parameters
    ----------
    store:
        Session persistence.
    registry:
        Source of protocol clients, one per server.
    """

    def __init__(self, store: SessionStore, registry: ClientRegistry) -> None:
        self._store = store
        self._registry = registry
        self._locks: dict[str, asyncio.Lock] = {}

    @property
    def store(self) -> SessionStore:
        return self._store

    def _lock_for(self, session_id: str) -> asyncio.Lock:
        lock = self._locks.get(session_id)
        if lock is None:
            lock = self._locks[session_id] = asyncio.Lock()
        return lock

    # ------------------------------------------------------------------
    # Local lifecycle
    # ------------------------------------------------------------------

    def create_session(self, server_id: str, title: str | None = None) -> Session:
        """Create and persist an empty session for ``server_id``.

        The server is not contacted; its context is created on the first
        exchange.
        """
        session = Session(server_id=server_id, title=title or DEFAULT_TITLE)
        self._store.add(session)
        self._store.save()
        logger.info(
            "Created new session: %s (%s) with server %s", session.title, session.id, server_id
        )
        return session

    def get_session(self, session_id: str) -> Session | None:
        return self._store.find(session_id)

    def list_sessions(self) -> list[Session]:
        return self._store.list()

    def rename_session(self, session_id: str, title: str) -> bool:
        """Rename a session; returns False (and writes nothing) if unknown."""
        session = self._store.find(session_id)
        if session is None:
            return False
        logger.info("Renaming session %s from %r to %r", session_id, session.title, title)
        session.rename(title)
        self._store.save()
        return True

    def delete_session(self, session_id: str) -> bool:
        """Delete a session locally; the remote context is left untouched."""
        if not self._store.remove(session_id):
            return False
        self._locks.pop(session_id, None)
        logger.info("Deleting session %s", session_id)
        self._store.save()
        return True

    def reset_context(self, session_id: str) -> bool:
        """Detach a session from its remote context.

        The next exchange creates a fresh context seeded with the full local
        history.  Returns False if the session is unknown.
        """
        session = self._store.find(session_id)
        if session is None:
            return False
        logger.info("Clearing context %s from session %s", session.context_id, session_id)
        session.clear_context()
        self._store.save()
        return True

    # ------------------------------------------------------------------
    # Remote exchange
    # ------------------------------------------------------------------

    async def _sync_message(
        self,
        session: Session,
        message: Message,
    ) -> OrganizedAIClient:
        """Mirror ``message`` (already in ``session.messages``) remotely.

        Creates the context from the full history when the session has none,
        otherwise appends just ``message`` to the existing one.
        """
        client = self._registry.get_client(session.server_id)

        if session.context_id is None:
            logger.debug("Creating new context for session %s", session.id)
            session.context_id = await client.create_context(
                CreateContextRequest(messages=list(session.messages))
            )
            self._store.save()
        else:
            logger.debug("Adding message to existing context for session %s", session.id)
            client.set_current_context_id(session.context_id)
            await client.add_messages(
                AddMessagesRequest(messages=[message]), context_id=session.context_id
            )
        return client

    async def add_message(self, session_id: str, message: Message) -> Message:
        """Append ``message`` to a session and mirror it remotely.

        Unlike ``send_message`` the model is not run.

        Raises
        ------
        SessionNotFoundError
            If ``session_id`` is unknown.
        """
        async with self._lock_for(session_id):
            session = self._store.get(session_id)
            stored = session.add_message(message)
            self._store.save()
            try:
                await self._sync_message(session, stored)
            except Exception as exc:
                logger.error("Error adding message to session %s: %s", session_id, exc)
                raise
            return stored

    async def send_message(self, session_id: str, content: str) -> Message:
        """Send a user message in ``session_id`` and return the assistant reply.

        Raises
        ------
        SessionNotFoundError
            If ``session_id`` is unknown.  Nothing is written in that case.
        OrganizedAIError
            Any registry, client or transport failure, unchanged.  The user
            message has already been appended and persisted.
        """
        async with self._lock_for(session_id):
            session = self._store.find(session_id)
            if session is None:
                self._locks.pop(session_id, None)
                raise SessionNotFoundError(session_id)

            user_message = session.add_message(Message(role=MessageRole.USER, content=content))
            self._store.save()
            logger.debug(
                "Sending user message to session %s: %s", session_id, content[:_PREVIEW_CHARS]
            )

            try:
                client = await self._sync_message(session, user_message)
                client.set_current_context_id(session.context_id)
                logger.debug("Running model for session %s", session_id)
                response = await client.run(context_id=session.context_id)
            except Exception as exc:
                logger.error("Error sending message in session %s: %s", session_id, exc)
                raise

            assistant_message = session.add_message(response.assistant_message)
            self._store.save()
            logger.debug("Received assistant response for session %s", session_id)
            return assistant_message
