"""Session domain model.

A ``Session`` pairs a local message history with the id of the remote
context that mirrors it and the server that holds that context.

Classes
-------
- Session  — one persisted conversation
"""
from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from organized_ai.protocol.models import Message

DEFAULT_TITLE = "New Conversation"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Session(BaseModel):
    """A locally stored conversation bound to one server.

    Parameters
    ----------
    id:
        Unique identifier, generated at creation and never changed.
    server_id:
        Id of the server the conversation runs against.  Fixed for the
        session's lifetime so ``context_id`` always belongs to it.
    title:
        Display label.
    context_id:
        Remote context mirroring ``messages``; None until the first
        successful context creation.
    messages:
        Conversation history in order.
    created_at:
        Creation timestamp (UTC).
    updated_at:
        Refreshed on every mutation (UTC).
    """

    id: str = Field(default_factory=lambda: str(uuid4()), frozen=True)
    server_id: str = Field(frozen=True)
    title: str = DEFAULT_TITLE
    context_id: str | None = None
    messages: list[Message] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def touch(self) -> None:
        self.updated_at = _utcnow()

    def add_message(self, message: Message) -> Message:
        """Append a copy of ``message`` and refresh ``updated_at``.

        Returns
        -------
        Message
            The stored copy.
        """
        stored = message.model_copy(deep=True)
        self.messages.append(stored)
        self.touch()
        return stored

    def rename(self, title: str) -> None:
        self.title = title
        self.touch()

    def clear_context(self) -> None:
        """Forget the remote context; the next exchange creates a new one."""
        self.context_id = None
        self.touch()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def has_context(self) -> bool:
        return self.context_id is not None

    @property
    def last_message(self) -> Message | None:
        return self.messages[-1] if self.messages else None
