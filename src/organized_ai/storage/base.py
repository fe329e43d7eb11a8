"""Abstract base class for document storage backends.

A backend stores whole JSON documents keyed by name.  The library keeps
two documents: ``settings`` and ``sessions``.  Every save replaces the
whole document; there is no incremental append.

Classes
-------
- StorageBackend  — abstract base for all backends
"""
from __future__ import annotations

from abc import ABC, abstractmethod


class StorageBackend(ABC):
    """Protocol for reading and writing raw JSON documents.

    Backend implementations must be safe for sequential (single-threaded)
    use.  Thread-safety is the responsibility of the caller when used from
    concurrent code.
    """

    @abstractmethod
    def save(self, name: str, payload: str) -> None:
        """Persist ``payload`` as the document ``name``, replacing any prior copy.

        Raises
        ------
        PersistenceError
            If the document could not be written.
        """

    @abstractmethod
    def load(self, name: str) -> str:
        """Return the raw payload of document ``name``.

        Raises
        ------
        KeyError
            If no document named ``name`` exists.
        """

    @abstractmethod
    def list(self) -> list[str]:
        """Return the names of all stored documents."""

    @abstractmethod
    def delete(self, name: str) -> None:
        """Remove document ``name``.

        Raises
        ------
        KeyError
            If no document named ``name`` exists.
        """

    @abstractmethod
    def exists(self, name: str) -> bool:
        """Return True if document ``name`` exists."""
