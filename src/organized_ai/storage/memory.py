"""In-memory storage backend.

Keeps documents in a plain dict.  Nothing survives the process; used by
the test suite and for throwaway sessions.

Classes
-------
- InMemoryBackend  — dict-backed ephemeral storage
"""
from __future__ import annotations

from organized_ai.storage.base import StorageBackend


class InMemoryBackend(StorageBackend):
    """Ephemeral document storage backed by a Python dict.

    Parameters
    ----------
    initial_data:
        Optional mapping of document names to raw payloads.  A shallow copy
        is taken so the caller's dict is not mutated.
    """

    def __init__(self, initial_data: dict[str, str] | None = None) -> None:
        self._store: dict[str, str] = dict(initial_data or {})
        self.save_count = 0

    def save(self, name: str, payload: str) -> None:
        self._store[name] = payload
        self.save_count += 1

    def load(self, name: str) -> str:
        try:
            return self._store[name]
        except KeyError:
            raise KeyError(f"Document {name!r} not found in InMemoryBackend.") from None

    def list(self) -> list[str]:
        return list(self._store)

    def delete(self, name: str) -> None:
        try:
            del self._store[name]
        except KeyError:
            raise KeyError(f"Document {name!r} not found in InMemoryBackend.") from None

    def exists(self, name: str) -> bool:
        return name in self._store

    def __len__(self) -> int:
        return len(self._store)

    def __repr__(self) -> str:
        return f"InMemoryBackend(documents={len(self._store)})"
