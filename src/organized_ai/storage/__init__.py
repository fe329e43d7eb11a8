"""Storage backend subpackage.

Public surface
--------------
- StorageBackend    — abstract base class
- FilesystemBackend — one JSON file per document under a directory
- InMemoryBackend   — in-process dict (useful for testing)
"""
from __future__ import annotations

from organized_ai.storage.base import StorageBackend
from organized_ai.storage.filesystem import DEFAULT_CONFIG_DIR, FilesystemBackend
from organized_ai.storage.memory import InMemoryBackend

__all__ = [
    "DEFAULT_CONFIG_DIR",
    "FilesystemBackend",
    "InMemoryBackend",
    "StorageBackend",
]
