"""Filesystem storage backend.

Persists each document as ``<storage_dir>/<name>.json``.  Writes go to a
sibling temporary file which is then moved over the target, so readers
never observe a half-written document.  Defaults to ``~/.organized-ai/``.

Classes
-------
- FilesystemBackend  — JSON-file-per-document storage
"""
from __future__ import annotations

import logging
import os
from pathlib import Path

from organized_ai.errors import PersistenceError
from organized_ai.storage.base import StorageBackend

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR: Path = Path.home() / ".organized-ai"
_FILE_EXTENSION = ".json"
_TEMP_SUFFIX = ".tmp"


class FilesystemBackend(StorageBackend):
    """Stores documents as individual JSON files.

    Parameters
    ----------
    storage_dir:
        Root directory for document files.  Defaults to ``~/.organized-ai/``.
        Created on first write if absent.
    """

    def __init__(self, storage_dir: str | Path | None = None) -> None:
        self._storage_dir: Path = (
            Path(storage_dir).expanduser() if storage_dir is not None else DEFAULT_CONFIG_DIR
        )

    @property
    def storage_dir(self) -> Path:
        return self._storage_dir

    def path_for(self, name: str) -> Path:
        """Return the file path for document ``name``.

        Directory components are stripped so a name can never escape
        ``storage_dir``.
        """
        safe_name = os.path.basename(name)
        return self._storage_dir / f"{safe_name}{_FILE_EXTENSION}"

    # ------------------------------------------------------------------
    # StorageBackend interface
    # ------------------------------------------------------------------

    def save(self, name: str, payload: str) -> None:
        """Replace ``<storage_dir>/<name>.json`` with ``payload``.

        Raises
        ------
        PersistenceError
            If the directory cannot be created or the file cannot be written.
        """
        path = self.path_for(name)
        temp_path = path.with_name(path.name + _TEMP_SUFFIX)
        try:
            self._storage_dir.mkdir(parents=True, exist_ok=True)
            temp_path.write_text(payload, encoding="utf-8")
            os.replace(temp_path, path)
        except OSError as exc:
            logger.error("Failed to write %s: %s", path, exc)
            if temp_path.exists():
                temp_path.unlink()
            raise PersistenceError(path, exc) from exc
        logger.debug("Wrote %d bytes to %s", len(payload), path)

    def load(self, name: str) -> str:
        path = self.path_for(name)
        if not path.is_file():
            raise KeyError(f"Document {name!r} not found at {path}")
        return path.read_text(encoding="utf-8")

    def list(self) -> list[str]:
        if not self._storage_dir.exists():
            return []
        return sorted(
            path.stem
            for path in self._storage_dir.glob(f"*{_FILE_EXTENSION}")
            if path.is_file()
        )

    def delete(self, name: str) -> None:
        path = self.path_for(name)
        if not path.is_file():
            raise KeyError(f"Document {name!r} not found at {path}")
        path.unlink()

    def exists(self, name: str) -> bool:
        return self.path_for(name).is_file()

    def __repr__(self) -> str:
        return f"FilesystemBackend(storage_dir={str(self._storage_dir)!r})"
