"""File-backed community store.

Persists the whole ledger as one JSON document. Writes go to a
temporary file in the same directory which is then renamed over the
target, so an interrupted write never leaves a truncated store behind.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

import structlog

from ..errors import StorageError
from .memory import InMemoryStore, _empty_document

logger = structlog.get_logger()

STORE_VERSION = 1


class JsonFileStore(InMemoryStore):
    """:class:`CommunityStore` persisted to a single JSON file.

    The document is read once and cached, and every write replaces the
    whole file. Two stores (or processes) writing the same path do not
    merge: the last writer wins for the entire ledger, including records
    the other one changed. Use one writer per file.
    """

    def __init__(self, path: str | Path) -> None:
        super().__init__()
        self.path = Path(path)

    async def _load(self) -> dict[str, Any]:
        if self._document is None:
            self._document = self._read()
        return self._document

    async def _commit(self) -> None:
        try:
            self._write(self._document or _empty_document())
        except StorageError:
            # Drop the unsaved in-memory changes; next call rereads the file
            self._document = None
            raise

    def _read(self) -> dict[str, Any]:
        """Load the document from disk, or start an empty one."""
        if not self.path.exists():
            return _empty_document()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Cannot read store {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StorageError(f"Store {self.path} is not a JSON object")
        document = _empty_document()
        for key in document:
            if key in data:
                document[key] = data[key]
        return document

    def _write(self, document: dict[str, Any]) -> None:
        """Atomically replace the store file with ``document``."""
        payload = json.dumps({"version": STORE_VERSION, **document}, indent=2)
        tmp_path = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=str(self.path.parent), suffix=".tmp", prefix=".store-"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            os.replace(tmp_path, str(self.path))
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            logger.error("store_write_failed", path=str(self.path), error=str(e))
            raise StorageError(f"Cannot write store {self.path}: {e}") from e
