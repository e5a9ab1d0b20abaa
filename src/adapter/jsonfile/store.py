"""Single-file JSON document store shared by the JSON repositories.

The whole database lives in one document::

    {"users": [...], "sessions": [...]}

Every read-modify-write runs under one process-wide lock and the file is
replaced atomically, so a crash never leaves a half-written document.
"""

import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Iterator

logger = logging.getLogger(__name__)

JSON_DB_PATH = os.getenv('JSON_DB_PATH', 'data/database.json')

_EMPTY = {'users': [], 'sessions': []}


class CorruptStoreError(ValueError):
    """The database file exists but is not a readable JSON document."""


class JsonFileStore:
    def __init__(self, path: str | Path = JSON_DB_PATH):
        self.path = Path(path)
        self._lock = threading.RLock()
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def read(self) -> dict[str, Any]:
        with self._lock:
            return self._load()

    @contextmanager
    def transaction(self) -> Iterator[dict[str, Any]]:
        """Yield the document for mutation; it is written back on clean exit."""
        with self._lock:
            data = self._load()
            yield data
            self._dump(data)

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {key: list(value) for key, value in _EMPTY.items()}
        try:
            with self.path.open('r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error("JSON database is corrupt", extra={"path": str(self.path), "error": str(e)})
            raise CorruptStoreError(f"Unreadable JSON database: {self.path}") from e
        if not isinstance(data, dict):
            logger.error("JSON database is corrupt", extra={"path": str(self.path)})
            raise CorruptStoreError(f"Unreadable JSON database: {self.path}")
        for key in _EMPTY:
            data.setdefault(key, [])
        return data

    def _dump(self, data: dict[str, Any]) -> None:
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix='.db-', suffix='.json')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, default=_encode)
            os.replace(tmp_path, self.path)
        except OSError:
            logger.error("Failed to write JSON database", extra={"path": str(self.path)})
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise


def _encode(value: Any) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def parse_datetime(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None
