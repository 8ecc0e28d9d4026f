"""
Key/value storage backends for the session.

Implementations:
- MemoryStorage: process-local, used by tests and short-lived scripts
- FileStorage: JSON file on disk, survives restarts
- frontend.cookie_storage.CookieStorage: browser cookies (web frontend)

Every backend writes and deletes a group of values in one step, so a reader
never sees the token without the user (or the reverse).
"""

import json
import os
import tempfile
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional


class StorageBackend(ABC):
    """Abstract interface for expiring key/value storage."""

    @abstractmethod
    def get(self, name: str) -> Optional[str]:
        """Return the value, or None when absent or expired."""
        pass

    @abstractmethod
    def set_many(self, values: Dict[str, str], max_age_seconds: int) -> None:
        """Store all values with the same expiry window."""
        pass

    @abstractmethod
    def delete_many(self, names: Iterable[str]) -> None:
        """Remove all named values in one step."""
        pass


class MemoryStorage(StorageBackend):
    """In-process storage with per-value expiry."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._values: Dict[str, tuple] = {}

    def get(self, name: str) -> Optional[str]:
        entry = self._values.get(name)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at <= self._clock():
            del self._values[name]
            return None
        return value

    def set_many(self, values: Dict[str, str], max_age_seconds: int) -> None:
        expires_at = self._clock() + max_age_seconds
        self._values = {**self._values, **{k: (v, expires_at) for k, v in values.items()}}

    def delete_many(self, names: Iterable[str]) -> None:
        drop = set(names)
        self._values = {k: v for k, v in self._values.items() if k not in drop}


class FileStorage(StorageBackend):
    """
    JSON file storage.

    Layout: {"<name>": {"value": str, "expires_at": epoch_seconds}}.
    Each write replaces the whole file with os.replace, which is atomic on
    POSIX and Windows.
    """

    def __init__(self, path, clock: Callable[[], float] = time.time):
        self.path = Path(os.path.expanduser(str(path)))
        self._clock = clock

    def _load(self) -> Dict[str, dict]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: Dict[str, dict]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".session-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh)
            os.chmod(tmp_path, 0o600)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def get(self, name: str) -> Optional[str]:
        entry = self._load().get(name)
        if not isinstance(entry, dict):
            return None
        if entry.get("expires_at", 0) <= self._clock():
            return None
        value = entry.get("value")
        return value if isinstance(value, str) else None

    def set_many(self, values: Dict[str, str], max_age_seconds: int) -> None:
        data = self._load()
        expires_at = self._clock() + max_age_seconds
        for name, value in values.items():
            data[name] = {"value": value, "expires_at": expires_at}
        self._save(data)

    def delete_many(self, names: Iterable[str]) -> None:
        data = self._load()
        drop = [n for n in names if n in data]
        if not drop:
            return
        for name in drop:
            del data[name]
        self._save(data)
