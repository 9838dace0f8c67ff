"""Single-slot bearer token storage shared by all in-flight requests."""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

TOKEN_KEY = "userToken"


class CredentialStore(Protocol):
    """Holder of the current bearer token, if any."""

    def get(self) -> str | None: ...

    def set(self, token: str) -> None: ...

    def clear(self) -> None: ...


class InMemoryCredentialStore:
    """Process-local token slot guarded by a lock."""

    def __init__(self, token: str | None = None) -> None:
        self._lock = threading.Lock()
        self._token = token

    def get(self) -> str | None:
        with self._lock:
            return self._token

    def set(self, token: str) -> None:
        with self._lock:
            self._token = token

    def clear(self) -> None:
        with self._lock:
            self._token = None


class FileCredentialStore:
    """Token slot persisted as a JSON object under a fixed key.

    The file is read once at construction; afterwards the in-memory copy is
    authoritative and every mutation is written through. Stored in plain text
    with no expiry metadata.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()
        self._token = self._load()

    def get(self) -> str | None:
        with self._lock:
            return self._token

    def set(self, token: str) -> None:
        with self._lock:
            self._token = token
            self._write({TOKEN_KEY: token})

    def clear(self) -> None:
        with self._lock:
            self._token = None
            self._write({})

    def _load(self) -> str | None:
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable credential file path=%s", self._path)
            return None

        if not isinstance(raw, dict):
            return None
        token = raw.get(TOKEN_KEY)
        if not isinstance(token, str) or not token:
            return None
        return token

    def _write(self, payload: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(payload), encoding="utf-8")
        tmp_path.replace(self._path)
