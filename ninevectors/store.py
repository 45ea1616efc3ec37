"""Key-value persistence port.

The tour engine, the draft list and the API client keep their state under a
handful of well-known keys.  They only ever talk to a ``KeyValueStore``, so
tests run against ``MemoryStore`` and the CLI against ``JsonFileStore``.

Keys in use:

- ``tour_prefs``: welcome flag and completed tour ids
- ``assessments``: launched assessment drafts
- ``token`` / ``user``: API credentials, cleared on a 401
- ``survey_responses``: the last survey kept locally instead of submitted
"""

from __future__ import annotations

import json
import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

KEY_TOUR_PREFS = "tour_prefs"
KEY_ASSESSMENTS = "assessments"
KEY_TOKEN = "token"
KEY_USER = "user"
KEY_SURVEY_RESPONSES = "survey_responses"

_VALID_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class KeyValueStore(ABC):
    """Abstract base for preference storage backends.

    Values are anything ``json.dumps`` accepts.
    """

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """Retrieve a value. Returns None if not found."""
        ...

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store a value, replacing any previous one."""
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a value. No-op if not found."""
        ...

    def exists(self, key: str) -> bool:
        return self.get(key) is not None


class MemoryStore(KeyValueStore):
    """In-process store.

    Values are round-tripped through JSON so callers can't mutate stored
    state through a reference they still hold.
    """

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.set(key, value)

    def get(self, key: str) -> Any | None:
        raw = self._data.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)


class JsonFileStore(KeyValueStore):
    """One ``<key>.json`` file per key inside *directory*.

    Writes are atomic (write tmp then rename).  A file that fails to parse
    is logged and reported as missing.
    """

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def _path(self, key: str) -> Path:
        if not _VALID_KEY.match(key):
            raise ValueError(f"Invalid store key: {key!r}")
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Any | None:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable %s: %s", path.name, exc)
            return None

    def set(self, key: str, value: Any) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(json.dumps(value, indent=2), encoding="utf-8")
        tmp.replace(path)

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)
