"""
Key-value persistence behind the trip split ledger
"""
from __future__ import annotations
import copy
import json
import logging
import os
import tempfile
from typing import Any, Dict, Optional, Protocol
from urllib.parse import quote

from exceptions import PersistenceError

logger = logging.getLogger(__name__)


class Store(Protocol):
    """Anything that can load and save JSON values by key"""

    def load(self, key: str) -> Optional[Any]:
        ...

    def save(self, key: str, value: Any) -> None:
        ...


class MemoryStore:
    """In-process store; values are copied in and out"""

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = copy.deepcopy(data) if data else {}

    def load(self, key: str) -> Optional[Any]:
        if key not in self._data:
            return None
        return copy.deepcopy(self._data[key])

    def save(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    def keys(self):
        return list(self._data.keys())


class JsonFileStore:
    """
    One JSON file per key under a directory.
    Writes go to a temp file first and are moved into place, so a failed
    save keeps the previous value.
    """

    def __init__(self, directory: str, indent: Optional[int] = 2):
        self.directory = directory
        self.indent = indent
        os.makedirs(directory, exist_ok=True)

    def path_for(self, key: str) -> str:
        return os.path.join(self.directory, quote(key, safe="") + ".json")

    def load(self, key: str) -> Optional[Any]:
        path = self.path_for(key)
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as ex:
            logger.error("Failed to load %s from %s: %s", key, path, ex)
            raise PersistenceError(key, f"could not load: {ex}") from ex

    def save(self, key: str, value: Any) -> None:
        path = self.path_for(key)
        fd, tmp = tempfile.mkstemp(prefix=".tmp-", suffix=".json", dir=self.directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(value, f, ensure_ascii=False, indent=self.indent)
            os.replace(tmp, path)
        except (OSError, TypeError, ValueError) as ex:
            if os.path.exists(tmp):
                os.remove(tmp)
            logger.error("Failed to save %s to %s: %s", key, path, ex)
            raise PersistenceError(key, f"could not save: {ex}") from ex
        logger.debug("Saved %s to %s", key, path)
