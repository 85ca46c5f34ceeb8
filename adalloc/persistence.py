"""
Local key-value persistence for the dashboard state.

Each collection (customers, settings, goals) is one JSON document under a
stable key. Documents are loaded once at startup and rewritten in full after
every change to the corresponding collection.
"""
import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from adalloc.config import StorageConfig
from adalloc.events import EventBus, StateEvent
from adalloc.observability import get_logger

logger = get_logger(__name__)


class KeyValueStore(ABC):
    """Durable storage of JSON-compatible documents by key."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Return the stored document, or None when the key is absent."""

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Replace the document stored under key."""


class MemoryStore(KeyValueStore):
    """In-process store; documents are kept as serialized JSON strings."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.set(key, value)

    def get(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        return json.loads(raw) if raw is not None else None

    def set(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)

    def __contains__(self, key: str) -> bool:
        return key in self._data


class JsonFileStore(KeyValueStore):
    """
    One ``<key>.json`` file per key inside a data directory.

    Writes go to a temp file that replaces the target, so a crash mid-write
    leaves the previous document intact.
    """

    def __init__(self, data_dir: str):
        self.data_dir = Path(data_dir)

    def _path(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    def get(self, key: str) -> Optional[Any]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read {path}: {e}")
            return None

    def set(self, key: str, value: Any) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        fd, tmp = tempfile.mkstemp(dir=self.data_dir, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(value, f, ensure_ascii=False)
            os.replace(tmp, path)
        except BaseException:
            if os.path.exists(tmp):
                os.remove(tmp)
            raise


class PersistenceObserver:
    """Writes a collection's document whenever the state reports a change."""

    def __init__(self, store: KeyValueStore, storage: Optional[StorageConfig] = None):
        self.store = store
        self.storage = storage or StorageConfig()
        self._state = None

    def attach(self, bus: EventBus, state) -> "PersistenceObserver":
        self._state = state
        bus.subscribe(StateEvent.CUSTOMERS_CHANGED, self.save_customers)
        bus.subscribe(StateEvent.GOALS_CHANGED, self.save_goals)
        bus.subscribe(StateEvent.SETTINGS_CHANGED, self.save_settings)
        return self

    def save_customers(self, data: Dict[str, Any]) -> None:
        customers = self._state.customers
        # An empty tree is never written so saved data cannot be wiped by it
        if not customers:
            return
        self.store.set(self.storage.customers_key, [c.to_dict() for c in customers])
        logger.debug("Customers saved", extra={"customers": len(customers)})

    def save_goals(self, data: Dict[str, Any]) -> None:
        self.store.set(self.storage.goals_key, [g.to_dict() for g in self._state.goals])

    def save_settings(self, data: Dict[str, Any]) -> None:
        self.store.set(self.storage.settings_key, self._state.settings.to_dict())
