"""
Tests for adalloc.persistence module.
"""
import json

from adalloc.config import StorageConfig
from adalloc.events import EventBus, StateEvent
from adalloc.persistence import JsonFileStore, MemoryStore, PersistenceObserver
from adalloc.state import DashboardState


class TestMemoryStore:
    def test_missing_key(self):
        assert MemoryStore().get("nothing") is None

    def test_values_are_copies(self):
        store = MemoryStore()
        value = {"a": [1, 2]}
        store.set("k", value)
        value["a"].append(3)
        assert store.get("k") == {"a": [1, 2]}
        assert "k" in store

    def test_initial(self):
        assert MemoryStore({"k": 1}).get("k") == 1


class TestJsonFileStore:
    def test_round_trip(self, tmp_path):
        store = JsonFileStore(str(tmp_path / "data"))
        store.set("adalloc-settings", {"currency": "EUR"})
        assert store.get("adalloc-settings") == {"currency": "EUR"}
        assert (tmp_path / "data" / "adalloc-settings.json").exists()

    def test_missing(self, tmp_path):
        assert JsonFileStore(str(tmp_path)).get("absent") is None

    def test_corrupt_file(self, tmp_path):
        (tmp_path / "broken.json").write_text("{not json", encoding="utf-8")
        assert JsonFileStore(str(tmp_path)).get("broken") is None

    def test_overwrite_leaves_no_temp_files(self, tmp_path):
        store = JsonFileStore(str(tmp_path))
        store.set("k", [1])
        store.set("k", [2])
        assert store.get("k") == [2]
        assert [p.name for p in tmp_path.iterdir()] == ["k.json"]

    def test_unicode(self, tmp_path):
        store = JsonFileStore(str(tmp_path))
        store.set("k", {"symbol": "₺"})
        raw = (tmp_path / "k.json").read_text(encoding="utf-8")
        assert json.loads(raw) == {"symbol": "₺"}


class TestPersistenceObserver:
    """Documents are rewritten when the matching event fires."""

    def _attach(self, state):
        store = MemoryStore()
        PersistenceObserver(store, StorageConfig(data_dir="unused")).attach(state.bus, state)
        return store

    def test_saves_customers(self, seed_customers):
        state = DashboardState(customers=seed_customers, bus=EventBus())
        store = self._attach(state)
        state.bus.emit(StateEvent.CUSTOMERS_CHANGED)
        saved = store.get("adalloc-customers")
        assert [c["id"] for c in saved] == ["cust-1", "cust-2"]

    def test_empty_customers_not_written(self):
        state = DashboardState(customers=[], bus=EventBus())
        store = self._attach(state)
        state.bus.emit(StateEvent.CUSTOMERS_CHANGED)
        assert "adalloc-customers" not in store

    def test_saves_goals_and_settings(self):
        state = DashboardState(customers=[], bus=EventBus())
        store = self._attach(state)
        state.bus.emit(StateEvent.GOALS_CHANGED)
        state.bus.emit(StateEvent.SETTINGS_CHANGED)
        assert store.get("adalloc-goals") == []
        assert store.get("adalloc-settings")["currency"] == "USD"
