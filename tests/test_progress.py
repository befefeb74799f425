"""
Progress persistence tests.

Covers the snapshot store, cursor store and the storage transports.
"""

import json

from guidedbook.classroom import (
    CursorStore,
    MemoryStorage,
    ProgressStore,
    SQLiteStorage,
)
from guidedbook.config import ACTIVE_CHAPTER_KEY, PROGRESS_STORAGE_KEY
from guidedbook.schemas import ChecklistBlock, InputListBlock


class TestProgressStore:
    """Test the flat answer mapping and its snapshot persistence."""

    def test_set_persists_full_snapshot(self, storage, progress):
        progress.set("e1", "olá")
        progress.set("ck", ["A"])
        stored = json.loads(storage.data[PROGRESS_STORAGE_KEY])
        assert stored == {"e1": "olá", "ck": ["A"]}

    def test_non_ascii_stored_verbatim(self, storage, progress):
        progress.set("e1", "ação")
        assert "ação" in storage.data[PROGRESS_STORAGE_KEY]

    def test_mapping_protocol(self, progress):
        progress.set("a", "1")
        assert progress["a"] == "1"
        assert progress.get("missing") is None
        assert "a" in progress
        assert len(progress) == 1

    def test_restores_on_construction(self, storage, progress):
        progress.set("e1", "x")
        reloaded = ProgressStore(storage)
        assert reloaded.snapshot() == {"e1": "x"}

    def test_corrupted_snapshot_yields_empty_store(self):
        storage = MemoryStorage({PROGRESS_STORAGE_KEY: "{not json"})
        assert ProgressStore(storage).snapshot() == {}

    def test_non_object_snapshot_yields_empty_store(self):
        storage = MemoryStorage({PROGRESS_STORAGE_KEY: "[1, 2]"})
        assert ProgressStore(storage).snapshot() == {}

    def test_save_all_load_all_round_trip(self, storage, progress):
        progress.set("e1", "x")
        progress.set("ck", ["A", "B"])
        before = storage.data[PROGRESS_STORAGE_KEY]
        assert progress.save_all(progress.load_all())
        assert storage.data[PROGRESS_STORAGE_KEY] == before

    def test_write_failure_keeps_memory_state(self):
        storage = MemoryStorage(fail_writes=True)
        progress = ProgressStore(storage)
        assert progress.set("e1", "still here") is False
        assert progress["e1"] == "still here"
        assert PROGRESS_STORAGE_KEY not in storage.data

    def test_clear_uses_empty_form_of_value(self, progress):
        progress.set("e1", "x")
        progress.set("ck", ["A"])
        progress.clear("e1")
        progress.clear("ck")
        assert progress["e1"] == ""
        assert progress["ck"] == []

    def test_clear_block_empties_every_sub_key(self, progress):
        block = InputListBlock(id="il", prompts=["a", "b", "c"])
        for key in block.answer_keys():
            progress.set(key, "filled")
        progress.clear_block(block)
        assert [progress[key] for key in block.answer_keys()] == ["", "", ""]

    def test_snapshot_is_a_copy(self, progress):
        progress.set("ck", ["A"])
        snapshot = progress.snapshot()
        snapshot["ck"].append("B")
        assert progress["ck"] == ["A"]

    def test_set_copies_list_values(self, storage, progress):
        selected = ["A"]
        progress.set("ck", selected)
        selected.append("B")
        assert progress["ck"] == ["A"]
        assert json.loads(storage.data[PROGRESS_STORAGE_KEY]) == {"ck": ["A"]}

    def test_reset_drops_everything(self, storage, progress):
        progress.set("e1", "x")
        progress.reset()
        assert len(progress) == 0
        assert PROGRESS_STORAGE_KEY not in storage.data


class TestToggleOption:
    """Test checklist selection through the store."""

    def setup_method(self):
        self.block = ChecklistBlock(id="ck", options=["A", "B", "C", "D"], min_selections=2, max_selections=3)

    def test_select_and_deselect(self, progress):
        assert progress.toggle_option(self.block, "A") == ["A"]
        assert progress.toggle_option(self.block, "B") == ["A", "B"]
        assert progress.toggle_option(self.block, "A") == ["B"]

    def test_selection_past_max_is_noop(self, progress):
        for option in ["A", "B", "C"]:
            progress.toggle_option(self.block, option)
        assert progress.toggle_option(self.block, "D") == ["A", "B", "C"]
        assert len(progress["ck"]) == 3

    def test_unknown_option_ignored(self, progress):
        assert progress.toggle_option(self.block, "Z") == []
        assert "ck" not in progress


class TestCursorStore:
    """Test the persisted current chapter id."""

    def test_save_load_clear(self, storage, cursor):
        assert cursor.load() is None
        cursor.save("ch-2")
        assert storage.data[ACTIVE_CHAPTER_KEY] == "ch-2"
        assert cursor.load() == "ch-2"
        cursor.clear()
        assert cursor.load() is None

    def test_write_failure_reported(self):
        cursor = CursorStore(MemoryStorage(fail_writes=True))
        assert cursor.save("ch-1") is False


class TestSQLiteStorage:
    """Test the SQLite key-value transport."""

    def test_write_read_overwrite(self, tmp_path):
        storage = SQLiteStorage(tmp_path / "progress.db", user_id="u1")
        storage.write_key("k", "v1")
        storage.write_key("k", "v2")
        assert storage.read_key("k") == "v2"
        assert storage.list_keys() == ["k"]

    def test_delete_key(self, tmp_path):
        storage = SQLiteStorage(tmp_path / "progress.db")
        storage.write_key("k", "v")
        storage.delete_key("k")
        assert storage.read_key("k") is None

    def test_users_are_namespaced(self, tmp_path):
        db_path = tmp_path / "progress.db"
        SQLiteStorage(db_path, user_id="a").write_key("k", "from a")
        assert SQLiteStorage(db_path, user_id="b").read_key("k") is None

    def test_progress_store_over_sqlite(self, tmp_path):
        storage = SQLiteStorage(tmp_path / "nested" / "progress.db")
        ProgressStore(storage).set("e1", "persistido")
        assert ProgressStore(SQLiteStorage(tmp_path / "nested" / "progress.db"))["e1"] == "persistido"
