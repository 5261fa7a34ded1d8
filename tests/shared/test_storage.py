"""Tests for shared/storage.py."""

import json
import threading
from unittest.mock import patch

from shared.storage import (
    JSONFileStore,
    KeyValueStore,
    MemoryStore,
    get_device_store,
    reset_device_store,
)


class TestMemoryStore:
    def test_set_get_remove(self):
        """Values should be stored until removed."""
        store = MemoryStore()
        store.set_item("user_role", "provider")
        assert store.get_item("user_role") == "provider"
        store.remove_item("user_role")
        assert store.get_item("user_role") is None

    def test_remove_missing_key(self):
        """Removing a missing key should be a no-op."""
        MemoryStore().remove_item("nothing")

    def test_initial_items_copied(self):
        """Initial items should be copied, not shared."""
        initial = {"user_role": "homeowner"}
        store = MemoryStore(initial)
        store.set_item("user_role", "provider")
        assert initial["user_role"] == "homeowner"

    def test_implements_protocol(self):
        """MemoryStore should satisfy KeyValueStore."""
        assert isinstance(MemoryStore(), KeyValueStore)


class TestJSONFileStore:
    def test_missing_file_reads_empty(self, tmp_path):
        """A store without a file should read as empty."""
        store = JSONFileStore(tmp_path / "storage.json")
        assert store.get_item("user_role") is None

    def test_persists_across_instances(self, tmp_path):
        """Values should survive a new store on the same path."""
        path = tmp_path / "nested" / "storage.json"
        JSONFileStore(path).set_item("user_role", "provider")

        assert JSONFileStore(path).get_item("user_role") == "provider"
        assert json.loads(path.read_text()) == {"user_role": "provider"}

    def test_remove_item(self, tmp_path):
        """Removed keys should be gone from the file."""
        path = tmp_path / "storage.json"
        store = JSONFileStore(path)
        store.set_item("a", "1")
        store.set_item("b", "2")
        store.remove_item("a")

        assert json.loads(path.read_text()) == {"b": "2"}

    def test_corrupt_file_reads_empty(self, tmp_path):
        """An unreadable file should not stop the app."""
        path = tmp_path / "storage.json"
        path.write_text("{not json")
        store = JSONFileStore(path)

        assert store.get_item("user_role") is None
        store.set_item("user_role", "homeowner")
        assert store.get_item("user_role") == "homeowner"

    def test_non_object_file_reads_empty(self, tmp_path):
        """A JSON file that isn't an object should read as empty."""
        path = tmp_path / "storage.json"
        path.write_text("[1, 2, 3]")
        assert JSONFileStore(path).get_item("0") is None

    def test_no_temp_files_left(self, tmp_path):
        """Writes should not leave temporary files behind."""
        store = JSONFileStore(tmp_path / "storage.json")
        store.set_item("user_role", "provider")
        assert [p.name for p in tmp_path.iterdir()] == ["storage.json"]

    def test_concurrent_writes(self, tmp_path):
        """Writes from several threads should all land."""
        store = JSONFileStore(tmp_path / "storage.json")

        def write(i):
            store.set_item(f"key-{i}", str(i))

        threads = [threading.Thread(target=write, args=(i,)) for i in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        for i in range(10):
            assert store.get_item(f"key-{i}") == str(i)


class TestDeviceStore:
    def test_uses_configured_path(self, tmp_path):
        """The device store should live at the configured path."""
        path = tmp_path / "device.json"
        with patch("shared.storage.get_settings") as mock_settings:
            mock_settings.return_value.storage_path = path
            store = get_device_store()

        assert store.path == path

    def test_cached_until_reset(self, tmp_path):
        """The device store should be cached until reset."""
        with patch("shared.storage.get_settings") as mock_settings:
            mock_settings.return_value.storage_path = tmp_path / "device.json"
            first = get_device_store()
            second = get_device_store()
            reset_device_store()
            third = get_device_store()

        assert first is second
        assert first is not third
