"""LocalStore unit tests using a temporary directory."""

from unittest.mock import patch

import pytest

from drishti.exceptions import StorageError
from drishti.services.local_store import LocalStore


class TestLocalStore:
    def test_missing_key_returns_none(self, local_store):
        assert local_store.get_item("nope") is None

    def test_set_then_get(self, local_store):
        local_store.set_item("checkpoints_p1", '["a"]')
        assert local_store.get_item("checkpoints_p1") == '["a"]'

    def test_overwrite(self, local_store):
        local_store.set_item("k", "1")
        local_store.set_item("k", "2")
        assert local_store.get_item("k") == "2"

    def test_survives_new_instance(self, tmp_path):
        LocalStore(base_path=str(tmp_path)).set_item("k", "v")
        assert LocalStore(base_path=str(tmp_path)).get_item("k") == "v"

    def test_unsafe_key_stays_inside_base_path(self, local_store):
        local_store.set_item("checkpoints_a/b", "x")
        assert local_store.get_item("checkpoints_a/b") == "x"
        assert [p.name for p in local_store.base_path.iterdir()] == ["checkpoints_a%2Fb.json"]

    def test_no_temp_files_left_behind(self, local_store):
        local_store.set_item("k", "v")
        assert not list(local_store.base_path.glob("*.tmp"))

    def test_write_failure_raises_storage_error(self, local_store):
        with patch("drishti.services.local_store.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(StorageError) as exc_info:
                local_store.set_item("k", "v")
        assert exc_info.value.error_code == "ERR_STORE_001"
        assert exc_info.value.details["error"] == "disk full"
