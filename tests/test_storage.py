"""Tests for result stores."""

import pytest

from judge_consensus.storage import FileResultStore, InMemoryResultStore, ResultStore


@pytest.fixture(params=["memory", "file"])
def store(request, tmp_path):
    if request.param == "memory":
        return InMemoryResultStore()
    return FileResultStore(tmp_path / "results")


class TestResultStore:
    """Behavior shared by every store."""

    def test_protocol(self, store):
        assert isinstance(store, ResultStore)

    def test_missing_key(self, store):
        assert store.get("nope") is None

    def test_put_get(self, store):
        store.put("comparison/s1", {"winner": "system", "scores": [4.0, 3.0]})
        assert store.get("comparison/s1") == {"winner": "system", "scores": [4.0, 3.0]}

    def test_overwrite(self, store):
        store.put("k", {"v": 1})
        store.put("k", {"v": 2})
        assert store.get("k") == {"v": 2}

    def test_list_prefix(self, store):
        for key in ["comparison/b", "comparison/a", "report/x"]:
            store.put(key, {"key": key})
        assert store.list("comparison/") == ["comparison/a", "comparison/b"]
        assert store.list() == ["comparison/a", "comparison/b", "report/x"]

    def test_returned_value_is_a_copy(self, store):
        store.put("k", {"items": [1]})
        store.get("k")["items"].append(2)
        assert store.get("k") == {"items": [1]}


class TestFileResultStore:
    """File-specific behavior."""

    def test_sharded_layout(self, tmp_path):
        store = FileResultStore(tmp_path)
        store.put("comparison/s1", {"a": 1})
        files = list(tmp_path.rglob("*.json"))
        assert len(files) == 1
        assert files[0].parent.name == files[0].stem[:2]

    def test_persists_across_instances(self, tmp_path):
        FileResultStore(tmp_path).put("k", {"a": 1})
        assert FileResultStore(tmp_path).get("k") == {"a": 1}

    def test_corrupt_record(self, tmp_path):
        store = FileResultStore(tmp_path)
        store.put("k", {"a": 1})
        next(tmp_path.rglob("*.json")).write_text("{broken")
        assert store.get("k") is None
        assert store.list() == []

    def test_delete_and_clear(self, tmp_path):
        store = FileResultStore(tmp_path / "s")
        store.put("a", {})
        store.put("b", {})
        assert store.delete("a")
        assert not store.delete("a")
        assert store.stats()["records"] == 1
        assert store.clear() == 1
        assert store.list() == []
