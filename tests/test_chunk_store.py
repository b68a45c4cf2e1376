"""Tests for ChunkStore."""

import pytest

from vault.exceptions import ChunkSizeExceededError, InvalidChunkIndexError, MissingChunkError
from vault.repositories.chunk_store import ChunkStore
from vault.utils import compute_checksum


@pytest.fixture
def table():
    return {}


@pytest.fixture
def store(table):
    return ChunkStore(table, max_chunk_size=10)


class TestPut:
    def test_put_and_get(self, store):
        record, previous = store.put("obj", 0, b"hello")

        assert previous is None
        assert record.size == 5
        assert record.checksum == compute_checksum(b"hello")
        assert store.get("obj", 0) == b"hello"

    def test_put_overwrites_existing_chunk(self, store):
        store.put("obj", 0, b"first")
        record, previous = store.put("obj", 0, b"second")

        assert previous.data == b"first"
        assert record.data == b"second"
        assert store.get("obj", 0) == b"second"
        assert store.count() == 1

    def test_put_at_exact_limit(self, store):
        store.put("obj", 0, b"x" * 10)
        assert store.get("obj", 0) == b"x" * 10

    def test_oversized_chunk_rejected_without_mutation(self, store, table):
        store.put("obj", 0, b"keep")

        with pytest.raises(ChunkSizeExceededError) as exc_info:
            store.put("obj", 0, b"x" * 11)

        assert exc_info.value.size == 11
        assert exc_info.value.limit == 10
        assert store.get("obj", 0) == b"keep"

    def test_oversized_chunk_on_new_object_leaves_no_entry(self, store, table):
        with pytest.raises(ChunkSizeExceededError):
            store.put("new", 0, b"x" * 11)

        assert "new" not in table

    def test_per_object_ceiling_overrides_store_limit(self, store):
        store.put("obj", 0, b"x" * 20, max_size=20)

        with pytest.raises(ChunkSizeExceededError) as exc_info:
            store.put("obj", 1, b"x" * 5, max_size=4)

        assert exc_info.value.limit == 4
        assert store.written_indices("obj") == [0]

    def test_negative_index_rejected(self, store):
        with pytest.raises(InvalidChunkIndexError):
            store.put("obj", -1, b"a")

    def test_index_beyond_expected_range_is_accepted(self, store):
        store.put("obj", 42, b"late")
        assert store.written_indices("obj") == [42]

    def test_get_missing_returns_none(self, store):
        assert store.get("obj", 3) is None
        assert store.get_record("nope", 0) is None


class TestReconstruct:
    def test_concatenates_in_index_order_regardless_of_upload_order(self, store):
        store.put("obj", 2, b"c")
        store.put("obj", 0, b"a")
        store.put("obj", 1, b"b")

        assert store.reconstruct("obj", 3) == b"abc"

    def test_missing_chunk_reports_index(self, store):
        store.put("obj", 0, b"a")
        store.put("obj", 2, b"c")

        with pytest.raises(MissingChunkError) as exc_info:
            store.reconstruct("obj", 3)

        assert exc_info.value.chunk_index == 1
        assert exc_info.value.object_id == "obj"

    def test_lowest_missing_index_reported(self, store):
        store.put("obj", 3, b"d")

        with pytest.raises(MissingChunkError) as exc_info:
            store.reconstruct("obj", 4)

        assert exc_info.value.chunk_index == 0

    def test_length_not_checked_against_declared_size(self, store):
        store.put("obj", 0, b"short")
        assert store.reconstruct("obj", 1) == b"short"

    def test_chunks_beyond_expected_count_are_ignored(self, store):
        store.put("obj", 0, b"a")
        store.put("obj", 5, b"orphan")

        assert store.reconstruct("obj", 1) == b"a"

    def test_iter_chunks_fails_before_yielding(self, store):
        store.put("obj", 0, b"a")

        with pytest.raises(MissingChunkError):
            store.iter_chunks("obj", 2)

    def test_iter_chunks_yields_in_order(self, store):
        store.put("obj", 1, b"b")
        store.put("obj", 0, b"a")

        assert list(store.iter_chunks("obj", 2)) == [b"a", b"b"]

    def test_first_missing_index_none_when_complete(self, store):
        store.put("obj", 0, b"a")
        assert store.first_missing_index("obj", 1) is None


class TestRemoval:
    def test_remove_all_purges_orphans(self, store, table):
        store.put("obj", 0, b"aaaa")
        store.put("obj", 1, b"bb")
        store.put("obj", 9, b"ccc")

        released = store.remove_all("obj")

        assert released == 9
        assert "obj" not in table
        assert store.written_indices("obj") == []

    def test_remove_all_unknown_object(self, store):
        assert store.remove_all("nope") == 0

    def test_remove_range_leaves_chunks_past_count(self, store):
        store.put("obj", 0, b"a")
        store.put("obj", 1, b"b")
        store.put("obj", 4, b"e")

        released = store.remove_range("obj", 2)

        assert released == 2
        assert store.written_indices("obj") == [4]

    def test_remove_range_drops_empty_object_entry(self, store, table):
        store.put("obj", 0, b"a")
        store.remove_range("obj", 1)
        assert "obj" not in table

    def test_other_objects_untouched(self, store):
        store.put("one", 0, b"1")
        store.put("two", 0, b"2")

        store.remove_all("one")

        assert store.get("two", 0) == b"2"
