"""Tests for ObjectRegistry."""

import math

import pytest

from common.types import Tag
from vault.exceptions import InvalidObjectSizeError, ObjectNotFoundError, SizeLimitExceededError
from vault.repositories.object_registry import ObjectRegistry


@pytest.fixture
def objects():
    return {}


@pytest.fixture
def owners():
    return {}


@pytest.fixture
def registry(objects, owners):
    return ObjectRegistry(objects, owners, max_object_size=1000, max_chunk_size=100)


def _create(registry, owner="alice", name="file.bin", size=250, content_type="image/png", is_public=True, tags=()):
    return registry.create(owner, name, content_type, size, is_public, list(tags))


class TestCreate:
    def test_create_records_metadata(self, registry):
        record = _create(registry, tags=[Tag("k", "v")])

        assert record.owner_id == "alice"
        assert record.name == "file.bin"
        assert record.content_type == "image/png"
        assert record.size == 250
        assert record.is_public is True
        assert record.tags == (Tag("k", "v"),)
        assert record.chunk_size == 100
        assert record.created_at.tzinfo is not None
        assert registry.get(record.object_id) == record

    def test_expected_chunk_count(self, registry):
        assert _create(registry, size=250).expected_chunk_count == 3
        assert _create(registry, size=200).expected_chunk_count == 2
        assert _create(registry, size=1).expected_chunk_count == 1

    def test_zero_length_object_expects_one_chunk(self, registry):
        assert _create(registry, size=0).expected_chunk_count == 1

    def test_expected_count_matches_ceiling_division(self, registry):
        for size in (99, 100, 101, 999, 1000):
            record = _create(registry, size=size)
            assert record.expected_chunk_count == max(1, math.ceil(size / 100))

    def test_same_owner_same_name_gets_distinct_ids(self, registry, objects):
        first = _create(registry, name="dup")
        second = _create(registry, name="dup")

        assert first.object_id != second.object_id
        assert len(objects) == 2

    def test_size_over_limit_rejected_without_persisting(self, registry, objects, owners):
        with pytest.raises(SizeLimitExceededError) as exc_info:
            _create(registry, size=1001)

        assert exc_info.value.limit == 1000
        assert objects == {}
        assert owners == {}

    def test_size_at_limit_accepted(self, registry):
        assert _create(registry, size=1000).size == 1000

    def test_negative_size_rejected(self, registry, objects):
        with pytest.raises(InvalidObjectSizeError):
            _create(registry, size=-1)
        assert objects == {}


class TestLookupsAndListings:
    def test_get_unknown_raises(self, registry):
        with pytest.raises(ObjectNotFoundError):
            registry.get("missing")

    def test_find_unknown_returns_none(self, registry):
        assert registry.find("missing") is None

    def test_list_by_owner_in_creation_order(self, registry):
        first = _create(registry, name="a")
        _create(registry, owner="bob", name="b")
        third = _create(registry, name="c", is_public=False)

        listed = registry.list_by_owner("alice")

        assert [r.object_id for r in listed] == [first.object_id, third.object_id]

    def test_list_by_owner_unknown_owner(self, registry):
        assert registry.list_by_owner("nobody") == []

    def test_list_public_excludes_private(self, registry):
        public = _create(registry, is_public=True)
        _create(registry, is_public=False)

        assert registry.list_public() == [public]

    def test_list_by_content_type_public_only(self, registry):
        png = _create(registry, content_type="image/png")
        _create(registry, content_type="image/png", is_public=False)
        _create(registry, content_type="text/plain")

        assert registry.list_by_content_type("image/png") == [png]


class TestRemoval:
    def test_remove_leaves_owner_index(self, registry, owners):
        record = _create(registry)

        registry.remove(record.object_id)

        assert registry.find(record.object_id) is None
        assert owners["alice"] == [record.object_id]
        assert registry.list_by_owner("alice") == []

    def test_remove_from_owner_index(self, registry, owners):
        first = _create(registry)
        second = _create(registry)

        registry.remove_from_owner_index("alice", first.object_id)
        assert owners["alice"] == [second.object_id]

        registry.remove_from_owner_index("alice", second.object_id)
        assert "alice" not in owners

    def test_remove_from_owner_index_unknown_is_noop(self, registry):
        registry.remove_from_owner_index("nobody", "missing")
