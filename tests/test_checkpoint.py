"""Tests for checkpoint export/import and the on-disk manager."""

import json

import pytest

from common.constants import CHECKPOINT_FORMAT_VERSION
from vault.checkpoint import CheckpointManager, export_state, import_state
from vault.exceptions import CheckpointVersionError, ChecksumMismatchError, MissingChunkError
from vault.services.storage_service import StorageService
from vault.state import EngineState


@pytest.fixture
def populated(service):
    """
    Service holding one complete public object, one partial private object
    and one object owned by a second owner.
    """
    complete = service.create_object(
        "alice", "song.mp3", 1_200_000, content_type="audio/mpeg", is_public=True, tags=[("album", "one")]
    )
    service.upload_chunk("alice", complete.object_id, 1, b"\xff" * 200_000)
    service.upload_chunk("alice", complete.object_id, 0, b"\x00" * 1_000_000)

    partial = service.create_object("alice", "draft.txt", 1_500_000, content_type="text/plain")
    service.upload_chunk("alice", partial.object_id, 0, b"d" * 1_000_000)

    other = service.create_object("bob", "note.txt", 3, content_type="text/plain")
    service.upload_chunk("bob", other.object_id, 0, b"hey")

    return service, complete, partial, other


class TestPureFunctions:
    def test_round_trip_preserves_tables(self, populated):
        service, _, _, _ = populated

        restored = import_state(json.loads(json.dumps(export_state(service.state))))

        assert restored == service.state

    def test_export_does_not_share_owner_lists(self, populated):
        service, complete, _, _ = populated

        snapshot = export_state(service.state)
        snapshot["owners"][0][1].append("tampered")

        assert "tampered" not in service.state.owners["alice"]
        assert complete.object_id in service.state.owners["alice"]

    def test_import_is_idempotent(self, populated):
        service, _, _, _ = populated
        snapshot = export_state(service.state)

        assert import_state(snapshot) == import_state(snapshot)

    def test_empty_state_round_trip(self):
        assert import_state(export_state(EngineState())) == EngineState()

    def test_absent_tables_start_empty(self):
        state = import_state({"version": CHECKPOINT_FORMAT_VERSION})

        assert state == EngineState()

    @pytest.mark.parametrize("version", [None, 0, CHECKPOINT_FORMAT_VERSION + 1, "1"])
    def test_version_mismatch_is_fatal(self, version):
        snapshot = {"objects": [], "chunks": []}
        if version is not None:
            snapshot["version"] = version

        with pytest.raises(CheckpointVersionError):
            import_state(snapshot)

    def test_corrupted_chunk_rejected(self, populated):
        service, _, _, _ = populated
        snapshot = export_state(service.state)
        snapshot["chunks"][0][1]["checksum"] = "0" * 64

        with pytest.raises(ChecksumMismatchError):
            import_state(snapshot)


class TestServiceImport:
    def test_restored_service_behaves_identically(self, populated):
        service, complete, partial, other = populated
        snapshot = json.loads(json.dumps(service.export_snapshot()))

        fresh = StorageService(max_object_size=5_000_000, max_chunk_size=1_000_000)
        fresh.import_snapshot(snapshot)

        assert fresh.read_object(None, complete.object_id) == b"\x00" * 1_000_000 + b"\xff" * 200_000
        with pytest.raises(MissingChunkError) as exc_info:
            fresh.read_object("alice", partial.object_id)
        assert exc_info.value.chunk_index == 1

        assert fresh.list_owner_objects("alice", caller_id="alice") == [complete, partial]
        assert fresh.list_public_objects() == [complete]
        assert fresh.owner_storage_used("alice") == service.owner_storage_used("alice")
        assert fresh.owner_storage_used("bob") == 3
        assert fresh.total_storage_used() == service.total_storage_used()
        assert fresh.get_object_info(other.object_id, caller_id="bob") == other

    def test_import_replaces_rather_than_merges(self, populated):
        service, complete, _, _ = populated
        snapshot = service.export_snapshot()

        target = StorageService(max_object_size=5_000_000, max_chunk_size=1_000_000)
        stale = target.create_object("carol", "stale", 1, is_public=True)
        target.import_snapshot(snapshot)

        assert target.get_object_info(stale.object_id) is None
        assert target.list_owner_objects("carol") == []
        assert target.get_object_info(complete.object_id) == complete

    def test_operations_after_import_use_restored_tables(self, populated):
        service, _, partial, _ = populated
        target = StorageService(max_object_size=5_000_000, max_chunk_size=1_000_000)
        target.import_snapshot(service.export_snapshot())

        target.upload_chunk("alice", partial.object_id, 1, b"e" * 500_000)

        assert len(target.read_object("alice", partial.object_id)) == 1_500_000
        assert target.state.chunks[partial.object_id][1].size == 500_000

    def test_failed_import_keeps_current_state(self, populated):
        service, complete, _, _ = populated

        with pytest.raises(CheckpointVersionError):
            service.import_snapshot({"version": 99})

        assert service.get_object_info(complete.object_id) == complete


class TestCheckpointManager:
    def test_save_and_restore(self, populated, tmp_path):
        service, complete, _, _ = populated
        manager = CheckpointManager(tmp_path / "data" / "checkpoint.json")

        manager.save(service)
        fresh = StorageService(max_object_size=5_000_000, max_chunk_size=1_000_000)

        assert manager.restore(fresh) is True
        assert fresh.state == service.state
        assert fresh.read_object("alice", complete.object_id) == service.read_object("alice", complete.object_id)

    def test_save_leaves_no_temporary_files(self, populated, tmp_path):
        service, _, _, _ = populated
        manager = CheckpointManager(tmp_path / "checkpoint.json")

        manager.save(service)
        manager.save(service)

        assert [p.name for p in tmp_path.iterdir()] == ["checkpoint.json"]

    def test_first_boot_starts_empty(self, tmp_path):
        service = StorageService(max_object_size=10, max_chunk_size=5)
        service.create_object("alice", "leftover", 1)

        restored = CheckpointManager(tmp_path / "absent.json").restore(service)

        assert restored is False
        assert service.state == EngineState()

    def test_version_mismatch_on_disk_is_fatal(self, tmp_path):
        path = tmp_path / "checkpoint.json"
        path.write_text(json.dumps({"version": 999}))

        with pytest.raises(CheckpointVersionError):
            CheckpointManager(path).restore(StorageService())

    def test_corrupted_file_raises(self, tmp_path):
        path = tmp_path / "checkpoint.json"
        path.write_text("{not json")

        with pytest.raises(json.JSONDecodeError):
            CheckpointManager(path).restore(StorageService())
