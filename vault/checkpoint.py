"""Export/import of all engine tables around a restart."""

import base64
import json
import os
import tempfile
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Optional

from common.constants import CHECKPOINT_FORMAT_VERSION
from common.logging_config import get_logger
from common.types import ChunkRecord, ObjectRecord, Tag
from vault.exceptions import CheckpointVersionError, ChecksumMismatchError
from vault.state import EngineState
from vault.utils import compute_checksum

if TYPE_CHECKING:
    from vault.services.storage_service import StorageService

logger = get_logger(__name__)


def _object_to_dict(record: ObjectRecord) -> Dict[str, Any]:
    data = asdict(record)
    data["created_at"] = record.created_at.isoformat()
    return data


def _object_from_dict(data: Dict[str, Any]) -> ObjectRecord:
    return ObjectRecord(
        object_id=data["object_id"],
        name=data["name"],
        content_type=data["content_type"],
        size=data["size"],
        owner_id=data["owner_id"],
        created_at=datetime.fromisoformat(data["created_at"]),
        is_public=data["is_public"],
        chunk_size=data["chunk_size"],
        tags=tuple(Tag(key=tag["key"], value=tag["value"]) for tag in data.get("tags", [])),
    )


def _chunk_to_dict(record: ChunkRecord) -> Dict[str, Any]:
    return {
        "data": base64.b64encode(record.data).decode("ascii"),
        "checksum": record.checksum,
    }


def _chunk_from_dict(object_id: str, chunk_index: int, data: Dict[str, Any]) -> ChunkRecord:
    raw = base64.b64decode(data["data"])
    checksum = data["checksum"]

    if compute_checksum(raw) != checksum:
        raise ChecksumMismatchError(
            f"Checkpoint chunk {chunk_index} of object {object_id} does not match its checksum"
        )

    return ChunkRecord(object_id=object_id, chunk_index=chunk_index, data=raw, checksum=checksum)


def export_state(state: EngineState) -> Dict[str, Any]:
    """
    Snapshot every table into ordered key/value sequences.

    Args:
        state: Tables to export; not modified

    Returns:
        JSON-serializable snapshot dictionary
    """
    return {
        "version": CHECKPOINT_FORMAT_VERSION,
        "objects": [
            [object_id, _object_to_dict(record)]
            for object_id, record in state.objects.items()
        ],
        "chunks": [
            [[object_id, chunk_index], _chunk_to_dict(record)]
            for object_id, chunks in state.chunks.items()
            for chunk_index, record in sorted(chunks.items())
        ],
        "owners": [
            [owner_id, list(object_ids)]
            for owner_id, object_ids in state.owners.items()
        ],
        "quotas": [
            [owner_id, used]
            for owner_id, used in state.quotas.items()
        ],
    }


def import_state(snapshot: Dict[str, Any]) -> EngineState:
    """
    Rebuild a fresh set of tables from a snapshot.

    Tables absent from the snapshot start empty. Importing the same snapshot
    twice yields equal states.

    Raises:
        CheckpointVersionError: If the snapshot version is not supported
        ChecksumMismatchError: If any chunk's bytes fail checksum verification
    """
    version = snapshot.get("version")
    if version != CHECKPOINT_FORMAT_VERSION:
        raise CheckpointVersionError(
            f"Unsupported checkpoint version {version!r} (expected {CHECKPOINT_FORMAT_VERSION})"
        )

    state = EngineState()

    for object_id, data in snapshot.get("objects") or []:
        state.objects[object_id] = _object_from_dict(data)

    for (object_id, chunk_index), data in snapshot.get("chunks") or []:
        state.chunks.setdefault(object_id, {})[chunk_index] = _chunk_from_dict(object_id, chunk_index, data)

    for owner_id, object_ids in snapshot.get("owners") or []:
        state.owners[owner_id] = list(object_ids)

    for owner_id, used in snapshot.get("quotas") or []:
        state.quotas[owner_id] = used

    return state


class CheckpointManager:
    """
    Persists engine snapshots to a JSON file.

    Saving writes a temporary file in the same directory and renames it over
    the target, so the four tables land on disk together or not at all.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def save(self, service: "StorageService") -> None:
        """
        Export the service state and write it to disk.

        Raises:
            OSError: If the write fails
        """
        snapshot = service.export_snapshot()

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".checkpoint-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(snapshot, f)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

        logger.info(
            f"Saved checkpoint to {self.path}: {len(snapshot['objects'])} objects, "
            f"{len(snapshot['chunks'])} chunks"
        )

    def load(self) -> Optional[Dict[str, Any]]:
        """
        Read the snapshot from disk.

        Returns:
            Snapshot dictionary, or None if no checkpoint exists yet

        Raises:
            json.JSONDecodeError: If the file is corrupted
        """
        if not self.path.exists():
            logger.warning(f"Checkpoint file not found at {self.path}, starting empty")
            return None

        try:
            with open(self.path, "r") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse checkpoint file: {e}")
            raise

    def restore(self, service: "StorageService") -> bool:
        """
        Replace the service state with the checkpoint on disk.

        Returns:
            True if a checkpoint was restored, False on first boot

        Raises:
            CheckpointVersionError: If the checkpoint format is not supported
            ChecksumMismatchError: If chunk data is corrupted
        """
        snapshot = self.load()
        if snapshot is None:
            service.import_snapshot({"version": CHECKPOINT_FORMAT_VERSION})
            return False

        service.import_snapshot(snapshot)
        logger.info(
            f"Restored checkpoint from {self.path}: {len(snapshot.get('objects') or [])} objects, "
            f"{len(snapshot.get('chunks') or [])} chunks"
        )
        return True
