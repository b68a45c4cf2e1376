"""Storage service: the operation surface over the engine tables."""

import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from common.constants import DEFAULT_CONTENT_TYPE
from common.logging_config import get_logger
from common.types import ChunkRecord, ObjectRecord
from vault import config
from vault.access import AccessController
from vault.checkpoint import export_state, import_state
from vault.repositories.chunk_store import ChunkStore
from vault.repositories.object_registry import ObjectRegistry
from vault.repositories.quota_tracker import QuotaTracker
from vault.state import EngineState
from vault.utils import normalize_tags

logger = get_logger(__name__)


@dataclass(frozen=True)
class UploadStatus:
    """
    Progress of a chunked upload.
    """
    object_id: str
    expected_chunk_count: int
    written_indices: List[int]
    stored_bytes: int
    first_missing_index: Optional[int]

    @property
    def complete(self) -> bool:
        return self.first_missing_index is None


class StorageService:
    """
    Owns the engine tables and runs every operation on them under a single
    lock, so no caller observes another operation half-applied.
    """

    def __init__(
        self,
        max_object_size: Optional[int] = None,
        max_chunk_size: Optional[int] = None,
        state: Optional[EngineState] = None,
    ):
        self.max_object_size = max_object_size if max_object_size is not None else config.MAX_OBJECT_SIZE_BYTES
        self.max_chunk_size = max_chunk_size if max_chunk_size is not None else config.MAX_CHUNK_SIZE_BYTES
        self.state = state if state is not None else EngineState()
        self.access = AccessController()
        self._lock = threading.RLock()
        self._bind_tables()

    def _bind_tables(self) -> None:
        self.registry = ObjectRegistry(
            self.state.objects,
            self.state.owners,
            max_object_size=self.max_object_size,
            max_chunk_size=self.max_chunk_size,
        )
        self.chunk_store = ChunkStore(self.state.chunks, max_chunk_size=self.max_chunk_size)
        self.quota = QuotaTracker(self.state.quotas)

    def create_object(
        self,
        owner_id: str,
        name: str,
        size: int,
        content_type: str = DEFAULT_CONTENT_TYPE,
        is_public: bool = False,
        tags: Iterable[Tuple[str, str]] = (),
    ) -> ObjectRecord:
        """
        Register a new object awaiting chunk uploads.

        Args:
            owner_id: Verified identity of the creator
            name: Display name
            size: Declared total size in bytes, fixed for the object's life
            content_type: MIME type string
            is_public: Whether anyone may read the object
            tags: Ordered (key, value) pairs

        Returns:
            The created ObjectRecord

        Raises:
            SizeLimitExceededError: If size exceeds the object ceiling
            InvalidObjectSizeError: If size is negative
        """
        with self._lock:
            record = self.registry.create(
                owner_id=owner_id,
                name=name,
                content_type=content_type,
                size=size,
                is_public=is_public,
                tags=normalize_tags(tags),
            )

        logger.info(
            f"Created object [object_id={record.object_id}] [owner_id={owner_id}] "
            f"[size={size}] [chunks={record.expected_chunk_count}]"
        )
        return record

    def upload_chunk(self, caller_id: Optional[str], object_id: str, chunk_index: int, data: bytes) -> ChunkRecord:
        """
        Store one chunk of an object. Re-uploading an index replaces it.

        Chunks are checked against the chunk size recorded on the object, so
        a changed limit never alters the layout of existing objects.

        Raises:
            ObjectNotFoundError: If the object does not exist
            UnauthorizedAccessError: If the caller does not own the object
            InvalidChunkIndexError: If chunk_index is negative
            ChunkSizeExceededError: If data exceeds the object's chunk size
        """
        with self._lock:
            record = self.registry.get(object_id)
            self.access.authorize_write(caller_id, record)

            chunk, previous = self.chunk_store.put(object_id, chunk_index, data, max_size=record.chunk_size)
            delta = chunk.size - (previous.size if previous is not None else 0)
            self.quota.add(record.owner_id, delta)

        if chunk_index >= record.expected_chunk_count:
            logger.warning(
                f"Chunk index {chunk_index} is beyond expected range {record.expected_chunk_count} "
                f"[object_id={object_id}]"
            )

        logger.debug(f"Stored chunk [object_id={object_id}] [index={chunk_index}] [bytes={chunk.size}]")
        return chunk

    def chunk_size_limit(self, object_id: str) -> int:
        """
        Largest chunk accepted for an object.

        Raises:
            ObjectNotFoundError: If the object does not exist
        """
        with self._lock:
            return self.registry.get(object_id).chunk_size

    def read_object(self, caller_id: Optional[str], object_id: str) -> bytes:
        """
        Reconstruct an object's full byte sequence.

        Raises:
            ObjectNotFoundError: If the object does not exist
            AuthenticationRequiredError: Anonymous caller on a private object
            UnauthorizedAccessError: Caller does not own a private object
            MissingChunkError: With the lowest index not yet uploaded
        """
        with self._lock:
            record = self.registry.get(object_id)
            self.access.authorize_read(caller_id, record)
            return self.chunk_store.reconstruct(object_id, record.expected_chunk_count)

    def stream_object(self, caller_id: Optional[str], object_id: str) -> Tuple[ObjectRecord, Iterator[bytes]]:
        """
        Same checks as read_object, but returns the chunks as an iterator.
        All failures are raised before the iterator is returned.
        """
        with self._lock:
            record = self.registry.get(object_id)
            self.access.authorize_read(caller_id, record)
            pieces = self.chunk_store.iter_chunks(object_id, record.expected_chunk_count)

        logger.info(f"Streaming object [object_id={object_id}] [chunks={record.expected_chunk_count}]")
        return record, pieces

    def upload_status(self, caller_id: Optional[str], object_id: str) -> UploadStatus:
        """
        Report which chunks are present so an interrupted upload can resume.

        Raises:
            ObjectNotFoundError: If the object does not exist
            UnauthorizedAccessError: If the caller does not own the object
        """
        with self._lock:
            record = self.registry.get(object_id)
            self.access.authorize_write(caller_id, record)

            return UploadStatus(
                object_id=object_id,
                expected_chunk_count=record.expected_chunk_count,
                written_indices=self.chunk_store.written_indices(object_id),
                stored_bytes=self.chunk_store.stored_bytes(object_id),
                first_missing_index=self.chunk_store.first_missing_index(object_id, record.expected_chunk_count),
            )

    def delete_object(self, caller_id: Optional[str], object_id: str) -> None:
        """
        Remove an object with all its chunks.

        The metadata record goes last: an interrupted delete leaves a visible
        object rather than unreachable chunks.

        Raises:
            ObjectNotFoundError: If the object does not exist
            UnauthorizedAccessError: If the caller does not own the object
        """
        with self._lock:
            record = self.registry.get(object_id)
            self.access.authorize_write(caller_id, record)

            released = self.chunk_store.remove_all(object_id)
            self.quota.release(record.owner_id, released)
            self.registry.remove_from_owner_index(record.owner_id, object_id)
            self.registry.remove(object_id)

        logger.info(f"Deleted object [object_id={object_id}] [owner_id={record.owner_id}] [released={released}]")

    def get_object_info(self, object_id: str, caller_id: Optional[str] = None) -> Optional[ObjectRecord]:
        """
        Metadata for an object, or None if it does not exist or the caller
        may not read it.
        """
        with self._lock:
            record = self.registry.find(object_id)

        if record is None or not self.access.can_read(caller_id, record):
            return None
        return record

    def list_owner_objects(self, owner_id: str, caller_id: Optional[str] = None) -> List[ObjectRecord]:
        """
        An owner's objects in creation order. Private objects are included
        only when the caller is that owner.
        """
        with self._lock:
            records = self.registry.list_by_owner(owner_id)

        return [record for record in records if self.access.can_read(caller_id, record)]

    def list_public_objects(self) -> List[ObjectRecord]:
        with self._lock:
            return self.registry.list_public()

    def list_by_content_type(self, content_type: str) -> List[ObjectRecord]:
        with self._lock:
            return self.registry.list_by_content_type(content_type)

    def total_storage_used(self) -> int:
        with self._lock:
            return QuotaTracker.total_stored(self.registry.all_records())

    def owner_storage_used(self, owner_id: str) -> int:
        with self._lock:
            return self.quota.usage(owner_id)

    def export_snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return export_state(self.state)

    def import_snapshot(self, snapshot: Dict[str, Any]) -> None:
        """
        Replace all tables with the snapshot contents.

        The new state is fully built before anything is swapped in, so a
        failed import leaves the current tables untouched.
        """
        with self._lock:
            restored = import_state(snapshot)
            self.state.replace_with(restored)
            self._bind_tables()

        logger.info(f"Imported snapshot: {len(restored.objects)} objects")
