"""Chunk table: byte ranges keyed by (object_id, chunk_index)."""

from typing import Dict, Iterator, List, Optional

from common.logging_config import get_logger
from common.types import ChunkRecord
from vault.exceptions import ChunkSizeExceededError, InvalidChunkIndexError, MissingChunkError
from vault.utils import compute_checksum

logger = get_logger(__name__)


class ChunkStore:
    """
    Stores chunk bytes per object.

    Writes are tolerant (any order, any non-negative index, overwrites
    allowed); reads are strict (every expected index must be present).
    """

    def __init__(self, table: Dict[str, Dict[int, ChunkRecord]], max_chunk_size: int):
        """
        Args:
            table: object_id -> {chunk_index -> ChunkRecord}, owned by EngineState
            max_chunk_size: Largest accepted chunk in bytes
        """
        self._table = table
        self.max_chunk_size = max_chunk_size

    def put(
        self,
        object_id: str,
        chunk_index: int,
        data: bytes,
        max_size: Optional[int] = None,
    ) -> tuple[ChunkRecord, Optional[ChunkRecord]]:
        """
        Store a chunk, replacing any chunk already at the same key.

        Args:
            object_id: Parent object
            chunk_index: Position of the chunk (0-based)
            data: Raw chunk bytes
            max_size: Per-object chunk ceiling; defaults to max_chunk_size

        Returns:
            Tuple of (new record, replaced record or None)

        Raises:
            InvalidChunkIndexError: If chunk_index is negative
            ChunkSizeExceededError: If data is larger than the chunk ceiling
        """
        if chunk_index < 0:
            raise InvalidChunkIndexError(f"Chunk index must be non-negative, got {chunk_index}")

        limit = max_size if max_size is not None else self.max_chunk_size
        if len(data) > limit:
            raise ChunkSizeExceededError(len(data), limit)

        record = ChunkRecord(
            object_id=object_id,
            chunk_index=chunk_index,
            data=bytes(data),
            checksum=compute_checksum(data),
        )

        chunks = self._table.setdefault(object_id, {})
        previous = chunks.get(chunk_index)
        chunks[chunk_index] = record

        if previous is not None:
            logger.debug(f"Overwrote chunk [object_id={object_id}] [index={chunk_index}]")

        return record, previous

    def get(self, object_id: str, chunk_index: int) -> Optional[bytes]:
        record = self._table.get(object_id, {}).get(chunk_index)
        return record.data if record is not None else None

    def get_record(self, object_id: str, chunk_index: int) -> Optional[ChunkRecord]:
        return self._table.get(object_id, {}).get(chunk_index)

    def first_missing_index(self, object_id: str, expected_count: int) -> Optional[int]:
        """
        Find the lowest index in [0, expected_count) with no chunk.

        Returns:
            The missing index, or None if the range is complete
        """
        chunks = self._table.get(object_id, {})
        for index in range(expected_count):
            if index not in chunks:
                return index
        return None

    def collect(self, object_id: str, expected_count: int) -> List[bytes]:
        """
        Gather chunk bytes for indices 0..expected_count-1 in order.

        Raises:
            MissingChunkError: With the lowest missing index
        """
        missing = self.first_missing_index(object_id, expected_count)
        if missing is not None:
            raise MissingChunkError(object_id, missing)

        chunks = self._table[object_id]
        return [chunks[index].data for index in range(expected_count)]

    def reconstruct(self, object_id: str, expected_count: int) -> bytes:
        """
        Concatenate an object's chunks in index order.

        The result length is whatever the chunks add up to; it is not
        checked against the declared object size.

        Raises:
            MissingChunkError: With the lowest missing index
        """
        return b"".join(self.collect(object_id, expected_count))

    def iter_chunks(self, object_id: str, expected_count: int) -> Iterator[bytes]:
        """
        Stream chunk bytes in index order. Completeness is checked before
        the first chunk is yielded.

        Raises:
            MissingChunkError: With the lowest missing index
        """
        pieces = self.collect(object_id, expected_count)
        return iter(pieces)

    def written_indices(self, object_id: str) -> List[int]:
        return sorted(self._table.get(object_id, {}))

    def stored_bytes(self, object_id: str) -> int:
        return sum(record.size for record in self._table.get(object_id, {}).values())

    def remove_range(self, object_id: str, count: int) -> int:
        """
        Delete chunks at indices 0..count-1.

        Returns:
            Number of bytes released
        """
        chunks = self._table.get(object_id)
        if not chunks:
            return 0

        released = 0
        for index in range(count):
            record = chunks.pop(index, None)
            if record is not None:
                released += record.size

        if not chunks:
            del self._table[object_id]

        return released

    def remove_all(self, object_id: str) -> int:
        """
        Delete every chunk written for an object, including indices beyond
        its expected range.

        Returns:
            Number of bytes released
        """
        chunks = self._table.pop(object_id, None)
        if not chunks:
            return 0

        released = sum(record.size for record in chunks.values())
        logger.info(f"Purged {len(chunks)} chunks ({released} bytes) [object_id={object_id}]")
        return released

    def count(self) -> int:
        return sum(len(chunks) for chunks in self._table.values())
