"""Shared data type definitions (ObjectRecord, ChunkRecord, Tag)."""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Tuple


@dataclass(frozen=True)
class Tag:
    """
    Custom key/value label attached to an object.
    """
    key: str
    value: str


@dataclass(frozen=True)
class ObjectRecord:
    """
    Metadata for a stored object. Never updated in place.
    """
    object_id: str
    name: str
    content_type: str
    size: int
    owner_id: str
    created_at: datetime
    is_public: bool
    chunk_size: int
    tags: Tuple[Tag, ...] = ()

    @property
    def expected_chunk_count(self) -> int:
        """
        Number of chunks a complete upload has. Zero-length objects still
        expect one (empty) chunk.
        """
        return max(1, math.ceil(self.size / self.chunk_size))


@dataclass(frozen=True)
class ChunkRecord:
    """
    A single stored byte range of an object.
    """
    object_id: str
    chunk_index: int
    data: bytes
    checksum: str

    @property
    def size(self) -> int:
        return len(self.data)
