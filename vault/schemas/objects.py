"""Pydantic schemas for object and storage endpoints."""

from typing import List, Optional

from pydantic import BaseModel, Field

from common.constants import DEFAULT_CONTENT_TYPE
from common.types import ObjectRecord


class TagModel(BaseModel):
    """A single key/value tag."""
    key: str
    value: str


class CreateObjectRequest(BaseModel):
    """Request model for object creation."""
    name: str
    size: int = Field(..., ge=0)
    content_type: str = DEFAULT_CONTENT_TYPE
    is_public: bool = False
    tags: List[TagModel] = []


class CreateObjectResponse(BaseModel):
    """Response model for object creation."""
    object_id: str
    expected_chunk_count: int
    chunk_size: int


class ObjectMetadataResponse(BaseModel):
    """Response model for object metadata."""
    object_id: str
    name: str
    content_type: str
    size: int
    owner_id: str
    created_at: str
    is_public: bool
    tags: List[TagModel]
    chunk_size: int
    expected_chunk_count: int

    @classmethod
    def from_record(cls, record: ObjectRecord) -> "ObjectMetadataResponse":
        return cls(
            object_id=record.object_id,
            name=record.name,
            content_type=record.content_type,
            size=record.size,
            owner_id=record.owner_id,
            created_at=record.created_at.isoformat(),
            is_public=record.is_public,
            tags=[TagModel(key=tag.key, value=tag.value) for tag in record.tags],
            chunk_size=record.chunk_size,
            expected_chunk_count=record.expected_chunk_count,
        )


class ListObjectsResponse(BaseModel):
    """Response model for object listings."""
    objects: List[ObjectMetadataResponse]


class UploadChunkResponse(BaseModel):
    """Response model for chunk upload."""
    object_id: str
    chunk_index: int
    size: int
    checksum: str


class UploadStatusResponse(BaseModel):
    """Response model for upload progress."""
    object_id: str
    expected_chunk_count: int
    written_indices: List[int]
    stored_bytes: int
    first_missing_index: Optional[int]
    complete: bool


class StorageUsageResponse(BaseModel):
    """Response model for byte accounting."""
    bytes_used: int
    owner_id: Optional[str] = None


class LimitsResponse(BaseModel):
    """Response model for configured size ceilings."""
    max_object_size: int
    max_chunk_size: int
