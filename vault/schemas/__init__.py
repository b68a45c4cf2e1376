"""Pydantic schemas for API requests and responses."""

from vault.schemas.objects import (
    TagModel,
    CreateObjectRequest,
    CreateObjectResponse,
    ObjectMetadataResponse,
    ListObjectsResponse,
    UploadChunkResponse,
    UploadStatusResponse,
    StorageUsageResponse,
    LimitsResponse
)
from vault.schemas.common import ErrorResponse

__all__ = [
    "TagModel",
    "CreateObjectRequest",
    "CreateObjectResponse",
    "ObjectMetadataResponse",
    "ListObjectsResponse",
    "UploadChunkResponse",
    "UploadStatusResponse",
    "StorageUsageResponse",
    "LimitsResponse",
    "ErrorResponse"
]
