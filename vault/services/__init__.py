"""Service layer for business logic."""

from vault.services.storage_service import StorageService, UploadStatus

__all__ = [
    "StorageService",
    "UploadStatus",
]
