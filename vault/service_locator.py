"""Service locator for the process-wide storage service."""

from typing import Optional

from vault.services.storage_service import StorageService

_storage_service: Optional[StorageService] = None


def set_storage_service(service: Optional[StorageService]):
    """Set global storage service instance"""
    global _storage_service
    _storage_service = service


def get_storage_service() -> StorageService:
    """
    Get global storage service instance, creating an empty one on first use.

    Also usable as a FastAPI dependency.
    """
    global _storage_service
    if _storage_service is None:
        _storage_service = StorageService()
    return _storage_service
