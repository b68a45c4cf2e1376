"""Storage accounting API routes."""

from fastapi import APIRouter, Depends

from vault.schemas.objects import LimitsResponse, StorageUsageResponse
from vault.service_locator import get_storage_service
from vault.services.storage_service import StorageService

router = APIRouter(tags=["Storage"])


@router.get("/storage/total", response_model=StorageUsageResponse)
async def total_storage_used(service: StorageService = Depends(get_storage_service)):
    """
    Sum of declared sizes across all live objects.
    """
    return StorageUsageResponse(bytes_used=service.total_storage_used())


@router.get("/storage/owners/{owner_id}", response_model=StorageUsageResponse)
async def owner_storage_used(owner_id: str, service: StorageService = Depends(get_storage_service)):
    """
    Bytes of chunk data committed by one owner.
    """
    return StorageUsageResponse(bytes_used=service.owner_storage_used(owner_id), owner_id=owner_id)


@router.get("/limits", response_model=LimitsResponse)
async def limits(service: StorageService = Depends(get_storage_service)):
    """
    Configured size ceilings, used by clients to split uploads.
    """
    return LimitsResponse(max_object_size=service.max_object_size, max_chunk_size=service.max_chunk_size)
