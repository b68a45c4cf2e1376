"""Object operation API routes."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.responses import StreamingResponse

from vault.access import get_current_caller, get_optional_caller
from vault.exceptions import ChunkSizeExceededError, ObjectNotFoundError
from vault.schemas.common import ErrorResponse
from vault.schemas.objects import (
    CreateObjectRequest,
    CreateObjectResponse,
    ListObjectsResponse,
    ObjectMetadataResponse,
    UploadChunkResponse,
    UploadStatusResponse,
)
from vault.service_locator import get_storage_service
from vault.services.storage_service import StorageService
from vault.utils import content_disposition

router = APIRouter(tags=["Objects"])


def _errors(*status_codes: int) -> dict:
    return {code: {"model": ErrorResponse} for code in status_codes}


async def _read_bounded_body(request: Request, limit: int) -> bytes:
    """
    Read a raw request body, failing as soon as it grows past limit bytes.

    Raises:
        ChunkSizeExceededError: If Content-Length or the received body is over limit
    """
    declared = request.headers.get("content-length")
    if declared is not None and declared.isdigit() and int(declared) > limit:
        raise ChunkSizeExceededError(int(declared), limit)

    body = bytearray()
    async for piece in request.stream():
        body.extend(piece)
        if len(body) > limit:
            raise ChunkSizeExceededError(len(body), limit)

    return bytes(body)


@router.post(
    "/objects",
    response_model=CreateObjectResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_errors(401, 413),
)
async def create_object(
    request: CreateObjectRequest,
    current_caller: str = Depends(get_current_caller),
    service: StorageService = Depends(get_storage_service),
):
    """
    Register an object and get back the id to upload chunks against.

    Parameters:
        - name, size, content_type, is_public, tags (JSON body)
        - X-Caller-Id header (required)

    Returns:
        - object_id: UUID of the new object
        - expected_chunk_count: Number of chunks a complete upload has
        - chunk_size: Maximum bytes per chunk

    Raises:
        - 401: Missing caller identity
        - 413: Declared size over the object ceiling
    """
    record = service.create_object(
        owner_id=current_caller,
        name=request.name,
        size=request.size,
        content_type=request.content_type,
        is_public=request.is_public,
        tags=[(tag.key, tag.value) for tag in request.tags],
    )

    return CreateObjectResponse(
        object_id=record.object_id,
        expected_chunk_count=record.expected_chunk_count,
        chunk_size=record.chunk_size,
    )


@router.get("/objects", response_model=ListObjectsResponse)
async def list_public_objects(
    content_type: Optional[str] = Query(None, description="Only public objects of this content type"),
    service: StorageService = Depends(get_storage_service),
):
    """
    List public objects, optionally filtered by content type.
    """
    if content_type is not None:
        records = service.list_by_content_type(content_type)
    else:
        records = service.list_public_objects()

    return ListObjectsResponse(objects=[ObjectMetadataResponse.from_record(r) for r in records])


@router.get("/objects/{object_id}", response_model=ObjectMetadataResponse, responses=_errors(404))
async def get_object_info(
    object_id: str,
    current_caller: Optional[str] = Depends(get_optional_caller),
    service: StorageService = Depends(get_storage_service),
):
    """
    Get object metadata.

    Raises:
        - 404: Object does not exist or is private to another caller
    """
    record = service.get_object_info(object_id, caller_id=current_caller)
    if record is None:
        raise ObjectNotFoundError(f"Object {object_id} not found")

    return ObjectMetadataResponse.from_record(record)


@router.get("/objects/{object_id}/content", responses=_errors(401, 403, 404, 409))
async def read_object(
    object_id: str,
    current_caller: Optional[str] = Depends(get_optional_caller),
    service: StorageService = Depends(get_storage_service),
):
    """
    Download an object's bytes.

    Raises:
        - 401: Private object requested anonymously
        - 403: Private object owned by someone else
        - 404: Object not found
        - 409: Upload incomplete; body carries the first missing chunk_index
    """
    record, pieces = service.stream_object(current_caller, object_id)

    return StreamingResponse(
        pieces,
        media_type=record.content_type,
        headers={"Content-Disposition": content_disposition(record.name)},
    )


@router.get(
    "/objects/{object_id}/status",
    response_model=UploadStatusResponse,
    responses=_errors(401, 403, 404),
)
async def upload_status(
    object_id: str,
    current_caller: str = Depends(get_current_caller),
    service: StorageService = Depends(get_storage_service),
):
    """
    Report upload progress so an interrupted upload can resume.
    """
    progress = service.upload_status(current_caller, object_id)

    return UploadStatusResponse(
        object_id=progress.object_id,
        expected_chunk_count=progress.expected_chunk_count,
        written_indices=progress.written_indices,
        stored_bytes=progress.stored_bytes,
        first_missing_index=progress.first_missing_index,
        complete=progress.complete,
    )


@router.put(
    "/objects/{object_id}/chunks/{chunk_index}",
    response_model=UploadChunkResponse,
    responses=_errors(400, 401, 403, 404, 413),
)
async def upload_chunk(
    object_id: str,
    chunk_index: int,
    request: Request,
    current_caller: str = Depends(get_current_caller),
    service: StorageService = Depends(get_storage_service),
):
    """
    Upload one chunk as the raw request body (application/octet-stream).

    Raises:
        - 400: Negative chunk index
        - 403: Caller does not own the object
        - 404: Object not found
        - 413: Chunk over the chunk ceiling
    """
    data = await _read_bounded_body(request, service.chunk_size_limit(object_id))
    chunk = service.upload_chunk(current_caller, object_id, chunk_index, data)

    return UploadChunkResponse(
        object_id=object_id,
        chunk_index=chunk.chunk_index,
        size=chunk.size,
        checksum=chunk.checksum,
    )


@router.delete(
    "/objects/{object_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=_errors(401, 403, 404),
)
async def delete_object(
    object_id: str,
    current_caller: str = Depends(get_current_caller),
    service: StorageService = Depends(get_storage_service),
):
    """
    Delete an object and all of its chunks.
    """
    service.delete_object(current_caller, object_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/owners/{owner_id}/objects", response_model=ListObjectsResponse)
async def list_owner_objects(
    owner_id: str,
    current_caller: Optional[str] = Depends(get_optional_caller),
    service: StorageService = Depends(get_storage_service),
):
    """
    List an owner's objects in creation order. Private ones are visible only
    to the owner.
    """
    records = service.list_owner_objects(owner_id, caller_id=current_caller)
    return ListObjectsResponse(objects=[ObjectMetadataResponse.from_record(r) for r in records])
