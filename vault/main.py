"""Entry point for the storage engine service."""

import time
import uuid
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from common.logging_config import setup_logging
from vault.checkpoint import CheckpointManager
from vault.config import CHECKPOINT_PATH, VAULT_HOST, VAULT_PORT
from vault.exceptions import (
    StorageEngineError,
    SizeLimitExceededError,
    ChunkSizeExceededError,
    InvalidChunkIndexError,
    InvalidObjectSizeError,
    ObjectNotFoundError,
    UnauthorizedAccessError,
    AuthenticationRequiredError,
    MissingChunkError,
)
from vault.routes.object_routes import router as object_router
from vault.routes.storage_routes import router as storage_router
from vault.service_locator import get_storage_service, set_storage_service
from vault.services.storage_service import StorageService

logger = setup_logging('vault')

app = FastAPI(
    title="Vault Object Storage",
    description="Chunked object storage engine with owner-scoped visibility",
    version="1.0.0"
)

checkpoint_manager: Optional[CheckpointManager] = None


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Middleware to log all HTTP requests and responses.
    """
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id

    start_time = time.time()

    logger.info(
        f"Request started: {request.method} {request.url.path} [request_id={request_id}]"
    )

    response = await call_next(request)

    duration = time.time() - start_time

    logger.info(
        f"Request completed: {request.method} {request.url.path} "
        f"status={response.status_code} duration={duration:.3f}s [request_id={request_id}]"
    )

    response.headers["X-Request-ID"] = request_id

    return response


@app.on_event("startup")
async def startup_event():
    """
    Restore the last checkpoint before serving traffic.

    A checkpoint that cannot be read is fatal: the service must not start
    with silently empty tables.
    """
    global checkpoint_manager

    logger.info("Vault service starting up...")

    service = StorageService()
    manager = CheckpointManager(CHECKPOINT_PATH)

    try:
        restored = manager.restore(service)
    except Exception as e:
        logger.critical(f"Failed to restore checkpoint from {CHECKPOINT_PATH}: {e}", exc_info=True)
        raise

    checkpoint_manager = manager
    set_storage_service(service)
    logger.info("Checkpoint restored" if restored else "No checkpoint found - starting with empty tables")


@app.on_event("shutdown")
async def shutdown_event():
    """
    Persist all tables on shutdown.
    """
    logger.info("Vault service shutting down...")

    if checkpoint_manager is not None:
        checkpoint_manager.save(get_storage_service())
        logger.info("Checkpoint saved")


def _error_response(request: Request, exc: Exception, status_code: int, code: str, **extra) -> JSONResponse:
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"{type(exc).__name__}: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "code": code, **extra}
    )


@app.exception_handler(SizeLimitExceededError)
async def size_limit_exceeded_handler(request: Request, exc: SizeLimitExceededError):
    return _error_response(request, exc, status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, "SIZE_LIMIT_EXCEEDED")


@app.exception_handler(ChunkSizeExceededError)
async def chunk_size_exceeded_handler(request: Request, exc: ChunkSizeExceededError):
    return _error_response(request, exc, status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, "CHUNK_SIZE_EXCEEDED")


@app.exception_handler(InvalidChunkIndexError)
async def invalid_chunk_index_handler(request: Request, exc: InvalidChunkIndexError):
    return _error_response(request, exc, status.HTTP_400_BAD_REQUEST, "INVALID_CHUNK_INDEX")


@app.exception_handler(InvalidObjectSizeError)
async def invalid_object_size_handler(request: Request, exc: InvalidObjectSizeError):
    return _error_response(request, exc, status.HTTP_400_BAD_REQUEST, "INVALID_OBJECT_SIZE")


@app.exception_handler(ObjectNotFoundError)
async def object_not_found_handler(request: Request, exc: ObjectNotFoundError):
    return _error_response(request, exc, status.HTTP_404_NOT_FOUND, "OBJECT_NOT_FOUND")


@app.exception_handler(UnauthorizedAccessError)
async def unauthorized_access_handler(request: Request, exc: UnauthorizedAccessError):
    return _error_response(request, exc, status.HTTP_403_FORBIDDEN, "UNAUTHORIZED_ACCESS")


@app.exception_handler(AuthenticationRequiredError)
async def authentication_required_handler(request: Request, exc: AuthenticationRequiredError):
    return _error_response(request, exc, status.HTTP_401_UNAUTHORIZED, "AUTHENTICATION_REQUIRED")


@app.exception_handler(MissingChunkError)
async def missing_chunk_handler(request: Request, exc: MissingChunkError):
    return _error_response(
        request, exc, status.HTTP_409_CONFLICT, "MISSING_CHUNK", chunk_index=exc.chunk_index
    )


@app.exception_handler(StorageEngineError)
async def storage_engine_error_handler(request: Request, exc: StorageEngineError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(
        f"Storage engine error: {exc} [request_id={request_id}] path={request.url.path}",
        exc_info=True
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": str(exc), "code": "INTERNAL_ERROR"}
    )


app.include_router(object_router)
app.include_router(storage_router)


@app.get("/")
async def root():
    """
    Root endpoint for health check.
    """
    return {"message": "Vault Object Storage API", "status": "running"}


@app.get("/health")
async def health_check():
    """
    Health check endpoint for container healthchecks.
    """
    return {"status": "healthy", "service": "vault"}


@app.get("/ready")
async def ready_check():
    """
    Readiness check: the checkpoint has been restored and tables are live.
    """
    ready = checkpoint_manager is not None
    status_code = status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE

    return JSONResponse(
        status_code=status_code,
        content={"ready": ready, "checkpoint_path": str(CHECKPOINT_PATH)}
    )


def main() -> None:
    """
    Start the FastAPI server with uvicorn.
    """
    uvicorn.run(
        "vault.main:app",
        host=VAULT_HOST,
        port=VAULT_PORT,
    )


if __name__ == "__main__":
    main()
