"""API routes package."""

from vault.routes.object_routes import router as object_router
from vault.routes.storage_routes import router as storage_router

__all__ = ["object_router", "storage_router"]
