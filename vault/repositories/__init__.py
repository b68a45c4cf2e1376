"""Table access layer for objects, chunks and quotas."""

from vault.repositories.object_registry import ObjectRegistry
from vault.repositories.chunk_store import ChunkStore
from vault.repositories.quota_tracker import QuotaTracker

__all__ = [
    "ObjectRegistry",
    "ChunkStore",
    "QuotaTracker",
]
