"""Object catalog and per-owner index."""

from typing import Dict, List, Optional, Sequence

from common.logging_config import get_logger
from common.types import ObjectRecord, Tag
from vault.exceptions import InvalidObjectSizeError, ObjectNotFoundError, SizeLimitExceededError
from vault.utils import generate_uuid, get_current_time

logger = get_logger(__name__)


class ObjectRegistry:
    def __init__(
        self,
        objects: Dict[str, ObjectRecord],
        owners: Dict[str, List[str]],
        max_object_size: int,
        max_chunk_size: int,
    ):
        self._objects = objects
        self._owners = owners
        self.max_object_size = max_object_size
        self.max_chunk_size = max_chunk_size

    def create(
        self,
        owner_id: str,
        name: str,
        content_type: str,
        size: int,
        is_public: bool,
        tags: Sequence[Tag],
    ) -> ObjectRecord:
        """
        Register a new object and append it to the owner's index.

        Raises:
            InvalidObjectSizeError: If size is negative
            SizeLimitExceededError: If size is over max_object_size
        """
        if size < 0:
            raise InvalidObjectSizeError(f"Declared size must be non-negative, got {size}")

        if size > self.max_object_size:
            raise SizeLimitExceededError(size, self.max_object_size)

        object_id = generate_uuid()
        while object_id in self._objects:
            object_id = generate_uuid()

        record = ObjectRecord(
            object_id=object_id,
            name=name,
            content_type=content_type,
            size=size,
            owner_id=owner_id,
            created_at=get_current_time(),
            is_public=is_public,
            chunk_size=self.max_chunk_size,
            tags=tuple(tags),
        )

        self._objects[object_id] = record
        self._owners.setdefault(owner_id, []).append(object_id)

        logger.debug(f"Registered object [object_id={object_id}] [owner_id={owner_id}] [size={size}]")
        return record

    def find(self, object_id: str) -> Optional[ObjectRecord]:
        return self._objects.get(object_id)

    def get(self, object_id: str) -> ObjectRecord:
        record = self._objects.get(object_id)
        if record is None:
            raise ObjectNotFoundError(f"Object {object_id} not found")
        return record

    def list_by_owner(self, owner_id: str) -> List[ObjectRecord]:
        return [
            self._objects[object_id]
            for object_id in self._owners.get(owner_id, [])
            if object_id in self._objects
        ]

    def list_public(self) -> List[ObjectRecord]:
        return [record for record in self._objects.values() if record.is_public]

    def list_by_content_type(self, content_type: str) -> List[ObjectRecord]:
        """
        Public objects whose content type matches exactly.
        """
        return [
            record for record in self._objects.values()
            if record.is_public and record.content_type == content_type
        ]

    def all_records(self) -> List[ObjectRecord]:
        return list(self._objects.values())

    def remove(self, object_id: str) -> None:
        """
        Drop the metadata record only. Chunks and the owner index are left to
        the caller.
        """
        self._objects.pop(object_id, None)

    def remove_from_owner_index(self, owner_id: str, object_id: str) -> None:
        object_ids = self._owners.get(owner_id)
        if object_ids is None:
            return

        if object_id in object_ids:
            object_ids.remove(object_id)

        if not object_ids:
            del self._owners[owner_id]
