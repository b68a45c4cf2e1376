"""Ownership and visibility checks shared by every object operation."""

from typing import Optional

from fastapi import Header

from common.types import ObjectRecord
from vault.config import CALLER_ID_HEADER
from vault.exceptions import AuthenticationRequiredError, UnauthorizedAccessError


class AccessController:
    @staticmethod
    def authorize_read(caller_id: Optional[str], record: ObjectRecord) -> None:
        """
        Allow reads of public objects by anyone and of private objects by
        their owner.

        Raises:
            AuthenticationRequiredError: Anonymous caller on a private object
            UnauthorizedAccessError: Caller is not the owner of a private object
        """
        if record.is_public:
            return

        if caller_id is None:
            raise AuthenticationRequiredError(f"Object {record.object_id} is private")

        if caller_id != record.owner_id:
            raise UnauthorizedAccessError(f"Caller {caller_id} cannot read object {record.object_id}")

    @staticmethod
    def authorize_write(caller_id: Optional[str], record: ObjectRecord) -> None:
        """
        Only the owner may write, whatever the visibility.

        Raises:
            UnauthorizedAccessError: Caller is anonymous or not the owner
        """
        if caller_id is None or caller_id != record.owner_id:
            raise UnauthorizedAccessError(f"Caller {caller_id} does not own object {record.object_id}")

    @staticmethod
    def can_read(caller_id: Optional[str], record: ObjectRecord) -> bool:
        return record.is_public or (caller_id is not None and caller_id == record.owner_id)


async def get_optional_caller(x_caller_id: Optional[str] = Header(None, alias=CALLER_ID_HEADER)) -> Optional[str]:
    """
    FastAPI dependency for read routes where anonymous callers are allowed.

    Identity is established upstream; the header value is trusted as-is.
    """
    return x_caller_id or None


async def get_current_caller(x_caller_id: Optional[str] = Header(None, alias=CALLER_ID_HEADER)) -> str:
    """
    FastAPI dependency for routes that need a caller identity.

    Raises:
        AuthenticationRequiredError: If the identity header is missing or empty
    """
    if not x_caller_id:
        raise AuthenticationRequiredError(f"{CALLER_ID_HEADER} header is required")
    return x_caller_id
