"""Utility helper functions for the storage engine."""

import hashlib
import re
import uuid
from datetime import datetime, timezone
from typing import Iterable, List, Tuple
from urllib.parse import quote

from common.types import Tag


def generate_uuid() -> str:
    """
    Generate a new UUID4 string.

    Returns:
        UUID4 string
    """
    return str(uuid.uuid4())


def get_current_time() -> datetime:
    """
    Get current time as a timezone-aware UTC datetime.
    """
    return datetime.now(timezone.utc)


def compute_checksum(data: bytes) -> str:
    """
    Compute SHA-256 checksum for given data.

    Args:
        data: Bytes to compute checksum for

    Returns:
        Hexadecimal string representation of SHA-256 hash
    """
    return hashlib.sha256(data).hexdigest()


def normalize_tags(pairs: Iterable[Tuple[str, str]]) -> List[Tag]:
    """
    Build an ordered tag list, dropping exact duplicates.

    Args:
        pairs: Iterable of (key, value) string pairs

    Returns:
        List of Tag in first-seen order
    """
    tags: List[Tag] = []
    for key, value in pairs:
        tag = Tag(key=key, value=value)
        if tag not in tags:
            tags.append(tag)
    return tags


_UNSAFE_FILENAME_CHARS = re.compile(r'[^\x20-\x7e]|["\\]')


def content_disposition(filename: str) -> str:
    """
    Build an attachment Content-Disposition header value (RFC 6266).

    Header values must be latin-1, so the real name travels percent-encoded
    in filename* and filename carries an ASCII-only fallback.

    Args:
        filename: Object name, any Unicode

    Returns:
        Header value, e.g. attachment; filename="__.txt"; filename*=UTF-8''%E6%8A%A5%E5%91%8A.txt
    """
    fallback = _UNSAFE_FILENAME_CHARS.sub('_', filename) or 'download'
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"
