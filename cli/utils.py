"""Utility functions for CLI operations."""

from pathlib import Path
from typing import List


def format_file_size(size_bytes: int) -> str:
    """
    Format a byte count with a binary unit (e.g., "1.50 MiB", "512 B").
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"

    size = size_bytes / 1024.0
    for unit in ['KiB', 'MiB', 'GiB']:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0

    return f"{size:.2f} TiB"


def read_chunk(path: Path, chunk_index: int, chunk_size: int) -> bytes:
    """
    Read the bytes of one chunk from a local file.
    """
    with open(path, 'rb') as f:
        f.seek(chunk_index * chunk_size)
        return f.read(chunk_size)


def parse_tag_args(values: List[str]) -> List[dict]:
    """
    Turn repeated "key=value" CLI arguments into request tag objects.
    """
    tags = []
    for item in values:
        key, _, value = item.partition('=')
        tags.append({'key': key.strip(), 'value': value.strip()})
    return tags
