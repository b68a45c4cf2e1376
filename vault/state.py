"""In-memory tables owned by the storage engine."""

from dataclasses import dataclass, field
from typing import Dict, List

from common.types import ChunkRecord, ObjectRecord


@dataclass
class EngineState:
    """
    The four engine tables. Chunks are grouped per object so the set of
    indices actually written is always known.
    """
    objects: Dict[str, ObjectRecord] = field(default_factory=dict)
    chunks: Dict[str, Dict[int, ChunkRecord]] = field(default_factory=dict)
    owners: Dict[str, List[str]] = field(default_factory=dict)
    quotas: Dict[str, int] = field(default_factory=dict)

    def replace_with(self, other: "EngineState") -> None:
        """
        Swap in the tables of another state, dropping everything held now.
        """
        self.objects = other.objects
        self.chunks = other.chunks
        self.owners = other.owners
        self.quotas = other.quotas
