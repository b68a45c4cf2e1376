"""Per-owner byte accounting."""

from typing import Dict, Iterable

from common.logging_config import get_logger
from common.types import ObjectRecord

logger = get_logger(__name__)


class QuotaTracker:
    def __init__(self, quotas: Dict[str, int]):
        self._quotas = quotas

    def usage(self, owner_id: str) -> int:
        """
        Bytes currently committed by an owner (0 if none).
        """
        return self._quotas.get(owner_id, 0)

    def add(self, owner_id: str, delta: int) -> None:
        """
        Apply a signed byte delta. Usage never drops below zero and owners
        at zero are dropped from the table.
        """
        if delta == 0:
            return

        updated = max(0, self._quotas.get(owner_id, 0) + delta)
        if updated:
            self._quotas[owner_id] = updated
        else:
            self._quotas.pop(owner_id, None)

    def release(self, owner_id: str, amount: int) -> None:
        self.add(owner_id, -amount)
        logger.debug(f"Released {amount} bytes [owner_id={owner_id}]")

    @staticmethod
    def total_stored(records: Iterable[ObjectRecord]) -> int:
        """
        Sum of declared sizes across live objects.
        """
        return sum(record.size for record in records)
