"""Quantity update strategies.

Defines the contract every update path implements, plus the two paths the
ledger can take:

- AtomicLedgerStrategy runs a conditional update in the data store and
  retries a bounded number of times when another writer got there first.
- BestEffortLedgerStrategy reads, computes in process and writes back. It is
  only safe when nothing else touches the item concurrently.
"""

from abc import ABC, abstractmethod
from datetime import UTC, datetime

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from supplies.errors import InsufficientStock, LedgerConflict, UnknownItem
from supplies.item.item import InventoryItem
from supplies.ledger.entry import LedgerPath
from supplies.utils.db import update_where

logger = structlog.get_logger(__name__)


class LedgerStrategy(ABC):
    """Applies a signed delta to an item's on-hand quantity."""

    path: LedgerPath

    @abstractmethod
    def apply(self, item_id: str, delta: int) -> tuple[int, int]:
        """Apply ``delta`` and return ``(previous_quantity, new_quantity)``."""
        ...

    def _read(self, item_id: str) -> InventoryItem:
        """Load the item straight from the store, bypassing the repository."""
        try:
            return current_domain.repository_for(InventoryItem)._dao.get(str(item_id))
        except ObjectNotFoundError as exc:
            raise UnknownItem(item_id) from exc

    @staticmethod
    def _check_available(item_id: str, observed: int, delta: int) -> int:
        new_quantity = observed + delta
        if new_quantity < 0:
            raise InsufficientStock(item_id, available=observed, requested=-delta)
        return new_quantity


class AtomicLedgerStrategy(LedgerStrategy):
    path = LedgerPath.ATOMIC

    def __init__(self, max_retries: int = 3):
        self.max_retries = max(1, int(max_retries))

    def apply(self, item_id: str, delta: int) -> tuple[int, int]:
        dao = current_domain.repository_for(InventoryItem)._dao

        for attempt in range(1, self.max_retries + 1):
            observed = self._read(item_id).quantity or 0
            new_quantity = self._check_available(item_id, observed, delta)

            try:
                matched = update_where(
                    dao,
                    {"id": str(item_id), "quantity": observed},
                    quantity=new_quantity,
                    updated_at=datetime.now(UTC),
                )
            except NotImplementedError as exc:
                raise LedgerConflict(item_id, "store does not support conditional updates") from exc

            if matched:
                return observed, new_quantity

            logger.info(
                "Quantity changed underneath ledger update, retrying",
                item_id=str(item_id),
                observed=observed,
                attempt=attempt,
            )

        raise LedgerConflict(item_id, f"lost {self.max_retries} compare-and-set attempts")


class BestEffortLedgerStrategy(LedgerStrategy):
    path = LedgerPath.BEST_EFFORT

    def apply(self, item_id: str, delta: int) -> tuple[int, int]:
        logger.warning(
            "Applying quantity delta without an atomic update; concurrent writes may be lost",
            item_id=str(item_id),
            delta=delta,
        )
        item = self._read(item_id)
        observed = item.quantity or 0
        new_quantity = self._check_available(item_id, observed, delta)

        item.restate_quantity(new_quantity)
        current_domain.repository_for(InventoryItem).add(item)
        return observed, new_quantity
