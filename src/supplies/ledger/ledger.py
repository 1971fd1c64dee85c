"""QuantityLedger: the only writer of an item's on-hand quantity."""

from dataclasses import dataclass

import structlog
from protean.utils.globals import current_domain
from sqlalchemy.exc import SQLAlchemyError

from supplies.errors import LedgerConflict, PersistenceFailure
from supplies.item.item import InventoryItem
from supplies.ledger.entry import LedgerEntry
from supplies.ledger.strategies import LedgerStrategy

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class LedgerResult:
    """Outcome of applying (or replaying) a delta."""

    item: InventoryItem
    entry: LedgerEntry
    replayed: bool = False


class QuantityLedger:
    def __init__(self, strategy: LedgerStrategy, fallback: LedgerStrategy | None = None):
        self.strategy = strategy
        self.fallback = fallback

    def apply_delta(self, item_id: str, delta: int, transaction_id: str) -> LedgerResult:
        """Apply ``delta`` to the item once per ``transaction_id``."""
        item_repo = current_domain.repository_for(InventoryItem)
        entry_repo = current_domain.repository_for(LedgerEntry)

        try:
            existing = self._find_entry(transaction_id)
            if existing is not None:
                logger.info(
                    "Ledger delta already applied, skipping",
                    transaction_id=str(transaction_id),
                    item_id=str(item_id),
                )
                return LedgerResult(item=item_repo._dao.get(str(item_id)), entry=existing, replayed=True)

            strategy = self.strategy
            try:
                previous, new = strategy.apply(item_id, delta)
            except LedgerConflict as exc:
                if self.fallback is None:
                    raise
                logger.warning(
                    "Atomic ledger update unavailable, falling back",
                    item_id=str(item_id),
                    transaction_id=str(transaction_id),
                    reason=exc.reason,
                    fallback=self.fallback.path.value,
                )
                strategy = self.fallback
                previous, new = strategy.apply(item_id, delta)

            entry = LedgerEntry.record(
                transaction_id=transaction_id,
                item_id=item_id,
                delta=delta,
                previous_quantity=previous,
                new_quantity=new,
                path=strategy.path.value,
            )
            entry_repo.add(entry)
            item = item_repo._dao.get(str(item_id))
        except (SQLAlchemyError, ConnectionError, TimeoutError) as exc:
            logger.error(
                "Ledger store unavailable",
                item_id=str(item_id),
                transaction_id=str(transaction_id),
                error=str(exc),
            )
            raise PersistenceFailure(str(exc)) from exc

        logger.info(
            "Stock level changed",
            item_id=str(item_id),
            transaction_id=str(transaction_id),
            previous_quantity=previous,
            new_quantity=new,
            path=strategy.path.value,
        )
        return LedgerResult(item=item, entry=entry)

    def _find_entry(self, transaction_id):
        entries = current_domain.repository_for(LedgerEntry)._dao.query.filter(transaction_id=str(transaction_id))
        return entries.all().first
