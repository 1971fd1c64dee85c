"""Alert lifecycle manager: the only writer of LowStockAlert records.

``reconcile`` is an upsert keyed by item id: it looks up the item's open
alert through OpenAlertIndex and either opens, reassesses or resolves it.
The index is maintained here, in the same unit of work as the alert, so a
follow-up reconciliation never misses an alert that was just opened.
"""

from datetime import UTC, datetime

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from supplies.alert.alert import LowStockAlert, OpenAlertIndex
from supplies.alert.evaluation import evaluate, is_escalation

logger = structlog.get_logger(__name__)


class AlertLifecycleManager:
    def open_alert_for(self, item_id) -> LowStockAlert | None:
        """Return the item's active or acknowledged alert, if it has one."""
        pointer = self._pointer(item_id)
        if pointer is None:
            return None
        return current_domain.repository_for(LowStockAlert).get(pointer.alert_id)

    def reconcile(self, item) -> LowStockAlert | None:
        """Bring the item's alert in line with its current quantity and minimum.

        Returns the alert that was opened, updated or resolved, or None when
        the item is healthy and had no open alert.
        """
        repo = current_domain.repository_for(LowStockAlert)
        quantity = item.quantity or 0
        min_quantity = item.min_quantity or 0
        level = evaluate(quantity, min_quantity)
        alert = self.open_alert_for(item.id)

        if alert is None:
            if level is None:
                return None
            alert = LowStockAlert.raise_for(
                item_id=item.id,
                alert_level=level.value,
                current_quantity=quantity,
                min_quantity=min_quantity,
            )
            repo.add(alert)
            current_domain.repository_for(OpenAlertIndex).add(
                OpenAlertIndex(item_id=str(item.id), alert_id=str(alert.id), opened_at=datetime.now(UTC))
            )
            logger.info(
                "Low stock alert raised",
                alert_id=str(alert.id),
                item_id=str(item.id),
                alert_level=level.value,
                quantity=quantity,
            )
            return alert

        if level is None:
            alert.resolve(current_quantity=quantity)
            repo.add(alert)
            self._clear_pointer(item.id)
            logger.info("Low stock alert resolved", alert_id=str(alert.id), item_id=str(item.id), quantity=quantity)
            return alert

        previous_level = alert.alert_level
        if alert.reassess(level.value, quantity, min_quantity):
            logger.info(
                "Low stock alert escalated" if is_escalation(previous_level, level.value) else "Low stock alert eased",
                alert_id=str(alert.id),
                item_id=str(item.id),
                previous_level=previous_level,
                alert_level=level.value,
                status=alert.status,
            )
        repo.add(alert)
        return alert

    def acknowledge(self, alert_id, user_id) -> LowStockAlert:
        repo = current_domain.repository_for(LowStockAlert)
        alert = repo.get(alert_id)
        alert.acknowledge(user_id)
        repo.add(alert)
        logger.info("Low stock alert acknowledged", alert_id=str(alert_id), user_id=str(user_id))
        return alert

    def resolve(self, alert_id, user_id) -> LowStockAlert:
        """Resolve an alert by hand. The item is re-alerted on its next breach."""
        repo = current_domain.repository_for(LowStockAlert)
        alert = repo.get(alert_id)
        alert.resolve(resolved_by=user_id)
        repo.add(alert)

        pointer = self._pointer(alert.item_id)
        if pointer is not None and str(pointer.alert_id) == str(alert.id):
            self._clear_pointer(alert.item_id)

        logger.info("Low stock alert resolved manually", alert_id=str(alert_id), user_id=str(user_id))
        return alert

    def _pointer(self, item_id):
        try:
            return current_domain.repository_for(OpenAlertIndex).get(str(item_id))
        except ObjectNotFoundError:
            return None

    def _clear_pointer(self, item_id):
        repo = current_domain.repository_for(OpenAlertIndex)
        pointer = self._pointer(item_id)
        if pointer is not None:
            repo._dao.delete(pointer)
