"""Integration tests for the Supplies read models."""

from datetime import UTC, date, datetime, timedelta

from protean import current_domain
from supplies.alert.acknowledgement import AcknowledgeAlert
from supplies.item.registration import RegisterItem
from supplies.ledger import BestEffortLedgerStrategy, QuantityLedger, set_ledger
from supplies.projections.alert_board import AlertBoard
from supplies.projections.stock_movement_log import StockMovementLog, movements_for
from supplies.projections.transaction_history import TransactionHistory, export_csv, history_rows
from supplies.transaction.overdue import MarkOverdueCheckouts
from supplies.transaction.processor import TransactionInput, TransactionProcessor


def _register_item(initial_quantity=10, min_quantity=4):
    return current_domain.process(
        RegisterItem(name="Oxygen Mask", location="ER", initial_quantity=initial_quantity, min_quantity=min_quantity),
        asynchronous=False,
    )


def _record(item_id, transaction_type, quantity, **extra):
    return TransactionProcessor().record(
        TransactionInput(
            item_id=item_id, user_id="nurse-001", transaction_type=transaction_type, quantity=quantity, **extra
        )
    )


class TestTransactionHistory:
    def test_row_per_transaction(self):
        item_id = _register_item()
        outcome = _record(item_id, "checkout", 2, notes="Bay 4")

        row = current_domain.repository_for(TransactionHistory).get(str(outcome.transaction.id))
        assert row.item_name == "Oxygen Mask"
        assert row.transaction_type == "checkout"
        assert row.status == "active"
        assert row.notes == "Bay 4"

    def test_return_completes_row(self):
        item_id = _register_item()
        checkout = _record(item_id, "checkout", 2)
        TransactionProcessor().return_checkout(str(checkout.transaction.id), user_id="nurse-001")

        row = current_domain.repository_for(TransactionHistory).get(str(checkout.transaction.id))
        assert row.status == "completed"
        assert row.returned_at is not None

    def test_overdue_reflected(self):
        item_id = _register_item()
        checkout = _record(item_id, "checkout", 1, due_date=date.today() - timedelta(days=1))
        current_domain.process(MarkOverdueCheckouts(as_of=datetime.now(UTC)), asynchronous=False)

        row = current_domain.repository_for(TransactionHistory).get(str(checkout.transaction.id))
        assert row.status == "overdue"

    def test_rejected_movement_not_in_history(self):
        item_id = _register_item(initial_quantity=1)
        _record(item_id, "checkout", 5)
        assert history_rows(item_id=item_id) == []

    def test_export_uses_item_name(self):
        item_id = _register_item()
        _record(item_id, "lost", 1)

        lines = export_csv(history_rows(item_id=item_id)).splitlines()
        assert lines[0] == "date,item,user,type,quantity,status,due_date,notes"
        assert ",Oxygen Mask,nurse-001,lost,1,lost," in lines[1]


class TestStockMovementLog:
    def test_every_applied_delta_logged(self):
        item_id = _register_item(initial_quantity=10)
        _record(item_id, "checkout", 3)
        _record(item_id, "checkin", 1)

        rows = movements_for(item_id)
        assert sorted(row.quantity_change for row in rows) == [-3, 1]

    def test_path_recorded(self):
        set_ledger(QuantityLedger(BestEffortLedgerStrategy()))
        item_id = _register_item(initial_quantity=10)
        outcome = _record(item_id, "checkout", 3)

        row = current_domain.repository_for(StockMovementLog).get(str(outcome.transaction.id))
        assert row.path == "best_effort"
        assert row.previous_level == 10
        assert row.new_level == 7


class TestAlertBoard:
    def test_alert_appears_with_item_details(self):
        item_id = _register_item(initial_quantity=10)
        outcome = _record(item_id, "checkout", 7)

        row = current_domain.repository_for(AlertBoard).get(str(outcome.alert.id))
        assert row.item_name == "Oxygen Mask"
        assert row.location == "ER"
        assert row.alert_level == "low"

    def test_level_change_and_acknowledgement_tracked(self):
        item_id = _register_item(initial_quantity=10)
        outcome = _record(item_id, "checkout", 7)
        current_domain.process(
            AcknowledgeAlert(alert_id=str(outcome.alert.id), user_id="nurse-007"), asynchronous=False
        )
        _record(item_id, "checkout", 3)

        row = current_domain.repository_for(AlertBoard).get(str(outcome.alert.id))
        assert row.alert_level == "out_of_stock"
        assert row.status == "acknowledged"
        assert row.acknowledged_by == "nurse-007"
        assert row.current_quantity == 0

    def test_resolved_alert_leaves_board(self):
        item_id = _register_item(initial_quantity=10)
        _record(item_id, "checkout", 7)
        _record(item_id, "checkin", 7)

        assert current_domain.repository_for(AlertBoard)._dao.query.all().total == 0
