"""Shared BDD fixtures and step definitions for the Supplies domain."""

import pytest
from protean import current_domain
from pytest_bdd import given, parsers, then, when
from supplies.alert.acknowledgement import AcknowledgeAlert
from supplies.alert.lifecycle import AlertLifecycleManager
from supplies.item.item import InventoryItem
from supplies.item.registration import RegisterItem
from supplies.transaction.processor import TransactionInput, TransactionProcessor
from supplies.transaction.transaction import StockTransaction


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def movements():
    """Outcomes of every movement recorded in the scenario, in order."""
    return []


@pytest.fixture()
def seen_alerts():
    return []


def _record(item_id, transaction_type, quantity, movements, seen_alerts):
    outcome = TransactionProcessor().record(
        TransactionInput(item_id=item_id, user_id="nurse-001", transaction_type=transaction_type, quantity=quantity)
    )
    movements.append(outcome)
    if outcome.ok and outcome.alert is not None:
        seen_alerts.append(outcome.alert)
    return outcome


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(
    parsers.parse("an item with {quantity:d} on hand and a minimum of {minimum:d}"),
    target_fixture="item_id",
)
def item_with_stock(quantity, minimum):
    return current_domain.process(
        RegisterItem(name="Sterile Gauze", initial_quantity=quantity, min_quantity=minimum),
        asynchronous=False,
    )


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.re(r"(?P<quantity>\d+) units? (?:is|are) checked out"))
def checked_out(item_id, quantity, movements, seen_alerts):
    _record(item_id, "checkout", int(quantity), movements, seen_alerts)


@when(parsers.re(r"(?P<quantity>\d+) units? (?:is|are) checked in"))
def checked_in(item_id, quantity, movements, seen_alerts):
    _record(item_id, "checkin", int(quantity), movements, seen_alerts)


@when(parsers.parse('the alert is acknowledged by "{user_id}"'))
def alert_acknowledged(seen_alerts, user_id):
    alert = current_domain.process(
        AcknowledgeAlert(alert_id=str(seen_alerts[-1].id), user_id=user_id), asynchronous=False
    )
    seen_alerts.append(alert)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.parse("the item has {quantity:d} on hand"))
def item_has_quantity(item_id, quantity):
    assert current_domain.repository_for(InventoryItem)._dao.get(item_id).quantity == quantity


@then(parsers.parse('the item has an {status} "{level}" alert'))
def item_has_alert(movements, status, level):
    alert = movements[-1].alert
    assert alert is not None
    assert alert.status == status
    assert alert.alert_level == level


@then("the alert is resolved")
def alert_is_resolved(movements):
    assert movements[-1].alert.status == "resolved"
    assert movements[-1].alert.resolved_at is not None


@then("the item has no open alert")
def no_open_alert(item_id):
    assert AlertLifecycleManager().open_alert_for(item_id) is None


@then("it is the same alert")
def same_alert(seen_alerts):
    assert len({str(alert.id) for alert in seen_alerts}) == 1


@then("it is a different alert")
def different_alert(seen_alerts):
    assert str(seen_alerts[-1].id) != str(seen_alerts[0].id)


@then(parsers.parse('the last movement is rejected with "{error}"'))
def last_movement_rejected(movements, error):
    assert not movements[-1].ok
    assert movements[-1].error == error


@then("no transactions are recorded")
def no_transactions():
    assert current_domain.repository_for(StockTransaction)._dao.query.all().total == 0
