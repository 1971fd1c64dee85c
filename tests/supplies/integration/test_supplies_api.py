"""Integration tests for Supplies API endpoints via TestClient."""

import csv
import io
from datetime import date, timedelta

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from protean.exceptions import InvalidOperationError, InvalidStateError
from supplies.api import ALL_ROUTERS, register_error_handlers


@pytest.fixture()
def client():
    app = FastAPI()
    register_error_handlers(app)
    for router in ALL_ROUTERS:
        app.include_router(router)
    return TestClient(app)


def _register_item(client, **overrides):
    """Helper: POST /items and return the item_id."""
    defaults = {
        "name": "Nitrile Gloves (M)",
        "item_type": "consumables",
        "location": "Central Store",
        "initial_quantity": 10,
        "min_quantity": 4,
        "max_quantity": 50,
        "unit_price": 2.5,
    }
    defaults.update(overrides)
    response = client.post("/items", json=defaults)
    assert response.status_code == 201
    return response.json()["item_id"]


def _transaction(client, item_id, transaction_type, quantity, **extra):
    payload = {
        "item_id": item_id,
        "user_id": "nurse-001",
        "transaction_type": transaction_type,
        "quantity": quantity,
        **extra,
    }
    return client.post("/transactions", json=payload)


class TestItemEndpoints:
    def test_register_and_get_item(self, client):
        item_id = _register_item(client)
        response = client.get(f"/items/{item_id}")

        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "Nitrile Gloves (M)"
        assert body["quantity"] == 10
        assert body["stock_value"] == 25.0

    def test_get_unknown_item(self, client):
        response = client.get("/items/no-such-item")
        assert response.status_code == 404

    def test_register_invalid_item_type(self, client):
        response = client.post("/items", json={"name": "Chair", "item_type": "furniture"})
        assert response.status_code == 400

    def test_update_thresholds(self, client):
        item_id = _register_item(client)
        response = client.put(f"/items/{item_id}/thresholds", json={"min_quantity": 12, "max_quantity": 60})

        assert response.status_code == 200
        assert response.json()["min_quantity"] == 12
        assert response.json()["quantity"] == 10

    def test_movements(self, client):
        item_id = _register_item(client)
        _transaction(client, item_id, "checkout", 3)

        response = client.get(f"/items/{item_id}/movements")
        assert response.status_code == 200
        rows = response.json()
        assert len(rows) == 1
        assert rows[0]["quantity_change"] == -3
        assert rows[0]["new_level"] == 7
        assert rows[0]["path"] == "atomic"


class TestTransactionEndpoints:
    def test_record_checkout(self, client):
        item_id = _register_item(client)
        response = _transaction(client, item_id, "checkout", 7, due_date=(date.today() + timedelta(days=3)).isoformat())

        assert response.status_code == 201
        body = response.json()
        assert body["transaction"]["status"] == "active"
        assert body["item"]["quantity"] == 3
        assert body["alert"]["alert_level"] == "low"
        assert body["path"] == "atomic"

    def test_invalid_quantity_is_400(self, client):
        item_id = _register_item(client)
        response = _transaction(client, item_id, "checkout", 0)

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_transaction"

    def test_unknown_item_is_404(self, client):
        response = _transaction(client, "no-such-item", "checkout", 1)
        assert response.status_code == 404
        assert response.json()["error"] == "unknown_item"

    def test_insufficient_stock_is_409(self, client):
        item_id = _register_item(client, initial_quantity=2)
        response = _transaction(client, item_id, "checkout", 5)

        assert response.status_code == 409
        assert response.json()["error"] == "insufficient_stock"

    def test_return_checkout(self, client):
        item_id = _register_item(client)
        checkout = _transaction(client, item_id, "checkout", 7).json()
        txn_id = checkout["transaction"]["transaction_id"]

        response = client.put(f"/transactions/{txn_id}/return", json={"user_id": "nurse-002"})

        assert response.status_code == 200
        body = response.json()
        assert body["transaction"]["transaction_type"] == "checkin"
        assert body["item"]["quantity"] == 10
        assert body["alert"]["status"] == "resolved"

    def test_retry_ledger_is_idempotent(self, client):
        item_id = _register_item(client)
        txn_id = _transaction(client, item_id, "checkout", 3).json()["transaction"]["transaction_id"]

        response = client.post(f"/transactions/{txn_id}/retry-ledger")

        assert response.status_code == 200
        assert response.json()["replayed"] is True
        assert response.json()["item"]["quantity"] == 7

    def test_history(self, client):
        item_id = _register_item(client)
        _transaction(client, item_id, "checkout", 2)
        _transaction(client, item_id, "damaged", 1)

        response = client.get("/transactions/history", params={"item_id": item_id})

        assert response.status_code == 200
        rows = response.json()
        assert {row["type"] for row in rows} == {"checkout", "damaged"}
        assert all(row["item"] == "Nitrile Gloves (M)" for row in rows)

    def test_export_csv(self, client):
        item_id = _register_item(client)
        _transaction(client, item_id, "checkout", 2, notes="Ward 3B")

        response = client.get("/transactions/export")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        rows = list(csv.reader(io.StringIO(response.text)))
        assert rows[0] == ["date", "item", "user", "type", "quantity", "status", "due_date", "notes"]
        assert rows[1][1:6] == ["Nitrile Gloves (M)", "nurse-001", "checkout", "2", "active"]
        assert rows[1][7] == "Ward 3B"


class TestAlertEndpoints:
    def test_open_alerts(self, client):
        item_id = _register_item(client)
        _transaction(client, item_id, "checkout", 7)

        response = client.get("/alerts")

        assert response.status_code == 200
        alerts = response.json()
        assert len(alerts) == 1
        assert alerts[0]["item_id"] == item_id
        assert alerts[0]["item_name"] == "Nitrile Gloves (M)"
        assert alerts[0]["alert_level"] == "low"

    def test_acknowledge(self, client):
        item_id = _register_item(client)
        alert_id = _transaction(client, item_id, "checkout", 7).json()["alert"]["alert_id"]

        response = client.put(f"/alerts/{alert_id}/acknowledge", json={"user_id": "nurse-007"})

        assert response.status_code == 200
        assert response.json()["status"] == "acknowledged"
        assert client.get("/alerts").json()[0]["status"] == "acknowledged"

    def test_acknowledge_twice_is_400(self, client):
        item_id = _register_item(client)
        alert_id = _transaction(client, item_id, "checkout", 7).json()["alert"]["alert_id"]
        client.put(f"/alerts/{alert_id}/acknowledge", json={"user_id": "nurse-007"})

        response = client.put(f"/alerts/{alert_id}/acknowledge", json={"user_id": "nurse-007"})
        assert response.status_code == 400

    def test_acknowledge_unknown_alert_is_404(self, client):
        response = client.put("/alerts/no-such-alert/acknowledge", json={"user_id": "nurse-007"})
        assert response.status_code == 404

    def test_resolve(self, client):
        item_id = _register_item(client)
        alert_id = _transaction(client, item_id, "checkout", 7).json()["alert"]["alert_id"]

        response = client.put(f"/alerts/{alert_id}/resolve", json={"user_id": "pharmacist-002"})

        assert response.status_code == 200
        assert response.json()["resolution"] == "manual"
        assert client.get("/alerts").json() == []


class TestDashboardAndMaintenance:
    def test_dashboard_stats(self, client):
        first = _register_item(client, initial_quantity=10, unit_price=2.0)
        _register_item(client, initial_quantity=1, unit_price=10.0)
        _transaction(client, first, "checkout", 2, due_date=(date.today() - timedelta(days=1)).isoformat())
        _transaction(client, first, "checkout", 1)
        client.post("/maintenance/transactions/mark-overdue", json={})

        response = client.get("/dashboard/stats")

        assert response.status_code == 200
        stats = response.json()
        assert stats["total_items"] == 2
        assert stats["open_alerts"] == 1
        assert stats["active_checkouts"] == 1
        assert stats["overdue_checkouts"] == 1
        assert stats["stock_value"] == 24.0

    def test_sweep(self, client):
        _register_item(client, initial_quantity=2)
        _register_item(client, initial_quantity=20)

        response = client.post("/maintenance/alerts/sweep", json={"page_size": 1})

        assert response.status_code == 200
        assert response.json()["count"] == 2

    def test_mark_overdue(self, client):
        item_id = _register_item(client)
        _transaction(client, item_id, "checkout", 1, due_date=(date.today() - timedelta(days=5)).isoformat())

        response = client.post("/maintenance/transactions/mark-overdue", json={})

        assert response.status_code == 200
        assert response.json()["count"] == 1


class TestErrorMapping:
    @pytest.fixture()
    def failing_client(self):
        app = FastAPI()
        register_error_handlers(app)

        @app.get("/closed-movement")
        async def closed_movement():
            raise InvalidOperationError("Movement is already closed")

        @app.get("/stale-alert")
        async def stale_alert():
            raise InvalidStateError("Alert changed since it was read")

        return TestClient(app)

    def test_invalid_operation_is_422(self, failing_client):
        response = failing_client.get("/closed-movement")
        assert response.status_code == 422
        assert "already closed" in response.json()["error"]

    def test_invalid_state_is_409(self, failing_client):
        response = failing_client.get("/stale-alert")
        assert response.status_code == 409
