"""Stock movement load test scenarios.

Two journeys:

- CheckoutReturnJourney: a ward registers an item, checks stock out,
  returns it and acknowledges any alert raised along the way.
- ContendedCheckoutUser: many users checking out the same item at once.
  Every response must be 201 or 409 (insufficient_stock); anything else,
  or a negative on-hand quantity, is a failure.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import checkout_data, item_data, movement_data, staff_id
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import SupplyState


class CheckoutReturnJourney(SequentialTaskSet):
    """Register Item -> Checkout -> Damage -> Return -> Acknowledge Alert."""

    def on_start(self):
        self.state = SupplyState(user_id=staff_id())

    @task
    def register_item(self):
        with self.client.post(
            "/items",
            json=item_data(initial_quantity=30, min_quantity=10),
            catch_response=True,
            name="POST /items",
        ) as resp:
            if resp.status_code == 201:
                self.state.item_id = resp.json()["item_id"]
            else:
                resp.failure(f"Register item failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def checkout(self):
        payload = checkout_data(self.state.item_id, quantity=random.randint(5, 20), user_id=self.state.user_id)
        with self.client.post("/transactions", json=payload, catch_response=True, name="POST /transactions") as resp:
            if resp.status_code == 201:
                body = resp.json()
                self.state.open_checkouts.append(body["transaction"]["transaction_id"])
                if body["alert"]:
                    self.state.alert_id = body["alert"]["alert_id"]
            elif resp.status_code != 409:
                resp.failure(f"Checkout failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def record_damage(self):
        payload = movement_data(self.state.item_id, "damaged", quantity=1)
        with self.client.post("/transactions", json=payload, catch_response=True, name="POST /transactions") as resp:
            if resp.status_code not in (201, 409):
                resp.failure(f"Damage failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def acknowledge_alert(self):
        if not self.state.alert_id:
            return
        with self.client.put(
            f"/alerts/{self.state.alert_id}/acknowledge",
            json={"user_id": self.state.user_id},
            catch_response=True,
            name="PUT /alerts/{id}/acknowledge",
        ) as resp:
            # Already acknowledged or resolved by the return is a valid race
            if resp.status_code not in (200, 400):
                resp.failure(f"Acknowledge failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def return_checkouts(self):
        for transaction_id in self.state.open_checkouts:
            with self.client.put(
                f"/transactions/{transaction_id}/return",
                json={"user_id": self.state.user_id, "condition_on_return": "good"},
                catch_response=True,
                name="PUT /transactions/{id}/return",
            ) as resp:
                if resp.status_code != 200:
                    resp.failure(f"Return failed: {resp.status_code}: {extract_error_detail(resp)}")
        self.state.open_checkouts.clear()
        self.interrupt()


class StockMovementUser(HttpUser):
    wait_time = between(0.5, 2)
    tasks = [CheckoutReturnJourney]


class ContendedCheckoutUser(HttpUser):
    """All instances hammer one shared item; the ledger must never go negative."""

    wait_time = between(0.05, 0.2)
    shared_item_id: str | None = None

    def on_start(self):
        if ContendedCheckoutUser.shared_item_id is None:
            resp = self.client.post("/items", json=item_data(initial_quantity=500, min_quantity=50), name="POST /items")
            ContendedCheckoutUser.shared_item_id = resp.json()["item_id"]

    @task(5)
    def checkout_one(self):
        payload = checkout_data(ContendedCheckoutUser.shared_item_id, quantity=1)
        with self.client.post(
            "/transactions", json=payload, catch_response=True, name="POST /transactions [contended]"
        ) as resp:
            if resp.status_code == 201:
                if resp.json()["item"]["quantity"] < 0:
                    resp.failure("On-hand quantity went negative")
            elif resp.status_code == 409:
                resp.success()
            else:
                resp.failure(f"Contended checkout failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task(1)
    def restock(self):
        payload = movement_data(ContendedCheckoutUser.shared_item_id, "checkin", quantity=random.randint(1, 5))
        with self.client.post(
            "/transactions", json=payload, catch_response=True, name="POST /transactions [restock]"
        ) as resp:
            if resp.status_code != 201:
                resp.failure(f"Restock failed: {resp.status_code}: {extract_error_detail(resp)}")
