"""MedStock Load Testing: Locust entry point.

Usage:
    # All scenarios (web UI):
    locust -f loadtests/locustfile.py

    # Contended checkouts only:
    locust -f loadtests/locustfile.py ContendedCheckoutUser

    # Headless (CI mode):
    locust -f loadtests/locustfile.py ContendedCheckoutUser --headless \
           -u 50 -r 5 -t 120s --csv=results/loadtest
"""

import logging
import time

import requests
from locust import events

# Import all user classes so Locust discovers them
from loadtests.helpers.response import extract_error_detail
from loadtests.scenarios.stock_movements import ContendedCheckoutUser, StockMovementUser  # noqa: F401

logger = logging.getLogger("loadtest")


@events.request.add_listener
def on_request(request_type, name, response, exception, **_kw):
    """Log error details for every failed request."""
    if exception:
        logger.error("[EXCEPTION] %s %s: %s", request_type, name, exception)
    elif response is not None and response.status_code >= 400:
        detail = extract_error_detail(response)
        logger.error("[%s] %s %s: %s", response.status_code, request_type, name, detail)


@events.test_start.add_listener
def on_test_start(environment, **_kwargs):
    print(f"\n[LOADTEST] Started at {time.strftime('%H:%M:%S')}")
    print(f"[LOADTEST] Target host: {environment.host}\n")


@events.test_stop.add_listener
def on_test_stop(environment, **_kwargs):
    """Print the final on-hand quantity of the contended item."""
    print(f"\n[LOADTEST] Stopped at {time.strftime('%H:%M:%S')}")
    item_id = ContendedCheckoutUser.shared_item_id
    if not item_id or not environment.host:
        return
    try:
        resp = requests.get(f"{environment.host}/items/{item_id}", timeout=5)
        print(f"[LOADTEST] Contended item {item_id} final quantity: {resp.json()['quantity']}\n")
    except requests.RequestException as e:
        print(f"[LOADTEST] Could not fetch contended item: {e}\n")
