"""Faker-based data generators for Locust load test scenarios.

Each generator produces payloads that pass the domain's validation rules
and match the exact field names expected by the API's Pydantic request
schemas.
"""

import random
import uuid
from datetime import date, timedelta

from faker import Faker

fake = Faker()

ITEM_TYPES = ["equipment", "supplies", "medications", "consumables"]
WARDS = ["ICU", "ER", "Ward 3B", "Pharmacy", "Theatre 2", "Central Store"]


def staff_id() -> str:
    return f"staff-{uuid.uuid4().hex[:8]}"


def item_data(initial_quantity: int | None = None, min_quantity: int | None = None) -> dict:
    """Payload for POST /items."""
    quantity = initial_quantity if initial_quantity is not None else random.randint(20, 200)
    minimum = min_quantity if min_quantity is not None else random.randint(5, 20)
    return {
        "name": f"{fake.word().title()} {random.choice(['Gauze', 'Syringe', 'Catheter', 'Glove', 'Mask'])}",
        "item_type": random.choice(ITEM_TYPES),
        "location": random.choice(WARDS),
        "initial_quantity": quantity,
        "min_quantity": minimum,
        "max_quantity": max(quantity, minimum) * 2,
        "unit_price": round(random.uniform(0.5, 150.0), 2),
    }


def checkout_data(item_id: str, quantity: int = 1, user_id: str | None = None) -> dict:
    """Payload for POST /transactions recording a checkout."""
    return {
        "item_id": item_id,
        "user_id": user_id or staff_id(),
        "transaction_type": "checkout",
        "quantity": quantity,
        "due_date": (date.today() + timedelta(days=random.randint(1, 14))).isoformat(),
        "location_used": random.choice(WARDS),
        "notes": fake.sentence(nb_words=6),
    }


def movement_data(item_id: str, transaction_type: str, quantity: int = 1) -> dict:
    """Payload for a loss, damage or maintenance movement."""
    return {
        "item_id": item_id,
        "user_id": staff_id(),
        "transaction_type": transaction_type,
        "quantity": quantity,
        "notes": fake.sentence(nb_words=6),
    }
