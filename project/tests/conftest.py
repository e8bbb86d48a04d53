# tests/conftest.py

import asyncio
import os
import tempfile

# настройки читаются при импорте ordertrack.config
os.environ.setdefault("AIRTABLE_API_KEY", "test-key")
os.environ.setdefault("AIRTABLE_BASE_ID", "appTEST")
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="ordertrack-log-")
os.environ["LOG_PRINT"] = "0"

import pytest
from fastapi.testclient import TestClient

from ordertrack.main import app
from ordertrack.services.airtable import parse_record
from ordertrack.services.store import OrderStore

ORDER_FIELD = "Order Number"
PHONE_FIELD = "Phone Number"


def airtable_record(order_number="SW-1001", phone_number="0812345678", record_id=None, **fields):
    """Запись в том виде, в каком её отдаёт Airtable list records."""
    data = {
        ORDER_FIELD: order_number,
        PHONE_FIELD: phone_number,
        "Recipient Name": "Somchai Jaidee",
        "Email": "somchai@example.com",
        "Total Price": "1500.00",
        "Order Items Summary": "2 x Sake Week Ticket",
        "Order Status": "FINALIZED",
        "Payment Status": "PAID",
    }
    data.update(fields)
    return {
        "id": record_id or f"rec{order_number.replace('-', '')}",
        "createdTime": "2025-05-01T10:30:00.000Z",
        "fields": data,
    }


def order_create(**kwargs):
    return parse_record(airtable_record(**kwargs), ORDER_FIELD, PHONE_FIELD).order


class FakeOrderSource:
    """Подмена AirtableClient: заказы из списка, счётчики вызовов."""

    def __init__(self, orders=None, error=None, delay=0.0):
        self.orders = list(orders or [])
        self.error = error
        self.delay = delay
        self.order_number_calls = 0
        self.phone_number_calls = 0

    async def fetch_by_order_number(self, order_number):
        self.order_number_calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return next((o for o in self.orders if o.order_number == order_number), None)

    async def fetch_all_by_phone_number(self, phone_number):
        self.phone_number_calls += 1
        if self.error:
            raise self.error
        return [o for o in self.orders if o.phone_number == phone_number]


@pytest.fixture
def source():
    return FakeOrderSource([
        order_create(order_number="SW-1001", phone_number="0812345678"),
        order_create(order_number="SW-1002", phone_number="0812345678", **{"Payment Status": "PENDING"}),
        order_create(order_number="SW-2001", phone_number="0899999999"),
    ])


@pytest.fixture
def store(source):
    return OrderStore(source)


@pytest.fixture
def client(store):
    with TestClient(app) as test_client:
        app.state.store = store
        yield test_client
