"""Tests for ListOrdersHandler and ExportOrdersHandler."""

import csv
import io
from datetime import datetime, timedelta, timezone

from storeorders.application.export_orders import EXPORT_COLUMNS, ExportOrdersHandler
from storeorders.application.list_orders import ListOrdersHandler
from storeorders.domain.model.lifecycle import OrderStatus
from storeorders.domain.model.order import Order, OrderLineItem, OrderTotals, Recipient
from storeorders.domain.model.value_objects import Money, Quantity
from tests.fakes import FakeOrderRepository

BASE = datetime(2026, 4, 1, 10, 0, tzinfo=timezone.utc)


def _order(user_id, status, hours, qty=1):
    price = Money.of(20000)
    total = price * qty
    return Order(
        id=None,
        user_id=user_id,
        items=[OrderLineItem("1", "Shirt", Quantity(qty), price)],
        totals=OrderTotals(total, Money.zero(), Money.zero(), Money.zero(), total),
        recipient=Recipient(f"Customer {user_id}", "010-0000-0000", f"{user_id}@example.com"),
        shipping_address="Seoul",
        status=status,
        created_at=BASE + timedelta(hours=hours),
    )


def _setup():
    repo = FakeOrderRepository()
    repo.save(_order("u1", OrderStatus.PAID, 0))
    repo.save(_order("u2", OrderStatus.DELIVERED, 2, qty=3))
    repo.save(_order("u1", OrderStatus.CANCELLED, 1))
    return repo


class TestListOrders:

    def test_newest_first(self):
        dtos = ListOrdersHandler(_setup()).handle()
        assert [d.id for d in dtos] == [2, 3, 1]

    def test_filter_by_customer_and_status(self):
        handler = ListOrdersHandler(_setup())

        assert [d.id for d in handler.handle(user_id="u1")] == [3, 1]
        assert [d.id for d in handler.handle(status=OrderStatus.PAID, user_id="u1")] == [1]


class TestExportOrders:

    def test_csv_rows(self):
        buffer = io.StringIO()

        count = ExportOrdersHandler(_setup()).handle(buffer)

        rows = list(csv.reader(io.StringIO(buffer.getvalue())))
        assert count == 3
        assert rows[0] == EXPORT_COLUMNS
        assert rows[1] == [
            "2",
            "2026-04-01 12:00 UTC",
            "Customer u2",
            "010-0000-0000",
            "u2@example.com",
            "60000",
            "KRW",
            "delivered",
            "3",
        ]

    def test_total_is_a_plain_number(self):
        buffer = io.StringIO()

        ExportOrdersHandler(_setup()).handle(buffer)

        rows = list(csv.DictReader(io.StringIO(buffer.getvalue())))
        assert sum(int(row["total"]) for row in rows) == 100000

    def test_status_filter(self):
        buffer = io.StringIO()

        count = ExportOrdersHandler(_setup()).handle(buffer, status=OrderStatus.CANCELLED)

        assert count == 1
        assert "cancelled" in buffer.getvalue()
        assert "delivered" not in buffer.getvalue()
