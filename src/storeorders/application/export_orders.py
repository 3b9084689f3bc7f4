"""Application service: Export Orders use case (query).

Flat CSV projection for offline reporting; one row per order.  Amounts
are plain decimals with the currency in its own column so spreadsheets
can sum them.
"""

from __future__ import annotations

import csv
from typing import TextIO

from storeorders.domain.model.lifecycle import OrderStatus
from storeorders.domain.repository.order_repository import OrderRepository

EXPORT_COLUMNS = [
    "id",
    "date",
    "customer",
    "phone",
    "email",
    "total",
    "currency",
    "status",
    "item_count",
]


class ExportOrdersHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, stream: TextIO, status: OrderStatus | None = None) -> int:
        """Write the CSV to ``stream``; returns the number of rows written."""
        orders = self._order_repo.list_all()
        if status is not None:
            orders = [o for o in orders if o.status == status]
        orders.sort(key=lambda o: o.created_at, reverse=True)

        writer = csv.writer(stream)
        writer.writerow(EXPORT_COLUMNS)
        for order in orders:
            writer.writerow(
                [
                    order.id,
                    order.created_at.strftime("%Y-%m-%d %H:%M UTC"),
                    order.recipient.name,
                    order.recipient.phone,
                    order.recipient.email,
                    order.total.amount,
                    order.total.currency,
                    order.status.value,
                    order.item_count,
                ]
            )
        return len(orders)
