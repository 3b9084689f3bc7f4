"""JSON-file-backed implementation of OrderRepository."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from pathlib import Path

from storeorders.domain.exceptions import (
    ConcurrencyConflict,
    IdempotencyKeyTaken,
    OrderNotFound,
)
from storeorders.domain.model.lifecycle import OrderStatus
from storeorders.domain.model.order import Order, OrderLineItem, OrderTotals, Recipient
from storeorders.domain.model.stock import BucketKind, StockBucket
from storeorders.domain.model.value_objects import DEFAULT_CURRENCY, Money, Quantity
from storeorders.domain.repository.order_repository import OrderRepository
from storeorders.infrastructure.persistence.json_file import JsonFile


class JsonOrderRepository(OrderRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    # --- OrderRepository interface --------------------------------------------

    def get_by_id(self, order_id: int) -> Order | None:
        for raw in self._file.load():
            if raw["id"] == order_id:
                return self._to_domain(raw)
        return None

    def get_by_idempotency_key(self, key: str) -> Order | None:
        for raw in self._file.load():
            if raw.get("idempotency_key") == key:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[Order]:
        orders = [self._to_domain(raw) for raw in self._file.load()]
        orders.sort(key=lambda o: o.created_at, reverse=True)
        return orders

    def save(self, order: Order) -> None:
        with self._file.locked():
            orders = self._file.load()

            if order.id is None:
                key = order.idempotency_key
                if key and any(o.get("idempotency_key") == key for o in orders):
                    raise IdempotencyKeyTaken(key)
                order.id = max((o["id"] for o in orders), default=0) + 1
                orders.append(self._to_raw(order, order.version + 1))
            else:
                for i, raw in enumerate(orders):
                    if raw["id"] == order.id:
                        stored_version = raw.get("version", 0)
                        if stored_version != order.version:
                            raise ConcurrencyConflict(
                                f"Order #{order.id} was changed by someone else "
                                f"(expected version {order.version}, found {stored_version})"
                            )
                        orders[i] = self._to_raw(order, order.version + 1)
                        break
                else:
                    orders.append(self._to_raw(order, order.version + 1))

            self._file.persist(orders)
        order.version += 1

    def delete(self, order_id: int) -> None:
        with self._file.locked():
            orders = self._file.load()
            remaining = [raw for raw in orders if raw["id"] != order_id]
            if len(remaining) == len(orders):
                raise OrderNotFound(f"Order #{order_id} not found")
            self._file.persist(remaining)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _money(m: Money) -> str:
        return str(m.amount)

    @classmethod
    def _to_raw(cls, order: Order, version: int) -> dict:
        totals = order.totals
        return {
            "id": order.id,
            "user_id": order.user_id,
            "status": order.status.value,
            "created_at": order.created_at.isoformat(),
            "recipient": {
                "name": order.recipient.name,
                "phone": order.recipient.phone,
                "email": order.recipient.email,
            },
            "shipping_address": order.shipping_address,
            "gift_wrap": order.gift_wrap,
            "coupon_id": order.coupon_id,
            "memo": order.memo,
            "idempotency_key": order.idempotency_key,
            "request_hash": order.request_hash,
            "stock_restored": order.stock_restored,
            "version": version,
            "currency": totals.total.currency,
            "totals": {
                "subtotal": cls._money(totals.subtotal),
                "shipping_fee": cls._money(totals.shipping_fee),
                "gift_wrap_fee": cls._money(totals.gift_wrap_fee),
                "coupon_discount": cls._money(totals.coupon_discount),
                "total": cls._money(totals.total),
                "earned_points": totals.earned_points,
                "coupon_applicable": totals.coupon_applicable,
            },
            "items": [
                {
                    "product_id": item.product_id,
                    "product_name": item.product_name,
                    "quantity": item.quantity.value,
                    "unit_price": cls._money(item.unit_price),
                    "selected_size": item.selected_size,
                    "selected_color": item.selected_color,
                    "image": item.image,
                    "category": item.category,
                    "reserved_bucket": (
                        {
                            "kind": item.reserved_bucket.kind.value,
                            "size": item.reserved_bucket.size,
                            "color": item.reserved_bucket.color,
                        }
                        if item.reserved_bucket is not None
                        else None
                    ),
                }
                for item in order.items
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        currency = raw.get("currency", DEFAULT_CURRENCY)

        def money(value: str) -> Money:
            return Money(Decimal(value), currency)

        items = []
        for i in raw["items"]:
            bucket = i.get("reserved_bucket")
            items.append(
                OrderLineItem(
                    product_id=i["product_id"],
                    product_name=i["product_name"],
                    quantity=Quantity(i["quantity"]),
                    unit_price=money(i["unit_price"]),
                    selected_size=i.get("selected_size"),
                    selected_color=i.get("selected_color"),
                    image=i.get("image", ""),
                    category=i.get("category", ""),
                    reserved_bucket=(
                        StockBucket(BucketKind(bucket["kind"]), bucket.get("size"), bucket.get("color"))
                        if bucket
                        else None
                    ),
                )
            )

        t = raw["totals"]
        recipient = raw.get("recipient", {})
        return Order(
            id=raw["id"],
            user_id=raw["user_id"],
            items=items,
            totals=OrderTotals(
                subtotal=money(t["subtotal"]),
                shipping_fee=money(t["shipping_fee"]),
                gift_wrap_fee=money(t["gift_wrap_fee"]),
                coupon_discount=money(t["coupon_discount"]),
                total=money(t["total"]),
                earned_points=t.get("earned_points", 0),
                coupon_applicable=t.get("coupon_applicable", True),
            ),
            recipient=Recipient(
                name=recipient.get("name", ""),
                phone=recipient.get("phone", ""),
                email=recipient.get("email", ""),
            ),
            shipping_address=raw.get("shipping_address", ""),
            status=OrderStatus(raw["status"]),
            created_at=datetime.fromisoformat(raw["created_at"]),
            gift_wrap=raw.get("gift_wrap", False),
            coupon_id=raw.get("coupon_id"),
            memo=raw.get("memo", ""),
            idempotency_key=raw.get("idempotency_key"),
            request_hash=raw.get("request_hash"),
            stock_restored=raw.get("stock_restored", False),
            version=raw.get("version", 0),
        )
