"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from storeorders.infrastructure.config import get_settings
from storeorders.infrastructure.persistence.json_audit_log import JsonLinesAuditLog
from storeorders.infrastructure.persistence.json_coupon_repository import (
    JsonCouponRepository,
)
from storeorders.infrastructure.persistence.json_order_repository import (
    JsonOrderRepository,
)
from storeorders.infrastructure.persistence.json_product_repository import (
    JsonProductRepository,
)
from storeorders.infrastructure.persistence.json_stock_repository import (
    JsonStockRepository,
)


def product_repository() -> JsonProductRepository:
    return JsonProductRepository(get_settings().data_dir / "products.json")


def stock_repository() -> JsonStockRepository:
    return JsonStockRepository(get_settings().data_dir / "stock.json")


def order_repository() -> JsonOrderRepository:
    return JsonOrderRepository(get_settings().data_dir / "orders.json")


def coupon_repository() -> JsonCouponRepository:
    return JsonCouponRepository(get_settings().data_dir / "coupons.json")


def audit_log() -> JsonLinesAuditLog:
    return JsonLinesAuditLog(get_settings().data_dir / "audit_log.jsonl")
