"""Application service: Set Stock use case (admin stock-in / correction).

This is the producer side of inventory: it writes absolute levels.
Orders only ever move stock through the reservation service.
"""

from __future__ import annotations

from storeorders.application import audit
from storeorders.domain.exceptions import ProductNotFound, ValidationError
from storeorders.domain.model.audit import Actor
from storeorders.domain.model.stock import BucketKind, ProductStock, StockBucket
from storeorders.domain.repository.audit_log import AuditLog
from storeorders.domain.repository.product_repository import ProductRepository
from storeorders.domain.repository.stock_repository import StockRepository


class SetStockHandler:

    def __init__(
        self,
        stock_repo: StockRepository,
        product_repo: ProductRepository,
        audit_log: AuditLog | None = None,
    ) -> None:
        self._stock_repo = stock_repo
        self._product_repo = product_repo
        self._audit_log = audit_log

    def handle(
        self,
        product_id: str,
        quantity: int,
        actor: Actor,
        size: str | None = None,
        color: str | None = None,
        reason: str | None = None,
    ) -> None:
        """Set one counter: flat (no variant), per-size, or per-size-per-color.

        ``reason`` (a delivery note, a recount) is kept in the audit entry.
        """
        if color and not size:
            raise ValidationError("A color-specific stock level also needs a size")

        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise ProductNotFound(f"Product not found: '{product_id}'")

        if size and color:
            bucket = StockBucket(BucketKind.SIZE_COLOR, size, color)
        elif size:
            bucket = StockBucket(BucketKind.SIZE, size)
        else:
            bucket = StockBucket(BucketKind.FLAT)

        record = self._stock_repo.get_by_product_id(product.id)
        if record is None:
            record = ProductStock(product_id=product.id, product_name=product.name)
        before = record.available(bucket)
        record.set_level(bucket, quantity)
        self._stock_repo.save(record)

        description = f"{product.name} [{bucket.describe()}] {before} -> {quantity}"
        if reason and reason.strip():
            description += f" ({reason.strip()})"
        audit.record(
            self._audit_log, actor, "STOCK_SET", f"product:{product.id}", description
        )
