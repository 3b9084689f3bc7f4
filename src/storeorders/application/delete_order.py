"""Application service: Delete Order use case (admin, cancelled orders only)."""

from __future__ import annotations

from storeorders.application import audit
from storeorders.domain.exceptions import OrderNotFound
from storeorders.domain.model.audit import Actor
from storeorders.domain.repository.audit_log import AuditLog
from storeorders.domain.repository.order_repository import OrderRepository


class DeleteOrderHandler:

    def __init__(self, order_repo: OrderRepository, audit_log: AuditLog | None = None) -> None:
        self._order_repo = order_repo
        self._audit_log = audit_log

    def handle(self, order_id: int, actor: Actor) -> None:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise OrderNotFound(f"Order #{order_id} not found")

        order.ensure_deletable()
        self._order_repo.delete(order_id)
        audit.record(
            self._audit_log,
            actor,
            "ORDER_DELETED",
            f"order:{order_id}",
            f"Deleted cancelled order #{order_id} ({order.recipient.name}, {order.total})",
        )
