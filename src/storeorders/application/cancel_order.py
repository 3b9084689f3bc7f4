"""Application service: Cancel Order use case (customer-initiated).

An unpaid order (``pending_payment``) is cancelled on the spot and its
stock released.  A paid order only moves to ``cancel_requested``; an
admin approves it later through UpdateOrderStatusHandler, which is when
stock comes back.
"""

from __future__ import annotations

from storeorders.application import audit
from storeorders.application.dto import OrderDTO, order_to_dto
from storeorders.application.status_change import commit_status_change
from storeorders.domain.exceptions import OrderNotFound
from storeorders.domain.model.audit import Actor
from storeorders.domain.repository.audit_log import AuditLog
from storeorders.domain.repository.order_repository import OrderRepository
from storeorders.domain.repository.stock_repository import StockRepository
from storeorders.domain.service.inventory_reservation_service import (
    DEFAULT_MAX_ATTEMPTS,
    InventoryReservationService,
)


class CancelOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        stock_repo: StockRepository,
        audit_log: AuditLog | None = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        self._order_repo = order_repo
        self._reservation = InventoryReservationService(stock_repo, max_attempts)
        self._audit_log = audit_log

    def handle(self, user_id: str, order_id: int) -> OrderDTO:
        order = self._order_repo.get_by_id(order_id)
        # Someone else's order is reported exactly like a missing one.
        if order is None or order.user_id != user_id:
            raise OrderNotFound(f"Order #{order_id} not found")

        previous = order.status
        release_needed = order.request_cancel()
        commit_status_change(
            order, previous, release_needed, self._order_repo, self._reservation
        )

        audit.record(
            self._audit_log,
            Actor(uid=user_id, username=order.recipient.name),
            "ORDER_CANCEL_REQUESTED" if not release_needed else "ORDER_CANCELLED",
            f"order:{order.id}",
            f"Customer moved order #{order.id} from {previous.value} to {order.status.value}",
        )
        return order_to_dto(order)
