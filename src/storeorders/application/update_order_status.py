"""Application service: Update Order Status use case (admin).

Admins may move any non-terminal order to any other status, one order at
a time or in batches.  Entering ``cancelled`` releases the order's stock
exactly once.  A batch never aborts halfway: each order succeeds or fails
on its own and the outcome is reported per id.
"""

from __future__ import annotations

import logging

from storeorders.application import audit
from storeorders.application.dto import BatchStatusResult, OrderDTO, order_to_dto
from storeorders.application.status_change import commit_status_change
from storeorders.domain.exceptions import DomainException, OrderNotFound
from storeorders.domain.model.audit import Actor
from storeorders.domain.model.lifecycle import OrderStatus
from storeorders.domain.repository.audit_log import AuditLog
from storeorders.domain.repository.order_repository import OrderRepository
from storeorders.domain.repository.stock_repository import StockRepository
from storeorders.domain.service.inventory_reservation_service import (
    DEFAULT_MAX_ATTEMPTS,
    InventoryReservationService,
)

logger = logging.getLogger(__name__)


class UpdateOrderStatusHandler:

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

    def handle(
        self,
        order_ids: list[int],
        new_status: OrderStatus,
        actor: Actor,
    ) -> BatchStatusResult:
        """Batch status change; failures are collected, not raised."""
        result = BatchStatusResult()
        for order_id in dict.fromkeys(order_ids):
            try:
                self.handle_one(order_id, new_status, actor)
            except DomainException as exc:
                logger.warning(
                    "batch status change of order %s to %s failed: %s",
                    order_id,
                    new_status.value,
                    exc,
                )
                result.failed[order_id] = str(exc)
            else:
                result.updated.append(order_id)
        return result

    def handle_one(self, order_id: int, new_status: OrderStatus, actor: Actor) -> OrderDTO:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise OrderNotFound(f"Order #{order_id} not found")

        previous = order.status
        release_needed = order.change_status(new_status)
        commit_status_change(
            order, previous, release_needed, self._order_repo, self._reservation
        )

        description = f"Order #{order.id} status {previous.value} -> {new_status.value}"
        if release_needed:
            description += " (stock restored)"
        audit.record(
            self._audit_log, actor, "ORDER_STATUS_CHANGED", f"order:{order.id}", description
        )
        return order_to_dto(order)
