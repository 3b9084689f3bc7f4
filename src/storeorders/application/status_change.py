"""Persisting a status change and releasing stock when it cancels an order.

Order of operations:

1. the caller has already moved the aggregate (``Order.change_status`` or
   ``Order.request_cancel``), which also claims ``stock_restored``
2. the order is saved; the version check makes a concurrent change lose
   instead of overwrite
3. only then is stock released, so two racing cancellations can never
   both credit it
4. if the release fails, the order is put back to its previous status so
   the cancellation can be retried
"""

from __future__ import annotations

import logging

from storeorders.domain.exceptions import DomainException
from storeorders.domain.model.lifecycle import OrderStatus
from storeorders.domain.model.order import Order
from storeorders.domain.repository.order_repository import OrderRepository
from storeorders.domain.service.inventory_reservation_service import (
    InventoryReservationService,
)

logger = logging.getLogger(__name__)


def commit_status_change(
    order: Order,
    previous: OrderStatus,
    release_needed: bool,
    order_repo: OrderRepository,
    reservation: InventoryReservationService,
) -> None:
    order_repo.save(order)
    logger.info(
        "order %s: %s -> %s", order.id, previous.value, order.status.value
    )
    if not release_needed:
        return

    try:
        reservation.release_for_order(order)
    except DomainException:
        logger.exception(
            "stock release failed for order %s; reverting to %s", order.id, previous.value
        )
        order.revert_to(previous)
        order_repo.save(order)
        raise
