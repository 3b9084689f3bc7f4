"""Application service: Create Order use case.

Orchestrates the flow between repositories and the domain model:

1. Replay a previous result if the idempotency key was seen before.
2. Resolve each cart line to a Product and snapshot it.
3. Validate the selected coupon and compute the totals.
4. Reserve stock for all lines at once (domain service).
5. Redeem the coupon with a conditional write, then persist the order.
   If either step fails, undo what was claimed; when a concurrent retry
   stored the same idempotency key first, return its order instead.
6. Write the audit entry.
"""

from __future__ import annotations

import hashlib
import json
import logging
from datetime import datetime, timezone
from typing import Callable

from storeorders.application import audit
from storeorders.application.dto import OrderDraft, OrderDTO, OrderItemSpec, order_to_dto
from storeorders.application.membership_summary import current_tier
from storeorders.domain.exceptions import (
    CouponNotApplicable,
    DomainException,
    IdempotencyConflict,
    ProductNotFound,
)
from storeorders.domain.model.audit import Actor
from storeorders.domain.model.coupon import Coupon
from storeorders.domain.model.order import Order, OrderLineItem, Recipient
from storeorders.domain.model.value_objects import Quantity
from storeorders.domain.repository.audit_log import AuditLog
from storeorders.domain.repository.coupon_repository import CouponRepository
from storeorders.domain.repository.order_repository import OrderRepository
from storeorders.domain.repository.product_repository import ProductRepository
from storeorders.domain.repository.stock_repository import StockRepository
from storeorders.domain.service.inventory_reservation_service import (
    DEFAULT_MAX_ATTEMPTS,
    InventoryReservationService,
)
from storeorders.domain.service.order_total_calculator import (
    CheckoutFees,
    quote,
    subtotal_of,
)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def request_hash(draft: OrderDraft, user_id: str) -> str:
    """Stable SHA-256 of the request, used to detect idempotency-key reuse."""
    body = json.dumps(
        draft.fingerprint_payload(user_id), sort_keys=True, separators=(",", ":")
    )
    return hashlib.sha256(body.encode("utf-8")).hexdigest()


def build_line_items(
    product_repo: ProductRepository,
    item_specs: list[OrderItemSpec],
) -> list[OrderLineItem]:
    """Snapshot each requested product at its *current* price."""
    line_items: list[OrderLineItem] = []
    for spec in item_specs:
        product = product_repo.get_by_id(spec.product_id)
        if product is None:
            raise ProductNotFound(f"Product not found: '{spec.product_id}'")

        line_items.append(
            OrderLineItem(
                product_id=product.id,
                product_name=product.name,
                quantity=Quantity(spec.quantity),
                unit_price=product.price,  # <-- price snapshot
                selected_size=spec.size or None,
                selected_color=spec.color or None,
                image=product.image,
                category=product.category,
            )
        )
    return line_items


class CreateOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
        stock_repo: StockRepository,
        coupon_repo: CouponRepository,
        audit_log: AuditLog | None = None,
        fees: CheckoutFees | None = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._order_repo = order_repo
        self._product_repo = product_repo
        self._coupon_repo = coupon_repo
        self._audit_log = audit_log
        self._fees = fees or CheckoutFees()
        self._reservation = InventoryReservationService(stock_repo, max_attempts)
        self._clock = clock

    def handle(self, user_id: str, draft: OrderDraft) -> OrderDTO:
        """Place an order; returns the stored order (or the original one on retry)."""
        fingerprint = request_hash(draft, user_id)
        replayed = self._replay(draft.idempotency_key, fingerprint)
        if replayed is not None:
            return replayed

        line_items = build_line_items(self._product_repo, draft.items)
        coupon = self._usable_coupon(user_id, draft, line_items)
        tier = current_tier(self._order_repo, user_id)
        totals = quote(line_items, self._fees, draft.gift_wrap, coupon, tier.discount_rate)

        order = Order.create(
            user_id=user_id,
            items=line_items,
            totals=totals,
            recipient=Recipient(draft.recipient_name, draft.phone, draft.email),
            shipping_address=draft.shipping_address,
            gift_wrap=draft.gift_wrap,
            coupon_id=coupon.id if coupon else None,
            idempotency_key=draft.idempotency_key,
            request_hash=fingerprint,
        )

        self._reservation.reserve_for_order(order)
        try:
            self._claim_and_save(order)
        except DomainException as exc:
            logger.error("placing order failed (%s); releasing its reservation", exc)
            self._reservation.release_for_order(order)
            # A concurrent retry with the same key may have won the race.
            replayed = self._replay(draft.idempotency_key, fingerprint)
            if replayed is not None:
                return replayed
            raise

        audit.record(
            self._audit_log,
            Actor(uid=user_id, username=order.recipient.name),
            "ORDER_CREATED",
            f"order:{order.id}",
            f"Order #{order.id} placed for {order.total} ({order.item_count} items)",
        )
        return order_to_dto(order)

    # --- Internal helpers -----------------------------------------------------

    def _replay(self, key: str | None, fingerprint: str) -> OrderDTO | None:
        if not key:
            return None
        existing = self._order_repo.get_by_idempotency_key(key)
        if existing is None:
            return None
        if existing.request_hash != fingerprint:
            raise IdempotencyConflict(
                f"Idempotency key '{key}' was already used for a different order"
            )
        logger.info("replaying order %s for idempotency key %s", existing.id, key)
        return order_to_dto(existing)

    def _usable_coupon(
        self,
        user_id: str,
        draft: OrderDraft,
        line_items: list[OrderLineItem],
    ) -> Coupon | None:
        if not draft.coupon_id:
            return None
        coupon = self._coupon_repo.get_by_id(draft.coupon_id)
        if coupon is None:
            raise CouponNotApplicable(f"Coupon '{draft.coupon_id}' not found")
        coupon.ensure_usable(
            user_id, subtotal_of(line_items, self._fees.currency), self._clock()
        )
        return coupon

    def _claim_and_save(self, order: Order) -> None:
        if order.coupon_id is None:
            self._order_repo.save(order)
            return
        self._coupon_repo.redeem(order.coupon_id)
        try:
            self._order_repo.save(order)
        except DomainException:
            logger.warning("order not stored; reinstating coupon %s", order.coupon_id)
            self._coupon_repo.reinstate(order.coupon_id)
            raise
