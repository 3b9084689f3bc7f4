"""Order aggregate — the core of the domain.

The Order is an aggregate root that owns its line items.
All business invariants are enforced here; which status moves are legal
is decided by ``storeorders.domain.model.lifecycle``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from storeorders.domain.exceptions import InvalidTransition, ValidationError
from storeorders.domain.model.lifecycle import (
    OrderStatus,
    can_delete,
    customer_cancel_target,
    triggers_release,
    validate_admin_transition,
)
from storeorders.domain.model.stock import StockBucket
from storeorders.domain.model.value_objects import Money, Quantity


@dataclass
class OrderLineItem:
    """Point-in-time copy of a product as it was ordered.

    ``reserved_bucket`` records which stock counter the reservation
    decremented so that a cancellation credits the very same counter.
    """

    product_id: str
    product_name: str
    quantity: Quantity
    unit_price: Money  # locked at order-creation time
    selected_size: str | None = None
    selected_color: str | None = None
    image: str = ""
    category: str = ""
    reserved_bucket: StockBucket | None = None

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value


@dataclass(frozen=True)
class OrderTotals:
    """Checkout breakdown, fixed when the order is placed."""

    subtotal: Money
    shipping_fee: Money
    gift_wrap_fee: Money
    coupon_discount: Money
    total: Money
    earned_points: int = 0
    coupon_applicable: bool = True


@dataclass(frozen=True)
class Recipient:
    name: str
    phone: str = ""
    email: str = ""


# ---------------------------------------------------------------------------
# Constants for business rules
# ---------------------------------------------------------------------------
MAX_LINE_ITEMS = 50


@dataclass
class Order:
    """Aggregate root for customer orders.

    Use the ``Order.create()`` factory for new orders — it enforces all
    business rules.  The ``__init__`` is intentionally simple so the
    repository can reconstitute persisted orders without re-validating.
    """

    id: int | None
    user_id: str
    items: list[OrderLineItem]
    totals: OrderTotals
    recipient: Recipient
    shipping_address: str
    status: OrderStatus = OrderStatus.PENDING_PAYMENT
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    gift_wrap: bool = False
    coupon_id: str | None = None
    memo: str = ""
    idempotency_key: str | None = None
    request_hash: str | None = None
    stock_restored: bool = False
    version: int = 0

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        user_id: str,
        items: list[OrderLineItem],
        totals: OrderTotals,
        recipient: Recipient,
        shipping_address: str,
        gift_wrap: bool = False,
        coupon_id: str | None = None,
        idempotency_key: str | None = None,
        request_hash: str | None = None,
    ) -> Order:
        """Create a new order in ``pending_payment``, enforcing all invariants."""
        if not user_id or not user_id.strip():
            raise ValidationError("User id is required")

        if not items:
            raise ValidationError("Order must contain at least one item")

        if len(items) > MAX_LINE_ITEMS:
            raise ValidationError(f"Maximum {MAX_LINE_ITEMS} items per order")

        if not recipient.name or not recipient.name.strip():
            raise ValidationError("Recipient name is required")

        if not shipping_address or not shipping_address.strip():
            raise ValidationError("Shipping address is required")

        return Order(
            id=None,
            user_id=user_id.strip(),
            items=list(items),
            totals=totals,
            recipient=recipient,
            shipping_address=shipping_address.strip(),
            gift_wrap=gift_wrap,
            coupon_id=coupon_id,
            idempotency_key=idempotency_key,
            request_hash=request_hash,
        )

    # --- State transitions ----------------------------------------------------

    def request_cancel(self) -> bool:
        """Customer-initiated cancel.

        Returns True when reserved stock must now be released.
        """
        return self._move_to(customer_cancel_target(self.status))

    def change_status(self, new_status: OrderStatus) -> bool:
        """Admin status change (any non-terminal -> any other status).

        Returns True when reserved stock must now be released.
        """
        validate_admin_transition(self.status, new_status)
        return self._move_to(new_status)

    def revert_to(self, previous: OrderStatus) -> None:
        """Undo a cancellation whose stock release failed, so it can be retried."""
        self.status = previous
        self.stock_restored = False

    def ensure_deletable(self) -> None:
        if not can_delete(self.status):
            raise InvalidTransition(
                f"Only cancelled orders can be deleted (order #{self.id} is {self.status.value})"
            )

    def update_memo(self, memo: str) -> None:
        self.memo = memo.strip()

    # --- Computed properties --------------------------------------------------

    @property
    def total(self) -> Money:
        return self.totals.total

    @property
    def item_count(self) -> int:
        return sum(item.quantity.value for item in self.items)

    # --- Internal helpers -----------------------------------------------------

    def _move_to(self, new_status: OrderStatus) -> bool:
        release = triggers_release(self.status, new_status) and not self.stock_restored
        self.status = new_status
        if release:
            self.stock_restored = True
        return release
