"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field

from storeorders.domain.model.order import Order, OrderTotals


@dataclass(frozen=True)
class OrderItemSpec:
    """Input: one cart line (product id, quantity, optional variant)."""

    product_id: str
    quantity: int
    size: str | None = None
    color: str | None = None


@dataclass(frozen=True)
class OrderDraft:
    """Input: everything the checkout form submits."""

    items: list[OrderItemSpec]
    recipient_name: str
    shipping_address: str
    phone: str = ""
    email: str = ""
    gift_wrap: bool = False
    coupon_id: str | None = None
    idempotency_key: str | None = None

    def fingerprint_payload(self, user_id: str) -> dict:
        """Request fields that must match for a retry to count as the same order."""
        payload = asdict(self)
        payload.pop("idempotency_key")
        payload["user_id"] = user_id
        return payload


@dataclass(frozen=True)
class TotalsDTO:
    subtotal: str
    shipping_fee: str
    gift_wrap_fee: str
    coupon_discount: str
    total: str
    earned_points: int
    coupon_applicable: bool


@dataclass(frozen=True)
class OrderLineItemDTO:
    """Output: a single line item as displayed to the user."""

    product_id: str
    product_name: str
    quantity: int
    unit_price: str  # formatted, e.g. "₩15,000"
    line_total: str
    variant: str


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: int
    user_id: str
    customer_name: str
    phone: str
    email: str
    shipping_address: str
    status: str
    items: list[OrderLineItemDTO]
    totals: TotalsDTO
    created_at: str
    memo: str = ""

    @property
    def total(self) -> str:
        return self.totals.total

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)


@dataclass(frozen=True)
class CheckoutQuoteDTO:
    """Output: price breakdown shown before the order is placed."""

    totals: TotalsDTO
    membership_grade: str
    coupon_message: str | None = None


@dataclass
class BatchStatusResult:
    """Output: per-order outcome of a batch status change."""

    updated: list[int] = field(default_factory=list)
    failed: dict[int, str] = field(default_factory=dict)

    @property
    def all_succeeded(self) -> bool:
        return not self.failed


# --- Mapping ------------------------------------------------------------------


def totals_to_dto(totals: OrderTotals) -> TotalsDTO:
    return TotalsDTO(
        subtotal=str(totals.subtotal),
        shipping_fee=str(totals.shipping_fee),
        gift_wrap_fee=str(totals.gift_wrap_fee),
        coupon_discount=str(totals.coupon_discount),
        total=str(totals.total),
        earned_points=totals.earned_points,
        coupon_applicable=totals.coupon_applicable,
    )


def order_to_dto(order: Order) -> OrderDTO:
    return OrderDTO(
        id=order.id,  # type: ignore[arg-type]
        user_id=order.user_id,
        customer_name=order.recipient.name,
        phone=order.recipient.phone,
        email=order.recipient.email,
        shipping_address=order.shipping_address,
        status=order.status.value,
        items=[
            OrderLineItemDTO(
                product_id=item.product_id,
                product_name=item.product_name,
                quantity=item.quantity.value,
                unit_price=str(item.unit_price),
                line_total=str(item.line_total),
                variant="/".join(v for v in (item.selected_size, item.selected_color) if v),
            )
            for item in order.items
        ],
        totals=totals_to_dto(order.totals),
        created_at=order.created_at.strftime("%Y-%m-%d %H:%M UTC"),
        memo=order.memo,
    )
