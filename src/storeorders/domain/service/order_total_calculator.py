"""Domain service: checkout total computation.

Pure functions only; nothing here reads a repository or the clock.
"""

from __future__ import annotations

from dataclasses import dataclass

from storeorders.domain.model.coupon import Coupon
from storeorders.domain.model.membership import earned_points
from storeorders.domain.model.order import OrderLineItem, OrderTotals
from storeorders.domain.model.value_objects import Money


@dataclass(frozen=True)
class CheckoutFees:
    """Store-wide fee schedule applied at checkout."""

    shipping_threshold: Money = Money.of(50000)
    shipping_fee: Money = Money.of(3000)
    gift_wrap_fee: Money = Money.of(3000)

    @property
    def currency(self) -> str:
        return self.shipping_fee.currency


def subtotal_of(items: list[OrderLineItem], currency: str) -> Money:
    result = Money.zero(currency)
    for item in items:
        result = result + item.line_total
    return result


def calculate_total(
    subtotal: Money,
    shipping_threshold: Money,
    shipping_fee: Money,
    gift_wrap_selected: bool,
    gift_wrap_fee: Money,
    coupon: Coupon | None,
    membership_discount_rate: int,
) -> OrderTotals:
    """Turn a cart subtotal into the amount the customer pays.

    - shipping is free when the subtotal is strictly above the threshold
    - gift wrap is a flat add-on
    - a coupon whose minimum purchase is unmet gives no discount and is
      reported with ``coupon_applicable=False``
    - the total is floored at zero
    - the membership rate only decides ``earned_points``; it is never
      taken off the price
    """
    shipping = Money.zero(subtotal.currency) if subtotal > shipping_threshold else shipping_fee
    wrapping = gift_wrap_fee if gift_wrap_selected else Money.zero(subtotal.currency)

    if coupon is None:
        discount = Money.zero(subtotal.currency)
        applicable = True
    else:
        applicable = coupon.meets_minimum(subtotal)
        discount = coupon.discount_for(subtotal)

    total = (subtotal + shipping + wrapping).minus_clamped(discount)

    return OrderTotals(
        subtotal=subtotal,
        shipping_fee=shipping,
        gift_wrap_fee=wrapping,
        coupon_discount=discount,
        total=total,
        earned_points=earned_points(total, membership_discount_rate),
        coupon_applicable=applicable,
    )


def quote(
    items: list[OrderLineItem],
    fees: CheckoutFees,
    gift_wrap_selected: bool,
    coupon: Coupon | None,
    membership_discount_rate: int,
) -> OrderTotals:
    """``calculate_total`` for a list of line items under a fee schedule."""
    return calculate_total(
        subtotal=subtotal_of(items, fees.currency),
        shipping_threshold=fees.shipping_threshold,
        shipping_fee=fees.shipping_fee,
        gift_wrap_selected=gift_wrap_selected,
        gift_wrap_fee=fees.gift_wrap_fee,
        coupon=coupon,
        membership_discount_rate=membership_discount_rate,
    )
