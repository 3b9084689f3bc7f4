"""Application service: Quote Checkout use case (query).

Computes what the customer would pay for a draft without reserving
anything.  An inapplicable coupon is reported, not raised, so the
checkout form can tell the customer to deselect it.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

from storeorders.application.create_order import build_line_items
from storeorders.application.dto import CheckoutQuoteDTO, OrderDraft, totals_to_dto
from storeorders.application.membership_summary import current_tier
from storeorders.domain.exceptions import CouponNotApplicable
from storeorders.domain.model.coupon import Coupon
from storeorders.domain.repository.coupon_repository import CouponRepository
from storeorders.domain.repository.order_repository import OrderRepository
from storeorders.domain.repository.product_repository import ProductRepository
from storeorders.domain.service.order_total_calculator import (
    CheckoutFees,
    quote,
    subtotal_of,
)


class QuoteCheckoutHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
        coupon_repo: CouponRepository,
        fees: CheckoutFees | None = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._order_repo = order_repo
        self._product_repo = product_repo
        self._coupon_repo = coupon_repo
        self._fees = fees or CheckoutFees()
        self._clock = clock

    def handle(self, user_id: str, draft: OrderDraft) -> CheckoutQuoteDTO:
        line_items = build_line_items(self._product_repo, draft.items)
        subtotal = subtotal_of(line_items, self._fees.currency)
        tier = current_tier(self._order_repo, user_id)

        coupon: Coupon | None = None
        message: str | None = None
        if draft.coupon_id:
            coupon = self._coupon_repo.get_by_id(draft.coupon_id)
            if coupon is None:
                message = f"Coupon '{draft.coupon_id}' not found"
            else:
                try:
                    coupon.ensure_usable(user_id, subtotal, self._clock())
                except CouponNotApplicable as exc:
                    message = str(exc)
                    # An unmet minimum stays selected so the breakdown reports
                    # coupon_applicable=False; any other problem drops it.
                    if coupon.meets_minimum(subtotal):
                        coupon = None

        totals = quote(line_items, self._fees, draft.gift_wrap, coupon, tier.discount_rate)
        return CheckoutQuoteDTO(
            totals=totals_to_dto(totals),
            membership_grade=tier.grade,
            coupon_message=message,
        )
