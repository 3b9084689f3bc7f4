"""Application service: Issue Coupon use case."""

from __future__ import annotations

import uuid
from datetime import datetime

from storeorders.domain.model.coupon import Coupon, DiscountType
from storeorders.domain.model.value_objects import Money
from storeorders.domain.repository.coupon_repository import CouponRepository


class IssueCouponHandler:

    def __init__(self, coupon_repo: CouponRepository) -> None:
        self._coupon_repo = coupon_repo

    def handle(
        self,
        user_id: str,
        title: str,
        discount_type: DiscountType,
        discount_value: int,
        min_purchase: str,
        expires_at: datetime,
    ) -> Coupon:
        coupon = Coupon(
            id=uuid.uuid4().hex[:12],
            user_id=user_id,
            title=title,
            discount_type=discount_type,
            discount_value=discount_value,
            min_purchase=Money.of(min_purchase),
            expires_at=expires_at,
        )
        self._coupon_repo.save(coupon)
        return coupon
