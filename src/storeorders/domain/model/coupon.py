"""Coupon — a single-use discount issued to one customer."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from storeorders.domain.exceptions import CouponNotApplicable, ValidationError
from storeorders.domain.model.value_objects import Money


class DiscountType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


@dataclass
class Coupon:
    id: str
    user_id: str
    title: str
    discount_type: DiscountType
    discount_value: int  # percent for PERCENTAGE, whole currency units for FIXED
    min_purchase: Money
    expires_at: datetime
    is_used: bool = False

    def __post_init__(self) -> None:
        if self.discount_value < 0:
            raise ValidationError("Coupon discount cannot be negative")
        if self.discount_type == DiscountType.PERCENTAGE and self.discount_value > 100:
            raise ValidationError("Percentage coupon cannot exceed 100%")

    def meets_minimum(self, subtotal: Money) -> bool:
        return subtotal >= self.min_purchase

    def discount_for(self, subtotal: Money) -> Money:
        """Discount this coupon gives on ``subtotal``; zero when the minimum is unmet."""
        if not self.meets_minimum(subtotal):
            return Money.zero(subtotal.currency)
        if self.discount_type == DiscountType.PERCENTAGE:
            return subtotal.percent(self.discount_value)
        return Money.of(self.discount_value, subtotal.currency)

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now

    def ensure_usable(self, user_id: str, subtotal: Money, now: datetime) -> None:
        """Raise CouponNotApplicable unless this coupon can be redeemed now."""
        if self.user_id != user_id:
            raise CouponNotApplicable(f"Coupon '{self.title}' belongs to another customer")
        if self.is_used:
            raise CouponNotApplicable(f"Coupon '{self.title}' has already been used")
        if self.is_expired(now):
            raise CouponNotApplicable(f"Coupon '{self.title}' has expired")
        if not self.meets_minimum(subtotal):
            raise CouponNotApplicable(
                f"Coupon '{self.title}' requires a minimum purchase of "
                f"{self.min_purchase}; deselect it to continue"
            )

    def redeem(self) -> None:
        if self.is_used:
            raise CouponNotApplicable(f"Coupon '{self.title}' has already been used")
        self.is_used = True

    def reinstate(self) -> None:
        """Undo a redemption whose order never got stored."""
        self.is_used = False
