"""Abstract repository for Coupon."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storeorders.domain.model.coupon import Coupon


class CouponRepository(ABC):

    @abstractmethod
    def get_by_id(self, coupon_id: str) -> Coupon | None:
        """Return a coupon by its ID, or None if not found."""

    @abstractmethod
    def list_by_user(self, user_id: str) -> list[Coupon]:
        """Return every coupon issued to a customer."""

    @abstractmethod
    def save(self, coupon: Coupon) -> None:
        """Persist a new or updated coupon."""

    @abstractmethod
    def redeem(self, coupon_id: str) -> Coupon:
        """Mark a coupon used as one atomic check-and-write.

        Raises CouponNotApplicable if it is missing or already used, so
        two checkouts can never both redeem the same coupon.
        """

    @abstractmethod
    def reinstate(self, coupon_id: str) -> None:
        """Make a redeemed coupon usable again."""
