"""JSON-file-backed implementation of CouponRepository."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from pathlib import Path

from storeorders.domain.exceptions import CouponNotApplicable
from storeorders.domain.model.coupon import Coupon, DiscountType
from storeorders.domain.model.value_objects import DEFAULT_CURRENCY, Money
from storeorders.domain.repository.coupon_repository import CouponRepository
from storeorders.infrastructure.persistence.json_file import JsonFile


class JsonCouponRepository(CouponRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    def get_by_id(self, coupon_id: str) -> Coupon | None:
        for raw in self._file.load():
            if raw["id"] == coupon_id:
                return self._to_domain(raw)
        return None

    def list_by_user(self, user_id: str) -> list[Coupon]:
        return [self._to_domain(raw) for raw in self._file.load() if raw["user_id"] == user_id]

    def save(self, coupon: Coupon) -> None:
        with self._file.locked():
            records = [raw for raw in self._file.load() if raw["id"] != coupon.id]
            records.append(self._to_raw(coupon))
            self._file.persist(records)

    def redeem(self, coupon_id: str) -> Coupon:
        with self._file.locked():
            coupon = self.get_by_id(coupon_id)
            if coupon is None:
                raise CouponNotApplicable(f"Coupon '{coupon_id}' not found")
            coupon.redeem()
            self.save(coupon)
        return coupon

    def reinstate(self, coupon_id: str) -> None:
        with self._file.locked():
            coupon = self.get_by_id(coupon_id)
            if coupon is None:
                return
            coupon.reinstate()
            self.save(coupon)

    @staticmethod
    def _to_raw(coupon: Coupon) -> dict:
        return {
            "id": coupon.id,
            "user_id": coupon.user_id,
            "title": coupon.title,
            "discount_type": coupon.discount_type.value,
            "discount_value": coupon.discount_value,
            "min_purchase": str(coupon.min_purchase.amount),
            "currency": coupon.min_purchase.currency,
            "expires_at": coupon.expires_at.isoformat(),
            "is_used": coupon.is_used,
        }

    @staticmethod
    def _to_domain(raw: dict) -> Coupon:
        return Coupon(
            id=raw["id"],
            user_id=raw["user_id"],
            title=raw.get("title", ""),
            discount_type=DiscountType(raw["discount_type"]),
            discount_value=raw["discount_value"],
            min_purchase=Money(
                Decimal(raw.get("min_purchase", "0")), raw.get("currency", DEFAULT_CURRENCY)
            ),
            expires_at=datetime.fromisoformat(raw["expires_at"]),
            is_used=raw.get("is_used", False),
        )
