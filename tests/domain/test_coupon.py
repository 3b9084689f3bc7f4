"""Unit tests for the Coupon entity."""

from datetime import datetime, timedelta, timezone

import pytest

from storeorders.domain.exceptions import CouponNotApplicable, ValidationError
from storeorders.domain.model.coupon import Coupon, DiscountType
from storeorders.domain.model.value_objects import Money

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _coupon(**overrides):
    kwargs = dict(
        id="c1",
        user_id="u1",
        title="Spring sale",
        discount_type=DiscountType.PERCENTAGE,
        discount_value=10,
        min_purchase=Money.of(30000),
        expires_at=NOW + timedelta(days=7),
    )
    kwargs.update(overrides)
    return Coupon(**kwargs)


class TestCouponRules:

    def test_percentage_over_100_rejected(self):
        with pytest.raises(ValidationError, match="cannot exceed 100%"):
            _coupon(discount_value=120)

    def test_negative_value_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            _coupon(discount_type=DiscountType.FIXED, discount_value=-1)

    def test_minimum_is_inclusive(self):
        coupon = _coupon()
        assert coupon.discount_for(Money.of(30000)) == Money.of(3000)
        assert coupon.discount_for(Money.of(29999)) == Money.zero()

    def test_expiry_instant_is_expired(self):
        coupon = _coupon(expires_at=NOW)
        assert coupon.is_expired(NOW)
        assert not coupon.is_expired(NOW - timedelta(seconds=1))


class TestEnsureUsable:

    def test_usable_coupon_passes(self):
        _coupon().ensure_usable("u1", Money.of(50000), NOW)

    def test_other_customers_coupon(self):
        with pytest.raises(CouponNotApplicable, match="another customer"):
            _coupon().ensure_usable("u2", Money.of(50000), NOW)

    def test_used_coupon(self):
        with pytest.raises(CouponNotApplicable, match="already been used"):
            _coupon(is_used=True).ensure_usable("u1", Money.of(50000), NOW)

    def test_expired_coupon(self):
        with pytest.raises(CouponNotApplicable, match="expired"):
            _coupon(expires_at=NOW - timedelta(days=1)).ensure_usable("u1", Money.of(50000), NOW)

    def test_minimum_unmet_asks_to_deselect(self):
        with pytest.raises(CouponNotApplicable, match="deselect it"):
            _coupon().ensure_usable("u1", Money.of(20000), NOW)

    def test_redeem_is_single_use(self):
        coupon = _coupon()
        coupon.redeem()
        with pytest.raises(CouponNotApplicable):
            coupon.redeem()
