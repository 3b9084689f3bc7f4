"""Unit tests for checkout total computation."""

from datetime import datetime, timedelta, timezone

import pytest

from storeorders.domain.model.coupon import Coupon, DiscountType
from storeorders.domain.model.order import OrderLineItem
from storeorders.domain.model.value_objects import Money, Quantity
from storeorders.domain.service.order_total_calculator import (
    CheckoutFees,
    calculate_total,
    quote,
)

FEES = CheckoutFees()


def _coupon(kind=DiscountType.PERCENTAGE, value=10, min_purchase=0):
    return Coupon(
        id="c1",
        user_id="u1",
        title="Welcome",
        discount_type=kind,
        discount_value=value,
        min_purchase=Money.of(min_purchase),
        expires_at=datetime.now(timezone.utc) + timedelta(days=30),
    )


def _total(subtotal, gift_wrap=False, coupon=None, rate=0):
    return calculate_total(
        subtotal=Money.of(subtotal),
        shipping_threshold=FEES.shipping_threshold,
        shipping_fee=FEES.shipping_fee,
        gift_wrap_selected=gift_wrap,
        gift_wrap_fee=FEES.gift_wrap_fee,
        coupon=coupon,
        membership_discount_rate=rate,
    )


class TestCalculateTotal:

    def test_free_shipping_with_percentage_coupon(self):
        totals = _total(60000, coupon=_coupon(value=10))

        assert totals.shipping_fee == Money.zero()
        assert totals.coupon_discount == Money.of(6000)
        assert totals.total == Money.of(54000)
        assert str(totals.total) == "₩54,000"

    def test_shipping_and_gift_wrap_below_threshold(self):
        totals = _total(30000, gift_wrap=True)

        assert totals.shipping_fee == Money.of(3000)
        assert totals.gift_wrap_fee == Money.of(3000)
        assert totals.total == Money.of(36000)

    def test_shipping_charged_exactly_at_threshold(self):
        assert _total(50000).shipping_fee == Money.of(3000)
        assert _total(50001).shipping_fee == Money.zero()

    def test_unmet_minimum_gives_no_discount(self):
        totals = _total(30000, coupon=_coupon(value=20, min_purchase=40000))

        assert totals.coupon_discount == Money.zero()
        assert totals.coupon_applicable is False
        assert totals.total == Money.of(33000)

    def test_fixed_coupon(self):
        totals = _total(60000, coupon=_coupon(DiscountType.FIXED, 5000))
        assert totals.total == Money.of(55000)

    def test_total_never_negative(self):
        totals = _total(2000, coupon=_coupon(DiscountType.FIXED, 10000))

        assert totals.coupon_discount == Money.of(10000)
        assert totals.total == Money.zero()

    def test_percentage_discount_rounds_down(self):
        totals = _total(55555, coupon=_coupon(value=10))
        assert totals.coupon_discount == Money.of(5555)

    def test_membership_rate_only_earns_points(self):
        totals = _total(60000, rate=3)

        assert totals.total == Money.of(60000)
        assert totals.earned_points == 1800

    def test_same_inputs_same_result(self):
        coupon = _coupon(value=15)
        assert _total(45000, True, coupon, 2) == _total(45000, True, coupon, 2)
        assert coupon.is_used is False


class TestQuote:

    def test_quote_sums_line_items(self):
        items = [
            OrderLineItem("1", "Shirt", Quantity(2), Money.of(15000)),
            OrderLineItem("2", "Mug", Quantity(1), Money.of(8000)),
        ]
        totals = quote(items, FEES, gift_wrap_selected=False, coupon=None, membership_discount_rate=1)

        assert totals.subtotal == Money.of(38000)
        assert totals.total == Money.of(41000)
        assert totals.earned_points == 410

    @pytest.mark.parametrize("threshold,expected", [(0, 10000), (100000, 13000)])
    def test_custom_fee_schedule(self, threshold, expected):
        fees = CheckoutFees(shipping_threshold=Money.of(threshold))
        items = [OrderLineItem("1", "Shirt", Quantity(1), Money.of(10000))]

        totals = quote(items, fees, False, None, 0)

        assert totals.total == Money.of(expected)
