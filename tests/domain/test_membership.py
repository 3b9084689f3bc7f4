"""Unit tests for membership tiers and point accrual."""

import pytest

from storeorders.domain.model.membership import (
    MEMBERSHIP_TIERS,
    earned_points,
    next_tier_info,
    tier_for_spend,
)
from storeorders.domain.model.value_objects import Money


class TestTierForSpend:

    @pytest.mark.parametrize(
        "spend,grade",
        [
            (0, "Bronze"),
            (499999, "Bronze"),
            (500000, "Silver"),
            (2000000, "Gold"),
            (4999999, "Gold"),
            (5000000, "Platinum"),
            (10000000, "VIP"),
            (99000000, "VIP"),
        ],
    )
    def test_lower_bound_is_inclusive(self, spend, grade):
        assert tier_for_spend(Money.of(spend)).grade == grade

    def test_rates(self):
        assert [t.discount_rate for t in MEMBERSHIP_TIERS] == [1, 2, 3, 5, 10]


class TestNextTier:

    def test_progress_towards_silver(self):
        info = next_tier_info(Money.of(250000))

        assert info.tier.grade == "Silver"
        assert info.remaining == Money.of(250000)
        assert info.progress == pytest.approx(50.0)

    def test_vip_has_no_next_tier(self):
        assert next_tier_info(Money.of(10000000)) is None


class TestEarnedPoints:

    def test_points_are_floored(self):
        assert earned_points(Money.of(12345), 2) == 246

    def test_zero_total_earns_nothing(self):
        assert earned_points(Money.zero(), 10) == 0
