"""Membership tiers.

A customer's grade follows from their cumulative spend on delivered
orders. The tier's rate decides how many loyalty points an order earns;
it never lowers the price paid at checkout.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from storeorders.domain.model.value_objects import Money


@dataclass(frozen=True)
class MembershipTier:
    grade: str
    min_spent: Decimal
    max_spent: Decimal | None  # None = unbounded
    discount_rate: int  # percent
    name: str


MEMBERSHIP_TIERS: tuple[MembershipTier, ...] = (
    MembershipTier("Bronze", Decimal("0"), Decimal("500000"), 1, "브론즈"),
    MembershipTier("Silver", Decimal("500000"), Decimal("2000000"), 2, "실버"),
    MembershipTier("Gold", Decimal("2000000"), Decimal("5000000"), 3, "골드"),
    MembershipTier("Platinum", Decimal("5000000"), Decimal("10000000"), 5, "플래티넘"),
    MembershipTier("VIP", Decimal("10000000"), None, 10, "VIP"),
)


@dataclass(frozen=True)
class NextTierInfo:
    tier: MembershipTier
    remaining: Money
    progress: float  # 0..100


def tier_for_spend(spend: Money) -> MembershipTier:
    """Highest tier whose lower bound the spend meets (bound inclusive)."""
    for tier in reversed(MEMBERSHIP_TIERS):
        if spend.amount >= tier.min_spent:
            return tier
    return MEMBERSHIP_TIERS[0]


def next_tier_info(spend: Money) -> NextTierInfo | None:
    """How far ``spend`` is from the next grade, or None at the top grade."""
    current = tier_for_spend(spend)
    index = MEMBERSHIP_TIERS.index(current)
    if index == len(MEMBERSHIP_TIERS) - 1:
        return None

    upcoming = MEMBERSHIP_TIERS[index + 1]
    remaining = max(upcoming.min_spent - spend.amount, Decimal("0"))
    span = upcoming.min_spent - current.min_spent
    progress = float((spend.amount - current.min_spent) / span * 100)
    return NextTierInfo(
        tier=upcoming,
        remaining=Money(remaining, spend.currency),
        progress=min(progress, 100.0),
    )


def earned_points(paid_total: Money, discount_rate: int) -> int:
    """Loyalty points accrued for an order paid at ``paid_total``."""
    return int(paid_total.percent(discount_rate).amount)
