"""Application service: Membership Summary use case (query).

Read-only view over delivered orders; nothing here feeds back into
order placement except the rate used for point accrual.
"""

from __future__ import annotations

from dataclasses import dataclass

from storeorders.domain.model.lifecycle import OrderStatus
from storeorders.domain.model.membership import (
    MembershipTier,
    next_tier_info,
    tier_for_spend,
)
from storeorders.domain.model.value_objects import DEFAULT_CURRENCY, Money
from storeorders.domain.repository.order_repository import OrderRepository


@dataclass(frozen=True)
class MembershipDTO:
    user_id: str
    grade: str
    grade_name: str
    discount_rate: int
    total_spent: str
    points: int
    next_grade: str | None
    remaining_to_next: str | None
    progress: float | None


def cumulative_spend(
    order_repo: OrderRepository,
    user_id: str,
    currency: str = DEFAULT_CURRENCY,
) -> Money:
    """Sum of final totals over the customer's delivered orders."""
    spent = Money.zero(currency)
    for order in order_repo.list_by_user(user_id):
        if order.status == OrderStatus.DELIVERED:
            spent = spent + order.total
    return spent


def current_tier(order_repo: OrderRepository, user_id: str) -> MembershipTier:
    return tier_for_spend(cumulative_spend(order_repo, user_id))


class MembershipSummaryHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, user_id: str) -> MembershipDTO:
        spent = cumulative_spend(self._order_repo, user_id)
        tier = tier_for_spend(spent)
        upcoming = next_tier_info(spent)
        points = sum(
            order.totals.earned_points
            for order in self._order_repo.list_by_user(user_id)
            if order.status == OrderStatus.DELIVERED
        )
        return MembershipDTO(
            user_id=user_id,
            grade=tier.grade,
            grade_name=tier.name,
            discount_rate=tier.discount_rate,
            total_spent=str(spent),
            points=points,
            next_grade=upcoming.tier.grade if upcoming else None,
            remaining_to_next=str(upcoming.remaining) if upcoming else None,
            progress=round(upcoming.progress, 1) if upcoming else None,
        )
