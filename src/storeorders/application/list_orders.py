"""Application service: List Orders use case (query).

Orders come back newest first, optionally narrowed to one customer
and/or one status.
"""

from __future__ import annotations

from storeorders.application.dto import OrderDTO, order_to_dto
from storeorders.domain.model.lifecycle import OrderStatus
from storeorders.domain.repository.order_repository import OrderRepository


class ListOrdersHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(
        self,
        status: OrderStatus | None = None,
        user_id: str | None = None,
    ) -> list[OrderDTO]:
        orders = (
            self._order_repo.list_by_user(user_id)
            if user_id
            else self._order_repo.list_all()
        )
        if status is not None:
            orders = [o for o in orders if o.status == status]
        orders.sort(key=lambda o: o.created_at, reverse=True)
        return [order_to_dto(o) for o in orders]
