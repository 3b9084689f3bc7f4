"""Abstract repository for Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storeorders.domain.model.order import Order


class OrderRepository(ABC):

    @abstractmethod
    def get_by_id(self, order_id: int) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def get_by_idempotency_key(self, key: str) -> Order | None:
        """Return the order created under a client idempotency key, or None."""

    @abstractmethod
    def list_all(self) -> list[Order]:
        """Return every order, newest first."""

    def list_by_user(self, user_id: str) -> list[Order]:
        """Return one customer's orders, newest first."""
        return [o for o in self.list_all() if o.user_id == user_id]

    @abstractmethod
    def save(self, order: Order) -> None:
        """Persist a new or updated order.

        New orders get an ID.  A new order whose idempotency key is
        already stored is rejected with IdempotencyKeyTaken.  Updates are
        rejected with ConcurrencyConflict if the stored version has moved on.
        """

    @abstractmethod
    def delete(self, order_id: int) -> None:
        """Remove an order permanently."""
