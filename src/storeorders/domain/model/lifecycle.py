"""Order lifecycle — the closed set of statuses and the legal moves between them.

Happy path::

    pending_payment -> paid -> preparing -> shipping -> delivered

Side branches: ``cancel_requested`` (customer asked to cancel a paid
order; an admin decides) and ``cancelled`` (terminal).

Customers may only cancel.  Admins may move a non-terminal order to any
other status, including backwards, to correct operational mistakes.
"""

from __future__ import annotations

from enum import Enum

from storeorders.domain.exceptions import InvalidTransition


class OrderStatus(Enum):
    PENDING_PAYMENT = "pending_payment"
    PAID = "paid"
    PREPARING = "preparing"
    SHIPPING = "shipping"
    DELIVERED = "delivered"
    CANCEL_REQUESTED = "cancel_requested"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({OrderStatus.CANCELLED, OrderStatus.DELIVERED})

# What a customer-initiated cancel turns each status into.
_CUSTOMER_CANCEL = {
    OrderStatus.PENDING_PAYMENT: OrderStatus.CANCELLED,
    OrderStatus.PAID: OrderStatus.CANCEL_REQUESTED,
}


def customer_cancel_target(current: OrderStatus) -> OrderStatus:
    """Status a customer cancel request moves an order to.

    Unpaid orders are cancelled outright; paid ones only raise a request
    for an admin to approve.
    """
    try:
        return _CUSTOMER_CANCEL[current]
    except KeyError:
        raise InvalidTransition(
            f"Order in status {current.value} cannot be cancelled by the customer"
        ) from None


def validate_admin_transition(current: OrderStatus, new: OrderStatus) -> None:
    if current.is_terminal:
        raise InvalidTransition(
            f"Order is {current.value}; no further status changes are allowed"
        )
    if current == new:
        raise InvalidTransition(f"Order is already {current.value}")


def triggers_release(current: OrderStatus, new: OrderStatus) -> bool:
    """True when the move must hand reserved stock back."""
    return new == OrderStatus.CANCELLED and current != OrderStatus.CANCELLED


def can_delete(current: OrderStatus) -> bool:
    return current == OrderStatus.CANCELLED
