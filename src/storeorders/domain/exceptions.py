"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
"""


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class PersistenceFailure(DomainException):
    """The underlying store rejected a read or write."""


class InsufficientStock(ValidationError):
    """Requested quantity exceeds what the resolved stock bucket holds."""

    def __init__(
        self,
        product_id: str,
        product_name: str,
        requested: int,
        available: int,
    ) -> None:
        self.product_id = product_id
        self.product_name = product_name
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for {product_name} "
            f"(need {requested}, have {available} available)"
        )

    @property
    def shortfall(self) -> int:
        return self.requested - self.available


class InvalidTransition(ValidationError):
    """A status change is not allowed from the order's current status."""


class CouponNotApplicable(ValidationError):
    """The selected coupon cannot be used for this checkout."""


class IdempotencyConflict(ValidationError):
    """An idempotency key was reused with a different request payload."""


class ProductNotFound(EntityNotFoundError):
    """A line item references a product with no backing record."""


class OrderNotFound(EntityNotFoundError):
    """No order exists with the requested id."""


class ConcurrencyConflict(PersistenceFailure):
    """A record changed between read and write (version mismatch)."""


class IdempotencyKeyTaken(ConcurrencyConflict):
    """Another request stored an order under the same idempotency key first."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Idempotency key '{key}' is already taken by a stored order")
