"""ProductStock aggregate — the inventory attached to one product.

A product record can carry up to three stock representations at once:

- ``flat``: a single count
- ``sizes``: size label -> count
- ``size_colors``: ordered ``(size, color, quantity)`` entries

Which one governs an order line is decided by ``resolve_bucket``.  Both
reservation and release go through the ``StockBucket`` it returns, so the
two can never disagree about which counter a line item touched.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from storeorders.domain.exceptions import InsufficientStock, ValidationError


class BucketKind(Enum):
    FLAT = "flat"
    SIZE = "size"
    SIZE_COLOR = "size_color"
    NONE = "none"  # nothing on the record covers the selection


@dataclass(frozen=True)
class StockBucket:
    """Identifies a single counter on a ProductStock record."""

    kind: BucketKind
    size: str | None = None
    color: str | None = None

    def describe(self) -> str:
        if self.kind == BucketKind.SIZE_COLOR:
            return f"{self.size}/{self.color}"
        if self.kind == BucketKind.SIZE:
            return f"size {self.size}"
        return self.kind.value


@dataclass
class SizeColorStock:
    size: str
    color: str
    quantity: int


@dataclass
class ProductStock:
    """Aggregate root for one product's stock counters.

    Invariants:
    - no counter is ever negative
    - ``version`` increases by one on every persisted change
    """

    product_id: str
    product_name: str
    flat: int | None = None
    sizes: dict[str, int] | None = None
    size_colors: list[SizeColorStock] | None = None
    version: int = 0

    def __post_init__(self) -> None:
        self._check_non_negative()

    # --- Queries --------------------------------------------------------------

    def available(self, bucket: StockBucket) -> int:
        if bucket.kind == BucketKind.FLAT:
            return self.flat or 0
        if bucket.kind == BucketKind.SIZE:
            return (self.sizes or {}).get(bucket.size, 0)  # type: ignore[arg-type]
        if bucket.kind == BucketKind.SIZE_COLOR:
            entry = self.size_color_entry(bucket.size, bucket.color)
            return entry.quantity if entry is not None else 0
        return 0

    # --- Mutations ------------------------------------------------------------

    def take(self, bucket: StockBucket, quantity: int) -> None:
        """Decrement ``bucket`` by ``quantity``.

        Raises InsufficientStock without touching any counter when the
        bucket holds less than requested.
        """
        if quantity <= 0:
            raise ValidationError("Reservation quantity must be positive")
        have = self.available(bucket)
        if quantity > have:
            raise InsufficientStock(self.product_id, self.product_name, quantity, have)
        self._write(bucket, have - quantity)

    def put(self, bucket: StockBucket, quantity: int) -> None:
        """Credit ``quantity`` back to ``bucket``, recreating it if missing."""
        if quantity <= 0:
            raise ValidationError("Release quantity must be positive")
        if bucket.kind == BucketKind.NONE:
            raise ValidationError(
                f"Cannot release stock for {self.product_name}: no bucket was reserved"
            )
        self._write(bucket, self.available(bucket) + quantity)

    def set_level(self, bucket: StockBucket, quantity: int) -> None:
        """Overwrite a counter (admin stock-in / correction)."""
        if quantity < 0:
            raise ValidationError("Stock quantity cannot be negative")
        self._write(bucket, quantity)

    # --- Internal helpers -----------------------------------------------------

    def _write(self, bucket: StockBucket, value: int) -> None:
        if bucket.kind == BucketKind.FLAT:
            self.flat = value
        elif bucket.kind == BucketKind.SIZE:
            if self.sizes is None:
                self.sizes = {}
            self.sizes[bucket.size] = value  # type: ignore[index]
        elif bucket.kind == BucketKind.SIZE_COLOR:
            entry = self.size_color_entry(bucket.size, bucket.color)
            if entry is not None:
                entry.quantity = value
            else:
                if self.size_colors is None:
                    self.size_colors = []
                self.size_colors.append(
                    SizeColorStock(size=bucket.size, color=bucket.color, quantity=value)  # type: ignore[arg-type]
                )
        else:
            raise ValidationError(f"No stock bucket to write for {self.product_name}")

    def size_color_entry(self, size: str | None, color: str | None) -> SizeColorStock | None:
        for entry in self.size_colors or []:
            if entry.size == size and entry.color == color:
                return entry
        return None

    def _check_non_negative(self) -> None:
        values = [self.flat or 0]
        values.extend((self.sizes or {}).values())
        values.extend(e.quantity for e in self.size_colors or [])
        if any(v < 0 for v in values):
            raise ValidationError(f"Stock for {self.product_name} cannot be negative")


def resolve_bucket(
    stock: ProductStock,
    size: str | None,
    color: str | None,
) -> StockBucket:
    """Pick the counter that governs a line with the given selection.

    Priority: size+color entry, then size entry (size selected without a
    color), then flat stock. If none of them exists the line resolves to a
    NONE bucket whose availability is zero.
    """
    if size and color and stock.size_color_entry(size, color) is not None:
        return StockBucket(BucketKind.SIZE_COLOR, size, color)
    if size and not color and stock.sizes and size in stock.sizes:
        return StockBucket(BucketKind.SIZE, size)
    if stock.flat is not None:
        return StockBucket(BucketKind.FLAT)
    return StockBucket(BucketKind.NONE, size, color)
