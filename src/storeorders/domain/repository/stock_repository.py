"""Abstract repository for the ProductStock aggregate.

Writes are optimistic: each record carries the ``version`` it was read
at, and the repository refuses to persist it if the stored version has
moved on in the meantime.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from storeorders.domain.model.stock import ProductStock


class StockRepository(ABC):

    @abstractmethod
    def get_by_product_id(self, product_id: str) -> ProductStock | None:
        """Return a detached copy of a product's stock record, or None."""

    @abstractmethod
    def list_all(self) -> list[ProductStock]:
        """Return every stock record."""

    @abstractmethod
    def save_all(self, records: list[ProductStock]) -> None:
        """Persist several records as one all-or-nothing write.

        Raises ConcurrencyConflict (and writes nothing) if any record's
        stored version differs from the version it was loaded at.  On
        success each record's ``version`` is incremented.
        """

    def save(self, record: ProductStock) -> None:
        """Persist a single record (same version check as ``save_all``)."""
        self.save_all([record])
