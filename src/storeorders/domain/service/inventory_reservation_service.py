"""Domain service: Inventory Reservation.

This service coordinates the cross-aggregate operation of reserving
or releasing stock for an order.  It lives in the domain layer
because the logic is a core business rule, not just orchestration.

Every attempt works on detached copies of the stock records and ends in
a single ``save_all`` call that compare-and-swaps each record's version.
Either every line of the order is reserved, or nothing is written.  A
version conflict (another checkout got there first) triggers a reload
and a fresh attempt, so availability is always re-checked against what
is actually stored.
"""

from __future__ import annotations

import logging

from storeorders.domain.exceptions import ConcurrencyConflict, ProductNotFound
from storeorders.domain.model.order import Order, OrderLineItem
from storeorders.domain.model.stock import ProductStock, StockBucket, resolve_bucket
from storeorders.domain.repository.stock_repository import StockRepository

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 3


class InventoryReservationService:

    def __init__(
        self,
        stock_repo: StockRepository,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        self._stock_repo = stock_repo
        self._max_attempts = max(1, max_attempts)

    def reserve_for_order(self, order: Order) -> None:
        """Reserve stock for every line item in the order.

        On success each line's ``reserved_bucket`` names the counter that
        was decremented.  Raises InsufficientStock or ProductNotFound
        without writing anything.
        """
        buckets = self._with_retry("reserve", order, self._reserve_once)
        for line, bucket in zip(order.items, buckets):
            line.reserved_bucket = bucket
        logger.info(
            "reserved stock for order %s: %s",
            order.id if order.id is not None else "(new)",
            ", ".join(
                f"{line.product_id}[{bucket.describe()}]x{line.quantity.value}"
                for line, bucket in zip(order.items, buckets)
            ),
        )

    def release_for_order(self, order: Order) -> None:
        """Credit every line's quantity back to the bucket it was taken from.

        Callers guarantee this runs at most once per order (see
        ``Order.stock_restored``).
        """
        self._with_retry("release", order, self._release_once)
        logger.info("released stock for order %s", order.id)

    # --- Attempts -------------------------------------------------------------

    def _reserve_once(self, order: Order) -> list[StockBucket]:
        records = self._load_records(order.items)

        buckets: list[StockBucket] = []
        for line in order.items:
            record = records[line.product_id]
            bucket = resolve_bucket(record, line.selected_size, line.selected_color)
            # take() raises InsufficientStock before touching the counter;
            # records are detached copies so nothing is persisted either way.
            record.take(bucket, line.quantity.value)
            buckets.append(bucket)

        self._stock_repo.save_all(list(records.values()))
        return buckets

    def _release_once(self, order: Order) -> None:
        records = self._load_records(order.items)

        for line in order.items:
            record = records[line.product_id]
            bucket = line.reserved_bucket
            if bucket is None:
                # Orders persisted before buckets were recorded.
                bucket = resolve_bucket(record, line.selected_size, line.selected_color)
                logger.warning(
                    "order %s line %s has no recorded bucket; resolved %s from current stock",
                    order.id,
                    line.product_id,
                    bucket.describe(),
                )
            record.put(bucket, line.quantity.value)

        self._stock_repo.save_all(list(records.values()))

    # --- Internal helpers -----------------------------------------------------

    def _load_records(self, lines: list[OrderLineItem]) -> dict[str, ProductStock]:
        records: dict[str, ProductStock] = {}
        for line in lines:
            if line.product_id in records:
                continue
            record = self._stock_repo.get_by_product_id(line.product_id)
            if record is None:
                raise ProductNotFound(
                    f"No stock record for product '{line.product_name}'"
                )
            records[line.product_id] = record
        return records

    def _with_retry(self, action, order, attempt_fn):
        for attempt in range(1, self._max_attempts + 1):
            try:
                return attempt_fn(order)
            except ConcurrencyConflict as exc:
                logger.warning(
                    "%s for order %s hit a stock version conflict (attempt %d/%d): %s",
                    action,
                    order.id,
                    attempt,
                    self._max_attempts,
                    exc,
                )
                last_error = exc
        raise ConcurrencyConflict(
            f"Could not {action} stock after {self._max_attempts} attempts; "
            f"stock is changing too quickly, please retry"
        ) from last_error
