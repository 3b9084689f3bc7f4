"""Unit tests for InventoryReservationService (uses fake repositories)."""

import pytest

from storeorders.domain.exceptions import (
    ConcurrencyConflict,
    InsufficientStock,
    ProductNotFound,
)
from storeorders.domain.model.order import Order, OrderLineItem, OrderTotals, Recipient
from storeorders.domain.model.stock import (
    BucketKind,
    ProductStock,
    SizeColorStock,
    StockBucket,
)
from storeorders.domain.model.value_objects import Money, Quantity
from storeorders.domain.service.inventory_reservation_service import (
    InventoryReservationService,
)
from tests.fakes import FakeStockRepository


def _line(product_id, qty, size=None, color=None, name=None):
    return OrderLineItem(
        product_id=product_id,
        product_name=name or f"Product {product_id}",
        quantity=Quantity(qty),
        unit_price=Money.of(10000),
        selected_size=size,
        selected_color=color,
    )


def _order(*lines):
    zero = Money.zero()
    totals = OrderTotals(zero, zero, zero, zero, zero)
    return Order.create(
        user_id="u1",
        items=list(lines),
        totals=totals,
        recipient=Recipient("Kim"),
        shipping_address="Seoul",
    )


def _setup(*records, max_attempts=3):
    repo = FakeStockRepository(list(records))
    return repo, InventoryReservationService(repo, max_attempts=max_attempts)


class TestReserve:

    def test_reserves_each_line_from_its_bucket(self):
        repo, service = _setup(
            ProductStock("1", "Shirt", size_colors=[SizeColorStock("S", "Red", 2)]),
            ProductStock("2", "Mug", flat=5),
        )
        order = _order(_line("1", 2, "S", "Red"), _line("2", 3))

        service.reserve_for_order(order)

        assert repo.peek("1").size_color_entry("S", "Red").quantity == 0
        assert repo.peek("2").flat == 2
        assert order.items[0].reserved_bucket == StockBucket(BucketKind.SIZE_COLOR, "S", "Red")
        assert order.items[1].reserved_bucket == StockBucket(BucketKind.FLAT)

    def test_shortage_on_any_line_writes_nothing(self):
        repo, service = _setup(
            ProductStock("1", "Shirt", flat=10),
            ProductStock("2", "Mug", flat=1),
        )
        order = _order(_line("1", 4), _line("2", 2, name="Mug"))

        with pytest.raises(InsufficientStock, match="Mug") as exc_info:
            service.reserve_for_order(order)

        assert exc_info.value.requested == 2
        assert exc_info.value.available == 1
        assert repo.peek("1").flat == 10
        assert repo.peek("2").flat == 1
        assert repo.save_calls == 0
        assert order.items[0].reserved_bucket is None

    def test_two_lines_share_one_bucket(self):
        repo, service = _setup(ProductStock("1", "Shirt", flat=3))

        with pytest.raises(InsufficientStock):
            service.reserve_for_order(_order(_line("1", 2), _line("1", 2)))

        assert repo.peek("1").flat == 3

    def test_missing_stock_record(self):
        _, service = _setup()
        with pytest.raises(ProductNotFound, match="No stock record"):
            service.reserve_for_order(_order(_line("9", 1)))

    def test_retries_after_concurrent_write(self):
        repo, service = _setup(ProductStock("1", "Shirt", flat=5))

        def another_checkout():
            record = repo.get_by_product_id("1")
            record.flat = 4
            repo.save_all([record])

        repo.before_save = another_checkout
        service.reserve_for_order(_order(_line("1", 2)))

        # The retry re-read the level left by the other checkout.
        assert repo.peek("1").flat == 2

    def test_retry_rechecks_availability(self):
        repo, service = _setup(ProductStock("1", "Shirt", flat=2))

        def another_checkout():
            record = repo.get_by_product_id("1")
            record.flat = 1
            repo.save_all([record])

        repo.before_save = another_checkout
        with pytest.raises(InsufficientStock):
            service.reserve_for_order(_order(_line("1", 2)))
        assert repo.peek("1").flat == 1

    def test_gives_up_after_max_attempts(self):
        repo, service = _setup(ProductStock("1", "Shirt", flat=5), max_attempts=2)

        def keep_interfering():
            record = repo.get_by_product_id("1")
            repo.before_save = None
            repo.save_all([record])
            repo.before_save = keep_interfering

        repo.before_save = keep_interfering
        with pytest.raises(ConcurrencyConflict, match="after 2 attempts"):
            service.reserve_for_order(_order(_line("1", 1)))
        assert repo.peek("1").flat == 5


class TestRelease:

    def test_release_credits_reserved_bucket(self):
        repo, service = _setup(
            ProductStock("1", "Shirt", sizes={"M": 3}, size_colors=[SizeColorStock("M", "Blue", 1)])
        )
        order = _order(_line("1", 1, "M", "Blue"))
        service.reserve_for_order(order)

        service.release_for_order(order)

        assert repo.peek("1").size_color_entry("M", "Blue").quantity == 1
        assert repo.peek("1").sizes == {"M": 3}

    def test_release_recreates_bucket_removed_since_reservation(self):
        repo, service = _setup(ProductStock("1", "Shirt", size_colors=[SizeColorStock("L", "Black", 1)]))
        order = _order(_line("1", 1, "L", "Black"))
        service.reserve_for_order(order)

        # Admin switched the product to flat stock in the meantime.
        record = repo.get_by_product_id("1")
        record.size_colors = None
        record.flat = 7
        repo.save_all([record])

        service.release_for_order(order)

        assert repo.peek("1").flat == 7
        assert repo.peek("1").size_color_entry("L", "Black").quantity == 1

    def test_release_without_recorded_bucket_resolves_from_current_stock(self):
        repo, service = _setup(ProductStock("1", "Mug", flat=0))
        order = _order(_line("1", 2))

        service.release_for_order(order)

        assert repo.peek("1").flat == 2
