"""Tests for the JSON-file repositories (real files under tmp_path)."""

import json
import multiprocessing
import threading
from datetime import datetime, timezone

import pytest

from storeorders.domain.exceptions import (
    ConcurrencyConflict,
    CouponNotApplicable,
    IdempotencyKeyTaken,
    InsufficientStock,
    OrderNotFound,
    PersistenceFailure,
)
from storeorders.domain.model.audit import Actor, AuditEntry
from storeorders.domain.model.coupon import Coupon, DiscountType
from storeorders.domain.model.lifecycle import OrderStatus
from storeorders.domain.model.order import Order, OrderLineItem, OrderTotals, Recipient
from storeorders.domain.model.stock import BucketKind, ProductStock, SizeColorStock, StockBucket
from storeorders.domain.model.value_objects import Money, Quantity
from storeorders.domain.service.inventory_reservation_service import InventoryReservationService
from storeorders.infrastructure.persistence.json_audit_log import JsonLinesAuditLog
from storeorders.infrastructure.persistence.json_coupon_repository import JsonCouponRepository
from storeorders.infrastructure.persistence.json_file import JsonFile
from storeorders.infrastructure.persistence.json_order_repository import JsonOrderRepository
from storeorders.infrastructure.persistence.json_stock_repository import JsonStockRepository


def _order(quantity=2, idempotency_key="k-1"):
    price = Money.of(15000)
    line = OrderLineItem(
        "1",
        "Linen Shirt",
        Quantity(quantity),
        price,
        selected_size="S",
        selected_color="Red",
        reserved_bucket=StockBucket(BucketKind.SIZE_COLOR, "S", "Red"),
    )
    return Order.create(
        user_id="u1",
        items=[line],
        totals=OrderTotals(
            Money.of(30000), Money.of(3000), Money.zero(), Money.zero(), Money.of(33000), 330
        ),
        recipient=Recipient("Kim Minji", "010-1234-5678", "minji@example.com"),
        shipping_address="Seoul",
        idempotency_key=idempotency_key,
        request_hash="abc",
    )


def _coupon():
    return Coupon(
        id="c1",
        user_id="u1",
        title="Welcome",
        discount_type=DiscountType.FIXED,
        discount_value=5000,
        min_purchase=Money.of(30000),
        expires_at=datetime(2026, 12, 31, tzinfo=timezone.utc),
    )


def _hold_lock(path, locked, release):
    with JsonFile(path).locked():
        locked.set()
        release.wait(10)


def _reserve_one(path, barrier, results):
    service = InventoryReservationService(JsonStockRepository(path))
    barrier.wait(10)
    try:
        service.reserve_for_order(_order(quantity=1, idempotency_key=None))
    except InsufficientStock:
        results.put("insufficient")
    else:
        results.put("reserved")


class TestJsonStockRepository:

    def test_save_and_reload(self, tmp_path):
        repo = JsonStockRepository(tmp_path / "stock.json")
        record = ProductStock(
            "1", "Linen Shirt", flat=4, sizes={"M": 2}, size_colors=[SizeColorStock("S", "Red", 1)]
        )

        repo.save(record)
        loaded = repo.get_by_product_id("1")

        assert record.version == 1
        assert loaded == record
        assert repo.get_by_product_id("2") is None

    def test_stale_version_rejected_and_nothing_written(self, tmp_path):
        repo = JsonStockRepository(tmp_path / "stock.json")
        repo.save_all([ProductStock("1", "Shirt", flat=5), ProductStock("2", "Mug", flat=5)])

        first = repo.get_by_product_id("1")
        stale = repo.get_by_product_id("2")
        fresh = repo.get_by_product_id("2")
        fresh.flat = 4
        repo.save(fresh)

        first.flat = 0
        stale.flat = 0
        with pytest.raises(ConcurrencyConflict, match="expected version 1, found 2"):
            repo.save_all([first, stale])

        assert repo.get_by_product_id("1").flat == 5
        assert repo.get_by_product_id("2").flat == 4

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "stock.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(PersistenceFailure, match="Could not read"):
            JsonStockRepository(path).list_all()


class TestCrossProcessLocking:

    def test_write_waits_for_lock_held_by_another_process(self, tmp_path):
        ctx = multiprocessing.get_context("fork")
        path = tmp_path / "stock.json"
        repo = JsonStockRepository(path)
        repo.save(ProductStock("1", "Shirt", flat=1))
        locked, release = ctx.Event(), ctx.Event()
        holder = ctx.Process(target=_hold_lock, args=(path, locked, release))
        holder.start()
        assert locked.wait(10)

        record = repo.get_by_product_id("1")
        record.flat = 0
        saved = threading.Event()
        writer = threading.Thread(target=lambda: (repo.save(record), saved.set()))
        writer.start()
        try:
            assert not saved.wait(0.5)
        finally:
            release.set()
            writer.join(10)
            holder.join(10)

        assert saved.is_set()
        assert repo.get_by_product_id("1").flat == 0

    def test_two_processes_cannot_both_take_last_unit(self, tmp_path):
        ctx = multiprocessing.get_context("fork")
        path = tmp_path / "stock.json"
        JsonStockRepository(path).save(
            ProductStock("1", "Linen Shirt", size_colors=[SizeColorStock("S", "Red", 1)])
        )
        barrier, results = ctx.Barrier(2), ctx.Queue()
        workers = [
            ctx.Process(target=_reserve_one, args=(path, barrier, results)) for _ in range(2)
        ]
        for worker in workers:
            worker.start()
        outcomes = sorted(results.get(timeout=10) for _ in workers)
        for worker in workers:
            worker.join(10)

        assert outcomes == ["insufficient", "reserved"]
        stored = JsonStockRepository(path).get_by_product_id("1")
        assert stored.size_color_entry("S", "Red").quantity == 0


class TestJsonOrderRepository:

    def test_round_trip_keeps_reserved_bucket(self, tmp_path):
        repo = JsonOrderRepository(tmp_path / "orders.json")
        order = _order()

        repo.save(order)
        loaded = repo.get_by_id(order.id)

        assert loaded.id == 1
        assert loaded.items[0].reserved_bucket == StockBucket(BucketKind.SIZE_COLOR, "S", "Red")
        assert loaded.totals.total == Money.of(33000)
        assert loaded.totals.earned_points == 330
        assert loaded.recipient.email == "minji@example.com"
        assert repo.get_by_idempotency_key("k-1").id == 1

    def test_stale_order_rejected(self, tmp_path):
        repo = JsonOrderRepository(tmp_path / "orders.json")
        repo.save(_order())

        first = repo.get_by_id(1)
        second = repo.get_by_id(1)
        first.change_status(OrderStatus.PAID)
        repo.save(first)

        second.change_status(OrderStatus.CANCELLED)
        with pytest.raises(ConcurrencyConflict):
            repo.save(second)
        assert repo.get_by_id(1).status == OrderStatus.PAID

    def test_delete(self, tmp_path):
        repo = JsonOrderRepository(tmp_path / "orders.json")
        repo.save(_order())

        repo.delete(1)

        assert repo.list_all() == []
        with pytest.raises(OrderNotFound):
            repo.delete(1)

    def test_second_order_with_same_key_rejected(self, tmp_path):
        repo = JsonOrderRepository(tmp_path / "orders.json")
        repo.save(_order())

        duplicate = _order()
        with pytest.raises(IdempotencyKeyTaken, match="k-1"):
            repo.save(duplicate)

        assert duplicate.id is None
        assert len(repo.list_all()) == 1

    def test_orders_without_key_are_independent(self, tmp_path):
        repo = JsonOrderRepository(tmp_path / "orders.json")
        repo.save(_order(idempotency_key=None))
        repo.save(_order(idempotency_key=None))

        assert sorted(o.id for o in repo.list_all()) == [1, 2]


class TestJsonCouponRepository:

    def test_save_and_filter_by_user(self, tmp_path):
        repo = JsonCouponRepository(tmp_path / "coupons.json")
        coupon = _coupon()

        repo.save(coupon)
        coupon.redeem()
        repo.save(coupon)

        assert repo.list_by_user("u1") == [coupon]
        assert repo.list_by_user("u2") == []

    def test_redeem_succeeds_only_once(self, tmp_path):
        repo = JsonCouponRepository(tmp_path / "coupons.json")
        repo.save(_coupon())

        assert repo.redeem("c1").is_used is True
        with pytest.raises(CouponNotApplicable, match="already been used"):
            repo.redeem("c1")
        assert repo.get_by_id("c1").is_used is True

    def test_reinstate_makes_coupon_usable_again(self, tmp_path):
        repo = JsonCouponRepository(tmp_path / "coupons.json")
        repo.save(_coupon())
        repo.redeem("c1")

        repo.reinstate("c1")

        assert repo.redeem("c1").is_used is True

    def test_redeem_unknown_coupon(self, tmp_path):
        repo = JsonCouponRepository(tmp_path / "coupons.json")
        with pytest.raises(CouponNotApplicable, match="not found"):
            repo.redeem("nope")


class TestJsonLinesAuditLog:

    def test_appends_one_line_per_entry(self, tmp_path):
        path = tmp_path / "logs" / "audit_log.jsonl"
        log = JsonLinesAuditLog(path)
        actor = Actor(uid="admin-1", username="admin")

        log.append(AuditEntry.by(actor, "STOCK_SET", "product:1", "Shirt [flat] 0 -> 5"))
        log.append(AuditEntry.by(actor, "ORDER_DELETED", "order:3", "Deleted"))

        lines = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
        assert [entry["action"] for entry in lines] == ["STOCK_SET", "ORDER_DELETED"]
        assert lines[0]["actor_name"] == "admin"
