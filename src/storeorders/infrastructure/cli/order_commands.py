"""CLI commands for the Order aggregate."""

from __future__ import annotations

import click

from storeorders.application.cancel_order import CancelOrderHandler
from storeorders.application.create_order import CreateOrderHandler
from storeorders.application.delete_order import DeleteOrderHandler
from storeorders.application.dto import OrderDraft, OrderDTO, OrderItemSpec, TotalsDTO
from storeorders.application.export_orders import ExportOrdersHandler
from storeorders.application.list_orders import ListOrdersHandler
from storeorders.application.quote_checkout import QuoteCheckoutHandler
from storeorders.application.show_order import ShowOrderHandler
from storeorders.application.update_order_memo import UpdateOrderMemoHandler
from storeorders.application.update_order_status import UpdateOrderStatusHandler
from storeorders.domain.exceptions import DomainException, InsufficientStock
from storeorders.domain.model.audit import Actor
from storeorders.domain.model.lifecycle import OrderStatus
from storeorders.infrastructure.bootstrap import (
    audit_log,
    coupon_repository,
    order_repository,
    product_repository,
    stock_repository,
)
from storeorders.infrastructure.config import get_settings

STATUS_CHOICES = click.Choice([s.value for s in OrderStatus])


def _parse_items(raw: str) -> list[OrderItemSpec]:
    """Parse '1:2,3:1:M,4:1:S:Red' (id:qty[:size[:color]]) into OrderItemSpec list."""
    specs: list[OrderItemSpec] = []
    for entry in raw.split(","):
        parts = [p.strip() for p in entry.strip().split(":")]
        if len(parts) < 2 or len(parts) > 4 or not parts[0]:
            raise click.BadParameter(
                f"Invalid item format '{entry}'. Expected 'ProductId:Qty[:Size[:Color]]'."
            )
        try:
            qty = int(parts[1])
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{parts[1]}' for product '{parts[0]}'."
            )
        size = parts[2] if len(parts) > 2 and parts[2] else None
        color = parts[3] if len(parts) > 3 and parts[3] else None
        specs.append(OrderItemSpec(product_id=parts[0], quantity=qty, size=size, color=color))
    return specs


def _checkout_options(fn):
    fn = click.option("--key", "idempotency_key", default=None, help="Idempotency key for safe retries.")(fn)
    fn = click.option("--coupon", "coupon_id", default=None, help="Coupon ID to apply.")(fn)
    fn = click.option("--gift-wrap", is_flag=True, default=False, help="Add gift wrapping.")(fn)
    fn = click.option("--email", default="", help="Recipient email.")(fn)
    fn = click.option("--phone", default="", help="Recipient phone.")(fn)
    fn = click.option("--address", required=True, help="Shipping address.")(fn)
    fn = click.option("--recipient", required=True, help="Recipient name.")(fn)
    fn = click.option("--items", required=True, help="Items as 'ProductId:Qty[:Size[:Color]],...'.")(fn)
    fn = click.option("--user", "user_id", required=True, help="Customer user id.")(fn)
    return fn


def _draft(items, recipient, address, phone, email, gift_wrap, coupon_id, idempotency_key) -> OrderDraft:
    return OrderDraft(
        items=_parse_items(items),
        recipient_name=recipient,
        shipping_address=address,
        phone=phone,
        email=email,
        gift_wrap=gift_wrap,
        coupon_id=coupon_id,
        idempotency_key=idempotency_key,
    )


def _display_totals(totals: TotalsDTO) -> None:
    click.echo(f"  {'Subtotal':<27} {totals.subtotal:>20}")
    click.echo(f"  {'Shipping':<27} {totals.shipping_fee:>20}")
    click.echo(f"  {'Gift wrap':<27} {totals.gift_wrap_fee:>20}")
    click.echo(f"  {'Coupon discount':<27} {'-' + totals.coupon_discount:>20}")
    click.echo(f"  {'-'*48}")
    click.echo(f"  {'Order Total':<27} {totals.total:>20}")
    click.echo(f"  {'Points earned':<27} {totals.earned_points:>20}")


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order #{dto.id}  (status={dto.status})")
    click.echo(f"Customer: {dto.customer_name}  {dto.phone} {dto.email}".rstrip())
    click.echo(f"Ship to:  {dto.shipping_address}")
    click.echo(f"Created:  {dto.created_at}")
    if dto.memo:
        click.echo(f"Memo:     {dto.memo}")
    click.echo()
    click.echo(f"  {'Product':<20} {'Variant':<10} {'Qty':>5} {'Price':>10} {'Total':>12}")
    click.echo(f"  {'-'*61}")
    for item in dto.items:
        click.echo(
            f"  {item.product_name:<20} {item.variant:<10} {item.quantity:>5} "
            f"{item.unit_price:>10} {item.line_total:>12}"
        )
    click.echo(f"  {'-'*61}")
    _display_totals(dto.totals)


@click.command("quote")
@_checkout_options
def order_quote(user_id, items, recipient, address, phone, email, gift_wrap, coupon_id, idempotency_key) -> None:
    """Show what an order would cost, without placing it."""
    settings = get_settings()
    handler = QuoteCheckoutHandler(
        order_repo=order_repository(),
        product_repo=product_repository(),
        coupon_repo=coupon_repository(),
        fees=settings.checkout_fees(),
    )

    draft = _draft(items, recipient, address, phone, email, gift_wrap, coupon_id, idempotency_key)
    try:
        dto = handler.handle(user_id, draft)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Membership: {dto.membership_grade}")
    if dto.coupon_message:
        click.echo(f"Coupon: {dto.coupon_message}")
    _display_totals(dto.totals)


@click.command("create")
@_checkout_options
def order_create(user_id, items, recipient, address, phone, email, gift_wrap, coupon_id, idempotency_key) -> None:
    """Place an order (reserves stock for every line or none)."""
    settings = get_settings()
    handler = CreateOrderHandler(
        order_repo=order_repository(),
        product_repo=product_repository(),
        stock_repo=stock_repository(),
        coupon_repo=coupon_repository(),
        audit_log=audit_log(),
        fees=settings.checkout_fees(),
        max_attempts=settings.reservation_max_attempts,
    )

    draft = _draft(items, recipient, address, phone, email, gift_wrap, coupon_id, idempotency_key)
    try:
        dto = handler.handle(user_id, draft)
    except InsufficientStock as exc:
        raise click.ClickException(f"{exc}. Please reduce the quantity.")
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{dto.id} created  (status={dto.status})")
    _display_order(dto)


@click.command("show")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
def order_show(order_id: int) -> None:
    """Show details of an existing order."""
    handler = ShowOrderHandler(order_repo=order_repository())

    try:
        dto = handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("list")
@click.option("--status", type=STATUS_CHOICES, default=None, help="Only this status.")
@click.option("--user", "user_id", default=None, help="Only this customer.")
def order_list(status: str | None, user_id: str | None) -> None:
    """List orders, newest first."""
    handler = ListOrdersHandler(order_repo=order_repository())
    orders = handler.handle(
        status=OrderStatus(status) if status else None,
        user_id=user_id,
    )

    if not orders:
        click.echo("No orders found.")
        return

    click.echo(f"{'ID':<6} {'Created':<21} {'Customer':<14} {'Status':<17} {'Items':>5} {'Total':>12}")
    click.echo("-" * 80)
    for dto in orders:
        click.echo(
            f"{dto.id:<6} {dto.created_at:<21} {dto.customer_name:<14} "
            f"{dto.status:<17} {dto.item_count:>5} {dto.total:>12}"
        )


@click.command("cancel")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to cancel.")
@click.option("--user", "user_id", required=True, help="Customer user id.")
def order_cancel(order_id: int, user_id: str) -> None:
    """Cancel your order (paid orders become a cancel request)."""
    settings = get_settings()
    handler = CancelOrderHandler(
        order_repo=order_repository(),
        stock_repo=stock_repository(),
        audit_log=audit_log(),
        max_attempts=settings.reservation_max_attempts,
    )

    try:
        dto = handler.handle(user_id, order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if dto.status == OrderStatus.CANCELLED.value:
        click.echo(f"Order #{order_id} cancelled — stock released.")
    else:
        click.echo(f"Order #{order_id} cancellation requested — awaiting approval.")


@click.command("status")
@click.option("--id", "order_ids", required=True, type=int, multiple=True, help="Order ID (repeatable).")
@click.option("--to", "new_status", required=True, type=STATUS_CHOICES, help="New status.")
@click.option("--admin", default="admin", show_default=True, help="Acting admin username.")
def order_status(order_ids: tuple[int, ...], new_status: str, admin: str) -> None:
    """Change the status of one or more orders (admin)."""
    settings = get_settings()
    handler = UpdateOrderStatusHandler(
        order_repo=order_repository(),
        stock_repo=stock_repository(),
        audit_log=audit_log(),
        max_attempts=settings.reservation_max_attempts,
    )

    result = handler.handle(
        list(order_ids), OrderStatus(new_status), Actor(uid=admin, username=admin)
    )
    for order_id in result.updated:
        click.echo(f"Order #{order_id} -> {new_status}")
    for order_id, reason in result.failed.items():
        click.echo(f"Order #{order_id} not updated: {reason}", err=True)
    if not result.all_succeeded:
        raise click.ClickException(f"{len(result.failed)} order(s) not updated")


@click.command("memo")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--text", required=True, help="Memo text.")
@click.option("--admin", default="admin", show_default=True, help="Acting admin username.")
def order_memo(order_id: int, text: str, admin: str) -> None:
    """Set the admin memo on an order."""
    handler = UpdateOrderMemoHandler(order_repo=order_repository(), audit_log=audit_log())

    try:
        handler.handle(order_id, text, Actor(uid=admin, username=admin))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} memo updated.")


@click.command("delete")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to delete.")
@click.option("--admin", default="admin", show_default=True, help="Acting admin username.")
def order_delete(order_id: int, admin: str) -> None:
    """Permanently delete a cancelled order (admin)."""
    handler = DeleteOrderHandler(order_repo=order_repository(), audit_log=audit_log())

    try:
        handler.handle(order_id, Actor(uid=admin, username=admin))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} deleted.")


@click.command("export")
@click.option("--status", type=STATUS_CHOICES, default=None, help="Only this status.")
@click.option("--output", type=click.Path(dir_okay=False, writable=True), default=None, help="CSV file (default: stdout).")
def order_export(status: str | None, output: str | None) -> None:
    """Export orders as CSV."""
    handler = ExportOrdersHandler(order_repo=order_repository())
    wanted = OrderStatus(status) if status else None

    if output is None:
        handler.handle(click.get_text_stream("stdout"), status=wanted)
        return

    with open(output, "w", encoding="utf-8", newline="") as fh:
        count = handler.handle(fh, status=wanted)
    click.echo(f"Exported {count} order(s) to {output}")
