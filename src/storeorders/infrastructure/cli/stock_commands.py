"""CLI commands for stock management."""

from __future__ import annotations

import click

from storeorders.application.set_stock import SetStockHandler
from storeorders.application.show_stock import ShowStockHandler
from storeorders.domain.exceptions import DomainException
from storeorders.domain.model.audit import Actor
from storeorders.infrastructure.bootstrap import (
    audit_log,
    product_repository,
    stock_repository,
)


@click.command("set")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--quantity", required=True, type=int, help="New stock level.")
@click.option("--size", default=None, help="Size label (per-size stock).")
@click.option("--color", default=None, help="Color (per-size-per-color stock, needs --size).")
@click.option("--reason", default=None, help="Why the level changed (kept in the audit log).")
@click.option("--admin", default="admin", show_default=True, help="Acting admin username.")
def stock_set(
    product_id: str,
    quantity: int,
    size: str | None,
    color: str | None,
    reason: str | None,
    admin: str,
) -> None:
    """Set a stock level for a product (flat, per size, or per size+color)."""
    handler = SetStockHandler(
        stock_repo=stock_repository(),
        product_repo=product_repository(),
        audit_log=audit_log(),
    )

    try:
        handler.handle(
            product_id,
            quantity,
            Actor(uid=admin, username=admin),
            size=size,
            color=color,
            reason=reason,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    variant = "/".join(v for v in (size, color) if v) or "flat"
    click.echo(f"Stock for product {product_id} [{variant}] set to {quantity}")


@click.command("show")
@click.option("--product", "product_id", default=None, help="Only this product ID.")
def stock_show(product_id: str | None) -> None:
    """Show current stock levels."""
    handler = ShowStockHandler(stock_repo=stock_repository())

    try:
        lines = handler.handle(product_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not lines:
        click.echo("No stock records found.")
        return

    click.echo(f"{'ID':<6} {'Product':<20} {'Bucket':<16} {'Qty':>6}")
    click.echo("-" * 51)
    for line in lines:
        click.echo(
            f"{line.product_id:<6} {line.product_name:<20} {line.bucket:<16} {line.quantity:>6}"
        )
