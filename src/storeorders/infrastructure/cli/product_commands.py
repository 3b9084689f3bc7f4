"""CLI commands for products and coupons."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import click

from storeorders.application.add_product import AddProductHandler
from storeorders.application.issue_coupon import IssueCouponHandler
from storeorders.domain.exceptions import DomainException
from storeorders.domain.model.coupon import DiscountType
from storeorders.domain.model.value_objects import Money
from storeorders.infrastructure.bootstrap import coupon_repository, product_repository


@click.command("add")
@click.option("--name", required=True, help="Product name.")
@click.option("--price", required=True, help="Price in won (e.g. 39000).")
@click.option("--category", default="", help="Category label.")
@click.option("--image", default="", help="Image URL.")
def product_add(name: str, price: str, category: str, image: str) -> None:
    """Add a new product to the catalog."""
    handler = AddProductHandler(product_repo=product_repository())

    try:
        product = handler.handle(name=name, price=price, category=category, image=image)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product #{product.id} '{product.name}' added at {product.price}")


@click.command("list")
def product_list() -> None:
    """List all products in the catalog."""
    repo = product_repository()
    products = repo.list_all()

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<6} {'Name':<20} {'Price':>12}")
    click.echo("-" * 40)
    for p in products:
        click.echo(f"{p.id:<6} {p.name:<20} {str(p.price):>12}")


@click.command("issue")
@click.option("--user", "user_id", required=True, help="Customer user id.")
@click.option("--title", required=True, help="Coupon title.")
@click.option(
    "--type",
    "discount_type",
    type=click.Choice([t.value for t in DiscountType]),
    required=True,
    help="Discount type.",
)
@click.option("--value", required=True, type=int, help="Percent, or amount in won.")
@click.option("--min-purchase", default="0", show_default=True, help="Minimum subtotal.")
@click.option("--days", default=30, show_default=True, type=int, help="Days until expiry.")
def coupon_issue(
    user_id: str,
    title: str,
    discount_type: str,
    value: int,
    min_purchase: str,
    days: int,
) -> None:
    """Issue a single-use coupon to a customer."""
    handler = IssueCouponHandler(coupon_repo=coupon_repository())

    try:
        coupon = handler.handle(
            user_id=user_id,
            title=title,
            discount_type=DiscountType(discount_type),
            discount_value=value,
            min_purchase=min_purchase,
            expires_at=datetime.now(timezone.utc) + timedelta(days=days),
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Coupon {coupon.id} '{coupon.title}' issued to {coupon.user_id}")


@click.command("list")
@click.option("--user", "user_id", required=True, help="Customer user id.")
def coupon_list(user_id: str) -> None:
    """List a customer's coupons."""
    coupons = coupon_repository().list_by_user(user_id)

    if not coupons:
        click.echo("No coupons found.")
        return

    click.echo(f"{'ID':<14} {'Title':<20} {'Discount':>10} {'Min':>10} {'Expires':<12} {'Used':<4}")
    click.echo("-" * 75)
    for c in coupons:
        discount = (
            f"{c.discount_value}%"
            if c.discount_type == DiscountType.PERCENTAGE
            else str(Money.of(c.discount_value, c.min_purchase.currency))
        )
        click.echo(
            f"{c.id:<14} {c.title:<20} {discount:>10} {str(c.min_purchase):>10} "
            f"{c.expires_at:%Y-%m-%d}   {'yes' if c.is_used else 'no':<4}"
        )
