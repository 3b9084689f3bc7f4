import click

from storeorders.infrastructure.cli.membership_commands import membership_show
from storeorders.infrastructure.cli.order_commands import (
    order_cancel,
    order_create,
    order_delete,
    order_export,
    order_list,
    order_memo,
    order_quote,
    order_show,
    order_status,
)
from storeorders.infrastructure.cli.product_commands import (
    coupon_issue,
    coupon_list,
    product_add,
    product_list,
)
from storeorders.infrastructure.cli.stock_commands import stock_set, stock_show
from storeorders.infrastructure.config import get_settings
from storeorders.infrastructure.logging import setup_logging


@click.group()
@click.option("--log-level", default=None, help="Override STOREORDERS_LOG_LEVEL.")
def cli(log_level: str | None) -> None:
    """storeorders — inventory-aware order engine"""
    setup_logging(log_level or get_settings().log_level)


@cli.group()
def order() -> None:
    """Place and manage orders."""


@cli.group()
def product() -> None:
    """Manage products."""


@cli.group()
def stock() -> None:
    """Manage stock levels."""


@cli.group()
def coupon() -> None:
    """Manage coupons."""


@cli.group()
def membership() -> None:
    """Membership tiers and points."""


# Register subcommands
order.add_command(order_cancel)
order.add_command(order_create)
order.add_command(order_delete)
order.add_command(order_export)
order.add_command(order_list)
order.add_command(order_memo)
order.add_command(order_quote)
order.add_command(order_show)
order.add_command(order_status)
product.add_command(product_add)
product.add_command(product_list)
stock.add_command(stock_set)
stock.add_command(stock_show)
coupon.add_command(coupon_issue)
coupon.add_command(coupon_list)
membership.add_command(membership_show)
