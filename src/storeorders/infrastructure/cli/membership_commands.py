"""CLI commands for membership."""

from __future__ import annotations

import click

from storeorders.application.membership_summary import MembershipSummaryHandler
from storeorders.infrastructure.bootstrap import order_repository


@click.command("show")
@click.option("--user", "user_id", required=True, help="Customer user id.")
def membership_show(user_id: str) -> None:
    """Show a customer's grade, spend and points."""
    dto = MembershipSummaryHandler(order_repo=order_repository()).handle(user_id)

    click.echo(f"User:    {dto.user_id}")
    click.echo(f"Grade:   {dto.grade} ({dto.grade_name}, {dto.discount_rate}% points)")
    click.echo(f"Spent:   {dto.total_spent}")
    click.echo(f"Points:  {dto.points}")
    if dto.next_grade:
        click.echo(
            f"Next:    {dto.next_grade} in {dto.remaining_to_next} ({dto.progress}%)"
        )
    else:
        click.echo("Next:    top grade reached")
