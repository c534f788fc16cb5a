"""CLI commands for looking up saved bills."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

import click

from retailpos.application.visitors.receipt_printer import ReceiptPrinter
from retailpos.infrastructure.cli.context import HANDLED_ERRORS, app_context


@click.command("list")
@click.option(
    "--date",
    "day",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Day to list (YYYY-MM-DD). Defaults to today.",
)
def bill_list(day: Optional[datetime]) -> None:
    """List the bills of one day."""
    sales = app_context().sales
    target = day.date() if day else date.today()

    try:
        bills = sales.bills_for_date(target)
    except HANDLED_ERRORS as exc:
        raise click.ClickException(str(exc))

    if not bills:
        click.echo(f"No bills on {target.isoformat()}.")
        return

    click.echo(f"  {'Bill':<12} {'Time':<8} {'Type':<9} {'Items':>5} {'Total':>12}")
    click.echo(f"  {'-'*50}")
    for b in bills:
        click.echo(
            f"  {str(b.bill_number):<12} {b.bill_date:%H:%M:%S} {b.transaction_type.value:<9} "
            f"{b.total_item_count:>5} {str(b.final_amount):>12}"
        )


@click.command("show")
@click.option("--number", required=True, type=int, help="Bill number to display.")
def bill_show(number: int) -> None:
    """Reprint the receipt of a saved bill."""
    sales = app_context().sales

    try:
        found = sales.find_bill(number)
    except HANDLED_ERRORS as exc:
        raise click.ClickException(str(exc))

    if found is None:
        raise click.ClickException(f"Bill {number} not found")

    printer = ReceiptPrinter()
    found.accept(printer)
    click.echo(printer.output, nl=False)
