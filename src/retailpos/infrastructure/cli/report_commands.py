"""CLI commands for sales and stock reports."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

import click

from retailpos.application.report_service import REORDER_THRESHOLD, RESHELVE_DAYS
from retailpos.infrastructure.cli.context import HANDLED_ERRORS, app_context

_DATE_OPTION = click.option(
    "--date",
    "day",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Report day (YYYY-MM-DD). Defaults to today.",
)


@click.command("daily")
@_DATE_OPTION
def report_daily(day: Optional[datetime]) -> None:
    """Units and revenue per item for one day."""
    reports = app_context().reports

    try:
        dto = reports.daily_sales(day.date() if day else None)
    except HANDLED_ERRORS as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Daily sales for {dto.day.isoformat()}")
    click.echo()
    click.echo(f"  {'Code':<10} {'Name':<24} {'Qty':>5} {'Revenue':>12}")
    click.echo(f"  {'-'*54}")
    for line in dto.lines:
        click.echo(
            f"  {line.item_code:<10} {line.item_name[:24]:<24} {line.quantity:>5} {line.revenue:>12}"
        )
    click.echo(f"  {'-'*54}")
    click.echo(f"  Transactions: {dto.transactions}")
    click.echo(f"  Items sold:   {dto.items_sold}")
    click.echo(f"  Revenue:      {dto.revenue}")


@click.command("stock")
def report_stock() -> None:
    """Stock on hand grouped by lifecycle state."""
    reports = app_context().reports

    try:
        dto = reports.stock_summary()
    except HANDLED_ERRORS as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Item types: {dto.item_types}   Total units: {dto.total_quantity}")
    for state, count in dto.by_state.items():
        click.echo(f"  {state:<9} {count:>4} batch(es)")
    click.echo()
    click.echo(f"  {'Code':<10} {'Name':<24} {'State':<9} {'Qty':>5} {'Price':>10}  Expiry")
    click.echo(f"  {'-'*78}")
    for line in dto.lines:
        click.echo(
            f"  {line.item_code:<10} {line.item_name[:24]:<24} {line.state:<9} "
            f"{line.quantity:>5} {line.price:>10}  {line.expiry}"
        )


@click.command("reorder")
@click.option(
    "--threshold", type=int, default=REORDER_THRESHOLD, show_default=True,
    help="Flag item codes holding fewer units than this.",
)
def report_reorder(threshold: int) -> None:
    """Item codes running low on stock."""
    reports = app_context().reports

    try:
        lines = reports.reorder(threshold)
    except HANDLED_ERRORS as exc:
        raise click.ClickException(str(exc))

    if not lines:
        click.echo(f"No items below {threshold} units.")
        return
    click.echo(f"  {'Code':<10} {'Name':<24} {'Shelf':>6} {'Store':>6} {'Total':>6} {'Short':>6}")
    click.echo(f"  {'-'*63}")
    for line in lines:
        click.echo(
            f"  {line.item_code:<10} {line.item_name[:24]:<24} {line.on_shelf:>6} "
            f"{line.in_store:>6} {line.quantity:>6} {line.shortfall:>6}"
        )


@click.command("reshelve")
@click.option(
    "--days", type=int, default=RESHELVE_DAYS, show_default=True,
    help="Look this many days ahead.",
)
def report_reshelve(days: int) -> None:
    """Batches close to expiry, most urgent first."""
    reports = app_context().reports

    try:
        lines = reports.reshelve(days)
    except HANDLED_ERRORS as exc:
        raise click.ClickException(str(exc))

    if not lines:
        click.echo(f"Nothing expires within {days} days.")
        return
    click.echo(f"  {'Code':<10} {'Name':<24} {'Qty':>5} {'Days':>5}  {'Urgency':<9} Action")
    click.echo(f"  {'-'*70}")
    for line in lines:
        click.echo(
            f"  {line.item_code:<10} {line.item_name[:24]:<24} {line.quantity:>5} "
            f"{line.days_until_expiry:>5}  {line.urgency:<9} {line.action}"
        )


@click.command("stats")
@_DATE_OPTION
def report_stats(day: Optional[datetime]) -> None:
    """Bill statistics for one day."""
    reports = app_context().reports

    try:
        dto = reports.statistics(day.date() if day else None)
    except HANDLED_ERRORS as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Statistics for {dto.day.isoformat()}")
    click.echo(f"  Bills:               {dto.bill_count} ({dto.online_count} online)")
    click.echo(f"  Revenue:             {dto.total_revenue}")
    click.echo(f"  Discounts:           {dto.total_discount}")
    click.echo(f"  Average transaction: {dto.average_transaction}")
    click.echo(f"  Most popular item:   {dto.most_popular_item}")
