"""CLI commands for stock intake and shelving."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

import click

from retailpos.domain.model.item import Item, ItemState
from retailpos.infrastructure.cli.context import HANDLED_ERRORS, app_context


def _display_items(items: list[Item]) -> None:
    today = date.today()
    click.echo(
        f"  {'Code':<10} {'Name':<24} {'State':<9} {'Qty':>5} {'Price':>10}  Expiry"
    )
    click.echo(f"  {'-'*78}")
    for item in items:
        click.echo(
            f"  {item.code.value:<10} {item.name[:24]:<24} {item.state.value:<9} "
            f"{item.quantity.value:>5} {str(item.price):>10}  {item.expiry_status(today)}"
        )


@click.command("add")
@click.option("--code", required=True, help="Item code (4-10 letters or digits).")
@click.option("--name", required=True, help="Item name.")
@click.option("--price", required=True, help="Unit price, e.g. 2.50.")
@click.option("--quantity", required=True, type=int, help="Units received.")
@click.option(
    "--expiry",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Expiry date (YYYY-MM-DD).",
)
def stock_add(
    code: str, name: str, price: str, quantity: int, expiry: Optional[datetime]
) -> None:
    """Receive stock into the store."""
    inventory = app_context().inventory

    try:
        item = inventory.add_stock(
            code, name, price, quantity,
            expiry_date=expiry.date() if expiry else None,
        )
    except HANDLED_ERRORS as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Stock received: {item.code} {item.name}  (in store: {item.quantity})")


@click.command("shelve")
@click.option("--code", required=True, help="Item code to shelve.")
@click.option("--quantity", required=True, type=int, help="Units to move to the shelf.")
def stock_shelve(code: str, quantity: int) -> None:
    """Move units from the store to the shelf."""
    inventory = app_context().inventory

    try:
        shelf = inventory.move_to_shelf(code, quantity)
    except HANDLED_ERRORS as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Moved {quantity} x {shelf.code} to shelf  (on shelf: {shelf.quantity})")


@click.command("list")
@click.option(
    "--state",
    type=click.Choice([s.value for s in ItemState], case_sensitive=False),
    default=None,
    help="Only show batches in this state.",
)
def stock_list(state: Optional[str]) -> None:
    """List stock batches."""
    inventory = app_context().inventory

    try:
        items = inventory.list_items()
    except HANDLED_ERRORS as exc:
        raise click.ClickException(str(exc))

    if state:
        items = [item for item in items if item.state.value == state.upper()]
    if not items:
        click.echo("No stock found.")
        return
    _display_items(items)


@click.command("expire")
def stock_expire() -> None:
    """Mark every batch past its expiry date as EXPIRED."""
    inventory = app_context().inventory

    try:
        expired = inventory.expire_overdue()
    except HANDLED_ERRORS as exc:
        raise click.ClickException(str(exc))

    click.echo(f"{len(expired)} batch(es) expired.")
    if expired:
        _display_items(expired)
