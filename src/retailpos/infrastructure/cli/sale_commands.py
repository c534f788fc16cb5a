"""CLI commands for ringing up sales."""

from __future__ import annotations

from typing import Optional

import click

from retailpos.application.dto import SaleLineSpec
from retailpos.application.visitors.receipt_printer import ReceiptPrinter
from retailpos.domain.model.value_objects import Money, UserId
from retailpos.infrastructure.cli.context import HANDLED_ERRORS, app_context


def _parse_items(raw: str) -> list[SaleLineSpec]:
    """Parse 'MILK001:2,BREAD01:1' into SaleLineSpec list."""
    specs: list[SaleLineSpec] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'CODE:Quantity'."
            )
        code, qty_str = pair.rsplit(":", 1)
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for item '{code}'."
            )
        specs.append(SaleLineSpec(item_code=code.strip(), quantity=qty))
    return specs


@click.command("create")
@click.option("--items", required=True, help="Items as 'CODE:Qty,CODE:Qty'.")
@click.option("--cash", required=True, help="Cash tendered, e.g. 20.00.")
@click.option("--cashier", type=int, default=None, help="Cashier user id.")
@click.option("--email", default=None, help="Customer email (online orders).")
@click.option("--address", default=None, help="Delivery address (online orders).")
def sale_create(
    items: str,
    cash: str,
    cashier: Optional[int],
    email: Optional[str],
    address: Optional[str],
) -> None:
    """Ring up a sale and print the receipt."""
    specs = _parse_items(items)
    if (email is None) != (address is None):
        raise click.ClickException("Online orders need both --email and --address")

    sales = app_context().sales

    try:
        builder = sales.start_new_sale()
        for spec in specs:
            builder.add_item(spec.item_code, spec.quantity)
        bill = builder.complete_sale(
            Money.of(cash),
            cashier_id=UserId(cashier) if cashier is not None else None,
        )
        if email is not None:
            saved = sales.save_online_order(bill, email, address)
        else:
            saved = sales.save_bill(bill)
    except HANDLED_ERRORS as exc:
        raise click.ClickException(str(exc))

    printer = ReceiptPrinter()
    saved.accept(printer)
    click.echo(printer.output, nl=False)
