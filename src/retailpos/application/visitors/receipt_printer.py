"""Visitor that renders a customer receipt."""

from __future__ import annotations

from retailpos.domain.model.bill import BillView
from retailpos.domain.visitor.bill_visitor import BillVisitor

WIDTH = 60
STORE_NAME = "RETAIL OUTLET STORE"


class ReceiptPrinter(BillVisitor):
    """Formats the most recently visited bill as receipt text."""

    def __init__(self, store_name: str = STORE_NAME) -> None:
        self._store_name = store_name
        self._lines: list[str] = []

    def visit(self, bill: BillView) -> None:
        lines = [
            "=" * WIDTH,
            self._store_name.center(WIDTH).rstrip(),
            "SALES RECEIPT".center(WIDTH).rstrip(),
            "=" * WIDTH,
            f"Bill No: {bill.bill_number}",
            f"Date: {bill.bill_date:%Y-%m-%d %H:%M:%S}",
            f"Transaction Type: {bill.transaction_type.value}",
        ]
        if bill.cashier_id is not None:
            lines.append(f"Cashier: {bill.cashier_id}")
        lines += [
            "-" * WIDTH,
            f"{'Item':<30} {'Qty':>5} {'Price':>10} {'Total':>11}",
            "-" * WIDTH,
        ]
        for item in bill.items:
            lines.append(
                f"{_truncate(item.item_name, 30):<30} {item.quantity.value:>5} "
                f"{str(item.unit_price):>10} {str(item.total_price):>11}"
            )
        lines.append("-" * WIDTH)

        lines.append(_total_line("Subtotal:", bill.subtotal))
        if bill.discount.amount > 0:
            lines.append(_total_line("Discount:", bill.discount))
            lines.append(_total_line("Total:", bill.final_amount))
        lines.append(_total_line("Cash Tendered:", bill.cash_tendered))
        lines.append(_total_line("Change:", bill.change))

        tracking = getattr(bill, "tracking_number", None)
        if tracking is not None:
            lines += [
                "-" * WIDTH,
                f"Tracking No: {tracking}",
                f"Deliver to: {bill.delivery_address}",
                f"Estimated Delivery: {bill.estimated_delivery:%Y-%m-%d}",
            ]

        lines += [
            "=" * WIDTH,
            "Thank you for shopping with us!".center(WIDTH).rstrip(),
            "=" * WIDTH,
        ]
        self._lines = lines

    @property
    def output(self) -> str:
        return "\n".join(self._lines) + ("\n" if self._lines else "")


def _total_line(label: str, amount) -> str:
    return f"{label:<40} {str(amount):>19}"


def _truncate(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."
