"""Visitor that accumulates sales statistics across many bills."""

from __future__ import annotations

from collections import Counter
from decimal import ROUND_HALF_UP, Decimal

from retailpos.domain.model.bill import BillView, TransactionType
from retailpos.domain.model.value_objects import Money
from retailpos.domain.visitor.bill_visitor import BillVisitor


class BillStatisticsVisitor(BillVisitor):
    """Running totals over every bill visited so far.

    Revenue counts the final (post-discount) amount of each bill; item
    frequency counts units sold per item name.
    """

    def __init__(self) -> None:
        self.bill_count = 0
        self.online_count = 0
        self.total_revenue = Money.zero()
        self.total_discount = Money.zero()
        self._item_frequency: Counter[str] = Counter()

    def visit(self, bill: BillView) -> None:
        self.bill_count += 1
        if bill.transaction_type is TransactionType.ONLINE:
            self.online_count += 1
        self.total_revenue = self.total_revenue + bill.final_amount
        self.total_discount = self.total_discount + bill.discount
        for item in bill.items:
            self._item_frequency[item.item_name] += item.quantity.value

    @property
    def average_transaction(self) -> Money:
        if self.bill_count == 0:
            return Money.zero()
        average = (self.total_revenue.amount / Decimal(self.bill_count)).quantize(
            Decimal("0.01"), rounding=ROUND_HALF_UP
        )
        return Money(average)

    @property
    def item_frequency(self) -> dict[str, int]:
        return dict(self._item_frequency)

    @property
    def most_popular_item(self) -> str:
        if not self._item_frequency:
            return "N/A"
        return self._item_frequency.most_common(1)[0][0]
