"""Application service: sales.

Starts sales, and commits finished bills. Saving a bill writes the bill
header, its lines and the stock deduction for every line inside ONE
transaction: if any batch cannot be drawn down (stale row, not enough
stock, expired) the bill is rolled back with it, so bill history never runs
ahead of stock.
"""

from __future__ import annotations

import dataclasses
import logging
from datetime import date, datetime
from typing import Callable

from retailpos.application.sale_builder import SaleBuilder
from retailpos.domain.exceptions import ItemNotFoundError
from retailpos.domain.model.bill import Bill, BillItem, TransactionType
from retailpos.domain.model.item import Item
from retailpos.domain.model.online_order import OnlineOrderBill
from retailpos.domain.repository.bill_repository import BillRepository
from retailpos.domain.repository.item_repository import ItemRepository
from retailpos.domain.repository.transaction_scope import TransactionScope

logger = logging.getLogger(__name__)


class SalesService:
    """Starts sales and commits finished bills against stock."""

    def __init__(
        self,
        bill_repo: BillRepository,
        item_repo: ItemRepository,
        transactions: TransactionScope,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._bill_repo = bill_repo
        self._item_repo = item_repo
        self._transactions = transactions
        self._clock = clock

    def start_new_sale(self) -> SaleBuilder:
        return SaleBuilder(
            item_repo=self._item_repo,
            next_bill_number=self._bill_repo.next_bill_number,
            clock=self._clock,
        )

    def save_bill(self, bill: Bill) -> Bill:
        """Persist *bill* and deduct its quantities from stock atomically.

        Returns the stored bill, which carries the number the database
        assigned.
        """
        with self._transactions.transaction():
            saved = self._bill_repo.save_bill_with_items(bill)
            for line in bill.items:
                item = self._source_batch(line)
                item.sell(line.quantity.value)
                self._item_repo.update(item)

        logger.info(
            "Saved %s: %d lines, total %s",
            saved.bill_number, len(saved.items), saved.final_amount,
        )
        return saved

    def save_online_order(
        self,
        bill: Bill,
        customer_email: str,
        delivery_address: str,
    ) -> OnlineOrderBill:
        """Save *bill* as an online sale and wrap it with shipping details.

        The details are validated before anything is written.
        """
        order = OnlineOrderBill(bill, customer_email, delivery_address)
        saved = self.save_bill(
            dataclasses.replace(bill, transaction_type=TransactionType.ONLINE)
        )
        return OnlineOrderBill(saved, order.customer_email, order.delivery_address)

    def bills_for_date(self, day: date) -> list[Bill]:
        return self._bill_repo.find_by_date(day)

    def bills_for_today(self) -> list[Bill]:
        return self.bills_for_date(self._clock().date())

    def find_bill(self, bill_number: int) -> Bill | None:
        return self._bill_repo.find_by_number(bill_number)

    # --- Internal helpers -----------------------------------------------------

    def _source_batch(self, line: BillItem) -> Item:
        item = None
        if line.item_id is not None:
            item = self._item_repo.find_by_id(line.item_id)
        if item is None:
            item = self._item_repo.find_by_code(line.item_code.value)
        if item is None:
            raise ItemNotFoundError(f"Item with code {line.item_code} not found")
        item.refresh_expiry(self._clock().date())
        return item
