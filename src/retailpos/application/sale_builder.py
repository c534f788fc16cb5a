"""Incremental assembly of a sale before it becomes a Bill.

The builder only reads inventory. Nothing is reserved or deducted until the
finished bill is handed to ``SalesService.save_bill``, so a sale can be
abandoned at any point without side effects.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable

from retailpos.domain.exceptions import (
    EmptySaleError,
    InsufficientStockError,
    ItemNotFoundError,
    ValidationError,
)
from retailpos.domain.model.bill import Bill, BillItem, TransactionType
from retailpos.domain.model.value_objects import BillNumber, ItemCode, Money, UserId
from retailpos.domain.repository.item_repository import ItemRepository


class SaleBuilder:
    """Collects bill lines for one sale, checking shelf stock as it goes.

    A code's shelved stock may sit in several batches. A requested quantity
    is drawn from them earliest expiry first and may become several lines,
    each pointing at the batch its units come from.
    """

    def __init__(
        self,
        item_repo: ItemRepository,
        next_bill_number: Callable[[], int],
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._item_repo = item_repo
        self._next_bill_number = next_bill_number
        self._clock = clock
        self._items: list[BillItem] = []
        self._subtotal = Money.zero()

    def add_item(self, code: str, quantity: int) -> SaleBuilder:
        """Add *quantity* units of *code* at each batch's current price.

        Units of the code already in this sale count against the available
        quantity.
        """
        item_code = ItemCode(code)
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
            raise ValidationError("Sale quantity must be a positive integer")

        batches = self._item_repo.find_batches(item_code.value)
        if not batches:
            raise ItemNotFoundError(f"Item with code {item_code} not found")

        today = self._clock().date()
        room = []
        for batch in batches:
            free = batch.available_quantity(today) - self._quantity_in_sale(batch.id)
            if free > 0:
                room.append((batch, free))

        available = sum(free for _, free in room)
        if quantity > available:
            raise InsufficientStockError(item_code.value, quantity, available)

        remaining = quantity
        for batch, free in room:
            taken = min(free, remaining)
            line = BillItem.of(batch, taken)
            self._items.append(line)
            self._subtotal = self._subtotal + line.total_price
            remaining -= taken
            if not remaining:
                break
        return self

    @property
    def subtotal(self) -> Money:
        return self._subtotal

    @property
    def items(self) -> tuple[BillItem, ...]:
        return tuple(self._items)

    @property
    def is_empty(self) -> bool:
        return not self._items

    def complete_sale(
        self,
        cash_tendered: Money,
        cashier_id: UserId | None = None,
    ) -> Bill:
        """Freeze the working set into an immutable in-store Bill."""
        if not self._items:
            raise EmptySaleError("Cannot complete sale with no items")

        return Bill.create(
            bill_number=BillNumber(self._next_bill_number()),
            items=self._items,
            cash_tendered=cash_tendered,
            discount=Money.zero(),
            bill_date=self._clock(),
            transaction_type=TransactionType.IN_STORE,
            cashier_id=cashier_id,
        )

    def _quantity_in_sale(self, item_id: int | None) -> int:
        return sum(
            line.quantity.value for line in self._items if line.item_id == item_id
        )
