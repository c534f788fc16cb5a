"""Bill aggregate: the immutable record of a completed sale."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Protocol

from retailpos.domain.exceptions import (
    EmptySaleError,
    InsufficientPaymentError,
    ValidationError,
)
from retailpos.domain.model.item import Item
from retailpos.domain.model.value_objects import (
    BillNumber,
    ItemCode,
    Money,
    Quantity,
    UserId,
)

if TYPE_CHECKING:
    from retailpos.domain.visitor.bill_visitor import BillVisitor


class TransactionType(Enum):
    IN_STORE = "IN_STORE"
    ONLINE = "ONLINE"


@dataclass(frozen=True)
class BillItem:
    """One line of a bill.

    Quantity and unit price are frozen at the moment of sale, so later
    price changes on the item never alter historical bills. ``item_id``
    points at the batch the units came from and is not persisted.
    """

    item_code: ItemCode
    item_name: str
    quantity: Quantity
    unit_price: Money  # locked at sale time
    item_id: int | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if self.quantity.is_zero:
            raise ValidationError("Bill line quantity must be positive")

    @staticmethod
    def of(item: Item, quantity: int) -> BillItem:
        return BillItem(
            item_code=item.code,
            item_name=item.name,
            quantity=Quantity(quantity),
            unit_price=item.price,
            item_id=item.id,
        )

    @property
    def total_price(self) -> Money:
        return self.unit_price * self.quantity.value


class BillView(Protocol):
    """Read accessors shared by ``Bill`` and the views that wrap it."""

    @property
    def bill_number(self) -> BillNumber: ...

    @property
    def bill_date(self) -> datetime: ...

    @property
    def items(self) -> tuple[BillItem, ...]: ...

    @property
    def discount(self) -> Money: ...

    @property
    def cash_tendered(self) -> Money: ...

    @property
    def transaction_type(self) -> TransactionType: ...

    @property
    def cashier_id(self) -> UserId | None: ...

    @property
    def subtotal(self) -> Money: ...

    @property
    def final_amount(self) -> Money: ...

    @property
    def change(self) -> Money: ...

    def accept(self, visitor: BillVisitor) -> None: ...


@dataclass(frozen=True)
class Bill:
    """Aggregate root for completed sales.

    Use ``Bill.create()`` for new bills; it enforces the sale rules. The
    constructor reconstitutes persisted bills without re-validating them.
    Totals are derived from the line items and never stored on the object.
    """

    bill_number: BillNumber
    bill_date: datetime
    items: tuple[BillItem, ...]
    cash_tendered: Money
    discount: Money = field(default_factory=Money.zero)
    transaction_type: TransactionType = TransactionType.IN_STORE
    cashier_id: UserId | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))

    # --- Factory (used for NEW bills only) ------------------------------------

    @staticmethod
    def create(
        bill_number: BillNumber,
        items: list[BillItem] | tuple[BillItem, ...],
        cash_tendered: Money,
        discount: Money | None = None,
        bill_date: datetime | None = None,
        transaction_type: TransactionType = TransactionType.IN_STORE,
        cashier_id: UserId | None = None,
    ) -> Bill:
        if not items:
            raise EmptySaleError("Cannot create bill with no items")

        bill = Bill(
            bill_number=bill_number,
            bill_date=bill_date or datetime.now(),
            items=tuple(items),
            cash_tendered=cash_tendered,
            discount=discount or Money.zero(),
            transaction_type=transaction_type,
            cashier_id=cashier_id,
        )

        if bill.discount.is_negative:
            raise ValidationError("Discount cannot be negative")
        if bill.discount > bill.subtotal:
            raise ValidationError(
                f"Discount {bill.discount} exceeds subtotal {bill.subtotal}"
            )
        if bill.change.is_negative:
            raise InsufficientPaymentError(
                f"Cash tendered ({bill.cash_tendered}) is insufficient "
                f"for amount {bill.final_amount}"
            )
        return bill

    # --- Computed properties --------------------------------------------------

    @property
    def subtotal(self) -> Money:
        result = Money.zero()
        for item in self.items:
            result = result + item.total_price
        return result

    @property
    def total_amount(self) -> Money:
        return self.subtotal

    @property
    def final_amount(self) -> Money:
        return self.subtotal - self.discount

    @property
    def change(self) -> Money:
        return self.cash_tendered - self.final_amount

    @property
    def total_item_count(self) -> int:
        return sum(item.quantity.value for item in self.items)

    @property
    def has_discount(self) -> bool:
        return self.discount.amount > 0

    # --- Views ----------------------------------------------------------------

    def accept(self, visitor: BillVisitor) -> None:
        visitor.visit(self)

    def __str__(self) -> str:
        return (
            f"{self.bill_number} {self.bill_date:%Y-%m-%d %H:%M} "
            f"({len(self.items)} items, {self.final_amount})"
        )
