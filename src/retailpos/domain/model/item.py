"""Item entity and its lifecycle state machine.

An Item is one stock batch: a quantity of a single item code sitting in
one lifecycle state with one expiry date. Stock intake creates an IN_STORE
batch; shelving splits units off into an ON_SHELF batch; selling draws
shelved units down until the batch is SOLD_OUT. EXPIRED is reachable from
any state once the expiry date has passed.

The complete transition table is kept in ``_TRANSITIONS`` below, keyed by
``(state, operation)``. A pair that is missing from the table is an illegal
transition.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Callable

from retailpos.domain.exceptions import (
    InsufficientStockError,
    InvalidStateTransitionError,
    ValidationError,
)
from retailpos.domain.model.value_objects import ItemCode, Money, Quantity

MAX_NAME_LENGTH = 100


class ItemState(Enum):
    IN_STORE = "IN_STORE"
    ON_SHELF = "ON_SHELF"
    EXPIRED = "EXPIRED"
    SOLD_OUT = "SOLD_OUT"


class ItemOperation(Enum):
    MOVE_TO_SHELF = "move to shelf"
    SELL = "sell"
    EXPIRE = "expire"


@dataclass
class Item:
    """A stock batch.

    Use ``Item.receive()`` for stock intake; the plain constructor is kept
    simple so repositories can reconstitute persisted rows as-is. Callers
    change a batch only through ``move_to_shelf``, ``sell``, ``expire`` and
    ``restock``.
    """

    code: ItemCode
    name: str
    price: Money
    quantity: Quantity
    state: ItemState = ItemState.IN_STORE
    purchase_date: date = field(default_factory=date.today)
    expiry_date: date | None = None
    id: int | None = None
    version: int = 0

    # --- Factory (stock intake) -----------------------------------------------

    @staticmethod
    def receive(
        code: str | ItemCode,
        name: str,
        price: Money,
        quantity: int,
        expiry_date: date | None = None,
        purchase_date: date | None = None,
    ) -> Item:
        """Create a new IN_STORE batch, enforcing intake rules."""
        item_code = code if isinstance(code, ItemCode) else ItemCode(code)

        if not name or not name.strip():
            raise ValidationError("Item name is required")
        if len(name.strip()) > MAX_NAME_LENGTH:
            raise ValidationError(f"Item name must be at most {MAX_NAME_LENGTH} characters")
        if price.amount <= 0:
            raise ValidationError("Item price must be greater than zero")
        _require_positive(quantity, "Stock quantity")

        return Item(
            code=item_code,
            name=name.strip(),
            price=price,
            quantity=Quantity(quantity),
            state=ItemState.IN_STORE,
            purchase_date=purchase_date or date.today(),
            expiry_date=expiry_date,
        )

    # --- Lifecycle operations -------------------------------------------------

    def move_to_shelf(self, amount: int, into: Item | None = None) -> Item:
        """Take *amount* units out of this store batch and shelve them.

        Returns the shelf batch that received the units: *into* when it is an
        ON_SHELF batch with the same code, price and expiry date, otherwise a
        new one.
        """
        _require_positive(amount, "Shelf quantity")
        return self._apply(ItemOperation.MOVE_TO_SHELF, amount, into)

    def sell(self, amount: int) -> None:
        _require_positive(amount, "Sale quantity")
        self._apply(ItemOperation.SELL, amount, None)

    def expire(self) -> None:
        self._apply(ItemOperation.EXPIRE, 0, None)

    def restock(self, amount: int) -> None:
        """Add units to a live batch (merging intake or shelving)."""
        _require_positive(amount, "Restock quantity")
        if self.state not in (ItemState.IN_STORE, ItemState.ON_SHELF):
            raise InvalidStateTransitionError(
                f"Cannot add stock to {self.code} in {self.state.value} state"
            )
        self.quantity = self.quantity.add(amount)

    def _apply(self, operation: ItemOperation, amount: int, into: Item | None):
        handler = _TRANSITIONS.get((self.state, operation))
        if handler is None:
            raise InvalidStateTransitionError(
                _REJECTIONS.get(
                    (self.state, operation),
                    f"Cannot {operation.value} {self.code} in {self.state.value} state",
                )
            )
        return handler(self, amount, into)

    # --- Expiry (evaluated at query time) -------------------------------------

    def days_until_expiry(self, today: date | None = None) -> int | None:
        if self.expiry_date is None:
            return None
        return (self.expiry_date - (today or date.today())).days

    def is_expired(self, today: date | None = None) -> bool:
        days = self.days_until_expiry(today)
        return days is not None and days < 0

    def is_expiring_soon(self, days_threshold: int, today: date | None = None) -> bool:
        days = self.days_until_expiry(today)
        return days is not None and days <= days_threshold

    def expiry_status(self, today: date | None = None) -> str:
        days = self.days_until_expiry(today)
        if days is None:
            return "No expiry"
        if days < 0:
            return "EXPIRED"
        if days == 0:
            return "Expires today"
        if days == 1:
            return "Expires tomorrow"
        if days <= 7:
            return f"Expires in {days} days"
        return f"Expires on {self.expiry_date.isoformat()}"

    def refresh_expiry(self, today: date | None = None) -> bool:
        """Expire the batch if its date has passed. Returns True on change."""
        if self.state is ItemState.EXPIRED or not self.is_expired(today):
            return False
        self.expire()
        return True

    # --- Computed properties --------------------------------------------------

    def available_quantity(self, today: date | None = None) -> int:
        """Units that can be sold right now."""
        if self.state is not ItemState.ON_SHELF or self.is_expired(today):
            return 0
        return self.quantity.value


@dataclass(frozen=True)
class StockLevel:
    """Unexpired units of one item code, summed over all of its batches."""

    code: ItemCode
    name: str
    on_shelf: int
    in_store: int

    @property
    def total(self) -> int:
        return self.on_shelf + self.in_store


# ---------------------------------------------------------------------------
# Transition table
# ---------------------------------------------------------------------------


def _require_positive(amount: int, label: str) -> None:
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise ValidationError(f"{label} must be an integer")
    if amount <= 0:
        raise ValidationError(f"{label} must be positive")


def _check_stock(item: Item, amount: int) -> None:
    if amount > item.quantity.value:
        raise InsufficientStockError(item.code.value, amount, item.quantity.value)


def _shelve(item: Item, amount: int, into: Item | None) -> Item:
    _check_stock(item, amount)
    if into is not None and not _can_merge(item, into):
        into = None
    item.quantity = item.quantity.subtract(amount)
    if into is not None:
        into.restock(amount)
        return into
    return Item(
        code=item.code,
        name=item.name,
        price=item.price,
        quantity=Quantity(amount),
        state=ItemState.ON_SHELF,
        purchase_date=item.purchase_date,
        expiry_date=item.expiry_date,
    )


def _can_merge(item: Item, shelf: Item) -> bool:
    return (
        shelf.state is ItemState.ON_SHELF
        and shelf.code == item.code
        and shelf.expiry_date == item.expiry_date
        and shelf.price == item.price
        and shelf is not item
    )


def _sell(item: Item, amount: int, _into: Item | None) -> None:
    _check_stock(item, amount)
    item.quantity = item.quantity.subtract(amount)
    if item.quantity.is_zero:
        item.state = ItemState.SOLD_OUT


def _expire(item: Item, _amount: int, _into: Item | None) -> None:
    item.state = ItemState.EXPIRED


def _already_expired(_item: Item, _amount: int, _into: Item | None) -> None:
    return None


_TRANSITIONS: dict[tuple[ItemState, ItemOperation], Callable[[Item, int, Item | None], object]] = {
    (ItemState.IN_STORE, ItemOperation.MOVE_TO_SHELF): _shelve,
    (ItemState.IN_STORE, ItemOperation.EXPIRE): _expire,
    (ItemState.ON_SHELF, ItemOperation.SELL): _sell,
    (ItemState.ON_SHELF, ItemOperation.EXPIRE): _expire,
    (ItemState.SOLD_OUT, ItemOperation.EXPIRE): _expire,
    (ItemState.EXPIRED, ItemOperation.EXPIRE): _already_expired,
}

_REJECTIONS: dict[tuple[ItemState, ItemOperation], str] = {
    (ItemState.IN_STORE, ItemOperation.SELL): "Cannot sell items directly from store",
    (ItemState.ON_SHELF, ItemOperation.MOVE_TO_SHELF): "Item is already on shelf",
    (ItemState.EXPIRED, ItemOperation.MOVE_TO_SHELF): "Cannot move expired items to shelf",
    (ItemState.EXPIRED, ItemOperation.SELL): "Cannot sell expired items",
    (ItemState.SOLD_OUT, ItemOperation.MOVE_TO_SHELF): "No items available to move",
    (ItemState.SOLD_OUT, ItemOperation.SELL): "Item is sold out",
}
