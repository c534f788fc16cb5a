"""Abstract repository (gateway) for Item stock batches.

Defined in the domain layer so the domain never depends on
infrastructure. The SQL implementation lives in the infrastructure layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from retailpos.domain.model.item import Item, ItemState, StockLevel


class ItemRepository(ABC):

    @abstractmethod
    def find_by_code(self, code: str, state: ItemState | None = None) -> Item | None:
        """Return the batch to act on for *code*, or None.

        Without *state*, shelved batches with stock win over other batches,
        earliest expiry first.
        """

    @abstractmethod
    def find_batches(self, code: str, state: ItemState | None = None) -> list[Item]:
        """Return every batch of *code*, in the same order as ``find_by_code``."""

    @abstractmethod
    def find_by_id(self, item_id: int) -> Item | None:
        """Return a batch by its id, or None."""

    @abstractmethod
    def find_all(self) -> list[Item]:
        """Return every batch ordered by name."""

    @abstractmethod
    def find_by_state(self, state: ItemState) -> list[Item]:
        """Return every batch currently in *state*."""

    @abstractmethod
    def find_low_stock(self, threshold: int) -> list[StockLevel]:
        """Return item codes whose unexpired units total less than *threshold*.

        Units are summed over the IN_STORE and ON_SHELF batches of each code;
        a code whose stock has all sold out or expired totals zero.
        """

    @abstractmethod
    def find_expiring_soon(self, days: int, today: date | None = None) -> list[Item]:
        """Return stocked batches whose expiry falls within *days* of today."""

    @abstractmethod
    def add(self, item: Item) -> Item:
        """Insert a new batch and assign its id."""

    @abstractmethod
    def update(self, item: Item) -> None:
        """Persist lifecycle changes to an existing batch."""
