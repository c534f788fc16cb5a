"""Application service: inventory intake, shelving and availability."""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable

from retailpos.domain.exceptions import (
    InvalidStateTransitionError,
    ItemNotFoundError,
    ValidationError,
)
from retailpos.domain.model.item import Item, ItemState
from retailpos.domain.model.value_objects import ItemCode, Money
from retailpos.domain.repository.item_repository import ItemRepository
from retailpos.domain.repository.transaction_scope import TransactionScope

logger = logging.getLogger(__name__)


class InventoryService:
    """Stock intake, shelving and availability lookups."""

    def __init__(
        self,
        item_repo: ItemRepository,
        transactions: TransactionScope,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._item_repo = item_repo
        self._transactions = transactions
        self._today = today

    def add_stock(
        self,
        code: str,
        name: str,
        price: Money | str,
        quantity: int,
        expiry_date: date | None = None,
    ) -> Item:
        """Receive stock into the store.

        Units join an existing IN_STORE batch when code, expiry date and
        price all match; otherwise a new batch is opened.
        """
        unit_price = price if isinstance(price, Money) else Money.of(price)
        if expiry_date is not None and expiry_date <= self._today():
            raise ValidationError("Expiry date must be in the future")
        incoming = Item.receive(
            code, name, unit_price, quantity,
            expiry_date=expiry_date, purchase_date=self._today(),
        )

        with self._transactions.transaction():
            existing = self._item_repo.find_batches(incoming.code.value)
            for batch in existing:
                if batch.name.lower() != incoming.name.lower():
                    raise ValidationError(
                        f"Item code {incoming.code} is already registered to '{batch.name}'"
                    )

            for batch in existing:
                if (
                    batch.state is ItemState.IN_STORE
                    and batch.expiry_date == incoming.expiry_date
                    and batch.price == incoming.price
                ):
                    batch.restock(quantity)
                    self._item_repo.update(batch)
                    logger.info("Restocked %s (+%d, now %s)", batch.code, quantity, batch.quantity)
                    return batch

            saved = self._item_repo.add(incoming)

        logger.info("Received new batch of %s: %d units", saved.code, quantity)
        return saved

    def move_to_shelf(self, code: str, quantity: int) -> Item:
        """Move *quantity* units from a store batch to the shelf.

        Store batches of *code* whose expiry date has passed are marked
        EXPIRED on the way, and that change is kept even when no live
        batch is left to shelve from. Returns the shelf batch that received
        the units.
        """
        item_code = ItemCode(code)
        today = self._today()
        result = None
        with self._transactions.transaction():
            live: list[Item] = []
            expired: list[Item] = []
            for batch in self._item_repo.find_batches(item_code.value, ItemState.IN_STORE):
                if batch.refresh_expiry(today):
                    self._item_repo.update(batch)
                    expired.append(batch)
                else:
                    live.append(batch)

            if live:
                store = live[0]
                shelf = self._matching_shelf_batch(store)
                result = store.move_to_shelf(quantity, into=shelf)
                self._item_repo.update(store)
                if result.id is None:
                    result = self._item_repo.add(result)
                else:
                    self._item_repo.update(result)

        for batch in expired:
            logger.info("Batch %s of %s expired on %s", batch.id, batch.code, batch.expiry_date)
        if result is None:
            if expired:
                raise InvalidStateTransitionError(
                    f"Cannot move expired items to shelf: store stock of {item_code} "
                    f"expired on {expired[0].expiry_date.isoformat()}"
                )
            raise ItemNotFoundError(f"No store stock found for item {item_code}")

        logger.info(
            "Moved %d x %s to shelf (%s left in store)", quantity, item_code, store.quantity,
        )
        return result

    def is_item_available(self, code: str) -> bool:
        item = self._item_repo.find_by_code(ItemCode(code).value)
        return item is not None and item.available_quantity(self._today()) > 0

    def get_available_items(self) -> list[Item]:
        today = self._today()
        return [
            item
            for item in self._item_repo.find_by_state(ItemState.ON_SHELF)
            if item.available_quantity(today) > 0
        ]

    def get_items_in_store(self) -> list[Item]:
        return [
            item
            for item in self._item_repo.find_by_state(ItemState.IN_STORE)
            if not item.quantity.is_zero
        ]

    def get_item(self, code: str) -> Item:
        item = self._item_repo.find_by_code(ItemCode(code).value)
        if item is None:
            raise ItemNotFoundError(f"Item with code {code.upper()} not found")
        return item

    def list_items(self) -> list[Item]:
        return self._item_repo.find_all()

    def expire_overdue(self, today: date | None = None) -> list[Item]:
        """Persist the EXPIRED state of every batch past its expiry date."""
        today = today or self._today()
        expired: list[Item] = []
        with self._transactions.transaction():
            for item in self._item_repo.find_all():
                if item.refresh_expiry(today):
                    self._item_repo.update(item)
                    expired.append(item)

        for item in expired:
            logger.info("Batch %s of %s expired on %s", item.id, item.code, item.expiry_date)
        return expired

    # --- Internal helpers -----------------------------------------------------

    def _matching_shelf_batch(self, store: Item) -> Item | None:
        for batch in self._item_repo.find_by_state(ItemState.ON_SHELF):
            if (
                batch.code == store.code
                and batch.expiry_date == store.expiry_date
                and batch.price == store.price
            ):
                return batch
        return None
