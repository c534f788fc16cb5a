"""In-memory fake repositories for testing.

These implement the same abstract interfaces as the SQL repositories
but keep everything in a dict. No database, no side effects. Entities are
copied on the way in and out, so a caller only changes stored state
through ``add``/``update``, just like with a real database.
"""

from __future__ import annotations

import copy
import dataclasses
from contextlib import contextmanager
from datetime import date, timedelta
from typing import Iterator

from retailpos.domain.model.bill import Bill
from retailpos.domain.model.item import Item, ItemState, StockLevel
from retailpos.domain.model.value_objects import BillNumber
from retailpos.domain.repository.bill_repository import BillRepository
from retailpos.domain.repository.item_repository import ItemRepository
from retailpos.infrastructure.persistence.exceptions import ConcurrencyError


class FakeItemRepository(ItemRepository):

    def __init__(self, items: list[Item] | None = None, today: date | None = None) -> None:
        self._store: dict[int, Item] = {}
        self._next_id = 1
        self._today = today or date.today()
        for item in items or []:
            self.add(item)

    def find_by_code(self, code: str, state: ItemState | None = None) -> Item | None:
        batches = self.find_batches(code, state)
        return batches[0] if batches else None

    def find_batches(self, code: str, state: ItemState | None = None) -> list[Item]:
        candidates = [
            item for item in self._store.values()
            if item.code.value == code.upper() and (state is None or item.state is state)
        ]
        return self._copies(sorted(candidates, key=self._preference))

    def find_by_id(self, item_id: int) -> Item | None:
        item = self._store.get(item_id)
        return copy.deepcopy(item) if item else None

    def find_all(self) -> list[Item]:
        return self._copies(sorted(self._store.values(), key=lambda i: (i.name, i.id)))

    def find_by_state(self, state: ItemState) -> list[Item]:
        return [item for item in self.find_all() if item.state is state]

    def find_low_stock(self, threshold: int) -> list[StockLevel]:
        totals: dict[str, dict] = {}
        for item in sorted(self._store.values(), key=lambda i: i.id):
            level = totals.setdefault(
                item.code.value,
                {"code": item.code, "name": item.name, "on_shelf": 0, "in_store": 0},
            )
            if item.is_expired(self._today):
                continue
            if item.state is ItemState.ON_SHELF:
                level["on_shelf"] += item.quantity.value
            elif item.state is ItemState.IN_STORE:
                level["in_store"] += item.quantity.value
        low = [StockLevel(**level) for level in totals.values()]
        return sorted(
            (level for level in low if level.total < threshold),
            key=lambda l: (l.total, l.name, l.code.value),
        )

    def find_expiring_soon(self, days: int, today: date | None = None) -> list[Item]:
        start = today or self._today
        end = start + timedelta(days=days)
        soon = [
            item for item in self._store.values()
            if item.expiry_date is not None
            and start <= item.expiry_date <= end
            and item.state in (ItemState.IN_STORE, ItemState.ON_SHELF)
            and not item.quantity.is_zero
        ]
        return self._copies(sorted(soon, key=lambda i: (i.expiry_date, i.name, i.id)))

    def add(self, item: Item) -> Item:
        item.id = self._next_id
        item.version = 0
        self._next_id += 1
        self._store[item.id] = copy.deepcopy(item)
        return item

    def update(self, item: Item) -> None:
        stored = self._store.get(item.id)
        if stored is None or stored.version != item.version:
            raise ConcurrencyError(f"Item batch {item.id} was modified")
        item.version += 1
        self._store[item.id] = copy.deepcopy(item)

    # --- Test helpers ---------------------------------------------------------

    def stored(self, item_id: int) -> Item:
        return self._store[item_id]

    def snapshot(self) -> object:
        return copy.deepcopy((self._store, self._next_id))

    def restore(self, snapshot: object) -> None:
        self._store, self._next_id = snapshot

    def _preference(self, item: Item) -> tuple:
        sellable = item.available_quantity(self._today) > 0
        return (
            not sellable,
            item.quantity.is_zero,
            item.expiry_date is None,
            item.expiry_date or date.max,
            item.id,
        )

    @staticmethod
    def _copies(items: list[Item]) -> list[Item]:
        return [copy.deepcopy(item) for item in items]


class FakeBillRepository(BillRepository):

    def __init__(self) -> None:
        self._store: dict[int, Bill] = {}
        self._next_number = 1

    def next_bill_number(self) -> int:
        return self._next_number

    def save_bill_with_items(self, bill: Bill) -> Bill:
        saved = dataclasses.replace(bill, bill_number=BillNumber(self._next_number))
        self._store[self._next_number] = saved
        self._next_number += 1
        return saved

    def find_by_number(self, bill_number: int) -> Bill | None:
        return self._store.get(bill_number)

    def find_by_date(self, day: date) -> list[Bill]:
        return self.find_by_date_range(day, day)

    def find_by_date_range(self, start: date, end: date) -> list[Bill]:
        return [
            bill for number, bill in sorted(self._store.items())
            if start <= bill.bill_date.date() <= end
        ]

    def find_all(self) -> list[Bill]:
        return sorted(
            self._store.values(),
            key=lambda b: (b.bill_date, b.bill_number.value),
            reverse=True,
        )

    def snapshot(self) -> object:
        return (dict(self._store), self._next_number)

    def restore(self, snapshot: object) -> None:
        self._store, self._next_number = snapshot


class FakeTransactionManager:
    """Unit of work over fake repositories.

    Snapshots every repository when the outermost transaction opens and
    restores them if the block raises.
    """

    def __init__(self, *repos) -> None:
        self._repos = repos
        self._depth = 0
        self.commits = 0
        self.rollbacks = 0

    @contextmanager
    def transaction(self) -> Iterator[None]:
        if self._depth:
            self._depth += 1
            try:
                yield None
            finally:
                self._depth -= 1
            return

        snapshots = [repo.snapshot() for repo in self._repos]
        self._depth = 1
        try:
            yield None
        except BaseException:
            for repo, snapshot in zip(self._repos, snapshots):
                repo.restore(snapshot)
            self.rollbacks += 1
            raise
        else:
            self.commits += 1
        finally:
            self._depth = 0
