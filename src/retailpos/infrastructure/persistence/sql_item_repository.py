"""SQLite-backed implementation of ItemRepository."""

from __future__ import annotations

import sqlite3
from datetime import date, timedelta
from decimal import Decimal
from typing import Callable

from retailpos.domain.model.item import Item, ItemState, StockLevel
from retailpos.domain.model.value_objects import ItemCode, Money, Quantity
from retailpos.domain.repository.item_repository import ItemRepository
from retailpos.infrastructure.persistence.exceptions import ConcurrencyError
from retailpos.infrastructure.persistence.transaction import TransactionManager

_COLUMNS = "id, code, name, price, quantity, state, purchase_date, expiry_date, version"

# Sellable shelf stock first, then the batch that expires soonest.
_PREFERENCE_ORDER = """
    ORDER BY (state = 'ON_SHELF' AND quantity > 0
              AND (expiry_date IS NULL OR expiry_date >= :today)) DESC,
             quantity > 0 DESC, expiry_date IS NULL, expiry_date, id
"""

# Lapsed batches count as empty even before their state is refreshed.
_LOW_STOCK_QUERY = """
    SELECT code, name, on_shelf, in_store FROM (
        SELECT code, MIN(name) AS name,
               SUM(CASE WHEN state = 'ON_SHELF'
                         AND (expiry_date IS NULL OR expiry_date >= :today)
                        THEN quantity ELSE 0 END) AS on_shelf,
               SUM(CASE WHEN state = 'IN_STORE'
                         AND (expiry_date IS NULL OR expiry_date >= :today)
                        THEN quantity ELSE 0 END) AS in_store
        FROM items
        GROUP BY code
    )
    WHERE on_shelf + in_store < :threshold
    ORDER BY on_shelf + in_store, name, code
"""


class SqlItemRepository(ItemRepository):

    def __init__(
        self,
        transactions: TransactionManager,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._tx = transactions
        self._today = today

    # --- ItemRepository interface ---------------------------------------------

    def find_by_code(self, code: str, state: ItemState | None = None) -> Item | None:
        batches = self._batches(code, state, limit=1)
        return batches[0] if batches else None

    def find_batches(self, code: str, state: ItemState | None = None) -> list[Item]:
        return self._batches(code, state)

    def find_by_id(self, item_id: int) -> Item | None:
        with self._tx.connection() as conn:
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM items WHERE id = ?", (item_id,)
            ).fetchone()
        return self._to_domain(row) if row else None

    def find_all(self) -> list[Item]:
        return self._query(f"SELECT {_COLUMNS} FROM items ORDER BY name, id")

    def find_by_state(self, state: ItemState) -> list[Item]:
        return self._query(
            f"SELECT {_COLUMNS} FROM items WHERE state = ? ORDER BY name, id",
            (state.value,),
        )

    def find_low_stock(self, threshold: int) -> list[StockLevel]:
        with self._tx.connection() as conn:
            rows = conn.execute(
                _LOW_STOCK_QUERY,
                {"threshold": threshold, "today": self._today().isoformat()},
            ).fetchall()
        return [
            StockLevel(
                code=ItemCode(row["code"]),
                name=row["name"],
                on_shelf=row["on_shelf"],
                in_store=row["in_store"],
            )
            for row in rows
        ]

    def find_expiring_soon(self, days: int, today: date | None = None) -> list[Item]:
        start = today or self._today()
        end = start + timedelta(days=days)
        return self._query(
            f"SELECT {_COLUMNS} FROM items "
            "WHERE expiry_date BETWEEN ? AND ? "
            "AND state IN ('IN_STORE', 'ON_SHELF') AND quantity > 0 "
            "ORDER BY expiry_date, name, id",
            (start.isoformat(), end.isoformat()),
        )

    def add(self, item: Item) -> Item:
        raw = self._to_raw(item)
        with self._tx.transaction() as conn:
            cursor = conn.execute(
                "INSERT INTO items (code, name, price, quantity, state, "
                "purchase_date, expiry_date, version) "
                "VALUES (:code, :name, :price, :quantity, :state, "
                ":purchase_date, :expiry_date, 0)",
                raw,
            )
        item.id = cursor.lastrowid
        item.version = 0
        return item

    def update(self, item: Item) -> None:
        if item.id is None:
            raise ValueError("Cannot update an item that has not been added")
        raw = self._to_raw(item)
        raw["id"] = item.id
        raw["version"] = item.version
        with self._tx.transaction() as conn:
            cursor = conn.execute(
                "UPDATE items SET name = :name, price = :price, quantity = :quantity, "
                "state = :state, expiry_date = :expiry_date, version = version + 1 "
                "WHERE id = :id AND version = :version",
                raw,
            )
            if cursor.rowcount != 1:
                raise ConcurrencyError(
                    f"Item batch {item.id} ({item.code}) was modified by another "
                    "transaction; reload and retry"
                )
        item.version += 1

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(item: Item) -> dict:
        return {
            "code": item.code.value,
            "name": item.name,
            "price": str(item.price.amount),
            "quantity": item.quantity.value,
            "state": item.state.value,
            "purchase_date": item.purchase_date.isoformat(),
            "expiry_date": item.expiry_date.isoformat() if item.expiry_date else None,
        }

    @staticmethod
    def _to_domain(row: sqlite3.Row) -> Item:
        return Item(
            id=row["id"],
            code=ItemCode(row["code"]),
            name=row["name"],
            price=Money(Decimal(row["price"])),
            quantity=Quantity(row["quantity"]),
            state=ItemState(row["state"]),
            purchase_date=date.fromisoformat(row["purchase_date"]),
            expiry_date=date.fromisoformat(row["expiry_date"]) if row["expiry_date"] else None,
            version=row["version"],
        )

    # --- Query helpers --------------------------------------------------------

    def _batches(
        self,
        code: str,
        state: ItemState | None,
        limit: int | None = None,
    ) -> list[Item]:
        params = {"code": ItemCode(code).value, "today": self._today().isoformat()}
        sql = f"SELECT {_COLUMNS} FROM items WHERE code = :code"
        if state is not None:
            sql += " AND state = :state"
            params["state"] = state.value
        sql += _PREFERENCE_ORDER
        if limit is not None:
            sql += f" LIMIT {int(limit)}"
        return self._query(sql, params)

    def _query(self, sql: str, params: tuple | dict = ()) -> list[Item]:
        with self._tx.connection() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [self._to_domain(row) for row in rows]
