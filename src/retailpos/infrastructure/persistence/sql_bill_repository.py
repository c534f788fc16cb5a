"""SQLite-backed implementation of BillRepository.

A bill is stored as one ``bills`` header row plus one ``bill_items`` row per
line. Both are always written in the same transaction.
"""

from __future__ import annotations

import dataclasses
import sqlite3
from datetime import date, datetime, timedelta
from decimal import Decimal

from retailpos.domain.model.bill import Bill, BillItem, TransactionType
from retailpos.domain.model.value_objects import (
    BillNumber,
    ItemCode,
    Money,
    Quantity,
    UserId,
)
from retailpos.domain.repository.bill_repository import BillRepository
from retailpos.infrastructure.persistence.transaction import TransactionManager

_HEADER_COLUMNS = (
    "bill_number, bill_date, total_amount, discount, cash_tendered, "
    "change_amount, transaction_type, cashier_id"
)
_LINE_COLUMNS = "bill_number, item_code, item_name, quantity, unit_price, total_price"


class SqlBillRepository(BillRepository):

    def __init__(self, transactions: TransactionManager) -> None:
        self._tx = transactions

    # --- BillRepository interface ---------------------------------------------

    def next_bill_number(self) -> int:
        with self._tx.connection() as conn:
            row = conn.execute(
                "SELECT COALESCE("
                "(SELECT seq FROM sqlite_sequence WHERE name = 'bills'), "
                "(SELECT MAX(bill_number) FROM bills), 0) + 1"
            ).fetchone()
        return row[0]

    def save_bill_with_items(self, bill: Bill) -> Bill:
        with self._tx.transaction() as conn:
            number = self._insert_header(conn, bill)
            self._insert_lines(conn, number, bill.items)
        return dataclasses.replace(bill, bill_number=BillNumber(number))

    def find_by_number(self, bill_number: int) -> Bill | None:
        bills = self._load("bill_number = ?", (bill_number,))
        return bills[0] if bills else None

    def find_by_date(self, day: date) -> list[Bill]:
        return self.find_by_date_range(day, day)

    def find_by_date_range(self, start: date, end: date) -> list[Bill]:
        # ISO timestamps sort as text, so a half-open range covers whole days.
        return self._load(
            "bill_date >= ? AND bill_date < ?",
            (start.isoformat(), (end + timedelta(days=1)).isoformat()),
        )

    def find_all(self) -> list[Bill]:
        return self._load(None, (), newest_first=True)

    # --- Writes ---------------------------------------------------------------

    def _insert_header(self, conn: sqlite3.Connection, bill: Bill) -> int:
        cursor = conn.execute(
            "INSERT INTO bills (bill_date, total_amount, discount, cash_tendered, "
            "change_amount, transaction_type, cashier_id) VALUES (?, ?, ?, ?, ?, ?, ?)",
            (
                bill.bill_date.isoformat(),
                str(bill.total_amount.amount),
                str(bill.discount.amount),
                str(bill.cash_tendered.amount),
                str(bill.change.amount),
                bill.transaction_type.value,
                bill.cashier_id.value if bill.cashier_id else None,
            ),
        )
        return cursor.lastrowid

    def _insert_lines(
        self,
        conn: sqlite3.Connection,
        bill_number: int,
        items: tuple[BillItem, ...],
    ) -> None:
        conn.executemany(
            f"INSERT INTO bill_items ({_LINE_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?)",
            [
                (
                    bill_number,
                    item.item_code.value,
                    item.item_name,
                    item.quantity.value,
                    str(item.unit_price.amount),
                    str(item.total_price.amount),
                )
                for item in items
            ],
        )

    # --- Reads ----------------------------------------------------------------

    def _load(
        self,
        where: str | None,
        params: tuple,
        newest_first: bool = False,
    ) -> list[Bill]:
        condition = f" WHERE {where}" if where else ""
        order = "bill_date DESC, bill_number DESC" if newest_first else "bill_number"
        with self._tx.connection() as conn:
            headers = conn.execute(
                f"SELECT {_HEADER_COLUMNS} FROM bills{condition} ORDER BY {order}",
                params,
            ).fetchall()
            lines = conn.execute(
                f"SELECT {_LINE_COLUMNS} FROM bill_items "
                f"WHERE bill_number IN (SELECT bill_number FROM bills{condition}) "
                "ORDER BY bill_number, id",
                params,
            ).fetchall()

        items_by_bill: dict[int, list[BillItem]] = {}
        for row in lines:
            items_by_bill.setdefault(row["bill_number"], []).append(self._line_to_domain(row))
        return [
            self._to_domain(row, items_by_bill.get(row["bill_number"], []))
            for row in headers
        ]

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _line_to_domain(row: sqlite3.Row) -> BillItem:
        return BillItem(
            item_code=ItemCode(row["item_code"]),
            item_name=row["item_name"],
            quantity=Quantity(row["quantity"]),
            unit_price=Money(Decimal(row["unit_price"])),
        )

    @staticmethod
    def _to_domain(row: sqlite3.Row, items: list[BillItem]) -> Bill:
        return Bill(
            bill_number=BillNumber(row["bill_number"]),
            bill_date=datetime.fromisoformat(row["bill_date"]),
            items=tuple(items),
            cash_tendered=Money(Decimal(row["cash_tendered"])),
            discount=Money(Decimal(row["discount"])),
            transaction_type=TransactionType(row["transaction_type"]),
            cashier_id=UserId(row["cashier_id"]) if row["cashier_id"] is not None else None,
        )
