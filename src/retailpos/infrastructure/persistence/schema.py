"""Database schema for bills, bill lines and stock batches."""

from __future__ import annotations

import sqlite3

SCHEMA = """
CREATE TABLE IF NOT EXISTS items (
    id            INTEGER PRIMARY KEY AUTOINCREMENT,
    code          TEXT    NOT NULL,
    name          TEXT    NOT NULL,
    price         TEXT    NOT NULL,
    quantity      INTEGER NOT NULL CHECK (quantity >= 0),
    state         TEXT    NOT NULL
                  CHECK (state IN ('IN_STORE', 'ON_SHELF', 'EXPIRED', 'SOLD_OUT')),
    purchase_date TEXT    NOT NULL,
    expiry_date   TEXT,
    version       INTEGER NOT NULL DEFAULT 0
);

CREATE INDEX IF NOT EXISTS idx_items_code ON items (code);
CREATE INDEX IF NOT EXISTS idx_items_state ON items (state);

CREATE TABLE IF NOT EXISTS bills (
    bill_number      INTEGER PRIMARY KEY AUTOINCREMENT,
    bill_date        TEXT    NOT NULL,
    total_amount     TEXT    NOT NULL,
    discount         TEXT    NOT NULL DEFAULT '0.00',
    cash_tendered    TEXT    NOT NULL,
    change_amount    TEXT    NOT NULL,
    transaction_type TEXT    NOT NULL CHECK (transaction_type IN ('IN_STORE', 'ONLINE')),
    cashier_id       INTEGER
);

CREATE INDEX IF NOT EXISTS idx_bills_date ON bills (bill_date);

CREATE TABLE IF NOT EXISTS bill_items (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    bill_number INTEGER NOT NULL REFERENCES bills (bill_number) ON DELETE CASCADE,
    item_code   TEXT    NOT NULL,
    item_name   TEXT    NOT NULL,
    quantity    INTEGER NOT NULL CHECK (quantity > 0),
    unit_price  TEXT    NOT NULL,
    total_price TEXT    NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_bill_items_bill ON bill_items (bill_number);
"""


def create_schema(conn: sqlite3.Connection) -> None:
    """Create any missing tables. Safe to run against an existing database."""
    conn.executescript(SCHEMA)
