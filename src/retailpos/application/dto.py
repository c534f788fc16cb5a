"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date


@dataclass(frozen=True)
class SaleLineSpec:
    """Input: what the cashier scanned (item code + quantity)."""

    item_code: str
    quantity: int


@dataclass(frozen=True)
class ItemSalesLine:
    """Output: one item's sales for a day."""

    item_code: str
    item_name: str
    quantity: int
    revenue: str  # formatted, e.g. "$15.00"


@dataclass(frozen=True)
class DailySalesDTO:
    day: date
    transactions: int
    items_sold: int
    revenue: str
    lines: list[ItemSalesLine] = field(default_factory=list)


@dataclass(frozen=True)
class StockLineDTO:
    item_code: str
    item_name: str
    state: str
    quantity: int
    price: str
    expiry: str


@dataclass(frozen=True)
class StockSummaryDTO:
    item_types: int
    total_quantity: int
    by_state: dict[str, int]
    lines: list[StockLineDTO] = field(default_factory=list)


@dataclass(frozen=True)
class ReorderLineDTO:
    item_code: str
    item_name: str
    on_shelf: int
    in_store: int
    quantity: int
    shortfall: int


@dataclass(frozen=True)
class ReshelveLineDTO:
    item_code: str
    item_name: str
    quantity: int
    days_until_expiry: int
    urgency: str
    action: str


@dataclass(frozen=True)
class StatisticsDTO:
    day: date
    bill_count: int
    online_count: int
    total_revenue: str
    total_discount: str
    average_transaction: str
    most_popular_item: str
