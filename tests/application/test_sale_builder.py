"""Tests for assembling a sale with SaleBuilder.

Uses in-memory fake repositories.
"""

from datetime import date, datetime, timedelta

import pytest

from retailpos.application.sale_builder import SaleBuilder
from retailpos.domain.exceptions import (
    EmptySaleError,
    InsufficientPaymentError,
    InsufficientStockError,
    ItemNotFoundError,
    ValidationError,
)
from retailpos.domain.model.item import Item, ItemState
from retailpos.domain.model.value_objects import ItemCode, Money, Quantity, UserId
from tests.fakes import FakeItemRepository

NOW = datetime(2026, 3, 10, 12, 0)
TODAY = NOW.date()


def _shelf(code: str, name: str, price: str, qty: int, expiry: date | None = None) -> Item:
    return Item(
        code=ItemCode(code),
        name=name,
        price=Money.of(price),
        quantity=Quantity(qty),
        state=ItemState.ON_SHELF,
        purchase_date=TODAY,
        expiry_date=expiry,
    )


def _setup(items: list[Item] | None = None) -> tuple[SaleBuilder, FakeItemRepository]:
    """Build a builder over a fake repo stocked with milk and bread."""
    if items is None:
        items = [
            _shelf("MILK01", "Milk", "2.50", 10),
            _shelf("BREAD01", "Bread", "3.00", 5),
        ]
    repo = FakeItemRepository(items, today=TODAY)
    builder = SaleBuilder(repo, next_bill_number=lambda: 1, clock=lambda: NOW)
    return builder, repo


class TestAddItem:

    def test_subtotal_is_sum_of_lines(self):
        builder, _ = _setup()
        builder.add_item("MILK01", 2).add_item("BREAD01", 1)
        assert builder.subtotal == Money.of("8.00")

    def test_lines_keep_add_order(self):
        builder, _ = _setup()
        builder.add_item("BREAD01", 1).add_item("milk01", 2)
        assert [line.item_code.value for line in builder.items] == ["BREAD01", "MILK01"]

    def test_price_is_locked_at_add_time(self):
        builder, _ = _setup()
        builder.add_item("MILK01", 1)
        assert builder.items[0].unit_price == Money.of("2.50")

    def test_unknown_item_rejected(self):
        builder, _ = _setup()
        with pytest.raises(ItemNotFoundError, match="NOPE01"):
            builder.add_item("NOPE01", 1)

    def test_insufficient_stock_reports_quantities(self):
        builder, _ = _setup()
        with pytest.raises(InsufficientStockError) as exc_info:
            builder.add_item("BREAD01", 6)
        assert exc_info.value.requested == 6
        assert exc_info.value.available == 5
        assert builder.is_empty

    def test_units_already_in_sale_count_against_stock(self):
        builder, _ = _setup()
        builder.add_item("BREAD01", 4)
        with pytest.raises(InsufficientStockError) as exc_info:
            builder.add_item("BREAD01", 2)
        assert exc_info.value.available == 1

    def test_store_only_stock_is_not_sellable(self):
        store = Item.receive("RICE01", "Rice", Money.of("9.00"), 20, purchase_date=TODAY)
        builder, _ = _setup([store])
        with pytest.raises(InsufficientStockError):
            builder.add_item("RICE01", 1)

    def test_lapsed_stock_is_not_sellable(self):
        builder, _ = _setup([_shelf("MILK01", "Milk", "2.50", 10, TODAY - timedelta(days=1))])
        with pytest.raises(InsufficientStockError):
            builder.add_item("MILK01", 1)

    @pytest.mark.parametrize("qty", [0, -1])
    def test_non_positive_quantity_rejected(self, qty):
        builder, _ = _setup()
        with pytest.raises(ValidationError):
            builder.add_item("MILK01", qty)

    def test_does_not_touch_stock(self):
        builder, repo = _setup()
        builder.add_item("MILK01", 3)
        assert repo.find_by_code("MILK01").quantity.value == 10


class TestSeveralShelfBatches:

    def _two_batches(self) -> tuple[SaleBuilder, FakeItemRepository]:
        return _setup([
            _shelf("MILK01", "Milk", "2.50", 4, TODAY + timedelta(days=9)),
            _shelf("MILK01", "Milk", "2.50", 4, TODAY + timedelta(days=2)),
        ])

    def test_next_batch_used_once_first_is_in_sale(self):
        builder, _ = self._two_batches()
        builder.add_item("MILK01", 4).add_item("MILK01", 1)
        assert [(line.item_id, line.quantity.value) for line in builder.items] == [(2, 4), (1, 1)]

    def test_quantity_split_earliest_expiry_first(self):
        builder, _ = self._two_batches()
        builder.add_item("MILK01", 6)
        assert [(line.item_id, line.quantity.value) for line in builder.items] == [(2, 4), (1, 2)]
        assert builder.subtotal == Money.of("15.00")

    def test_available_is_total_over_batches(self):
        builder, _ = self._two_batches()
        builder.add_item("MILK01", 3)
        with pytest.raises(InsufficientStockError) as exc_info:
            builder.add_item("MILK01", 6)
        assert exc_info.value.available == 5
        assert len(builder.items) == 1

    def test_each_batch_keeps_its_price(self):
        builder, _ = _setup([
            _shelf("MILK01", "Milk", "2.50", 1, TODAY + timedelta(days=1)),
            _shelf("MILK01", "Milk", "2.80", 5, TODAY + timedelta(days=6)),
        ])
        builder.add_item("MILK01", 2)
        assert [line.unit_price for line in builder.items] == [Money.of("2.50"), Money.of("2.80")]
        assert builder.subtotal == Money.of("5.30")


class TestCompleteSale:

    def test_produces_bill(self):
        builder, _ = _setup()
        bill = builder.add_item("MILK01", 2).complete_sale(
            Money.of("10.00"), cashier_id=UserId(3)
        )
        assert bill.bill_number.value == 1
        assert bill.bill_date == NOW
        assert bill.subtotal == Money.of("5.00")
        assert bill.change == Money.of("5.00")
        assert bill.cashier_id == UserId(3)

    def test_empty_sale_rejected(self):
        builder, _ = _setup()
        with pytest.raises(EmptySaleError):
            builder.complete_sale(Money.of("10.00"))

    def test_insufficient_cash_rejected(self):
        builder, _ = _setup()
        builder.add_item("MILK01", 2)
        with pytest.raises(InsufficientPaymentError):
            builder.complete_sale(Money.of("4.99"))
