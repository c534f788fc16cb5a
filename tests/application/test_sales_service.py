"""Tests for saving bills and deducting stock in one unit of work.

Uses in-memory fake repositories.
"""

from datetime import datetime, timedelta

import pytest

from retailpos.application.sales_service import SalesService
from retailpos.domain.exceptions import InvalidStateTransitionError, ValidationError
from retailpos.domain.model.bill import Bill, TransactionType
from retailpos.domain.model.item import Item, ItemState
from retailpos.domain.model.online_order import OnlineOrderBill
from retailpos.domain.model.value_objects import ItemCode, Money, Quantity
from tests.fakes import FakeBillRepository, FakeItemRepository, FakeTransactionManager

NOW = datetime(2026, 3, 10, 12, 0)


def _setup() -> tuple[SalesService, FakeBillRepository, FakeItemRepository, FakeTransactionManager]:
    items = [
        Item(
            code=ItemCode("MILK01"),
            name="Milk",
            price=Money.of("2.50"),
            quantity=Quantity(10),
            state=ItemState.ON_SHELF,
            purchase_date=NOW.date(),
        ),
        Item(
            code=ItemCode("BREAD01"),
            name="Bread",
            price=Money.of("3.00"),
            quantity=Quantity(2),
            state=ItemState.ON_SHELF,
            purchase_date=NOW.date(),
        ),
    ]
    item_repo = FakeItemRepository(items, today=NOW.date())
    bill_repo = FakeBillRepository()
    tx = FakeTransactionManager(item_repo, bill_repo)
    service = SalesService(bill_repo, item_repo, tx, clock=lambda: NOW)
    return service, bill_repo, item_repo, tx


class TestSaveBill:

    def test_persists_bill_and_deducts_stock(self):
        service, bill_repo, item_repo, tx = _setup()
        bill = service.start_new_sale().add_item("MILK01", 3).complete_sale(Money.of("10"))

        saved = service.save_bill(bill)

        assert bill_repo.find_by_number(saved.bill_number.value) == saved
        assert item_repo.find_by_code("MILK01").quantity.value == 7
        assert tx.commits == 1

    def test_selling_last_units_marks_sold_out(self):
        service, _, item_repo, _ = _setup()
        bill = service.start_new_sale().add_item("BREAD01", 2).complete_sale(Money.of("10"))
        service.save_bill(bill)
        assert item_repo.stored(2).state is ItemState.SOLD_OUT

    def test_failed_deduction_rolls_back_bill(self):
        service, bill_repo, item_repo, tx = _setup()
        first = service.start_new_sale().add_item("BREAD01", 2).complete_sale(Money.of("10"))
        second = service.start_new_sale().add_item("BREAD01", 2).complete_sale(Money.of("10"))
        service.save_bill(first)

        with pytest.raises(InvalidStateTransitionError, match="sold out"):
            service.save_bill(second)

        assert len(bill_repo.find_all()) == 1
        assert item_repo.stored(2).quantity.is_zero
        assert tx.rollbacks == 1

    def test_partial_deduction_is_undone(self):
        service, bill_repo, item_repo, _ = _setup()
        stale = service.start_new_sale().add_item("BREAD01", 2).complete_sale(Money.of("10"))
        service.save_bill(stale)
        mixed = service.start_new_sale().add_item("MILK01", 1)
        bill = mixed.complete_sale(Money.of("10"))
        bill = Bill(
            bill_number=bill.bill_number,
            bill_date=bill.bill_date,
            items=bill.items + stale.items,
            cash_tendered=bill.cash_tendered,
        )

        with pytest.raises(InvalidStateTransitionError, match="sold out"):
            service.save_bill(bill)

        assert item_repo.stored(1).quantity.value == 10
        assert len(bill_repo.find_all()) == 1

    def test_split_sale_draws_down_every_batch(self):
        service, _, item_repo, _ = _setup()
        item_repo.add(Item(
            code=ItemCode("MILK01"),
            name="Milk",
            price=Money.of("2.50"),
            quantity=Quantity(3),
            state=ItemState.ON_SHELF,
            purchase_date=NOW.date(),
            expiry_date=NOW.date() + timedelta(days=2),
        ))
        bill = service.start_new_sale().add_item("MILK01", 5).complete_sale(Money.of("20"))

        service.save_bill(bill)

        assert item_repo.stored(3).state is ItemState.SOLD_OUT
        assert item_repo.stored(1).quantity.value == 8

    def test_bill_numbers_increase(self):
        service, _, _, _ = _setup()
        one = service.save_bill(
            service.start_new_sale().add_item("MILK01", 1).complete_sale(Money.of("5"))
        )
        two = service.save_bill(
            service.start_new_sale().add_item("MILK01", 1).complete_sale(Money.of("5"))
        )
        assert two.bill_number.value == one.bill_number.value + 1


class TestOnlineOrder:

    def test_saved_as_online_bill(self):
        service, bill_repo, _, _ = _setup()
        bill = service.start_new_sale().add_item("MILK01", 1).complete_sale(Money.of("5"))

        order = service.save_online_order(bill, "ann@example.com", "1 Main Street")

        assert isinstance(order, OnlineOrderBill)
        stored = bill_repo.find_by_number(order.bill_number.value)
        assert stored.transaction_type is TransactionType.ONLINE
        assert order.customer_email == "ann@example.com"

    def test_invalid_email_writes_nothing(self):
        service, bill_repo, item_repo, _ = _setup()
        bill = service.start_new_sale().add_item("MILK01", 1).complete_sale(Money.of("5"))

        with pytest.raises(ValidationError):
            service.save_online_order(bill, "nope", "1 Main Street")

        assert bill_repo.find_all() == []
        assert item_repo.stored(1).quantity.value == 10


class TestBillLookups:

    def test_bills_for_today(self):
        service, _, _, _ = _setup()
        service.save_bill(
            service.start_new_sale().add_item("MILK01", 1).complete_sale(Money.of("5"))
        )
        assert len(service.bills_for_today()) == 1
        assert service.bills_for_date(datetime(2026, 3, 9).date()) == []

    def test_find_bill_missing(self):
        service, _, _, _ = _setup()
        assert service.find_bill(99) is None
