"""Application service: reporting queries (read only).

Every report is a projection over committed bills or stock batches. Results
are returned as DTOs; laying them out is the CLI's job.
"""

from __future__ import annotations

from collections import Counter
from datetime import date
from typing import Callable

from retailpos.application.dto import (
    DailySalesDTO,
    ItemSalesLine,
    ReorderLineDTO,
    ReshelveLineDTO,
    StatisticsDTO,
    StockLineDTO,
    StockSummaryDTO,
)
from retailpos.application.visitors.bill_statistics import BillStatisticsVisitor
from retailpos.domain.model.item import ItemState
from retailpos.domain.model.value_objects import Money
from retailpos.domain.repository.bill_repository import BillRepository
from retailpos.domain.repository.item_repository import ItemRepository

REORDER_THRESHOLD = 50
RESHELVE_DAYS = 7


class ReportService:

    def __init__(
        self,
        bill_repo: BillRepository,
        item_repo: ItemRepository,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._bill_repo = bill_repo
        self._item_repo = item_repo
        self._today = today

    def daily_sales(self, day: date | None = None) -> DailySalesDTO:
        day = day or self._today()
        bills = self._bill_repo.find_by_date(day)

        names: dict[str, str] = {}
        quantities: Counter[str] = Counter()
        revenue: dict[str, Money] = {}
        for bill in bills:
            for line in bill.items:
                code = line.item_code.value
                names.setdefault(code, line.item_name)
                quantities[code] += line.quantity.value
                revenue[code] = revenue.get(code, Money.zero()) + line.total_price

        total = Money.zero()
        for amount in revenue.values():
            total = total + amount

        return DailySalesDTO(
            day=day,
            transactions=len(bills),
            items_sold=sum(quantities.values()),
            revenue=str(total),
            lines=[
                ItemSalesLine(
                    item_code=code,
                    item_name=names[code],
                    quantity=quantities[code],
                    revenue=str(revenue[code]),
                )
                for code in sorted(names)
            ],
        )

    def stock_summary(self) -> StockSummaryDTO:
        today = self._today()
        items = self._item_repo.find_all()
        by_state = Counter(item.state.value for item in items)
        return StockSummaryDTO(
            item_types=len({item.code for item in items}),
            total_quantity=sum(item.quantity.value for item in items),
            by_state={state.value: by_state.get(state.value, 0) for state in ItemState},
            lines=[
                StockLineDTO(
                    item_code=item.code.value,
                    item_name=item.name,
                    state=item.state.value,
                    quantity=item.quantity.value,
                    price=str(item.price),
                    expiry=item.expiry_status(today),
                )
                for item in items
            ],
        )

    def reorder(self, threshold: int = REORDER_THRESHOLD) -> list[ReorderLineDTO]:
        return [
            ReorderLineDTO(
                item_code=level.code.value,
                item_name=level.name,
                on_shelf=level.on_shelf,
                in_store=level.in_store,
                quantity=level.total,
                shortfall=threshold - level.total,
            )
            for level in self._item_repo.find_low_stock(threshold)
        ]

    def reshelve(self, days: int = RESHELVE_DAYS) -> list[ReshelveLineDTO]:
        today = self._today()
        lines = []
        for item in self._item_repo.find_expiring_soon(days, today):
            remaining = item.days_until_expiry(today)
            urgency, action = _urgency(remaining)
            lines.append(
                ReshelveLineDTO(
                    item_code=item.code.value,
                    item_name=item.name,
                    quantity=item.quantity.value,
                    days_until_expiry=remaining,
                    urgency=urgency,
                    action=action,
                )
            )
        return lines

    def statistics(self, day: date | None = None) -> StatisticsDTO:
        day = day or self._today()
        visitor = BillStatisticsVisitor()
        visitor.visit_all(self._bill_repo.find_by_date(day))
        return StatisticsDTO(
            day=day,
            bill_count=visitor.bill_count,
            online_count=visitor.online_count,
            total_revenue=str(visitor.total_revenue),
            total_discount=str(visitor.total_discount),
            average_transaction=str(visitor.average_transaction),
            most_popular_item=visitor.most_popular_item,
        )


def _urgency(days_until_expiry: int) -> tuple[str, str]:
    if days_until_expiry <= 1:
        return "CRITICAL", "Remove"
    if days_until_expiry <= 3:
        return "HIGH", "Move to front"
    return "MEDIUM", "Rotate"
