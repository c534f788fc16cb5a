"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from retailpos.application.inventory_service import InventoryService
from retailpos.application.report_service import ReportService
from retailpos.application.sales_service import SalesService
from retailpos.infrastructure.config import DatabaseSettings
from retailpos.infrastructure.persistence.connection_pool import (
    ConnectionPool,
    sqlite_connection_factory,
)
from retailpos.infrastructure.persistence.schema import create_schema
from retailpos.infrastructure.persistence.sql_bill_repository import SqlBillRepository
from retailpos.infrastructure.persistence.sql_item_repository import SqlItemRepository
from retailpos.infrastructure.persistence.transaction import TransactionManager

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    pool: ConnectionPool
    transactions: TransactionManager
    items: SqlItemRepository
    bills: SqlBillRepository
    sales: SalesService
    inventory: InventoryService
    reports: ReportService

    def shutdown(self) -> None:
        self.pool.shutdown()


def build_context(settings: DatabaseSettings) -> AppContext:
    """Open the database named by *settings* and wire the services to it."""
    pool = ConnectionPool(
        sqlite_connection_factory(settings.url),
        initial_size=settings.pool_initial_size,
        max_size=settings.pool_max_size,
    )
    try:
        with pool.connection() as conn:
            create_schema(conn)
    except Exception:
        pool.shutdown()
        raise
    logger.info("Database ready at %s", settings.url)

    transactions = TransactionManager(pool)
    items = SqlItemRepository(transactions)
    bills = SqlBillRepository(transactions)
    return AppContext(
        pool=pool,
        transactions=transactions,
        items=items,
        bills=bills,
        sales=SalesService(bills, items, transactions),
        inventory=InventoryService(items, transactions),
        reports=ReportService(bills, items),
    )
