"""Shared pytest fixtures: a throwaway SQLite database per test."""

from __future__ import annotations

from typing import Iterator

import pytest

from retailpos.infrastructure.persistence.connection_pool import (
    ConnectionPool,
    sqlite_connection_factory,
)
from retailpos.infrastructure.persistence.schema import create_schema
from retailpos.infrastructure.persistence.sql_bill_repository import SqlBillRepository
from retailpos.infrastructure.persistence.sql_item_repository import SqlItemRepository
from retailpos.infrastructure.persistence.transaction import TransactionManager


@pytest.fixture
def db_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'retailpos.db'}"


@pytest.fixture
def pool(db_url) -> Iterator[ConnectionPool]:
    pool = ConnectionPool(sqlite_connection_factory(db_url), initial_size=1, max_size=4)
    with pool.connection() as conn:
        create_schema(conn)
    yield pool
    pool.shutdown()


@pytest.fixture
def transactions(pool) -> TransactionManager:
    return TransactionManager(pool)


@pytest.fixture
def item_repo(transactions) -> SqlItemRepository:
    return SqlItemRepository(transactions)


@pytest.fixture
def bill_repo(transactions) -> SqlBillRepository:
    return SqlBillRepository(transactions)
