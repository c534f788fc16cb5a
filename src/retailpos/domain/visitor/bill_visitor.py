"""Visitor contract for bill projections.

A visitor is an accumulator: it reads each bill it is handed and keeps its
own result state, so one instance can summarise many bills.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from retailpos.domain.model.bill import BillView


class BillVisitor(ABC):

    @abstractmethod
    def visit(self, bill: BillView) -> None:
        """Process one bill. Must not modify it."""

    def visit_all(self, bills) -> None:
        for bill in bills:
            bill.accept(self)
