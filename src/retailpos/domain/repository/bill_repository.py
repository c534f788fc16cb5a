"""Abstract repository (gateway) for the Bill aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from retailpos.domain.model.bill import Bill


class BillRepository(ABC):

    @abstractmethod
    def next_bill_number(self) -> int:
        """Return the number the next saved bill is expected to receive."""

    @abstractmethod
    def save_bill_with_items(self, bill: Bill) -> Bill:
        """Persist the bill header and all its lines as one atomic unit.

        Returns the bill carrying the number the store assigned.
        """

    @abstractmethod
    def find_by_number(self, bill_number: int) -> Bill | None:
        """Return a bill by its number, or None if not found."""

    @abstractmethod
    def find_by_date(self, day: date) -> list[Bill]:
        """Return the bills created on *day*, in bill-number order."""

    @abstractmethod
    def find_by_date_range(self, start: date, end: date) -> list[Bill]:
        """Return the bills created between *start* and *end* inclusive."""

    @abstractmethod
    def find_all(self) -> list[Bill]:
        """Return every bill, newest first."""
