"""Online order view of a bill.

``OnlineOrderBill`` wraps an existing Bill and delegates every read accessor
to it, except that the transaction type is always ONLINE. Shipping details
live on the wrapper only; the wrapped bill is never modified, and several
wrappers may share one bill.
"""

from __future__ import annotations

import re
import uuid
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Callable

from retailpos.domain.exceptions import ValidationError
from retailpos.domain.model.bill import Bill, BillItem, TransactionType
from retailpos.domain.model.value_objects import BillNumber, Money, UserId

if TYPE_CHECKING:
    from retailpos.domain.visitor.bill_visitor import BillVisitor

DELIVERY_DAYS = 3
_EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9+_.-]+@(.+)$")


def _random_token() -> str:
    return uuid.uuid4().hex[:8].upper()


class OnlineOrderBill:
    """An online sale: a bill plus the customer's email and delivery address."""

    def __init__(
        self,
        bill: Bill,
        customer_email: str,
        delivery_address: str,
        token_factory: Callable[[], str] = _random_token,
    ) -> None:
        if bill is None:
            raise ValidationError("Bill cannot be None")
        if not customer_email or not customer_email.strip():
            raise ValidationError("Customer email is required")
        if not delivery_address or not delivery_address.strip():
            raise ValidationError("Delivery address is required")
        if not _EMAIL_PATTERN.match(customer_email.strip()):
            raise ValidationError(f"Invalid email format: {customer_email!r}")

        self._bill = bill
        self._customer_email = customer_email.strip()
        self._delivery_address = delivery_address.strip()
        self._tracking_number = f"TRK-{bill.bill_number.value:06d}-{token_factory()}"
        self._estimated_delivery = bill.bill_date + timedelta(days=DELIVERY_DAYS)

    # --- Delegated accessors --------------------------------------------------

    @property
    def bill_number(self) -> BillNumber:
        return self._bill.bill_number

    @property
    def bill_date(self) -> datetime:
        return self._bill.bill_date

    @property
    def items(self) -> tuple[BillItem, ...]:
        return self._bill.items

    @property
    def discount(self) -> Money:
        return self._bill.discount

    @property
    def cash_tendered(self) -> Money:
        return self._bill.cash_tendered

    @property
    def cashier_id(self) -> UserId | None:
        return self._bill.cashier_id

    @property
    def subtotal(self) -> Money:
        return self._bill.subtotal

    @property
    def final_amount(self) -> Money:
        return self._bill.final_amount

    @property
    def change(self) -> Money:
        return self._bill.change

    @property
    def transaction_type(self) -> TransactionType:
        return TransactionType.ONLINE

    # --- Online-specific data -------------------------------------------------

    @property
    def customer_email(self) -> str:
        return self._customer_email

    @property
    def delivery_address(self) -> str:
        return self._delivery_address

    @property
    def tracking_number(self) -> str:
        return self._tracking_number

    @property
    def estimated_delivery(self) -> datetime:
        return self._estimated_delivery

    @property
    def original_bill(self) -> Bill:
        return self._bill

    def accept(self, visitor: BillVisitor) -> None:
        visitor.visit(self)

    def __repr__(self) -> str:
        return (
            f"OnlineOrderBill({self.bill_number}, email={self._customer_email!r}, "
            f"tracking={self._tracking_number!r})"
        )
