"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from retailpos.domain.exceptions import InvalidQuantityError, ValidationError

_CENTS = Decimal("0.01")
_ITEM_CODE_PATTERN = re.compile(r"^[A-Z0-9]{4,10}$")


def _to_decimal(amount: object) -> Decimal:
    if amount is None or isinstance(amount, bool):
        raise ValidationError(f"Invalid money amount: {amount!r}")
    if isinstance(amount, Decimal):
        return amount
    if isinstance(amount, (int, float, str)):
        # floats go through str() so 10.555 means 10.555, not 10.55499...
        try:
            return Decimal(str(amount).strip())
        except InvalidOperation as exc:
            raise ValidationError(f"Invalid money amount: {amount!r}") from exc
    raise ValidationError(
        f"Money amount must be numeric, got {type(amount).__name__}"
    )


@dataclass(frozen=True)
class Money:
    """Fixed-point amount held at two decimal places.

    Every construction (and therefore every arithmetic result) is rounded
    half-up to cents. Negative amounts are allowed: change owed and
    discounts are both expressed as Money.
    """

    amount: Decimal

    def __post_init__(self) -> None:
        value = _to_decimal(self.amount)
        if not value.is_finite():
            raise ValidationError(f"Invalid money amount: {self.amount!r}")
        object.__setattr__(self, "amount", value.quantize(_CENTS, rounding=ROUND_HALF_UP))

    # --- Arithmetic helpers ---------------------------------------------------

    def __add__(self, other: Money) -> Money:
        return Money(self.amount + other.amount)

    def __sub__(self, other: Money) -> Money:
        return Money(self.amount - other.amount)

    def __mul__(self, factor: int) -> Money:
        if not isinstance(factor, int) or isinstance(factor, bool):
            raise TypeError(f"Can only multiply Money by int, got {type(factor).__name__}")
        return Money(self.amount * factor)

    def __lt__(self, other: Money) -> bool:
        return self.amount < other.amount

    def __le__(self, other: Money) -> bool:
        return self.amount <= other.amount

    def __gt__(self, other: Money) -> bool:
        return self.amount > other.amount

    def __ge__(self, other: Money) -> bool:
        return self.amount >= other.amount

    @property
    def is_negative(self) -> bool:
        return self.amount < 0

    @property
    def is_zero(self) -> bool:
        return self.amount == 0

    # --- Display --------------------------------------------------------------

    def __str__(self) -> str:
        if self.is_negative:
            return f"-${-self.amount:.2f}"
        return f"${self.amount:.2f}"

    # --- Factories ------------------------------------------------------------

    @staticmethod
    def of(amount: str | float | int | Decimal) -> Money:
        """Convenient factory that coerces to Decimal safely."""
        return Money(_to_decimal(amount))

    @staticmethod
    def zero() -> Money:
        return Money(Decimal("0"))


@dataclass(frozen=True)
class Quantity:
    """A non-negative count of units."""

    value: int

    def __post_init__(self) -> None:
        if not isinstance(self.value, int) or isinstance(self.value, bool):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value < 0:
            raise InvalidQuantityError("Quantity cannot be negative")

    def add(self, amount: int) -> Quantity:
        return Quantity(self.value + amount)

    def subtract(self, amount: int) -> Quantity:
        if amount > self.value:
            raise InvalidQuantityError(
                f"Cannot subtract {amount} from quantity {self.value}"
            )
        return Quantity(self.value - amount)

    @property
    def is_zero(self) -> bool:
        return self.value == 0

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class ItemCode:
    """Upper-case alphanumeric item identifier, 4 to 10 characters."""

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not self.value.strip():
            raise ValidationError("Item code cannot be empty")
        normalized = self.value.strip().upper()
        if not _ITEM_CODE_PATTERN.match(normalized):
            raise ValidationError(
                f"Item code must be 4-10 alphanumeric characters, got {self.value!r}"
            )
        object.__setattr__(self, "value", normalized)

    def __str__(self) -> str:
        return self.value


def _require_positive_int(value: object, label: str) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValidationError(f"{label} must be an integer, got {type(value).__name__}")
    if value <= 0:
        raise ValidationError(f"{label} must be positive")


@dataclass(frozen=True)
class BillNumber:
    value: int

    def __post_init__(self) -> None:
        _require_positive_int(self.value, "Bill number")

    def __str__(self) -> str:
        return f"BILL-{self.value:06d}"


@dataclass(frozen=True)
class UserId:
    """Reference to a system user (the cashier who rang up a sale)."""

    value: int

    def __post_init__(self) -> None:
        _require_positive_int(self.value, "User ID")

    def __str__(self) -> str:
        return str(self.value)
