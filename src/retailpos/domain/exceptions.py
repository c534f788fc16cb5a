"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
"""


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A value or business rule was violated."""


class InvalidQuantityError(ValidationError):
    """A quantity operation would produce a negative count."""


class InvalidStateTransitionError(DomainException):
    """The requested lifecycle operation is not legal in the item's state."""


class InsufficientStockError(DomainException):
    """More units were requested than are available."""

    def __init__(self, item_code: str, requested: int, available: int) -> None:
        self.item_code = item_code
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for {item_code} "
            f"(requested {requested}, available {available})"
        )


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class ItemNotFoundError(EntityNotFoundError):
    """No stock batch exists for the given item code."""


class EmptySaleError(DomainException):
    """A sale was completed without any items."""


class InsufficientPaymentError(DomainException):
    """Cash tendered does not cover the amount due."""
