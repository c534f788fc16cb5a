"""Errors raised by the storage layer.

Domain errors never pass through here; they propagate from the domain
unchanged. These cover the database and its connections.
"""


class PersistenceError(Exception):
    """Base for all storage layer errors."""


class PoolExhaustedError(PersistenceError):
    """Every pooled connection is in use and the pool is at its ceiling."""


class StorageError(PersistenceError):
    """A database operation failed. The transaction has been rolled back."""


class ConcurrencyError(StorageError):
    """A row changed underneath an optimistic update."""
