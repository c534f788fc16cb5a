"""Port for running several repository calls as one atomic unit."""

from __future__ import annotations

from typing import ContextManager, Protocol


class TransactionScope(Protocol):

    def transaction(self) -> ContextManager[object]:
        """Open a unit of work: commit on normal exit, roll back on error.

        Repository calls made inside the block join the unit of work.
        """
