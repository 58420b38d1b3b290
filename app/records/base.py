from abc import ABC, abstractmethod
from typing import Any


class Updatable(ABC):
    """Contract for a record store that can update rows by a single column."""

    @abstractmethod
    def update_by_column(
        self,
        column: str,
        value: str,
        fields: dict[str, Any],
        max_rows: int | None = None,
    ) -> int:
        """Apply *fields* to every row where *column* equals *value*.

        When *max_rows* is given and more rows match, nothing is written.

        Returns:
            The number of matched rows.

        Raises:
            RecordStoreError: if the store rejects the update.
        """


class Selectable(ABC):
    """Contract for a record store that can read a single row by a column."""

    @abstractmethod
    def select_one(
        self, column: str, value: str, columns: list[str]
    ) -> dict[str, Any] | None:
        """Return *columns* of the row where *column* equals *value*, or None."""


class RecordStore(Updatable, Selectable, ABC):
    """A record store supporting both updates and single-row reads."""
