"""Abstract record store interface.

The portal talks to persistence only through this interface so the
workflow can be exercised against any backend. Rows are plain dicts with
camelCase keys; every row carries an ``id``.
"""

from abc import ABC, abstractmethod
from typing import Any, Mapping

from ..models import ReportKind

Category = ReportKind | str


class BaseRecordStore(ABC):
    """Abstract base class for report/audit persistence."""

    @abstractmethod
    def get(
        self,
        category: Category,
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[dict]:
        """Select rows from a category.

        Args:
            category: Report kind or table name
            filters: Field -> value equality filters (all must match)
            order_by: Field to sort by
            descending: Sort newest/largest first

        Returns:
            Matching rows
        """
        pass

    @abstractmethod
    def get_by_id(self, category: Category, record_id: str) -> dict | None:
        """Get a single row by id, or None if there is none."""
        pass

    @abstractmethod
    def insert(self, category: Category, record: Mapping[str, Any]) -> dict:
        """Insert a row and return it as stored (with its assigned id)."""
        pass

    @abstractmethod
    def update(self, category: Category, record_id: str, patch: Mapping[str, Any]) -> dict:
        """Merge ``patch`` into an existing row and return the updated row.

        Raises:
            RecordNotFoundError: If no row has this id.
        """
        pass

    @abstractmethod
    def delete(self, category: Category, record_id: str) -> dict:
        """Delete a row and return the row that was removed.

        Raises:
            ValueError: If ``record_id`` is empty.
            RecordNotFoundError: If nothing was deleted.
        """
        pass

    @abstractmethod
    def upsert(self, category: Category, record: Mapping[str, Any], key: str) -> dict:
        """Insert, or overwrite the row sharing the same ``key`` value."""
        pass
