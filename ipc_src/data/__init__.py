"""Record store interface and implementations."""

from .base import BaseRecordStore
from .sqlite_store import SQLiteRecordStore

__all__ = [
    "BaseRecordStore",
    "SQLiteRecordStore",
]
