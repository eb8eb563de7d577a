"""Exceptions raised by the record store and report workflow."""


class IPCError(Exception):
    """Base class for IPC reporting errors."""


class UnknownReportKindError(IPCError, ValueError):
    """Raised when a report kind label or slug is not recognized."""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Invalid form type: {value}")


class RecordNotFoundError(IPCError):
    """Raised when an update or delete matched zero rows."""

    def __init__(self, table: str, record_id: str):
        self.table = table
        self.record_id = record_id
        super().__init__(
            f"Record {record_id} not found in {table} "
            "(missing, or the store refused the change)"
        )


class DuplicateRecordError(IPCError):
    """Raised when an insert violates a unique constraint."""


class ValidationFailedError(IPCError):
    """Raised when a coordinator validation could not be applied."""
