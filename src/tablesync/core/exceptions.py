"""tablesync exception hierarchy."""

from __future__ import annotations


class TableSyncError(Exception):
    """Base exception for all tablesync errors."""


class ConfigurationError(TableSyncError):
    """The declared schema is unusable and must be fixed by the deployer."""


class MissingTableDefinitionError(ConfigurationError):
    """A schema pair was requested without a declared table definition."""


class IndexNamingError(ConfigurationError):
    """An index name does not encode a 1- or 2-key schema as 'hash[-range]-Index'."""

    def __init__(self, index_name: str, message: str) -> None:
        self.index_name = index_name
        super().__init__(f"Invalid index name {index_name!r}: {message}")


class UnresolvedAttributeError(ConfigurationError):
    """An index name refers to attributes the owning table does not declare."""

    def __init__(self, index_name: str, attribute_names: list[str], declared: list[str]) -> None:
        self.index_name = index_name
        self.attribute_names = attribute_names
        self.declared = declared
        super().__init__(
            f"Index {index_name!r} refers to attribute(s) {attribute_names} "
            f"which are not among the declared attribute definitions {declared}"
        )


class ProtocolViolationError(TableSyncError):
    """The store reported a status the reconciliation model does not allow."""

    def __init__(self, table_name: str, status: str | None, message: str,
                 index_name: str | None = None) -> None:
        self.table_name = table_name
        self.index_name = index_name
        self.status = status
        subject = f"index {index_name!r} on table {table_name!r}" if index_name else f"table {table_name!r}"
        super().__init__(f"Unexpected status {status!r} for {subject}: {message}")


class SynchronizationCancelled(TableSyncError):
    """The batch was cancelled while waiting on the store."""


class SynchronizationTimeoutError(TableSyncError):
    """A wait on the store exceeded the configured deadline."""

    def __init__(self, table_name: str, timeout_seconds: float, index_name: str | None = None) -> None:
        self.table_name = table_name
        self.index_name = index_name
        self.timeout_seconds = timeout_seconds
        subject = f"index {index_name!r} on table {table_name!r}" if index_name else f"table {table_name!r}"
        super().__init__(f"Gave up waiting on {subject} after {timeout_seconds}s")


class StoreError(TableSyncError):
    """A DynamoDB call failed for a reason other than the expected ones."""
