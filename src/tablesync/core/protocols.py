"""Protocol interfaces for tablesync abstractions.

Structural typing only: the engine never inherits from a store, and test
doubles satisfy these by shape.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from tablesync.models.schema import (
        AttributeDefinition,
        CreateIndexAction,
        TableDefinition,
        TableDescription,
    )


# ---------------------------------------------------------------------------
# Persistence: Table Store
# ---------------------------------------------------------------------------

@runtime_checkable
class ITableStore(Protocol):
    """Table and index provisioning surface of a DynamoDB-compatible store."""

    def describe_table(self, table_name: str) -> TableDescription | None: ...

    def create_table_if_not_exists(self, definition: TableDefinition) -> bool: ...

    def wait_until_table_active(self, table_name: str) -> None: ...

    def create_secondary_index(
        self,
        table_name: str,
        action: CreateIndexAction,
        hash_definition: AttributeDefinition,
        range_definition: AttributeDefinition | None = None,
    ) -> str: ...

    def delete_secondary_index(self, table_name: str, index_name: str) -> None: ...

    def list_table_names(self) -> list[str]: ...

    def delete_table(self, table_name: str) -> None: ...
