"""A declared table definition paired with its observed remote description."""

from __future__ import annotations

import logging

from tablesync.core.exceptions import MissingTableDefinitionError
from tablesync.models.schema import (
    GlobalSecondaryIndex,
    GlobalSecondaryIndexDescription,
    TableDefinition,
    TableDescription,
)

logger = logging.getLogger(__name__)


class SchemaPair:
    """Two versions of one table: the declared (latest) and the remote one.

    The index maps are snapshots taken here. They are compared by index name
    only, so an index whose name survives but whose key schema or projection
    changed counts as unchanged.
    """

    def __init__(self, definition: TableDefinition | None, description: TableDescription | None) -> None:
        if definition is None:
            logger.error("Cannot pair a table without a declared definition; there must always be a local table.")
            raise MissingTableDefinitionError(
                "Cannot pair a table without a declared definition; there must always be a local table."
            )

        if description is not None and description.table_name != definition.table_name:
            # The pair proceeds under the declared name.
            logger.error(
                "Pairing tables with different names. Declared: %s. Observed: %s.",
                definition.table_name,
                description.table_name,
            )

        self._definition = definition
        self._description = description

        self._local: dict[str, GlobalSecondaryIndex] = {
            index.index_name: index for index in definition.global_secondary_indexes or []
        }
        self._remote: dict[str, GlobalSecondaryIndexDescription] = {}
        if description is not None:
            self._remote = {index.index_name: index for index in description.global_secondary_indexes or []}

        logger.info(
            "Paired table %s: %d declared index(es), %s.",
            self.table_name,
            len(self._local),
            f"{len(self._remote)} observed index(es)" if description is not None else "no remote table yet",
        )

    @property
    def table_name(self) -> str:
        return self._definition.table_name

    @property
    def definition(self) -> TableDefinition:
        return self._definition

    @property
    def description(self) -> TableDescription | None:
        return self._description

    def requires_creation(self) -> bool:
        return self._description is None

    def requires_modification(self) -> bool:
        return not self.requires_creation() and bool(self.indexes_to_create() or self.indexes_to_delete())

    def indexes_to_create(self) -> dict[str, GlobalSecondaryIndex]:
        """Declared indexes missing remotely. Empty when the whole table is new."""
        if self.requires_creation():
            return {}
        return {name: index for name, index in self._local.items() if name not in self._remote}

    def indexes_to_delete(self) -> dict[str, GlobalSecondaryIndex]:
        """Remote indexes no longer declared, converted to the declared shape."""
        if self._description is None:
            return {}
        return {
            name: GlobalSecondaryIndex.from_description(index)
            for name, index in self._remote.items()
            if name not in self._local
        }

    def observed_index(self, index_name: str) -> GlobalSecondaryIndexDescription | None:
        return self._remote.get(index_name)

    def __repr__(self) -> str:
        return (
            f"SchemaPair(table_name={self.table_name!r}, local={sorted(self._local)}, "
            f"remote={sorted(self._remote) if self._description is not None else None})"
        )
