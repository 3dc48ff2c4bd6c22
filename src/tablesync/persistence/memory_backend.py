"""In-memory table store for unit tests: a dict-backed fake with delayed statuses.

Mutations do not settle immediately: a new table reports CREATING, a new index
CREATING and a dropped index DELETING for ``settle_after`` describe calls
before becoming ACTIVE (or disappearing). The parent table reports UPDATING
while any of its indexes is in flight, and rejects index changes until it is
ACTIVE again, like DynamoDB does.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from tablesync.core.exceptions import StoreError
from tablesync.models.schema import (
    AttributeDefinition,
    CreateIndexAction,
    GlobalSecondaryIndexDescription,
    IndexStatus,
    KeySchemaElement,
    LocalSecondaryIndexDescription,
    Projection,
    ProvisionedThroughputDescription,
    TableDefinition,
    TableDescription,
    TableStatus,
)

_MAX_WAIT_ATTEMPTS = 1000


@dataclass
class _MemoryIndex:
    index_name: str
    key_schema: list[KeySchemaElement]
    projection: Projection
    throughput: ProvisionedThroughputDescription
    status: str = IndexStatus.ACTIVE
    remaining: int = 0


@dataclass
class _MemoryTable:
    definition: TableDefinition
    attribute_definitions: list[AttributeDefinition]
    status: str = TableStatus.ACTIVE
    remaining: int = 0
    indexes: dict[str, _MemoryIndex] = field(default_factory=dict)

    @property
    def effective_status(self) -> str:
        if self.status != TableStatus.ACTIVE:
            return self.status
        if any(i.status != IndexStatus.ACTIVE for i in self.indexes.values()):
            return TableStatus.UPDATING
        return TableStatus.ACTIVE


class MemoryTableStore:
    """Dict-backed ITableStore for unit tests."""

    def __init__(self, settle_after: int = 0) -> None:
        self._settle_after = settle_after
        self._tables: dict[str, _MemoryTable] = {}
        self._pinned_tables: dict[str, str] = {}
        self._pinned_indexes: dict[tuple[str, str], str] = {}
        self.calls: list[tuple[str, ...]] = []
        self.describe_count = 0

    # ---- test setup ----

    def add_table(self, definition: TableDefinition) -> None:
        """Seed an existing, fully ACTIVE remote table without recording a call."""
        self._tables[definition.table_name] = self._build_table(definition, TableStatus.ACTIVE, 0)

    def pin_table_status(self, table_name: str, status: str) -> None:
        """Always report ``status`` for the table, whatever its real state."""
        self._pinned_tables[table_name] = status

    def pin_index_status(self, table_name: str, index_name: str, status: str) -> None:
        """Always report ``status`` for the index while it exists."""
        self._pinned_indexes[(table_name, index_name)] = status

    def mutations(self, table_name: str | None = None) -> list[tuple[str, ...]]:
        return [c for c in self.calls if table_name is None or c[1] == table_name]

    # ---- ITableStore ----

    def describe_table(self, table_name: str) -> TableDescription | None:
        self.describe_count += 1
        table = self._tables.get(table_name)
        if table is None:
            return None
        self._tick(table)
        return self._describe(table)

    def create_table_if_not_exists(self, definition: TableDefinition) -> bool:
        if definition.table_name in self._tables:
            return False
        self.calls.append(("create_table", definition.table_name))
        self._tables[definition.table_name] = self._build_table(
            definition, TableStatus.CREATING, self._settle_after
        )
        return True

    def wait_until_table_active(self, table_name: str) -> None:
        for _ in range(_MAX_WAIT_ATTEMPTS):
            description = self.describe_table(table_name)
            if description is not None and description.table_status == TableStatus.ACTIVE:
                return
        raise StoreError(f"Table {table_name!r} never became ACTIVE")

    def create_secondary_index(
        self,
        table_name: str,
        action: CreateIndexAction,
        hash_definition: AttributeDefinition,
        range_definition: AttributeDefinition | None = None,
    ) -> str:
        table = self._require_active(table_name)
        if action.index_name in table.indexes:
            raise StoreError(f"Index {action.index_name!r} already exists on {table_name!r}")
        self.calls.append(("create_index", table_name, action.index_name))

        known = {d.attribute_name for d in table.attribute_definitions}
        for definition in (hash_definition, range_definition):
            if definition is not None and definition.attribute_name not in known:
                table.attribute_definitions.append(definition)
                known.add(definition.attribute_name)

        throughput = action.provisioned_throughput
        table.indexes[action.index_name] = _MemoryIndex(
            index_name=action.index_name,
            key_schema=list(action.key_schema),
            projection=action.projection,
            throughput=ProvisionedThroughputDescription(
                read_capacity_units=throughput.read_capacity_units if throughput else 0,
                write_capacity_units=throughput.write_capacity_units if throughput else 0,
            ),
            status=IndexStatus.CREATING,
            remaining=self._settle_after,
        )
        return action.index_name

    def delete_secondary_index(self, table_name: str, index_name: str) -> None:
        table = self._require_active(table_name)
        index = table.indexes.get(index_name)
        if index is None:
            raise StoreError(f"Index {index_name!r} does not exist on {table_name!r}")
        self.calls.append(("delete_index", table_name, index_name))
        index.status = IndexStatus.DELETING
        index.remaining = self._settle_after

    def list_table_names(self) -> list[str]:
        return sorted(self._tables)

    def delete_table(self, table_name: str) -> None:
        if self._tables.pop(table_name, None) is None:
            raise StoreError(f"Table {table_name!r} does not exist")
        self.calls.append(("delete_table", table_name))

    # ---- internals ----

    @staticmethod
    def _build_table(definition: TableDefinition, status: str, remaining: int) -> _MemoryTable:
        table = _MemoryTable(
            definition=definition,
            attribute_definitions=list(definition.attribute_definitions),
            status=status,
            remaining=remaining,
        )
        for index in definition.global_secondary_indexes or []:
            throughput = index.provisioned_throughput
            table.indexes[index.index_name] = _MemoryIndex(
                index_name=index.index_name,
                key_schema=list(index.key_schema),
                projection=index.projection,
                throughput=ProvisionedThroughputDescription(
                    read_capacity_units=throughput.read_capacity_units if throughput else 0,
                    write_capacity_units=throughput.write_capacity_units if throughput else 0,
                ),
            )
        return table

    def _require_active(self, table_name: str) -> _MemoryTable:
        table = self._tables.get(table_name)
        if table is None:
            raise StoreError(f"Table {table_name!r} does not exist")
        if table.effective_status != TableStatus.ACTIVE:
            raise StoreError(f"Table {table_name!r} is {table.effective_status}; index changes are rejected")
        return table

    @staticmethod
    def _tick(table: _MemoryTable) -> None:
        if table.status == TableStatus.CREATING:
            if table.remaining > 0:
                table.remaining -= 1
            else:
                table.status = TableStatus.ACTIVE
        for name, index in list(table.indexes.items()):
            if index.status == IndexStatus.ACTIVE:
                continue
            if index.remaining > 0:
                index.remaining -= 1
            elif index.status == IndexStatus.DELETING:
                del table.indexes[name]
            else:
                index.status = IndexStatus.ACTIVE

    def _describe(self, table: _MemoryTable) -> TableDescription:
        name = table.definition.table_name
        indexes = [
            GlobalSecondaryIndexDescription(
                index_name=index.index_name,
                key_schema=index.key_schema,
                projection=index.projection,
                index_status=self._pinned_indexes.get((name, index.index_name), index.status),
                provisioned_throughput=index.throughput,
            )
            for index in table.indexes.values()
        ]
        local_indexes = [
            LocalSecondaryIndexDescription(
                index_name=index.index_name, key_schema=index.key_schema, projection=index.projection
            )
            for index in table.definition.local_secondary_indexes or []
        ]
        return TableDescription(
            table_name=name,
            table_status=self._pinned_tables.get(name, table.effective_status),
            key_schema=table.definition.key_schema,
            attribute_definitions=list(table.attribute_definitions),
            global_secondary_indexes=indexes or None,
            local_secondary_indexes=local_indexes or None,
        )
