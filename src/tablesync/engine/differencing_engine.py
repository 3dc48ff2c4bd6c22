"""Reconcile declared DynamoDB tables against the live ones.

For each declared table a match is looked up by exact name. A missing table is
created from its definition. A matching table is compared index by index:
global secondary indexes declared locally but not remotely are created, and
those present remotely but no longer declared are deleted. Nothing else about
an existing table is changed.

Every mutating call is followed by polling until DynamoDB reports the table or
index settled, so the engine can be run on every deploy: once the remote state
matches the declaration a batch issues no changes at all.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field

from tablesync.core.config import AppSettings
from tablesync.core.exceptions import TableSyncError
from tablesync.core.protocols import ITableStore
from tablesync.core.types import DesiredTables
from tablesync.engine.index_naming import IndexKeyBinding, resolve_key_bindings
from tablesync.engine.schema_pair import SchemaPair
from tablesync.engine.waiters import StatusWaiter
from tablesync.models.report import SynchronizationReport, TableAction, TableOutcome
from tablesync.models.schema import (
    CreateIndexAction,
    GlobalSecondaryIndex,
    IndexStatus,
    TableDefinition,
)
from tablesync.persistence import create_table_store

logger = logging.getLogger(__name__)


@dataclass
class _Batch:
    """State private to one synchronize call."""

    definitions: dict[str, TableDefinition]
    waiter: StatusWaiter
    # Keyed by the name each table was described under.
    pairs: dict[str, SchemaPair] = field(default_factory=dict)
    report: SynchronizationReport = field(default_factory=SynchronizationReport)


class DifferencingEngine:
    """Converges remote tables to a declared set, one batch at a time.

    A single instance is meant to be long-lived and reused on every deploy.
    Concurrent synchronize calls on the same instance block on one another
    rather than interleave index mutations on the same table.
    """

    def __init__(
        self,
        store: ITableStore,
        poll_delay_ms: int = 500,
        timeout_seconds: float | None = None,
    ) -> None:
        self._store = store
        self._poll_delay_ms = poll_delay_ms
        self._timeout_seconds = timeout_seconds
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: AppSettings | None = None) -> DifferencingEngine:
        if settings is None:
            settings = AppSettings()
        return cls(
            create_table_store(settings),
            poll_delay_ms=settings.engine.poll_delay_ms,
            timeout_seconds=settings.engine.timeout_seconds,
        )

    def synchronize(
        self,
        desired: DesiredTables,
        cancel_event: threading.Event | None = None,
    ) -> SynchronizationReport:
        """Create missing tables and reconcile indexes on existing ones.

        Args:
            desired: Table name -> declared definition, processed in iteration order.
                Remote tables are looked up and changed under the mapping key;
                a definition whose own name differs is logged and still applied.
            cancel_event: Setting it aborts the batch at the next poll.

        Returns:
            One outcome per declared table.

        Raises:
            ConfigurationError: the declaration is unusable (bad index name,
                undeclared index attribute, missing definition).
            ProtocolViolationError: the store reported an unexpected status.
            SynchronizationCancelled, SynchronizationTimeoutError: a wait was
                interrupted. Changes already applied stay applied.
        """
        with self._lock:
            batch = _Batch(
                definitions=dict(desired),
                waiter=StatusWaiter(
                    self._store, self._poll_delay_ms, self._timeout_seconds, cancel_event
                ),
            )
            logger.info("Received %d declared table(s): %s.", len(batch.definitions), list(batch.definitions))
            try:
                self._pair_tables(batch)
                for table_name, pair in batch.pairs.items():
                    batch.report.outcomes.append(self._reconcile(batch, table_name, pair))
            except TableSyncError as exc:
                logger.error("Synchronization aborted: %s", exc)
                raise
            logger.info("Synchronization finished for %d table(s).", len(batch.pairs))
            return batch.report

    def _pair_tables(self, batch: _Batch) -> None:
        for table_name, definition in batch.definitions.items():
            description = self._store.describe_table(table_name)
            if description is not None:
                logger.info("Matched declared table %s with its remote counterpart.", table_name)
            else:
                logger.info("No remote table found for %s. It will be created from scratch.", table_name)
            batch.pairs[table_name] = SchemaPair(definition, description)

    def _reconcile(self, batch: _Batch, table_name: str, pair: SchemaPair) -> TableOutcome:
        """Apply one pair. ``table_name`` is the name the remote table was described under."""
        logger.info("Processing %r.", pair)
        outcome = TableOutcome(table_name=table_name)

        if pair.requires_creation():
            logger.info("Table %s has no remote counterpart. Creating it.", pair.table_name)
            self._store.create_table_if_not_exists(pair.definition)
            batch.waiter.wait_for_table_active(pair.table_name)
            outcome.action = TableAction.CREATED

        elif pair.requires_modification():
            logger.info("Table %s differs from its remote indexes. Reconciling.", table_name)
            to_delete = pair.indexes_to_delete()
            to_create = pair.indexes_to_create()
            bindings = {
                name: resolve_key_bindings(index, pair.definition.attribute_definitions)
                for name, index in to_create.items()
            }

            batch.waiter.wait_for_table_active(table_name)
            if to_delete:
                self._delete_superfluous_indexes(batch, table_name, pair, to_delete)
                logger.info("Deleted %d superfluous index(es) from %s.", len(to_delete), table_name)
            if to_create:
                self._create_missing_indexes(batch, table_name, to_create, bindings)
                logger.info("Created %d new index(es) on %s.", len(to_create), table_name)

            outcome.action = TableAction.MODIFIED
            outcome.indexes_deleted = list(to_delete)
            outcome.indexes_created = list(to_create)

        else:
            logger.info("Table %s is identical to its remote counterpart. Nothing to reconcile.", table_name)

        return outcome

    def _delete_superfluous_indexes(
        self, batch: _Batch, table_name: str, pair: SchemaPair, indexes: dict[str, GlobalSecondaryIndex]
    ) -> None:
        for index_name in indexes:
            observed = pair.observed_index(index_name)
            if observed is not None and observed.index_status == IndexStatus.DELETING:
                logger.info("Index %s on %s is already DELETING.", index_name, table_name)
            else:
                logger.info("Deleting index %s from %s.", index_name, table_name)
                self._store.delete_secondary_index(table_name, index_name)
            batch.waiter.wait_for_index_removed(table_name, index_name)

    def _create_missing_indexes(
        self,
        batch: _Batch,
        table_name: str,
        indexes: dict[str, GlobalSecondaryIndex],
        bindings: dict[str, IndexKeyBinding],
    ) -> None:
        for index_name, index in indexes.items():
            action = CreateIndexAction.from_index(index)
            binding = bindings[index_name]
            logger.info("Creating index %s on %s keyed on %s.", index_name, table_name,
                        [d.attribute_name for d in binding.attribute_definitions])
            self._store.create_secondary_index(
                table_name, action, binding.hash_definition, binding.range_definition
            )
            batch.waiter.wait_for_index_active(table_name, index_name)
