"""Fixed-interval polling until the store reports a terminal status."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

from tablesync.core.exceptions import (
    ProtocolViolationError,
    SynchronizationCancelled,
    SynchronizationTimeoutError,
)
from tablesync.core.protocols import ITableStore
from tablesync.models.schema import IndexStatus, TableStatus

logger = logging.getLogger(__name__)

_TABLE_IN_PROGRESS = frozenset({TableStatus.CREATING, TableStatus.UPDATING})
_INDEX_IN_PROGRESS = frozenset({IndexStatus.CREATING, IndexStatus.UPDATING})


class StatusWaiter:
    """Blocks the calling thread until a table or index settles.

    Each wait re-describes the table, inspects the status and sleeps
    ``poll_delay_ms`` between attempts. Setting ``cancel_event`` interrupts the
    sleep and raises SynchronizationCancelled. ``timeout_seconds`` bounds each
    individual wait, including the wait for the parent table that precedes
    every index wait; None waits forever.
    """

    def __init__(
        self,
        store: ITableStore,
        poll_delay_ms: int,
        timeout_seconds: float | None = None,
        cancel_event: threading.Event | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._store = store
        self._delay = poll_delay_ms / 1000
        self._timeout = timeout_seconds
        self._cancel_event = cancel_event
        self._clock = clock

    def wait_for_table_active(self, table_name: str) -> None:
        logger.info("Waiting for table %s to be ACTIVE.", table_name)
        self._await_table_active(table_name, self._deadline())

    def _await_table_active(self, table_name: str, deadline: float | None) -> None:
        while True:
            description = self._store.describe_table(table_name)
            status = description.table_status if description is not None else None
            if status == TableStatus.ACTIVE:
                logger.info("Table %s is ACTIVE.", table_name)
                return
            if description is not None and status not in _TABLE_IN_PROGRESS:
                raise ProtocolViolationError(
                    table_name, status, "expected the table to become ACTIVE"
                )
            self._sleep(deadline, table_name)

    def wait_for_index_active(self, table_name: str, index_name: str) -> None:
        logger.info("Waiting for index %s on table %s to be ACTIVE.", index_name, table_name)
        deadline = self._deadline()
        self._await_table_active(table_name, deadline)
        while True:
            description = self._store.describe_table(table_name)
            index = description.find_index(index_name) if description is not None else None
            if index is not None:
                if index.index_status == IndexStatus.ACTIVE:
                    logger.info("Index %s on table %s is ACTIVE.", index_name, table_name)
                    return
                if index.index_status == IndexStatus.DELETING:
                    raise ProtocolViolationError(
                        table_name, index.index_status, "index was changed to DELETING while being created",
                        index_name=index_name,
                    )
                if index.index_status not in _INDEX_IN_PROGRESS:
                    raise ProtocolViolationError(
                        table_name, index.index_status, "unrecognised index status", index_name=index_name,
                    )
            self._sleep(deadline, table_name, index_name)

    def wait_for_index_removed(self, table_name: str, index_name: str) -> None:
        """Return once the index is gone from the table's index list.

        DynamoDB keeps listing an index as DELETING until removal completes.
        """
        logger.info("Waiting for index %s to leave the description of table %s.", index_name, table_name)
        deadline = self._deadline()
        self._await_table_active(table_name, deadline)
        while True:
            description = self._store.describe_table(table_name)
            index = description.find_index(index_name) if description is not None else None
            if index is None:
                logger.info("Index %s is no longer listed on table %s.", index_name, table_name)
                return
            if index.index_status != IndexStatus.DELETING:
                raise ProtocolViolationError(
                    table_name, index.index_status, "index left DELETING before it was removed",
                    index_name=index_name,
                )
            self._sleep(deadline, table_name, index_name)

    def _deadline(self) -> float | None:
        return None if self._timeout is None else self._clock() + self._timeout

    def _sleep(self, deadline: float | None, table_name: str, index_name: str | None = None) -> None:
        if deadline is not None and self._clock() >= deadline:
            raise SynchronizationTimeoutError(table_name, self._timeout, index_name=index_name)
        if self._cancel_event is None:
            time.sleep(self._delay)
        elif self._cancel_event.wait(self._delay):
            logger.error(
                "Cancelled while waiting on table %s%s. Deploy again to finish reconciling.",
                table_name,
                f" index {index_name}" if index_name else "",
            )
            raise SynchronizationCancelled(f"Cancelled while waiting on table {table_name!r}")
