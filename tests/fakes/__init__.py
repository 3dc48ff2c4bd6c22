"""Shared test doubles: the memory table store and a table definition builder."""

from __future__ import annotations

from tablesync.persistence.memory_backend import MemoryTableStore
from tests.fakes.builders import SAFE_PREFIX, TableDefinitionBuilder

__all__ = ["SAFE_PREFIX", "MemoryTableStore", "TableDefinitionBuilder"]
