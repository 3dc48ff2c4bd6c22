"""Type aliases used across tablesync."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from tablesync.models.schema import TableDefinition

JsonDict = dict[str, Any]
TableName = str
IndexName = str
DesiredTables = Mapping[TableName, "TableDefinition"]
