"""Outcome of a synchronization batch."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field


class TableAction(StrEnum):
    CREATED = "CREATED"
    MODIFIED = "MODIFIED"
    UNCHANGED = "UNCHANGED"


class TableOutcome(BaseModel):
    """What one batch did to one declared table."""

    table_name: str
    action: TableAction = TableAction.UNCHANGED
    indexes_created: list[str] = Field(default_factory=list)
    indexes_deleted: list[str] = Field(default_factory=list)


class SynchronizationReport(BaseModel):
    """Per-table outcomes in the order the tables were declared."""

    outcomes: list[TableOutcome] = Field(default_factory=list)

    @property
    def changed(self) -> bool:
        return any(o.action != TableAction.UNCHANGED for o in self.outcomes)

    def outcome_for(self, table_name: str) -> TableOutcome:
        for outcome in self.outcomes:
            if outcome.table_name == table_name:
                return outcome
        raise KeyError(table_name)
