"""Re-export persistence protocols from core for convenience."""

from __future__ import annotations

from tablesync.core.protocols import ITableStore

__all__ = ["ITableStore"]
