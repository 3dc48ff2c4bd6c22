"""Delete every DynamoDB table whose name starts with a safe prefix.

Used to tear down tables created by test runs and throwaway environments.

Usage:
    python scripts/purge_tables.py --endpoint-url http://localhost:4566 --prefix dev_
"""

from __future__ import annotations

import argparse
from typing import Any

from tablesync.core.config import AppSettings
from tablesync.core.logger import configure_logging
from tablesync.core.protocols import ITableStore
from tablesync.persistence import create_table_store


def purge_tables(store: ITableStore, prefix: str) -> list[str]:
    """Delete tables named ``prefix*``. Returns the deleted names.

    Raises ValueError on an empty prefix, which would match every table.
    """
    if not prefix:
        raise ValueError("Refusing to purge tables without a safe prefix")

    deleted: list[str] = []
    for table_name in store.list_table_names():
        if not table_name.startswith(prefix):
            print(f"  Keeping table {table_name}")
            continue
        store.delete_table(table_name)
        deleted.append(table_name)
        print(f"  Deleted table {table_name}")
    return deleted


def main() -> None:
    settings = AppSettings()
    parser = argparse.ArgumentParser(description="Delete DynamoDB tables carrying a safe prefix")
    parser.add_argument("--endpoint-url", default=settings.dynamodb.endpoint_url,
                        help="DynamoDB endpoint (e.g. http://localhost:4566)")
    parser.add_argument("--region", default=settings.dynamodb.region, help="AWS region")
    parser.add_argument("--prefix", default=settings.engine.safe_prefix, help="Table name prefix (e.g. dev_)")
    args = parser.parse_args()

    overrides: dict[str, Any] = {"region": args.region, "endpoint_url": args.endpoint_url}
    settings.dynamodb = settings.dynamodb.model_copy(update=overrides)
    configure_logging(settings)

    print(f"Purging tables starting with {args.prefix!r}...")
    deleted = purge_tables(create_table_store(settings), args.prefix)
    print(f"Done! Deleted {len(deleted)} table(s).")


if __name__ == "__main__":
    main()
