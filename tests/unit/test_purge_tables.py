"""Tests for the table purge script."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import pytest

from tablesync.core.logger import LOGGER_NAME
from tests.fakes import MemoryTableStore, TableDefinitionBuilder

# Make scripts/ importable
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent / "scripts"))

from purge_tables import main, purge_tables  # noqa: E402


def _create(store, name: str) -> None:
    store.create_table_if_not_exists(
        TableDefinitionBuilder.valid().with_hash_key_only().with_table_name(name).build()
    )


class TestPurgeTables:
    def test_deletes_only_prefixed_tables(self, dynamo_store, aws):
        _create(dynamo_store, "dev_orders")
        _create(dynamo_store, "dev_users")
        aws.create_table(
            TableName="prod_orders",
            KeySchema=[{"AttributeName": "id", "KeyType": "HASH"}],
            AttributeDefinitions=[{"AttributeName": "id", "AttributeType": "S"}],
            BillingMode="PAY_PER_REQUEST",
        )

        deleted = purge_tables(dynamo_store, "dev_")

        assert sorted(deleted) == ["dev_orders", "dev_users"]
        assert dynamo_store.list_table_names() == ["prod_orders"]

    def test_empty_prefix_is_refused(self):
        store = MemoryTableStore()
        _create(store, "dev_orders")
        with pytest.raises(ValueError):
            purge_tables(store, "")
        assert store.list_table_names() == ["dev_orders"]

    def test_reports_kept_tables(self, capsys):
        store = MemoryTableStore()
        definition = TableDefinitionBuilder.valid().with_hash_key_only().build()
        store.add_table(definition.model_copy(update={"table_name": "prod_x"}))
        assert purge_tables(store, "dev_") == []
        assert "Keeping table prod_x" in capsys.readouterr().out


@pytest.fixture
def _restore_package_logger():
    logger = logging.getLogger(LOGGER_NAME)
    handlers, level = list(logger.handlers), logger.level
    yield
    logger.handlers = handlers
    logger.setLevel(level)


@pytest.mark.usefixtures("_restore_package_logger")
def test_main_uses_command_line_prefix(aws, monkeypatch, capsys):
    aws.create_table(
        TableName="tmp_scratch",
        KeySchema=[{"AttributeName": "id", "KeyType": "HASH"}],
        AttributeDefinitions=[{"AttributeName": "id", "AttributeType": "S"}],
        BillingMode="PAY_PER_REQUEST",
    )
    monkeypatch.setattr(sys, "argv", ["purge_tables.py", "--region", "us-east-1", "--prefix", "tmp_"])

    main()

    assert aws.list_tables()["TableNames"] == []
    captured = capsys.readouterr()
    assert "Deleted 1 table(s)" in captured.out
    assert "Issued DeleteTable for tmp_scratch." in captured.err
