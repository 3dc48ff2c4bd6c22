"""End-to-end synchronization against moto's DynamoDB."""

from __future__ import annotations

import pytest

from tablesync.core.exceptions import IndexNamingError
from tablesync.engine.differencing_engine import DifferencingEngine
from tablesync.engine.index_naming import INDEX_NAME_DELIMITER
from tablesync.models.report import TableAction
from tablesync.models.schema import KeyType, TableDefinition
from tests.fakes import TableDefinitionBuilder
from tests.fakes.builders import hash_only_index


@pytest.fixture
def engine(dynamo_store):
    return DifferencingEngine(dynamo_store, poll_delay_ms=0, timeout_seconds=30)


def _sync(engine: DifferencingEngine, *definitions: TableDefinition):
    return engine.synchronize({d.table_name: d for d in definitions})


def _remote_indexes(store, table_name: str) -> set[str]:
    return {i.index_name for i in store.describe_table(table_name).global_secondary_indexes or []}


class TestCreatesTables:
    def test_hash_only_table(self, engine, dynamo_store):
        definition = TableDefinitionBuilder.valid().with_hash_key_only().build()
        report = _sync(engine, definition)

        description = dynamo_store.describe_table(definition.table_name)
        assert [k.key_type for k in description.key_schema] == [KeyType.HASH]
        assert description.attribute_definitions == definition.attribute_definitions
        assert report.outcome_for(definition.table_name).action == TableAction.CREATED

    def test_hash_and_range_table(self, engine, dynamo_store):
        definition = TableDefinitionBuilder.valid().with_hash_and_range_key().build()
        _sync(engine, definition)

        description = dynamo_store.describe_table(definition.table_name)
        assert [k.key_type for k in description.key_schema] == [KeyType.HASH, KeyType.RANGE]

    def test_local_secondary_indexes(self, engine, dynamo_store):
        definition = TableDefinitionBuilder.valid().with_hash_and_range_key() \
            .with_local_secondary_index_count(3).build()
        _sync(engine, definition)

        description = dynamo_store.describe_table(definition.table_name)
        assert len(description.local_secondary_indexes) == 3

    def test_simple_global_indexes(self, engine, dynamo_store):
        definition = TableDefinitionBuilder.valid().with_hash_key_only() \
            .with_global_secondary_index_hash_only_count(3).build()
        _sync(engine, definition)

        description = dynamo_store.describe_table(definition.table_name)
        assert len(description.global_secondary_indexes) == 3
        for index in description.global_secondary_indexes:
            segments = index.index_name.split(INDEX_NAME_DELIMITER)
            assert len(segments) == 2
            assert index.key_schema[0].attribute_name == segments[0]

    def test_complex_global_indexes(self, engine, dynamo_store):
        definition = TableDefinitionBuilder.valid().with_hash_and_range_key() \
            .with_global_secondary_index_hash_and_range_count(2).build()
        _sync(engine, definition)

        description = dynamo_store.describe_table(definition.table_name)
        for index in description.global_secondary_indexes:
            segments = index.index_name.split(INDEX_NAME_DELIMITER)
            assert len(segments) == 3
            assert [(k.attribute_name, k.key_type) for k in index.key_schema] == [
                (segments[0], KeyType.HASH), (segments[1], KeyType.RANGE),
            ]


class TestEvolvesTables:
    def test_idempotent(self, engine, dynamo_store):
        definition = TableDefinitionBuilder.valid().with_hash_key_only() \
            .with_global_secondary_index_hash_only_count(2).build()
        _sync(engine, definition)
        before = dynamo_store.describe_table(definition.table_name)

        report = _sync(engine, definition)

        assert not report.changed
        assert _remote_indexes(dynamo_store, definition.table_name) == {
            i.index_name for i in before.global_secondary_indexes
        }

    def test_evolving_schema(self, engine, dynamo_store):
        builder = TableDefinitionBuilder.valid().with_hash_key_only() \
            .with_global_secondary_index_hash_only_count(2)
        original = builder.build()
        _sync(engine, original)

        kept = original.global_secondary_indexes[0]
        evolved = original.model_copy(update={
            "global_secondary_indexes": [kept, hash_only_index(original.key_schema[0].attribute_name)],
        })
        report = _sync(engine, evolved)

        assert _remote_indexes(dynamo_store, original.table_name) == {
            kept.index_name, f"{original.key_schema[0].attribute_name}-Index",
        }
        outcome = report.outcome_for(original.table_name)
        assert outcome.indexes_deleted == [original.global_secondary_indexes[1].index_name]

    def test_three_cycles_converge(self, engine, dynamo_store):
        definition = TableDefinitionBuilder.valid().with_hash_key_only() \
            .with_global_secondary_index_hash_only_count(3).build()
        a, b, c = definition.global_secondary_indexes

        for declared in ([a, b], [b, c], [c]):
            _sync(engine, definition.model_copy(update={"global_secondary_indexes": declared}))
            assert _remote_indexes(dynamo_store, definition.table_name) == {i.index_name for i in declared}

    def test_bad_index_name_leaves_remote_table_unchanged(self, engine, dynamo_store):
        definition = TableDefinitionBuilder.valid().with_hash_key_only() \
            .with_global_secondary_index_hash_only_count(1).build()
        _sync(engine, definition)

        bad = definition.global_secondary_indexes[0].model_copy(update={"index_name": "x-y-z-Index"})
        with pytest.raises(IndexNamingError):
            _sync(engine, definition.model_copy(update={"global_secondary_indexes": [bad]}))

        assert _remote_indexes(dynamo_store, definition.table_name) == {
            definition.global_secondary_indexes[0].index_name
        }
