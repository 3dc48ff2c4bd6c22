"""Integration test fixtures for LocalStack DynamoDB."""

from __future__ import annotations

import os

import boto3
import pytest
from botocore.exceptions import BotoCoreError, ClientError

from tablesync.engine.differencing_engine import DifferencingEngine
from tablesync.persistence.dynamodb_backend import DynamoDBTableStore
from tests.fakes import SAFE_PREFIX

# Default LocalStack endpoint
LOCALSTACK_URL = os.environ.get("LOCALSTACK_URL", "http://localhost:4566")
REGION = "us-east-1"


def _localstack_available() -> bool:
    """Check if LocalStack is reachable."""
    try:
        client = boto3.client("dynamodb", region_name=REGION, endpoint_url=LOCALSTACK_URL)
        client.list_tables()
        return True
    except (BotoCoreError, ClientError):
        return False


skip_no_localstack = pytest.mark.skipif(
    not _localstack_available(),
    reason="LocalStack not available",
)


@pytest.fixture
def localstack_store():
    """Table store pointing at LocalStack; drops every safe-prefixed table afterwards."""
    store = DynamoDBTableStore(region=REGION, endpoint_url=LOCALSTACK_URL)
    yield store
    for table_name in store.list_table_names():
        if table_name.startswith(SAFE_PREFIX):
            store.delete_table(table_name)


@pytest.fixture
def localstack_engine(localstack_store):
    return DifferencingEngine(localstack_store, poll_delay_ms=200, timeout_seconds=120)
