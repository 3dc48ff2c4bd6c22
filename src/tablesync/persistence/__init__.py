"""Pluggable table store backends behind the ITableStore protocol."""

from __future__ import annotations

from tablesync.core.config import AppSettings
from tablesync.persistence.dynamodb_backend import DynamoDBTableStore


def create_table_store(settings: AppSettings | None = None) -> DynamoDBTableStore:
    """Create the DynamoDB table store from application settings."""
    if settings is None:
        settings = AppSettings()

    return DynamoDBTableStore(
        region=settings.dynamodb.region,
        endpoint_url=settings.dynamodb.endpoint_url,
    )
