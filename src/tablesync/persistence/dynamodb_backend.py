"""DynamoDB backend implementing ITableStore."""

from __future__ import annotations

import logging
from typing import Any

import boto3
from botocore.exceptions import ClientError

from tablesync.core.exceptions import StoreError
from tablesync.models.schema import (
    AttributeDefinition,
    CreateIndexAction,
    TableDefinition,
    TableDescription,
)

logger = logging.getLogger(__name__)


def _error_code(exc: ClientError) -> str:
    return exc.response.get("Error", {}).get("Code", "")


class DynamoDBTableStore:
    """Production ITableStore backed by the DynamoDB control-plane API."""

    WAITER_DELAY_SECONDS = 20
    WAITER_MAX_ATTEMPTS = 30  # 10 minutes

    def __init__(self, region: str = "us-east-1", endpoint_url: str | None = None) -> None:
        self._region = region
        self._endpoint_url = endpoint_url
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._client = boto3.client("dynamodb", **kwargs)

    def describe_table(self, table_name: str) -> TableDescription | None:
        try:
            resp = self._client.describe_table(TableName=table_name)
        except ClientError as exc:
            if _error_code(exc) == "ResourceNotFoundException":
                return None
            raise StoreError(f"DescribeTable failed for {table_name!r}: {exc}") from exc
        return TableDescription.from_dynamodb(resp["Table"])

    def create_table_if_not_exists(self, definition: TableDefinition) -> bool:
        """Issue CreateTable. Returns False if the table already existed."""
        try:
            self._client.create_table(**definition.to_dynamodb())
        except ClientError as exc:
            if _error_code(exc) == "ResourceInUseException":
                logger.info("Table %s already exists; not creating it.", definition.table_name)
                return False
            raise StoreError(f"CreateTable failed for {definition.table_name!r}: {exc}") from exc
        logger.info("Issued CreateTable for %s.", definition.table_name)
        return True

    def wait_until_table_active(self, table_name: str) -> None:
        waiter = self._client.get_waiter("table_exists")
        waiter.wait(
            TableName=table_name,
            WaiterConfig={"Delay": self.WAITER_DELAY_SECONDS, "MaxAttempts": self.WAITER_MAX_ATTEMPTS},
        )

    def create_secondary_index(
        self,
        table_name: str,
        action: CreateIndexAction,
        hash_definition: AttributeDefinition,
        range_definition: AttributeDefinition | None = None,
    ) -> str:
        definitions = [hash_definition]
        if range_definition is not None and range_definition != hash_definition:
            definitions.append(range_definition)
        try:
            self._client.update_table(
                TableName=table_name,
                AttributeDefinitions=[d.to_dynamodb() for d in definitions],
                GlobalSecondaryIndexUpdates=[{"Create": action.to_dynamodb()}],
            )
        except ClientError as exc:
            raise StoreError(
                f"Creating index {action.index_name!r} on {table_name!r} failed: {exc}"
            ) from exc
        logger.info("Issued index creation for %s on %s.", action.index_name, table_name)
        return action.index_name

    def delete_secondary_index(self, table_name: str, index_name: str) -> None:
        try:
            self._client.update_table(
                TableName=table_name,
                GlobalSecondaryIndexUpdates=[{"Delete": {"IndexName": index_name}}],
            )
        except ClientError as exc:
            raise StoreError(f"Deleting index {index_name!r} on {table_name!r} failed: {exc}") from exc
        logger.info("Issued index deletion for %s on %s.", index_name, table_name)

    def list_table_names(self) -> list[str]:
        try:
            names: list[str] = []
            paginator = self._client.get_paginator("list_tables")
            for page in paginator.paginate():
                names.extend(page.get("TableNames", []))
            return names
        except ClientError as exc:
            raise StoreError(f"ListTables failed: {exc}") from exc

    def delete_table(self, table_name: str) -> None:
        try:
            self._client.delete_table(TableName=table_name)
        except ClientError as exc:
            raise StoreError(f"DeleteTable failed for {table_name!r}: {exc}") from exc
        logger.info("Issued DeleteTable for %s.", table_name)

    def __repr__(self) -> str:
        args: dict[str, Any] = {"region": self._region}
        if self._endpoint_url:
            args["endpoint_url"] = self._endpoint_url
        return f"DynamoDBTableStore({', '.join(f'{k}={v!r}' for k, v in args.items())})"
