"""Shared unit test fixtures backed by moto DynamoDB."""

from __future__ import annotations

import boto3
import pytest
from moto import mock_aws

from tablesync.persistence.dynamodb_backend import DynamoDBTableStore

REGION = "us-east-1"


@pytest.fixture
def aws():
    with mock_aws():
        yield boto3.client("dynamodb", region_name=REGION)


@pytest.fixture
def dynamo_store(aws):
    return DynamoDBTableStore(region=REGION)
