"""Declared and observed DynamoDB table schema models.

Field names are snake_case; aliases are the PascalCase keys DynamoDB uses on
the wire, so describe_table responses validate directly and declared models
dump straight into CreateTable / UpdateTable keyword arguments.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_pascal

from tablesync.core.types import JsonDict


class KeyType(StrEnum):
    HASH = "HASH"
    RANGE = "RANGE"


class ScalarAttributeType(StrEnum):
    S = "S"
    N = "N"
    B = "B"


class ProjectionType(StrEnum):
    ALL = "ALL"
    KEYS_ONLY = "KEYS_ONLY"
    INCLUDE = "INCLUDE"


class BillingMode(StrEnum):
    PROVISIONED = "PROVISIONED"
    PAY_PER_REQUEST = "PAY_PER_REQUEST"


class TableStatus(StrEnum):
    CREATING = "CREATING"
    UPDATING = "UPDATING"
    DELETING = "DELETING"
    ACTIVE = "ACTIVE"


class IndexStatus(StrEnum):
    CREATING = "CREATING"
    UPDATING = "UPDATING"
    DELETING = "DELETING"
    ACTIVE = "ACTIVE"


class DynamoModel(BaseModel):
    """Base for every model that maps onto a DynamoDB wire structure."""

    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True, frozen=True)

    def to_dynamodb(self) -> JsonDict:
        """Dump to the PascalCase dict boto3 expects, dropping unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


# ---------------------------------------------------------------------------
# Building blocks
# ---------------------------------------------------------------------------

class AttributeDefinition(DynamoModel):
    attribute_name: str
    attribute_type: ScalarAttributeType


class KeySchemaElement(DynamoModel):
    attribute_name: str
    key_type: KeyType


class Projection(DynamoModel):
    projection_type: ProjectionType = ProjectionType.ALL
    non_key_attributes: Optional[list[str]] = None


class ProvisionedThroughput(DynamoModel):
    read_capacity_units: int
    write_capacity_units: int


# ---------------------------------------------------------------------------
# Declared form
# ---------------------------------------------------------------------------

class GlobalSecondaryIndex(DynamoModel):
    """A declared global secondary index, named 'hash[-range]-Index'."""

    index_name: str
    key_schema: list[KeySchemaElement]
    projection: Projection = Projection()
    provisioned_throughput: Optional[ProvisionedThroughput] = None

    @classmethod
    def from_description(cls, description: GlobalSecondaryIndexDescription) -> GlobalSecondaryIndex:
        """Carry an observed index over into the declared shape."""
        throughput = description.provisioned_throughput
        return cls(
            index_name=description.index_name,
            key_schema=list(description.key_schema),
            projection=description.projection or Projection(),
            provisioned_throughput=(
                ProvisionedThroughput(
                    read_capacity_units=throughput.read_capacity_units,
                    write_capacity_units=throughput.write_capacity_units,
                )
                if throughput is not None
                else None
            ),
        )


class LocalSecondaryIndex(DynamoModel):
    """A declared local secondary index. Only applied when the table is created."""

    index_name: str
    key_schema: list[KeySchemaElement]
    projection: Projection = Projection()


class TableDefinition(DynamoModel):
    """The desired schema of one table, equivalent to a CreateTable request."""

    table_name: str
    key_schema: list[KeySchemaElement]
    attribute_definitions: list[AttributeDefinition] = Field(default_factory=list)
    global_secondary_indexes: Optional[list[GlobalSecondaryIndex]] = None
    local_secondary_indexes: Optional[list[LocalSecondaryIndex]] = None
    provisioned_throughput: Optional[ProvisionedThroughput] = None
    billing_mode: Optional[BillingMode] = None


class CreateIndexAction(DynamoModel):
    """The Create entry of an UpdateTable GlobalSecondaryIndexUpdates list."""

    index_name: str
    key_schema: list[KeySchemaElement]
    projection: Projection
    provisioned_throughput: Optional[ProvisionedThroughput] = None

    @classmethod
    def from_index(cls, index: GlobalSecondaryIndex) -> CreateIndexAction:
        return cls(
            index_name=index.index_name,
            key_schema=index.key_schema,
            projection=index.projection,
            provisioned_throughput=index.provisioned_throughput,
        )


# ---------------------------------------------------------------------------
# Observed form
# ---------------------------------------------------------------------------

class ProvisionedThroughputDescription(DynamoModel):
    read_capacity_units: int = 0
    write_capacity_units: int = 0


class GlobalSecondaryIndexDescription(DynamoModel):
    """An index as reported by DescribeTable.

    Status is kept as the raw string so an unrecognised value reaches the
    waiters as a protocol violation instead of failing validation here.
    """

    index_name: str
    key_schema: list[KeySchemaElement] = Field(default_factory=list)
    projection: Optional[Projection] = None
    index_status: Optional[str] = None
    provisioned_throughput: Optional[ProvisionedThroughputDescription] = None


class LocalSecondaryIndexDescription(DynamoModel):
    index_name: str
    key_schema: list[KeySchemaElement] = Field(default_factory=list)
    projection: Optional[Projection] = None


class TableDescription(DynamoModel):
    """The Table element of a DescribeTable response."""

    table_name: str
    table_status: Optional[str] = None
    key_schema: list[KeySchemaElement] = Field(default_factory=list)
    attribute_definitions: list[AttributeDefinition] = Field(default_factory=list)
    global_secondary_indexes: Optional[list[GlobalSecondaryIndexDescription]] = None
    local_secondary_indexes: Optional[list[LocalSecondaryIndexDescription]] = None

    @classmethod
    def from_dynamodb(cls, table: JsonDict) -> TableDescription:
        return cls.model_validate(table)

    def find_index(self, index_name: str) -> GlobalSecondaryIndexDescription | None:
        for index in self.global_secondary_indexes or []:
            if index.index_name == index_name:
                return index
        return None
