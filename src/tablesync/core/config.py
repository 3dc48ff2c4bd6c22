"""Application configuration using pydantic-settings with grouped env prefixes."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class DynamoDBConfig(BaseSettings):
    """DynamoDB connection configuration."""

    model_config = {"env_prefix": "TABLESYNC_DYNAMO_"}

    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override


class EngineConfig(BaseSettings):
    """Reconciliation engine tuning."""

    model_config = {"env_prefix": "TABLESYNC_ENGINE_"}

    poll_delay_ms: int = 500
    timeout_seconds: float | None = None  # None waits forever
    safe_prefix: str = "dev_"  # only tables with this prefix may be purged


class AppSettings(BaseSettings):
    """Root application settings aggregating all sub-configs."""

    model_config = {"env_prefix": "TABLESYNC_"}

    environment: Literal["dev", "uat", "prod"] = "dev"
    log_level: str = "INFO"
    log_colour: bool = False

    dynamodb: DynamoDBConfig = DynamoDBConfig()
    engine: EngineConfig = EngineConfig()
