"""Configuration for queue handles using Pydantic settings."""

from __future__ import annotations

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy import Engine
from sqlalchemy import create_engine as sa_create_engine


class QueueSettings(BaseSettings):
    """
    Settings for one queue, read from SQLQUEUE_* environment variables.

    SQLQUEUE_URL                   SQLAlchemy URL of the store
    SQLQUEUE_SCHEMA_NAME           schema holding the queue table
    SQLQUEUE_NAME                  queue (table) name
    SQLQUEUE_CREATE_IF_NOT_EXISTS  issue CREATE TABLE IF NOT EXISTS on first use
    SQLQUEUE_ECHO                  log every statement through sqlalchemy.engine
    """

    model_config = SettingsConfigDict(env_prefix="SQLQUEUE_")

    url: SecretStr = Field(description="SQLAlchemy database URL")
    schema_name: str = Field(default="public", description="Schema of the queue table")
    name: str = Field(description="Queue table name")
    create_if_not_exists: bool = Field(default=True)
    echo: bool = Field(default=False)

    @field_validator("schema_name", "name")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v

    def create_engine(self) -> Engine:
        return sa_create_engine(self.url.get_secret_value(), echo=self.echo)
