"""
Main settings object.
"""

from datetime import timedelta
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy import URL

from memberview.database.queries import DEFAULT_STALENESS

from .managers import AsyncSessionManager, SyncSessionManager


class Settings(BaseSettings):
    # CockroachDB speaks the PostgreSQL wire protocol through the same
    # drivers, but needs its own dialect. Only CockroachDB supports
    # bounded-staleness reads.
    database_type: Literal["postgres", "cockroachdb"] = "postgres"
    database_user: str | None = None
    database_password: str | None = None
    database_port: int | None = None
    database_host: str | None = None
    database_db: str = "memberview"

    database_echo: bool = False

    # How far in the past membership reads are served from. Set to None to
    # always read the latest committed state.
    read_staleness: timedelta | None = DEFAULT_STALENESS

    model_config = SettingsConfigDict(env_prefix="MEMBERVIEW_", env_file=".env")

    @field_validator("read_staleness")
    @classmethod
    def check_staleness(cls, value: timedelta | None) -> timedelta | None:
        if value is not None and value <= timedelta(0):
            raise ValueError("read_staleness must be positive, or None to disable")
        return value

    @property
    def snapshot_staleness(self) -> timedelta | None:
        """
        The staleness to hand to the membership queries for this database.
        """
        match self.database_type:
            case "cockroachdb":
                return self.read_staleness
            case _:
                return None

    @property
    def sync_driver(self) -> str:
        match self.database_type:
            case "postgres":
                return "postgresql+psycopg"
            case "cockroachdb":
                return "cockroachdb+psycopg"
            case _:
                raise ValueError

    @property
    def async_driver(self) -> str:
        match self.database_type:
            case "postgres":
                return "postgresql+asyncpg"
            case "cockroachdb":
                return "cockroachdb+asyncpg"
            case _:
                raise ValueError

    @property
    def sync_uri(self) -> URL:
        return URL.create(
            drivername=self.sync_driver,
            username=self.database_user,
            password=self.database_password,
            host=self.database_host,
            port=self.database_port,
            database=self.database_db,
        )

    def sync_manager(self) -> SyncSessionManager:
        return SyncSessionManager(connection_url=self.sync_uri, echo=self.database_echo)

    @property
    def async_uri(self) -> URL:
        return URL.create(
            drivername=self.async_driver,
            username=self.database_user,
            password=self.database_password,
            host=self.database_host,
            port=self.database_port,
            database=self.database_db,
        )

    def async_manager(self) -> AsyncSessionManager:
        return AsyncSessionManager(
            connection_url=self.async_uri, echo=self.database_echo
        )
