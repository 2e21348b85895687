"""
Core client, including session management.
"""

from sqlalchemy import Engine, URL
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import sessionmaker
from sqlalchemy.schema import CreateSchema
from sqlmodel import SQLModel, create_engine

from memberview.database.projections import PROJECTIONS_SCHEMA


class SyncSessionManager:
    """
    A manager for synchronous sessions, mostly used to set up and seed the
    projections. Expected usage of this class to interact:

    manager = SyncSessionManager(conn_url)

    with manager.session() as conn:
        conn.add(GroupMemberProjection(...))
        conn.commit()
    """

    connection_url: URL
    engine: Engine
    session: sessionmaker

    def __init__(self, connection_url: URL, echo: bool = False):
        self.connection_url = connection_url
        self.engine = create_engine(self.connection_url, echo=echo)
        self.session = sessionmaker(self.engine)

    def create_all(self):
        """
        Create the projections schema and run the `SQLModel.metadata.create_all`
        migration tool. Required to set up the table schema.
        """
        with self.engine.begin() as conn:
            conn.execute(CreateSchema(PROJECTIONS_SCHEMA, if_not_exists=True))
            SQLModel.metadata.create_all(conn)

    def drop_all(self):
        """
        Run the `SQLModel.metadata.drop_all` deletion method. WARNING: this
        will delete all data in your database; you probably don't want to do this
        unless you are writing a test.
        """
        with self.engine.begin() as conn:
            SQLModel.metadata.drop_all(conn)


class AsyncSessionManager:
    """
    A manager for asynchronous sessions. Expected usage of this class to interact:

    manager = AsyncSessionManager(conn_url)

    async with manager.session() as conn:
        members = await read_group_members(conn=conn, log=log)
    """

    connection_url: URL
    engine: AsyncEngine
    session: async_sessionmaker

    def __init__(self, connection_url: URL, echo: bool = False):
        self.connection_url = connection_url
        self.engine = create_async_engine(self.connection_url, echo=echo)
        self.session = async_sessionmaker(self.engine)

    async def dispose(self):
        """
        Release every pooled connection held by the engine.
        """
        await self.engine.dispose()
