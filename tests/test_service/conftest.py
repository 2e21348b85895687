"""
Configuration variables and fixtures for the service layer tests.
"""

from contextlib import asynccontextmanager

import pytest
import pytest_asyncio
from sqlalchemy import delete

from memberview.config.settings import Settings
from memberview.database.projections import ALL_PROJECTIONS


class FakeResult:
    """
    Stands in for a buffered `Result`. Optionally fails with `error` after
    yielding `fail_after` rows, and with `close_error` when closed.
    """

    def __init__(self, rows, error=None, fail_after=0, close_error=None):
        self.rows = rows
        self.error = error
        self.fail_after = fail_after
        self.close_error = close_error
        self.closed = False

    def __iter__(self):
        for index, row in enumerate(self.rows):
            if self.error is not None and index == self.fail_after:
                raise self.error
            yield row

        if self.error is not None and self.fail_after >= len(self.rows):
            raise self.error

    def close(self):
        self.closed = True

        if self.close_error is not None:
            raise self.close_error


class FakeConnection:
    """
    Stands in for an `AsyncConnection` checked out of the engine.
    """

    def __init__(self, session):
        self.session = session
        self.options = {}

    async def execution_options(self, **options):
        self.options.update(options)
        return self

    async def execute(self, statement, parameters=None):
        self.session.connections.append(self.options)
        return await self.session.execute(statement, parameters)


class FakeEngine:
    def __init__(self, session, connect_error=None):
        self.session = session
        self.connect_error = connect_error

    @asynccontextmanager
    async def connect(self):
        if self.connect_error is not None:
            raise self.connect_error

        yield FakeConnection(self.session)


class FakeSession:
    """
    Stands in for an `AsyncSession`, recording what was executed and on
    which connection options.
    """

    def __init__(self, result=None, error=None, connect_error=None):
        self.result = result
        self.error = error
        self.statements = []
        self.connections = []
        self.bind = FakeEngine(self, connect_error=connect_error)

    async def execute(self, statement, parameters=None):
        self.statements.append((str(statement), parameters))

        if self.error is not None:
            raise self.error

        return self.result


@pytest.fixture
def fake_session():
    def build(
        rows=(),
        error=None,
        execute_error=None,
        connect_error=None,
        close_error=None,
        fail_after=0,
    ):
        result = FakeResult(
            list(rows), error=error, fail_after=fail_after, close_error=close_error
        )
        return FakeSession(
            result=result, error=execute_error, connect_error=connect_error
        )

    return build


@pytest_asyncio.fixture(scope="session")
def session_manager(server_settings: Settings, database):
    yield server_settings.async_manager()


@pytest_asyncio.fixture(scope="session")
def cockroach_session_manager(cockroach_settings: Settings, cockroach_database):
    yield cockroach_settings.async_manager()


def _emptied(manager):
    def clear():
        with manager.session() as conn:
            for table in ALL_PROJECTIONS:
                conn.execute(delete(table))
            conn.commit()

    return clear


@pytest.fixture
def projections(database):
    """
    The sync session manager, with every projection emptied before and after
    the test.
    """
    clear = _emptied(database)

    clear()
    yield database
    clear()


@pytest.fixture
def cockroach_projections(cockroach_database):
    clear = _emptied(cockroach_database)

    clear()
    yield cockroach_database
    clear()
