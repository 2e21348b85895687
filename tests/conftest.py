"""
Core configuration
"""

from datetime import datetime, timezone

import pytest
import pytest_asyncio
import structlog
from docker.errors import DockerException
from testcontainers.community.cockroachdb import CockroachDBContainer
from testcontainers.postgres import PostgresContainer

from memberview.config.settings import Settings
from memberview.database.queries import GROUP_MEMBERS_COLUMNS


@pytest.fixture
def now():
    return datetime(2021, 12, 6, 12, 30, tzinfo=timezone.utc)


@pytest.fixture
def make_row(now):
    """
    Builds a positional result row of the group members query. Every column
    not given explicitly is NULL, apart from the membership columns.
    """

    def build(**columns):
        values = {
            "creation_date": now,
            "change_date": now,
            "sequence": 20211206,
            "resource_owner": "ro",
            "user_id": "user-id",
            "group_id": "group-id",
            "roles": ["role-1", "role-2"],
            "count": 1,
        }
        values.update(columns)
        return tuple(values.get(name) for name in GROUP_MEMBERS_COLUMNS)

    return build


@pytest_asyncio.fixture(scope="session")
def logger():
    yield structlog.get_logger()


@pytest_asyncio.fixture(scope="session")
def database_container():
    try:
        container = PostgresContainer().start()
    except DockerException as e:
        pytest.skip(f"No container runtime available: {e}")

    yield {
        "database_type": "postgres",
        "database_user": container.username,
        "database_password": container.password,
        "database_port": container.get_exposed_port(container.port),
        "database_host": container.get_container_host_ip(),
        "database_db": container.dbname,
        "database_echo": True,
    }

    container.stop()


@pytest_asyncio.fixture(scope="session")
def server_settings(database_container):
    yield Settings(**database_container)


@pytest_asyncio.fixture(scope="session")
def database(server_settings: Settings):
    manager = server_settings.sync_manager()
    manager.create_all()

    yield manager

    manager.drop_all()


@pytest_asyncio.fixture(scope="session")
def cockroach_container():
    try:
        container = CockroachDBContainer().start()
    except DockerException as e:
        pytest.skip(f"No container runtime available: {e}")

    yield {
        "database_type": "cockroachdb",
        "database_user": container.username,
        "database_password": container.password,
        "database_port": container.get_exposed_port(container.COCKROACH_DB_PORT),
        "database_host": container.get_container_host_ip(),
        "database_db": container.dbname,
        "database_echo": True,
    }

    container.stop()


@pytest_asyncio.fixture(scope="session")
def cockroach_settings(cockroach_container):
    yield Settings(**cockroach_container)


@pytest_asyncio.fixture(scope="session")
def cockroach_database(cockroach_settings: Settings):
    manager = cockroach_settings.sync_manager()
    manager.create_all()

    yield manager

    manager.drop_all()
