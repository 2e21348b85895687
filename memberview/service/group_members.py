"""
Service layer reading group memberships from the projections.
"""

from datetime import timedelta
from typing import Any

from sqlalchemy import Result
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncSession
from sqlalchemy.sql.selectable import TextualSelect
from structlog.typing import FilteringBoundLogger

from memberview.core.members import GroupMember, GroupMembers, SearchResponse
from memberview.database.queries import (
    DEFAULT_STALENESS,
    as_of_system_time,
    group_member_query,
    group_members_query,
)
from memberview.database.rows import GroupMemberRow


class GroupMembersExecutionError(Exception):
    """
    The database failed to run a membership query. The underlying error is
    available as `__cause__`.
    """

    pass


class GroupMemberNotFound(Exception):
    pass


# Raised by the engine or the driver while connecting, executing or fetching.
# OSError covers resolver failures, timeouts and refused or reset connections.
EXECUTION_ERRORS = (SQLAlchemyError, OSError)


async def _execute(
    statement: TextualSelect,
    parameters: dict[str, Any],
    conn: AsyncSession | AsyncConnection,
) -> Result:
    try:
        return await conn.execute(statement, parameters)
    except EXECUTION_ERRORS as e:
        raise GroupMembersExecutionError(
            f"Could not execute group members query: {e}"
        ) from e


def _discard(result: Result, log: FilteringBoundLogger):
    """
    Close `result` while another error is propagating. A failure to close is
    logged so that it does not replace that error.
    """
    try:
        result.close()
    except EXECUTION_ERRORS as e:
        log.warning("group_members.close_failed", error=str(e))


def _drain(result: Result, log: FilteringBoundLogger) -> GroupMembers:
    """
    Map every row of `result` and close it. The total count is read from the
    first row; every row carries the same value.
    """
    count = 0
    members: list[GroupMember] = []

    try:
        for raw in result:
            row = GroupMemberRow.scan(raw)

            if not members:
                count = row.count

            members.append(row.to_core())
    except EXECUTION_ERRORS as e:
        _discard(result, log)
        raise GroupMembersExecutionError(
            f"Could not fetch group members: {e}"
        ) from e
    except BaseException:
        _discard(result, log)
        raise

    try:
        result.close()
    except EXECUTION_ERRORS as e:
        raise GroupMembersExecutionError(
            f"Could not close group members result: {e}"
        ) from e

    return GroupMembers(
        search_response=SearchResponse(count=count),
        group_members=tuple(members),
    )


async def _collect(
    statement: TextualSelect,
    parameters: dict[str, Any],
    conn: AsyncSession,
    log: FilteringBoundLogger,
    snapshot: bool,
) -> GroupMembers:
    """
    Execute `statement` and map every row it returns.

    CockroachDB only accepts a relative `AS OF SYSTEM TIME` outside of an
    explicit transaction, and the session always opens one. Snapshot reads
    therefore run on a separate autocommit connection from the session's
    engine. Results are buffered, as server-side cursors need a transaction.
    """
    if not snapshot:
        return _drain(await _execute(statement, parameters, conn), log)

    if conn.bind is None:
        raise ValueError("Snapshot reads need a session bound to an engine")

    try:
        async with conn.bind.connect() as connection:
            connection = await connection.execution_options(
                isolation_level="AUTOCOMMIT"
            )
            return _drain(await _execute(statement, parameters, connection), log)
    except EXECUTION_ERRORS as e:
        raise GroupMembersExecutionError(
            f"Could not connect for group members query: {e}"
        ) from e


async def read_group_members(
    conn: AsyncSession,
    log: FilteringBoundLogger,
    is_primary: bool = True,
    staleness: timedelta | None = DEFAULT_STALENESS,
) -> GroupMembers:
    """
    Read all group memberships, each joined with the identity of its user.

    Parameters
    ----------
    conn: AsyncSession
        The database session.
    log: FilteringBoundLogger
        Logger instance.
    is_primary: bool
        Only join login names with this primary flag. Defaults to the
        primary login name of each user.
    staleness: timedelta | None
        Read from a snapshot this far in the past, or the latest committed
        state when `None`. Must be `None` for engines without
        `AS OF SYSTEM TIME` support.
        Snapshot reads run on their own autocommit connection taken from
        the engine the session is bound to, outside the session's
        transaction.

    Returns
    -------
    GroupMembers
        The members, in the order the database returned them, and the total
        count. No matching rows gives an empty result with a count of zero.

    Raises
    ------
    GroupMembersExecutionError
        If the database could not run the query.
    memberview.database.rows.GroupMemberScanError
        If a row did not have the expected shape.
    """
    log = log.bind(is_primary=is_primary)

    group_members = await _collect(
        statement=group_members_query(staleness=staleness),
        parameters={"is_primary": is_primary},
        conn=conn,
        log=log,
        snapshot=bool(as_of_system_time(staleness)),
    )

    await log.adebug(
        "group_members.listed",
        count=group_members.count,
        number_of_members=len(group_members.group_members),
    )

    return group_members


async def read_group_member(
    group_id: str,
    user_id: str,
    conn: AsyncSession,
    log: FilteringBoundLogger,
    is_primary: bool = True,
    staleness: timedelta | None = DEFAULT_STALENESS,
) -> GroupMember:
    """
    Read a single membership by its natural key.

    Raises
    ------
    GroupMemberNotFound
        If the user is not a member of the group.
    GroupMembersExecutionError
        If the database could not run the query.
    """
    log = log.bind(group_id=group_id, user_id=user_id, is_primary=is_primary)

    group_members = await _collect(
        statement=group_member_query(staleness=staleness),
        parameters={"is_primary": is_primary, "group_id": group_id, "user_id": user_id},
        conn=conn,
        log=log,
        snapshot=bool(as_of_system_time(staleness)),
    )

    if not group_members.group_members:
        await log.ainfo("group_member.not_found")
        raise GroupMemberNotFound(
            f"User {user_id} is not a member of group {group_id}"
        )

    await log.adebug("group_member.found")

    return group_members.group_members[0]
