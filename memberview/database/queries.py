"""
Statements reading group memberships from the projections.

The statements are fixed text with bound parameters. The only part that
varies is the optional bounded-staleness clause, which is rendered from
configuration and never from caller input.
"""

from datetime import timedelta

from sqlalchemy import (
    ARRAY,
    BigInteger,
    Boolean,
    DateTime,
    SmallInteger,
    String,
    Text,
    bindparam,
    column,
    text,
)
from sqlalchemy.sql.elements import ColumnClause
from sqlalchemy.sql.selectable import TextualSelect

DEFAULT_STALENESS = timedelta(milliseconds=1)

_SELECT_GROUP_MEMBERS = (
    "SELECT"
    " members.creation_date"
    ", members.change_date"
    ", members.sequence"
    ", members.resource_owner"
    ", members.user_id"
    ", members.group_id"
    ", members.roles"
    ", projections.login_names3.login_name"
    ", projections.users13_humans.email"
    ", projections.users13_humans.first_name"
    ", projections.users13_humans.last_name"
    ", projections.users13_humans.display_name"
    ", projections.users13_machines.name"
    ", projections.users13_humans.avatar_key"
    ", projections.users13.type"
    ", COUNT(*) OVER () AS count"
    " FROM projections.group_members AS members"
    " LEFT JOIN projections.users13_humans"
    " ON members.user_id = projections.users13_humans.user_id"
    " AND members.instance_id = projections.users13_humans.instance_id"
    " LEFT JOIN projections.users13_machines"
    " ON members.user_id = projections.users13_machines.user_id"
    " AND members.instance_id = projections.users13_machines.instance_id"
    " LEFT JOIN projections.users13"
    " ON members.user_id = projections.users13.id"
    " AND members.instance_id = projections.users13.instance_id"
    " LEFT JOIN projections.login_names3"
    " ON members.user_id = projections.login_names3.user_id"
    " AND members.instance_id = projections.login_names3.instance_id"
)

_WHERE_PRIMARY_LOGIN_NAME = " WHERE projections.login_names3.is_primary = :is_primary"

_AND_MEMBERSHIP_KEY = (
    " AND members.group_id = :group_id AND members.user_id = :user_id"
)


def _result_columns() -> tuple[ColumnClause, ...]:
    return (
        column("creation_date", DateTime(timezone=True)),
        column("change_date", DateTime(timezone=True)),
        column("sequence", BigInteger),
        column("resource_owner", String),
        column("user_id", String),
        column("group_id", String),
        column("roles", ARRAY(Text)),
        column("login_name", String),
        column("email", String),
        column("first_name", String),
        column("last_name", String),
        column("display_name", String),
        column("name", String),
        column("avatar_key", String),
        column("type", SmallInteger),
        column("count", BigInteger),
    )


GROUP_MEMBERS_COLUMNS: tuple[str, ...] = tuple(c.name for c in _result_columns())


def as_of_system_time(staleness: timedelta | None) -> str:
    """
    Render the bounded-staleness clause for a snapshot `staleness` in the
    past, e.g. `AS OF SYSTEM TIME '-1 ms'`. Returns an empty string when no
    staleness is requested.
    """
    if staleness is None or staleness <= timedelta(0):
        return ""

    microseconds = staleness // timedelta(microseconds=1)

    if microseconds % 1000 == 0:
        offset = f"-{microseconds // 1000} ms"
    else:
        offset = f"-{microseconds} us"

    return f" AS OF SYSTEM TIME '{offset}'"


def group_members_query(staleness: timedelta | None = None) -> TextualSelect:
    """
    All memberships joined with the identity of their user and the user's
    primary login name. Every row carries the total number of matches in
    the `count` column.

    Parameters
    ----------
    staleness: timedelta | None
        Read from a consistent snapshot this far in the past. Only supported
        by engines that understand `AS OF SYSTEM TIME`.

    Bound parameters
    ----------------
    is_primary: bool
    """
    statement = (
        _SELECT_GROUP_MEMBERS
        + as_of_system_time(staleness)
        + _WHERE_PRIMARY_LOGIN_NAME
    )

    return (
        text(statement)
        .bindparams(bindparam("is_primary", type_=Boolean))
        .columns(*_result_columns())
    )


def group_member_query(staleness: timedelta | None = None) -> TextualSelect:
    """
    As `group_members_query`, restricted to a single membership.

    Bound parameters
    ----------------
    is_primary: bool
    group_id: str
    user_id: str
    """
    statement = (
        _SELECT_GROUP_MEMBERS
        + as_of_system_time(staleness)
        + _WHERE_PRIMARY_LOGIN_NAME
        + _AND_MEMBERSHIP_KEY
    )

    return (
        text(statement)
        .bindparams(
            bindparam("is_primary", type_=Boolean),
            bindparam("group_id", type_=String),
            bindparam("user_id", type_=String),
        )
        .columns(*_result_columns())
    )
