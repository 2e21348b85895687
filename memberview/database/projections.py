"""
ORM declarations of the projection tables read by the membership queries.

These tables are owned and populated by the projection handlers; this
package only reads them. The declarations exist so that the schema can be
created for development and testing.
"""

from datetime import datetime

from sqlalchemy import ARRAY, BigInteger, Column, DateTime, SmallInteger, Text
from sqlmodel import Field, SQLModel

PROJECTIONS_SCHEMA = "projections"


class GroupMemberProjection(SQLModel, table=True):
    """
    A record of a user's membership of a group, within one instance.
    """

    __tablename__ = "group_members"
    __table_args__ = {"schema": PROJECTIONS_SCHEMA}

    instance_id: str = Field(primary_key=True)
    group_id: str = Field(primary_key=True)
    user_id: str = Field(primary_key=True)

    creation_date: datetime = Field(
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
    change_date: datetime = Field(
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
    sequence: int = Field(sa_column=Column(BigInteger, nullable=False))
    resource_owner: str

    # Order is significant, roles are kept exactly as they were granted.
    roles: list[str] = Field(
        sa_column=Column(ARRAY(Text), nullable=False), default_factory=list
    )


class UserProjection(SQLModel, table=True):
    __tablename__ = "users13"
    __table_args__ = {"schema": PROJECTIONS_SCHEMA}

    instance_id: str = Field(primary_key=True)
    id: str = Field(primary_key=True)

    resource_owner: str
    username: str
    type: int = Field(sa_column=Column(SmallInteger, nullable=False))


class HumanUserProjection(SQLModel, table=True):
    __tablename__ = "users13_humans"
    __table_args__ = {"schema": PROJECTIONS_SCHEMA}

    instance_id: str = Field(primary_key=True)
    user_id: str = Field(primary_key=True)

    first_name: str
    last_name: str
    display_name: str | None = None
    email: str | None = None
    avatar_key: str | None = None


class MachineUserProjection(SQLModel, table=True):
    __tablename__ = "users13_machines"
    __table_args__ = {"schema": PROJECTIONS_SCHEMA}

    instance_id: str = Field(primary_key=True)
    user_id: str = Field(primary_key=True)

    name: str
    description: str | None = None


class LoginNameProjection(SQLModel, table=True):
    """
    One of the login names of a user. Exactly one per user is flagged as
    primary.
    """

    __tablename__ = "login_names3"
    __table_args__ = {"schema": PROJECTIONS_SCHEMA}

    instance_id: str = Field(primary_key=True)
    user_id: str = Field(primary_key=True)
    login_name: str = Field(primary_key=True)

    is_primary: bool = False


ALL_PROJECTIONS = (
    GroupMemberProjection,
    UserProjection,
    HumanUserProjection,
    MachineUserProjection,
    LoginNameProjection,
)
