"""
Mapping of raw membership rows into core group members.
"""

from collections.abc import Sequence
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from memberview.core.members import GroupMember
from memberview.core.user import (
    HumanIdentity,
    MachineIdentity,
    UnspecifiedIdentity,
    UserIdentity,
    UserType,
)

from .queries import GROUP_MEMBERS_COLUMNS


class GroupMemberScanError(Exception):
    """
    A row could not be bound to the expected columns, which means the
    projections and the query have drifted apart.
    """

    pass


class GroupMemberRow(BaseModel):
    """
    One row of the group members query, exactly as it came out of the
    database. Identity details are `None` when the joined projection had no
    matching row.
    """

    model_config = ConfigDict(strict=True, frozen=True)

    creation_date: datetime
    change_date: datetime
    sequence: int = Field(ge=0)
    resource_owner: str
    user_id: str
    group_id: str
    roles: list[str]

    login_name: str | None
    email: str | None
    first_name: str | None
    last_name: str | None
    display_name: str | None
    # Machine users only
    name: str | None
    avatar_key: str | None
    type: int | None

    count: int = Field(ge=0)

    @classmethod
    def scan(cls, row: Sequence[Any]) -> "GroupMemberRow":
        """
        Bind a positional result row.

        Raises
        ------
        GroupMemberScanError
            If the row has the wrong number of columns, or any value has an
            unexpected type.
        """
        values = tuple(row)

        if len(values) != len(GROUP_MEMBERS_COLUMNS):
            raise GroupMemberScanError(
                f"Expected {len(GROUP_MEMBERS_COLUMNS)} columns, got {len(values)}"
            )

        try:
            return cls.model_validate(dict(zip(GROUP_MEMBERS_COLUMNS, values)))
        except ValidationError as e:
            raise GroupMemberScanError(
                f"Could not bind group member row: {e.error_count()} invalid column(s)"
            ) from e

    def identity(self) -> UserIdentity:
        """
        Resolve the identity details that are valid for this row's user type.
        """
        match self.type:
            case UserType.HUMAN:
                return HumanIdentity(
                    email=self.email or "",
                    first_name=self.first_name or "",
                    last_name=self.last_name or "",
                    display_name=self.display_name or "",
                    avatar_key=self.avatar_key or "",
                )
            case UserType.MACHINE:
                return MachineIdentity(name=self.name or "")
            case _:
                # The user may have been removed, or not projected yet.
                return UnspecifiedIdentity()

    def to_core(self) -> GroupMember:
        return GroupMember(
            creation_date=self.creation_date,
            change_date=self.change_date,
            sequence=self.sequence,
            resource_owner=self.resource_owner,
            user_id=self.user_id,
            group_id=self.group_id,
            roles=tuple(self.roles),
            preferred_login_name=self.login_name or "",
            **self.identity().flatten(),
        )
