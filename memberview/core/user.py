"""
User identity details as seen by the membership read model.
"""

from enum import IntEnum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class UserType(IntEnum):
    """
    Kind of user, as stored in the `type` column of the users projection.
    """

    UNSPECIFIED = 0
    HUMAN = 1
    MACHINE = 2


class HumanIdentity(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_type: Literal[UserType.HUMAN] = UserType.HUMAN

    email: str = ""
    first_name: str = ""
    last_name: str = ""
    display_name: str = ""
    avatar_key: str = ""

    # The asset key is passed through unchanged as `avatar_url`.
    def flatten(self) -> dict[str, str | UserType]:
        return {
            "user_type": self.user_type,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "display_name": self.display_name,
            "avatar_url": self.avatar_key,
        }


class MachineIdentity(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_type: Literal[UserType.MACHINE] = UserType.MACHINE

    name: str = ""

    def flatten(self) -> dict[str, str | UserType]:
        return {"user_type": self.user_type, "display_name": self.name}


class UnspecifiedIdentity(BaseModel):
    """
    The user record is missing or has not been projected yet.
    """

    model_config = ConfigDict(frozen=True)

    user_type: Literal[UserType.UNSPECIFIED] = UserType.UNSPECIFIED

    def flatten(self) -> dict[str, str | UserType]:
        return {"user_type": self.user_type}


UserIdentity = Annotated[
    Union[HumanIdentity, MachineIdentity, UnspecifiedIdentity],
    Field(discriminator="user_type"),
]
