"""
Group membership models handed back to callers.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .user import UserType


class SearchResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Total number of matches across all pages, not the size of this page.
    count: int = Field(default=0, ge=0)


class GroupMember(BaseModel):
    """
    A single user's membership of a group, with the identity details of
    that user resolved for display.

    Only humans carry `email`, `first_name`, `last_name` and `avatar_url`;
    they are empty strings for every other kind of user. `avatar_url` holds
    the stored avatar asset key, relative to the asset store of the
    resource owner, and not a resolvable URL.
    """

    model_config = ConfigDict(frozen=True)

    creation_date: datetime
    change_date: datetime
    sequence: int = Field(ge=0)

    resource_owner: str
    user_id: str
    group_id: str

    roles: tuple[str, ...] = ()

    preferred_login_name: str = ""
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    display_name: str = ""
    avatar_url: str = ""

    user_type: UserType = UserType.UNSPECIFIED


class GroupMembers(BaseModel):
    model_config = ConfigDict(frozen=True)

    search_response: SearchResponse = SearchResponse()
    group_members: tuple[GroupMember, ...] = ()

    @property
    def count(self) -> int:
        return self.search_response.count
