"""Pydantic models for recipient groups.

Groups collect recipients (members) and other groups (child groups)
so a batch can address them by group id. A group can also update
itself from keyword messages sent to a number (auto update).
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from .base_models import BaseApiModel, Page, UpdateModel


class AutoUpdate(BaseApiModel):
    """Keyword rules adding or removing members automatically.

    :param to: Number receiving the keyword messages
    :param add_keyword_first: First keyword of a join message
    :param add_keyword_second: Optional second keyword of a join message
    :param remove_keyword_first: First keyword of a leave message
    :param remove_keyword_second: Optional second keyword of a leave message
    """

    to: str = Field(min_length=1)
    add_keyword_first: Optional[str] = None
    add_keyword_second: Optional[str] = None
    remove_keyword_first: Optional[str] = None
    remove_keyword_second: Optional[str] = None


class GroupCreate(BaseApiModel):
    """Request to create a group."""

    name: Optional[str] = None
    members: List[str] = Field(default_factory=list)
    child_groups: List[str] = Field(default_factory=list)
    auto_update: Optional[AutoUpdate] = None
    tags: List[str] = Field(default_factory=list)


class GroupUpdate(UpdateModel):
    """Partial update of a group.

    Passing ``name=None`` removes the group name.
    """

    name: Optional[str] = None
    member_add: Optional[List[str]] = Field(None, alias="add")
    member_remove: Optional[List[str]] = Field(None, alias="remove")
    child_groups_add: Optional[List[str]] = None
    child_groups_remove: Optional[List[str]] = None
    add_from_group: Optional[str] = None
    remove_from_group: Optional[str] = None
    auto_update: Optional[AutoUpdate] = None


class GroupResult(BaseApiModel):
    """A group as stored by the server."""

    id: str
    name: Optional[str] = None
    size: int = Field(0, ge=0)
    child_groups: List[str] = Field(default_factory=list)
    auto_update: Optional[AutoUpdate] = None
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None


class PagedGroupResult(Page[GroupResult]):
    """One page of a group listing."""

    content: List[GroupResult] = Field(default_factory=list, alias="groups")
