"""Pydantic schemas for the groups API."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from kure.groups.domain import models


class GroupCreateRequest(BaseModel):
	name: str
	display: Optional[str] = None


class RoleGrantRequest(BaseModel):
	role: str = Field(..., pattern="^(moderator|member)$")


class PostCreateRequest(BaseModel):
	author: str = Field(..., min_length=1)
	permlink: str = Field(..., min_length=1)
	title: str = Field(default="", max_length=512)
	category: Optional[str] = None


class GroupResponse(BaseModel):
	name: str
	display: str
	owner: str
	created_at: datetime
	updated_at: datetime
	post_count: int
	user_count: int

	@classmethod
	def from_model(cls, group: models.Group) -> "GroupResponse":
		return cls(
			name=group.name,
			display=group.display,
			owner=group.owner,
			created_at=group.created_at,
			updated_at=group.updated_at,
			post_count=group.post_count,
			user_count=group.user_count,
		)


class UserGroupResponse(GroupResponse):
	role: str
	access: int
	added_on: Optional[datetime] = None


class MemberResponse(BaseModel):
	group: str
	user: str
	role: str
	access: int
	added_on: datetime

	@classmethod
	def from_model(cls, membership: models.Membership) -> "MemberResponse":
		return cls(
			group=membership.group_name,
			user=membership.user_name,
			role=membership.access.label,
			access=int(membership.access),
			added_on=membership.added_on,
		)


class PostResponse(BaseModel):
	id: int
	group: str
	author: str
	permlink: str
	title: str
	category: Optional[str] = None
	added_by: str
	created_at: datetime

	@classmethod
	def from_model(cls, post: models.Post) -> "PostResponse":
		return cls(
			id=post.id,
			group=post.group_name,
			author=post.author,
			permlink=post.permlink,
			title=post.title,
			category=post.category,
			added_by=post.added_by,
			created_at=post.created_at,
		)


class GroupDetailResponse(BaseModel):
	group: GroupResponse
	# Left unset for anonymous viewers; None means "not a member".
	viewer_role: Optional[str] = None
	posts: List[PostResponse]
	members: List[MemberResponse]
	pending: List[MemberResponse]


class UserGroupsResponse(BaseModel):
	groups: List[UserGroupResponse]


class GroupActivityResponse(BaseModel):
	group: GroupResponse
	posts: List[PostResponse]


class CommunityOverviewResponse(BaseModel):
	groups_activity: List[GroupActivityResponse]
	groups_created: List[GroupActivityResponse]
