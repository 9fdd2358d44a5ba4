"""Domain models for groups, memberships and posts."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from kure.groups.domain.roles import Role


class Group(BaseModel):
	"""Represents a community group with its derived counters."""

	name: str
	display: str
	owner: str
	created_at: datetime
	updated_at: datetime
	post_count: int = 0
	user_count: int = 0

	model_config = ConfigDict(from_attributes=True)


class Membership(BaseModel):
	"""Represents a (group, user) access row."""

	group_name: str
	user_name: str
	access: Role
	added_on: datetime

	model_config = ConfigDict(from_attributes=True)

	@property
	def is_pending(self) -> bool:
		return self.access == Role.PENDING


class MemberGroup(Group):
	"""A group joined with the caller's membership in it."""

	access: Role
	added_on: datetime


class Post(BaseModel):
	"""Represents a post shared into a group."""

	id: int
	group_name: str
	author: str
	permlink: str
	title: str = ""
	category: Optional[str] = None
	added_by: str
	created_at: datetime

	model_config = ConfigDict(from_attributes=True)
