"""Linear privilege scale for group memberships.

Lower numeric access value means more privilege. The values are what the
store persists in ``kgroups_access.access``; pending requests sit far below
every real role so that "is a member" is simply ``access < PENDING``.
"""

from __future__ import annotations

from enum import IntEnum

from kure.groups.config import GroupsConfig
from kure.groups.domain.exceptions import ValidationError


class Role(IntEnum):
	OWNER = 0
	MODERATOR = 1
	MEMBER = 2
	PENDING = 100

	@property
	def label(self) -> str:
		return self.name.lower()


# Roles a membership can be moved to by grant or approval.
GRANTABLE_ROLES = (Role.MODERATOR, Role.MEMBER)


class RoleModel:
	"""Comparison helpers over :class:`Role` plus the configured approval role."""

	def __init__(self, *, default_approved_role: Role = Role.MEMBER) -> None:
		if default_approved_role not in GRANTABLE_ROLES:
			raise ValidationError("invalid_default_approved_role")
		self.default_approved_role = default_approved_role

	@classmethod
	def from_config(cls, config: GroupsConfig) -> "RoleModel":
		return cls(default_approved_role=cls.parse(config.default_approved_role))

	@property
	def roles(self) -> tuple[Role, ...]:
		"""All roles, most privileged first."""
		return tuple(sorted(Role))

	@staticmethod
	def parse(value: Role | str | int) -> Role:
		if isinstance(value, Role):
			return value
		if isinstance(value, int) and not isinstance(value, bool):
			try:
				return Role(value)
			except ValueError as exc:
				raise ValidationError("invalid_role") from exc
		if isinstance(value, str):
			try:
				return Role[value.strip().upper()]
			except KeyError as exc:
				raise ValidationError("invalid_role") from exc
		raise ValidationError("invalid_role")

	@staticmethod
	def compare(a: Role, b: Role) -> int:
		"""Positive when ``a`` outranks ``b``, zero when equal, negative otherwise."""
		if a == b:
			return 0
		return 1 if int(a) < int(b) else -1

	def is_at_least(self, actual: Role | None, required: Role) -> bool:
		if actual is None:
			return False
		return self.compare(actual, required) >= 0

	def outranks(self, actual: Role | None, other: Role) -> bool:
		if actual is None:
			return False
		return self.compare(actual, other) > 0

	@staticmethod
	def is_member(role: Role | None) -> bool:
		"""True for approved roles; pending requests and strangers are not members."""
		return role is not None and role < Role.PENDING
