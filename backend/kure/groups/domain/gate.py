"""Single authorization rule shared by every mutating group operation."""

from __future__ import annotations

from typing import Protocol

from kure.groups.domain.exceptions import PermissionDeniedError
from kure.groups.domain.roles import Role, RoleModel


class AccessLookup(Protocol):
	async def get_access(self, group: str, user: str) -> Role | None: ...


class RequestGate:
	"""Resolves a caller's role and enforces a minimum threshold."""

	def __init__(self, *, roles: RoleModel, access: AccessLookup) -> None:
		self.roles = roles
		self.access = access

	def check(self, actual: Role | None, required: Role, *, detail: str | None = None) -> Role:
		# Pending requests never satisfy a threshold, even one of PENDING.
		if not self.roles.is_member(actual) or not self.roles.is_at_least(actual, required):
			raise PermissionDeniedError(detail or f"{required.label}_role_required")
		assert actual is not None
		return actual

	async def resolve(self, group: str, user: str | None) -> Role | None:
		if not user:
			return None
		return await self.access.get_access(group, user)

	async def require(self, group: str, user: str | None, required: Role, *, detail: str | None = None) -> Role:
		"""Return the caller's role or raise ``PermissionDeniedError``."""
		actual = await self.resolve(group, user)
		return self.check(actual, required, detail=detail)

	async def require_outranks(self, group: str, user: str | None, target: Role) -> Role:
		"""Return the caller's role when it strictly outranks ``target``."""
		actual = await self.resolve(group, user)
		if not self.roles.is_member(actual) or not self.roles.outranks(actual, target):
			raise PermissionDeniedError("insufficient_role_rank")
		assert actual is not None
		return actual
