"""Membership records: requests, grants, approvals and revocations."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from kure.groups.config import GroupsConfig
from kure.groups.domain import models, policies, repo as repo_module
from kure.groups.domain.exceptions import (
	AlreadyMemberError,
	ConflictError,
	GroupsError,
	InternalError,
	NotFoundError,
	PermissionDeniedError,
)
from kure.groups.domain.gate import RequestGate
from kure.groups.domain.roles import Role, RoleModel
from kure.obs import metrics as obs_metrics
from kure.settings import settings

_LOG = logging.getLogger(__name__)


@asynccontextmanager
async def _tracked(action: str) -> AsyncIterator[None]:
	try:
		yield
	except InternalError:
		obs_metrics.inc_membership_mutation(action, "error")
		raise
	except GroupsError:
		obs_metrics.inc_membership_mutation(action, "rejected")
		raise
	obs_metrics.inc_membership_mutation(action, "success")


class AccessStore:
	"""Owns (group, user) membership rows and the rules for changing them."""

	def __init__(
		self,
		*,
		repository: repo_module.GroupsRepository | None = None,
		roles: RoleModel | None = None,
		config: GroupsConfig | None = None,
	) -> None:
		self.config = config or settings.groups
		self.repo = repository or repo_module.GroupsRepository()
		self.roles = roles or RoleModel.from_config(self.config)
		self.gate = RequestGate(roles=self.roles, access=self)

	def _group(self, group: str) -> str:
		return policies.lookup_group_name(group, self.config)

	async def get_access(self, group: str, user: str) -> Role | None:
		"""The user's role in ``group``, or ``None`` when they hold no membership."""
		membership = await self.repo.get_membership(self._group(group), user)
		return membership.access if membership else None

	async def list_members(self, group: str, *, include_pending: bool = False) -> list[models.Membership]:
		max_access = Role.PENDING if include_pending else Role.MEMBER
		return await self.repo.list_memberships(self._group(group), min_access=Role.OWNER, max_access=max_access)

	async def list_pending(self, group: str) -> list[models.Membership]:
		return await self.repo.list_memberships(self._group(group), min_access=Role.PENDING, max_access=Role.PENDING)

	async def request_access(self, group: str, user: str) -> models.Membership:
		"""Create a pending request; an existing membership raises ``AlreadyMemberError``."""
		group = self._group(group)
		user = policies.ensure_user_id(user)
		async with _tracked("request"):
			created = await self.repo.insert_membership(group, user, access=Role.PENDING)
			if created is None:
				existing = await self.repo.get_membership(group, user)
				if existing is None:
					raise ConflictError("membership_changed")
				raise AlreadyMemberError(existing)
		_LOG.info("membership.requested", extra={"group": group, "member": user})
		return created

	async def grant_access(self, group: str, granted_by: str, user: str, role: Role | str | int) -> models.Membership:
		group = self._group(group)
		user = policies.ensure_user_id(user)
		desired = self.roles.parse(role)
		policies.ensure_grantable(desired)
		async with _tracked("grant"):
			# Members outrank nothing grantable, so moderator is the floor.
			actor = await self.gate.require(group, granted_by, Role.MODERATOR, detail="insufficient_role_rank")
			current = await self.repo.get_membership(group, user)
			policies.ensure_can_grant(self.roles, actor, current.access if current else None, desired)
			if current is not None and current.access == desired:
				raise ConflictError("role_already_granted")
			if current is None:
				updated = await self.repo.insert_membership(group, user, access=desired)
			else:
				updated = await self.repo.update_membership_access(
					group,
					user,
					access=desired,
					expected_access=current.access,
				)
			if updated is None:
				raise ConflictError("membership_changed")
		_LOG.info(
			"membership.granted",
			extra={"group": group, "member": user, "role": desired.label, "actor": granted_by},
		)
		return updated

	async def approve_pending(self, group: str, approved_by: str, user: str) -> models.Membership:
		group = self._group(group)
		async with _tracked("approve"):
			await self.gate.require(group, approved_by, Role.MODERATOR, detail="moderator_role_required")
			current = await self.repo.get_membership(group, user)
			if current is None or current.access != Role.PENDING:
				raise NotFoundError("pending_request_not_found")
			updated = await self.repo.update_membership_access(
				group,
				user,
				access=self.roles.default_approved_role,
				expected_access=Role.PENDING,
			)
			if updated is None:
				raise NotFoundError("pending_request_not_found")
		_LOG.info(
			"membership.approved",
			extra={"group": group, "member": user, "role": updated.access.label, "actor": approved_by},
		)
		return updated

	async def revoke_access(self, group: str, revoked_by: str, user: str) -> None:
		"""Delete a membership; self-removal is allowed for everyone but the owner."""
		group = self._group(group)
		async with _tracked("revoke"):
			current = await self.repo.get_membership(group, user)
			if current is None:
				raise NotFoundError("membership_not_found")
			if revoked_by == user:
				if current.access == Role.OWNER:
					raise PermissionDeniedError("owner_cannot_leave")
			else:
				await self.gate.require_outranks(group, revoked_by, current.access)
			deleted = await self.repo.delete_membership(group, user, expected_access=current.access)
			if not deleted:
				raise ConflictError("membership_changed")
		_LOG.info("membership.revoked", extra={"group": group, "member": user, "actor": revoked_by})
