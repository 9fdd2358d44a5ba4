"""Group metadata: creation, cascade deletion and listings."""

from __future__ import annotations

import logging

from kure.groups.config import GroupsConfig
from kure.groups.domain import models, policies, repo as repo_module
from kure.groups.domain.access_service import AccessStore
from kure.groups.domain.exceptions import NotFoundError
from kure.groups.domain.roles import Role
from kure.obs import metrics as obs_metrics
from kure.settings import settings

_LOG = logging.getLogger(__name__)


class GroupCatalog:
	"""Creates and deletes groups and enforces the per-owner group limit."""

	def __init__(
		self,
		*,
		repository: repo_module.GroupsRepository | None = None,
		access: AccessStore | None = None,
		config: GroupsConfig | None = None,
	) -> None:
		self.config = config or settings.groups
		self.repo = repository or repo_module.GroupsRepository()
		self.access = access or AccessStore(repository=self.repo, config=self.config)
		self.gate = self.access.gate

	async def create_group(self, name: str, owner: str, *, display: str | None = None) -> models.Group:
		"""Create ``name`` together with its Owner membership in one transaction."""
		identifier = policies.normalize_group_name(name, self.config)
		if display is not None:
			policies.normalize_group_name(display, self.config)
		owner = policies.ensure_user_id(owner)
		group = await self.repo.create_group_with_owner(
			name=identifier,
			display=display or name,
			owner=owner,
			max_owned=self.config.max_owned_groups,
		)
		obs_metrics.inc_groups_created()
		_LOG.info("group.created", extra={"group": group.name, "owner": owner})
		return group

	async def get_group(self, name: str) -> models.Group | None:
		return await self.repo.get_group(policies.lookup_group_name(name, self.config))

	async def existing(self, names: list[str]) -> set[str]:
		"""The subset of stored identifiers in ``names`` that still exist."""
		if not names:
			return set()
		return await self.repo.existing_group_names(names)

	async def delete_group(self, name: str, requested_by: str) -> None:
		"""Remove the group with all of its memberships and posts."""
		name = policies.lookup_group_name(name, self.config)
		if await self.repo.get_group(name) is None:
			raise NotFoundError("group_not_found")
		await self.gate.require(name, requested_by, Role.OWNER, detail="owner_role_required")
		await self.repo.delete_group_cascade(name, owner=requested_by)
		obs_metrics.inc_groups_deleted()
		_LOG.info("group.deleted", extra={"group": name, "actor": requested_by})

	async def list_owned(self, user: str) -> list[models.Group]:
		"""Groups owned by ``user``, newest first."""
		return await self.repo.list_owned_groups(user)

	async def list_recent(self, *, limit: int) -> list[models.Group]:
		return await self.repo.list_recent_groups(limit=limit)

	async def list_active(self, *, user: str | None, limit: int) -> list[models.Group]:
		return await self.repo.list_groups_by_activity(user=user, limit=limit)

	async def list_member_groups(
		self,
		user: str,
		*,
		include_owned: bool,
		order: repo_module.GroupOrder,
		limit: int,
	) -> list[models.MemberGroup]:
		"""Groups where ``user`` holds an approved role, optionally excluding ones they own."""
		return await self.repo.list_member_groups(
			user,
			min_access=Role.OWNER if include_owned else Role.MODERATOR,
			max_access=Role.MEMBER,
			order=order,
			limit=limit,
		)
