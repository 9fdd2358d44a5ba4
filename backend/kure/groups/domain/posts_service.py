"""Read access to group posts plus the add/remove hooks used by the posting flow."""

from __future__ import annotations

import logging

from kure.groups.config import GroupsConfig
from kure.groups.domain import models, policies, repo as repo_module
from kure.groups.domain.access_service import AccessStore
from kure.groups.domain.exceptions import NotFoundError, ValidationError
from kure.groups.domain.roles import Role
from kure.obs import metrics as obs_metrics
from kure.settings import settings

_LOG = logging.getLogger(__name__)


class PostIndex:
	"""Lists a group's posts newest first and guards post removal."""

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

	async def list_by_group(self, group: str, *, limit: int | None = None) -> list[models.Post]:
		return await self.repo.list_posts(policies.lookup_group_name(group, self.config), limit=limit)

	async def add_post(
		self,
		group: str,
		added_by: str,
		author: str,
		permlink: str,
		*,
		title: str = "",
		category: str | None = None,
	) -> models.Post:
		group = policies.lookup_group_name(group, self.config)
		if not author or not permlink:
			raise ValidationError("post_reference_required")
		await self.gate.require(group, added_by, Role.MEMBER, detail="membership_required")
		post = await self.repo.add_post(
			group=group,
			author=author,
			permlink=permlink,
			added_by=added_by,
			title=title,
			category=category,
		)
		obs_metrics.inc_posts_changed("added")
		_LOG.info("post.added", extra={"group": group, "author": author, "permlink": permlink, "actor": added_by})
		return post

	async def delete_post(self, group: str, author: str, permlink: str, requested_by: str) -> None:
		"""Moderators and above may remove any post; authors and submitters their own."""
		group = policies.lookup_group_name(group, self.config)
		post = await self.repo.get_post(group, author, permlink)
		if post is None:
			raise NotFoundError("post_not_found")
		if requested_by not in (post.author, post.added_by):
			await self.gate.require(group, requested_by, Role.MODERATOR, detail="moderator_role_required")
		if not await self.repo.delete_post(group, author, permlink):
			raise NotFoundError("post_not_found")
		obs_metrics.inc_posts_changed("removed")
		_LOG.info("post.removed", extra={"group": group, "author": author, "permlink": permlink, "actor": requested_by})
