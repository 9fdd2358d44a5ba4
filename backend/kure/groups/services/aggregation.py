"""Composed read views over groups, memberships and posts.

Every view fans out into independent store queries, runs them concurrently
and joins the results by key, so the output order never depends on which
query finishes first. The engine keeps no state between calls.

There is no cancellation: when one sub-query fails the view fails with that
error, while sibling queries already dispatched run to completion.
"""

from __future__ import annotations

import asyncio
import logging
import time
from contextlib import contextmanager
from typing import Any, Awaitable, Iterator, Mapping, Sequence

from kure.groups.config import GroupsConfig
from kure.groups.domain import models, policies, repo as repo_module
from kure.groups.domain.access_service import AccessStore
from kure.groups.domain.catalog_service import GroupCatalog
from kure.groups.domain.exceptions import GroupsError, InternalError, NotFoundError
from kure.groups.domain.posts_service import PostIndex
from kure.groups.domain.roles import Role
from kure.groups.schemas import dto
from kure.obs import metrics as obs_metrics
from kure.settings import settings

_LOG = logging.getLogger(__name__)


@contextmanager
def _timed(view: str) -> Iterator[None]:
	started = time.perf_counter()
	try:
		yield
	finally:
		obs_metrics.observe_view(view, time.perf_counter() - started)


async def _guard(operation: str, query: Awaitable[Any]) -> Any:
	try:
		return await query
	except GroupsError:
		raise
	except Exception as exc:
		_LOG.error("view_subquery_failed", extra={"operation": operation, "error": type(exc).__name__})
		obs_metrics.inc_store_error(operation)
		raise InternalError(operation) from exc


async def _gather(view: str, queries: Mapping[str, Awaitable[Any]]) -> dict[str, Any]:
	"""Run ``queries`` concurrently and return their results keyed like the input."""
	keys = list(queries)
	results = await asyncio.gather(*(_guard(f"{view}.{key}", queries[key]) for key in keys))
	return dict(zip(keys, results))


def _user_group(group: models.Group, *, access: Role, added_on=None) -> dto.UserGroupResponse:
	return dto.UserGroupResponse(
		**dto.GroupResponse.from_model(group).model_dump(),
		role=access.label,
		access=int(access),
		added_on=added_on,
	)


class AggregationEngine:
	"""Builds the group page, the user's group lists and the activity digests."""

	def __init__(
		self,
		*,
		repository: repo_module.GroupsRepository | None = None,
		access: AccessStore | None = None,
		catalog: GroupCatalog | None = None,
		posts: PostIndex | None = None,
		config: GroupsConfig | None = None,
	) -> None:
		self.config = config or settings.groups
		self.repo = repository or repo_module.GroupsRepository()
		self.access = access or AccessStore(repository=self.repo, config=self.config)
		self.catalog = catalog or GroupCatalog(repository=self.repo, access=self.access, config=self.config)
		self.posts = posts or PostIndex(repository=self.repo, access=self.access, config=self.config)

	def _viewer(self, user: str | None) -> str | None:
		if not user or user == self.config.anonymous_user:
			return None
		return user

	async def group_detail(self, group: str, viewer: str | None) -> dto.GroupDetailResponse:
		"""Group metadata, posts, members and pending requests, plus the viewer's role.

		The viewer lookup is skipped for anonymous callers and ``viewer_role``
		is then left unset on the response.
		"""
		viewer = self._viewer(viewer)
		with _timed("group_detail"):
			queries: dict[str, Awaitable[Any]] = {
				"group": self.catalog.get_group(group),
				"posts": self.posts.list_by_group(group),
				"members": self.access.list_members(group),
				"pending": self.access.list_pending(group),
			}
			if viewer is not None:
				queries["viewer"] = self.access.get_access(group, viewer)
			results = await _gather("group_detail", queries)
			found: models.Group | None = results["group"]
			# A cascade that commits mid-fan-out empties the later sub-queries.
			if found is not None:
				found = await _guard("group_detail.recheck", self.catalog.get_group(group))

		if found is None:
			raise NotFoundError("group_not_found")
		detail = dto.GroupDetailResponse(
			group=dto.GroupResponse.from_model(found),
			posts=[dto.PostResponse.from_model(post) for post in results["posts"]],
			members=[dto.MemberResponse.from_model(member) for member in results["members"]],
			pending=[dto.MemberResponse.from_model(member) for member in results["pending"]],
		)
		if viewer is not None:
			role: Role | None = results["viewer"]
			detail.viewer_role = role.label if role is not None else None
		return detail

	async def user_groups(self, user: str, kind: str, *, limit: int | None = None) -> list[dto.UserGroupResponse]:
		"""Owned groups newest first, or joined groups by display name.

		Passing ``limit`` switches the joined listing to most recently updated first.
		"""
		kind = policies.ensure_user_group_kind(kind)
		if limit is not None:
			policies.ensure_limit(limit, self.config)
		with _timed(f"user_groups_{kind}"):
			if kind == "owned":
				owned = await _guard("user_groups.owned", self.catalog.list_owned(user))
				if limit is not None:
					owned = owned[:limit]
				return [_user_group(group, access=Role.OWNER) for group in owned]
			rows: list[models.MemberGroup] = await _guard(
				f"user_groups.{kind}",
				self.catalog.list_member_groups(
					user,
					include_owned=kind == "all",
					order="updated" if limit is not None else "name",
					limit=limit if limit is not None else self.config.default_page_size,
				),
			)
		return [_user_group(row, access=row.access, added_on=row.added_on) for row in rows]

	async def recent_activity(
		self,
		user: str | None,
		*,
		group_limit: int,
		post_limit: int,
	) -> list[dto.GroupActivityResponse]:
		"""Most recently active visible groups, each with its newest posts.

		Anonymous callers see every group; signed-in callers see the groups where
		they hold an approved role.
		"""
		policies.ensure_limit(group_limit, self.config)
		policies.ensure_limit(post_limit, self.config, allow_zero=True)
		with _timed("recent_activity"):
			groups = await _guard(
				"recent_activity.groups",
				self.catalog.list_active(user=self._viewer(user), limit=group_limit),
			)
			return await self._with_posts("recent_activity", groups, post_limit)

	async def groups_created(self, *, limit: int, post_preview_limit: int) -> list[dto.GroupActivityResponse]:
		policies.ensure_limit(limit, self.config)
		policies.ensure_limit(post_preview_limit, self.config, allow_zero=True)
		with _timed("groups_created"):
			groups = await _guard("groups_created.groups", self.catalog.list_recent(limit=limit))
			return await self._with_posts("groups_created", groups, post_preview_limit)

	async def community_overview(
		self,
		user: str | None,
		*,
		group_limit: int | None = None,
		post_limit: int | None = None,
	) -> dto.CommunityOverviewResponse:
		"""Recent activity and newly created groups, composed concurrently."""
		group_limit = group_limit if group_limit is not None else self.config.overview_group_limit
		post_limit = post_limit if post_limit is not None else self.config.overview_post_limit
		activity, created = await asyncio.gather(
			self.recent_activity(user, group_limit=group_limit, post_limit=post_limit),
			self.groups_created(limit=group_limit, post_preview_limit=post_limit),
		)
		return dto.CommunityOverviewResponse(groups_activity=activity, groups_created=created)

	async def _with_posts(
		self,
		view: str,
		groups: Sequence[models.Group],
		post_limit: int,
	) -> list[dto.GroupActivityResponse]:
		# Results are re-attached in selection order, never completion order.
		posts_by_group = await _gather(
			view,
			{f"posts:{group.name}": self.posts.list_by_group(group.name, limit=post_limit) for group in groups},
		)
		# Groups deleted while their posts were fetched are dropped whole.
		remaining = await _guard(f"{view}.recheck", self.catalog.existing([group.name for group in groups]))
		return [
			dto.GroupActivityResponse(
				group=dto.GroupResponse.from_model(group),
				posts=[dto.PostResponse.from_model(post) for post in posts_by_group[f"posts:{group.name}"]],
			)
			for group in groups
			if group.name in remaining
		]
