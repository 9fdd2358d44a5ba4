"""Async repository helpers for the groups domain."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Literal

import asyncpg

from kure.groups.domain import models
from kure.groups.domain.exceptions import (
	ConflictError,
	InternalError,
	LimitExceededError,
	NotFoundError,
	PermissionDeniedError,
)
from kure.groups.domain.roles import Role
from kure.infra.postgres import get_pool
from kure.obs import metrics as obs_metrics

_LOG = logging.getLogger(__name__)

GroupOrder = Literal["name", "updated"]

_GROUP_SELECT = f"""
	SELECT g.name, g.display, g.owner, g.created_at, g.updated_at,
		(SELECT COUNT(*) FROM kposts p WHERE p.group_name = g.name) AS post_count,
		(SELECT COUNT(*) FROM kgroups_access a
			WHERE a.group_name = g.name AND a.access < {int(Role.PENDING)}) AS user_count
	FROM kgroups g
"""

_GROUP_ORDER = {
	"name": "grp.display ASC, grp.name ASC",
	"updated": "grp.updated_at DESC, grp.name ASC",
}


@asynccontextmanager
async def _connection(operation: str) -> AsyncIterator[asyncpg.Connection]:
	"""Acquire a pooled connection, surfacing driver failures as ``InternalError``."""
	try:
		pool = await get_pool()
		async with pool.acquire() as conn:
			yield conn
	except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError) as exc:
		_LOG.error("store_operation_failed", extra={"operation": operation, "error": type(exc).__name__})
		obs_metrics.inc_store_error(operation)
		raise InternalError(operation) from exc


class GroupsRepository:
	"""Thin data-access layer around asyncpg.

	Uniqueness of group names, of (group, user) memberships and of the single
	Owner per group is enforced by the schema, not by this class.
	"""

	# --- Group operations -------------------------------------------------

	async def create_group_with_owner(
		self,
		*,
		name: str,
		display: str,
		owner: str,
		max_owned: int,
	) -> models.Group:
		async with _connection("group.create") as conn:
			async with conn.transaction():
				# Serialises concurrent creates by the same owner so the count below holds.
				await conn.execute("SELECT pg_advisory_xact_lock(hashtext($1))", owner)
				owned = await conn.fetchval("SELECT COUNT(*) FROM kgroups WHERE owner=$1", owner)
				if owned >= max_owned:
					raise LimitExceededError("owned_group_limit_reached")
				try:
					record = await conn.fetchrow(
						"""
						INSERT INTO kgroups (name, display, owner)
						VALUES ($1, $2, $3)
						RETURNING name, display, owner, created_at, updated_at
						""",
						name,
						display,
						owner,
					)
				except asyncpg.UniqueViolationError as exc:
					raise ConflictError("group_name_taken") from exc
				await conn.execute(
					"""
					INSERT INTO kgroups_access (group_name, user_name, access)
					VALUES ($1, $2, $3)
					""",
					name,
					owner,
					int(Role.OWNER),
				)
		return models.Group.model_validate({**dict(record), "post_count": 0, "user_count": 1})

	async def get_group(self, name: str) -> models.Group | None:
		async with _connection("group.get") as conn:
			record = await conn.fetchrow(f"{_GROUP_SELECT} WHERE g.name=$1", name)
		return models.Group.model_validate(dict(record)) if record else None

	async def existing_group_names(self, names: list[str]) -> set[str]:
		async with _connection("group.exists") as conn:
			rows = await conn.fetch("SELECT name FROM kgroups WHERE name = ANY($1::text[])", names)
		return {row["name"] for row in rows}

	async def delete_group_cascade(self, name: str, *, owner: str) -> None:
		async with _connection("group.delete") as conn:
			async with conn.transaction():
				current_owner = await conn.fetchval("SELECT owner FROM kgroups WHERE name=$1 FOR UPDATE", name)
				if current_owner is None:
					raise NotFoundError("group_not_found")
				if current_owner != owner:
					raise PermissionDeniedError("owner_role_required")
				await conn.execute("DELETE FROM kposts WHERE group_name=$1", name)
				await conn.execute("DELETE FROM kgroups_access WHERE group_name=$1", name)
				await conn.execute("DELETE FROM kgroups WHERE name=$1", name)

	async def list_owned_groups(self, owner: str) -> list[models.Group]:
		async with _connection("group.list_owned") as conn:
			rows = await conn.fetch(
				f"{_GROUP_SELECT} WHERE g.owner=$1 ORDER BY g.created_at DESC, g.name ASC",
				owner,
			)
		return [models.Group.model_validate(dict(row)) for row in rows]

	async def list_recent_groups(self, *, limit: int) -> list[models.Group]:
		async with _connection("group.list_recent") as conn:
			rows = await conn.fetch(
				f"{_GROUP_SELECT} ORDER BY g.created_at DESC, g.name ASC LIMIT $1",
				limit,
			)
		return [models.Group.model_validate(dict(row)) for row in rows]

	async def list_groups_by_activity(self, *, user: str | None, limit: int) -> list[models.Group]:
		"""Groups ordered by latest post activity; restricted to ``user``'s memberships when given."""
		async with _connection("group.list_active") as conn:
			if user is None:
				rows = await conn.fetch(
					f"{_GROUP_SELECT} ORDER BY g.updated_at DESC, g.name ASC LIMIT $1",
					limit,
				)
			else:
				rows = await conn.fetch(
					f"""
					{_GROUP_SELECT}
					WHERE EXISTS (
						SELECT 1 FROM kgroups_access m
						WHERE m.group_name = g.name AND m.user_name = $2 AND m.access < {int(Role.PENDING)}
					)
					ORDER BY g.updated_at DESC, g.name ASC
					LIMIT $1
					""",
					limit,
					user,
				)
		return [models.Group.model_validate(dict(row)) for row in rows]

	async def list_member_groups(
		self,
		user: str,
		*,
		min_access: Role,
		max_access: Role,
		order: GroupOrder,
		limit: int,
	) -> list[models.MemberGroup]:
		async with _connection("group.list_member") as conn:
			rows = await conn.fetch(
				f"""
				SELECT grp.*, a.access, a.added_on
				FROM kgroups_access a
				JOIN ({_GROUP_SELECT}) AS grp ON grp.name = a.group_name
				WHERE a.user_name=$1 AND a.access BETWEEN $2 AND $3
				ORDER BY {_GROUP_ORDER[order]}
				LIMIT $4
				""",
				user,
				int(min_access),
				int(max_access),
				limit,
			)
		return [models.MemberGroup.model_validate(dict(row)) for row in rows]

	# --- Membership operations ---------------------------------------------

	async def get_membership(self, group: str, user: str) -> models.Membership | None:
		async with _connection("membership.get") as conn:
			record = await conn.fetchrow(
				"SELECT * FROM kgroups_access WHERE group_name=$1 AND user_name=$2",
				group,
				user,
			)
		return models.Membership.model_validate(dict(record)) if record else None

	async def list_memberships(self, group: str, *, min_access: Role, max_access: Role) -> list[models.Membership]:
		async with _connection("membership.list") as conn:
			rows = await conn.fetch(
				"""
				SELECT * FROM kgroups_access
				WHERE group_name=$1 AND access BETWEEN $2 AND $3
				ORDER BY user_name ASC
				""",
				group,
				int(min_access),
				int(max_access),
			)
		return [models.Membership.model_validate(dict(row)) for row in rows]

	async def insert_membership(self, group: str, user: str, *, access: Role) -> models.Membership | None:
		"""Insert a membership; ``None`` when one already exists for (group, user)."""
		async with _connection("membership.insert") as conn:
			try:
				record = await conn.fetchrow(
					"""
					INSERT INTO kgroups_access (group_name, user_name, access)
					VALUES ($1, $2, $3)
					ON CONFLICT (group_name, user_name) DO NOTHING
					RETURNING *
					""",
					group,
					user,
					int(access),
				)
			except asyncpg.ForeignKeyViolationError as exc:
				raise NotFoundError("group_not_found") from exc
		return models.Membership.model_validate(dict(record)) if record else None

	async def update_membership_access(
		self,
		group: str,
		user: str,
		*,
		access: Role,
		expected_access: Role,
	) -> models.Membership | None:
		"""Compare-and-swap the access level; ``None`` when the row no longer matches."""
		async with _connection("membership.update") as conn:
			record = await conn.fetchrow(
				"""
				UPDATE kgroups_access SET access=$3
				WHERE group_name=$1 AND user_name=$2 AND access=$4 AND access <> $5
				RETURNING *
				""",
				group,
				user,
				int(access),
				int(expected_access),
				int(Role.OWNER),
			)
		return models.Membership.model_validate(dict(record)) if record else None

	async def delete_membership(self, group: str, user: str, *, expected_access: Role) -> bool:
		"""Compare-and-swap delete; the Owner row is only removed by group deletion."""
		async with _connection("membership.delete") as conn:
			result = await conn.execute(
				"""
				DELETE FROM kgroups_access
				WHERE group_name=$1 AND user_name=$2 AND access=$3 AND access <> $4
				""",
				group,
				user,
				int(expected_access),
				int(Role.OWNER),
			)
		return result.split()[-1] != "0"

	# --- Post operations ---------------------------------------------------

	async def add_post(
		self,
		*,
		group: str,
		author: str,
		permlink: str,
		added_by: str,
		title: str,
		category: str | None,
	) -> models.Post:
		async with _connection("post.add") as conn:
			async with conn.transaction():
				try:
					record = await conn.fetchrow(
						"""
						INSERT INTO kposts (group_name, author, permlink, title, category, added_by)
						VALUES ($1, $2, $3, $4, $5, $6)
						RETURNING *
						""",
						group,
						author,
						permlink,
						title,
						category,
						added_by,
					)
				except asyncpg.UniqueViolationError as exc:
					raise ConflictError("post_exists") from exc
				except asyncpg.ForeignKeyViolationError as exc:
					raise NotFoundError("group_not_found") from exc
				await conn.execute("UPDATE kgroups SET updated_at=clock_timestamp() WHERE name=$1", group)
		return models.Post.model_validate(dict(record))

	async def get_post(self, group: str, author: str, permlink: str) -> models.Post | None:
		async with _connection("post.get") as conn:
			record = await conn.fetchrow(
				"SELECT * FROM kposts WHERE group_name=$1 AND author=$2 AND permlink=$3",
				group,
				author,
				permlink,
			)
		return models.Post.model_validate(dict(record)) if record else None

	async def list_posts(self, group: str, *, limit: int | None = None) -> list[models.Post]:
		async with _connection("post.list") as conn:
			rows = await conn.fetch(
				"SELECT * FROM kposts WHERE group_name=$1 ORDER BY id DESC LIMIT $2",
				group,
				limit,
			)
		return [models.Post.model_validate(dict(row)) for row in rows]

	async def delete_post(self, group: str, author: str, permlink: str) -> bool:
		async with _connection("post.delete") as conn:
			result = await conn.execute(
				"DELETE FROM kposts WHERE group_name=$1 AND author=$2 AND permlink=$3",
				group,
				author,
				permlink,
			)
		return result.split()[-1] != "0"
