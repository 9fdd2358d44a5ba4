"""Input and authorization policies for group operations.

Everything here is computed locally; nothing touches the store.
"""

from __future__ import annotations

import re

from kure.groups.config import GroupsConfig
from kure.groups.domain.exceptions import ConflictError, PermissionDeniedError, ValidationError
from kure.groups.domain.roles import GRANTABLE_ROLES, Role, RoleModel

USER_GROUP_KINDS = ("owned", "joined", "all")


def normalize_group_name(name: str, config: GroupsConfig) -> str:
	"""Validate a submitted group name and return the stored identifier."""
	if not isinstance(name, str):
		raise ValidationError("group_name_invalid")
	if len(name) < config.name_min_length:
		raise ValidationError("group_name_too_short")
	if len(name) > config.name_max_length:
		raise ValidationError("group_name_too_long")
	if not re.fullmatch(config.name_pattern, name):
		raise ValidationError("group_name_invalid_characters")
	return name.lower() if config.case_insensitive_names else name


def lookup_group_name(name: str, config: GroupsConfig) -> str:
	"""Map a group reference from a caller onto the stored identifier."""
	return name.lower() if config.case_insensitive_names else name


def ensure_user_id(user: str | None) -> str:
	if user is None or not str(user).strip():
		raise ValidationError("user_required")
	return str(user).strip()


def ensure_grantable(role: Role) -> None:
	if role not in GRANTABLE_ROLES:
		raise ValidationError("role_not_grantable")


def ensure_can_grant(roles: RoleModel, actor: Role, target: Role | None, desired: Role) -> None:
	"""The granter must outrank both the granted role and the target's current role."""
	if target == Role.OWNER:
		raise ConflictError("owner_role_immutable")
	if actor != Role.OWNER and not roles.outranks(actor, desired):
		raise PermissionDeniedError("insufficient_role_rank")
	if target is not None and not roles.outranks(actor, target):
		raise PermissionDeniedError("insufficient_role_rank")


def ensure_user_group_kind(kind: str) -> str:
	if kind not in USER_GROUP_KINDS:
		raise ValidationError("invalid_group_kind")
	return kind


def ensure_limit(limit: int, config: GroupsConfig, *, allow_zero: bool = False) -> int:
	floor = 0 if allow_zero else 1
	if limit < floor or limit > config.max_page_size:
		raise ValidationError("limit_out_of_range")
	return limit
