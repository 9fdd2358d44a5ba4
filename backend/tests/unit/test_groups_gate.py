from __future__ import annotations

import pytest

from kure.groups.domain.exceptions import PermissionDeniedError
from kure.groups.domain.gate import RequestGate
from kure.groups.domain.roles import Role, RoleModel


class _StaticAccess:
	def __init__(self, roles: dict[str, Role]) -> None:
		self.roles = roles
		self.lookups: list[tuple[str, str]] = []

	async def get_access(self, group: str, user: str) -> Role | None:
		self.lookups.append((group, user))
		return self.roles.get(user)


@pytest.fixture()
def access() -> _StaticAccess:
	return _StaticAccess(
		{
			"olga": Role.OWNER,
			"mona": Role.MODERATOR,
			"mike": Role.MEMBER,
			"pete": Role.PENDING,
		}
	)


@pytest.fixture()
def gate(access) -> RequestGate:
	return RequestGate(roles=RoleModel(), access=access)


@pytest.mark.asyncio
async def test_require_returns_role_when_threshold_met(gate):
	assert await gate.require("devs", "olga", Role.MODERATOR) is Role.OWNER
	assert await gate.require("devs", "mona", Role.MODERATOR) is Role.MODERATOR


@pytest.mark.asyncio
async def test_require_rejects_lower_role_with_default_detail(gate):
	with pytest.raises(PermissionDeniedError) as excinfo:
		await gate.require("devs", "mike", Role.MODERATOR)
	assert excinfo.value.detail == "moderator_role_required"


@pytest.mark.asyncio
async def test_pending_never_satisfies_a_threshold(gate):
	with pytest.raises(PermissionDeniedError):
		await gate.require("devs", "pete", Role.PENDING)


@pytest.mark.asyncio
async def test_stranger_and_anonymous_are_rejected(gate, access):
	with pytest.raises(PermissionDeniedError):
		await gate.require("devs", "nobody", Role.MEMBER)
	with pytest.raises(PermissionDeniedError):
		await gate.require("devs", None, Role.MEMBER, detail="membership_required")
	assert ("devs", None) not in access.lookups


@pytest.mark.asyncio
async def test_require_outranks_is_strict(gate):
	assert await gate.require_outranks("devs", "olga", Role.MODERATOR) is Role.OWNER
	with pytest.raises(PermissionDeniedError) as excinfo:
		await gate.require_outranks("devs", "mona", Role.MODERATOR)
	assert excinfo.value.detail == "insufficient_role_rank"
