"""Membership routes: join requests, grants, approvals and removals."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from kure.groups.api._errors import to_http_error
from kure.groups.domain.access_service import AccessStore
from kure.groups.domain.exceptions import GroupsError
from kure.groups.schemas import dto
from kure.infra.auth import AuthenticatedUser, get_current_user

router = APIRouter(tags=["groups:members"])
_service = AccessStore()


@router.post("/{group}/requests", response_model=dto.MemberResponse, status_code=201)
async def request_access_endpoint(
	group: str,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> dto.MemberResponse:
	try:
		membership = await _service.request_access(group, auth_user.id)
	except GroupsError as exc:
		raise to_http_error(exc) from exc
	return dto.MemberResponse.from_model(membership)


@router.put("/{group}/members/{user}", response_model=dto.MemberResponse)
async def grant_access_endpoint(
	group: str,
	user: str,
	payload: dto.RoleGrantRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> dto.MemberResponse:
	try:
		membership = await _service.grant_access(group, auth_user.id, user, payload.role)
	except GroupsError as exc:
		raise to_http_error(exc) from exc
	return dto.MemberResponse.from_model(membership)


@router.post("/{group}/pending/{user}/approve", response_model=dto.MemberResponse)
async def approve_pending_endpoint(
	group: str,
	user: str,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> dto.MemberResponse:
	try:
		membership = await _service.approve_pending(group, auth_user.id, user)
	except GroupsError as exc:
		raise to_http_error(exc) from exc
	return dto.MemberResponse.from_model(membership)


@router.delete(
	"/{group}/members/{user}",
	status_code=204,
	response_class=Response,
	response_model=None,
)
async def revoke_access_endpoint(
	group: str,
	user: str,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> None:
	try:
		await _service.revoke_access(group, auth_user.id, user)
	except GroupsError as exc:
		raise to_http_error(exc) from exc
	return None
