"""Group routes: listings, detail page, creation and deletion."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Response

from kure.groups.api._errors import to_http_error
from kure.groups.domain.catalog_service import GroupCatalog
from kure.groups.domain.exceptions import GroupsError
from kure.groups.schemas import dto
from kure.groups.services.aggregation import AggregationEngine
from kure.infra.auth import AuthenticatedUser, get_current_user

router = APIRouter(tags=["groups"])
_catalog = GroupCatalog()
_engine = AggregationEngine(catalog=_catalog, access=_catalog.access)


@router.get("/user/{user}/{kind}", response_model=dto.UserGroupsResponse)
async def user_groups_endpoint(user: str, kind: str, limit: Optional[int] = None) -> dto.UserGroupsResponse:
	try:
		groups = await _engine.user_groups(user, kind, limit=limit)
	except GroupsError as exc:
		raise to_http_error(exc) from exc
	return dto.UserGroupsResponse(groups=groups)


# Declared before "/{group}/{user}" so "list" is not read as a group name.
@router.get("/list/{user}", response_model=dto.CommunityOverviewResponse)
async def community_overview_endpoint(user: str) -> dto.CommunityOverviewResponse:
	try:
		return await _engine.community_overview(user)
	except GroupsError as exc:
		raise to_http_error(exc) from exc


@router.get("/{group}/{user}", response_model=dto.GroupDetailResponse, response_model_exclude_unset=True)
async def group_detail_endpoint(group: str, user: str) -> dto.GroupDetailResponse:
	try:
		return await _engine.group_detail(group, user)
	except GroupsError as exc:
		raise to_http_error(exc) from exc


@router.post("", response_model=dto.GroupResponse, status_code=201)
async def create_group_endpoint(
	payload: dto.GroupCreateRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> dto.GroupResponse:
	try:
		group = await _catalog.create_group(payload.name, auth_user.id, display=payload.display)
	except GroupsError as exc:
		raise to_http_error(exc) from exc
	return dto.GroupResponse.from_model(group)


@router.delete(
	"/{group}",
	status_code=204,
	response_class=Response,
	response_model=None,
)
async def delete_group_endpoint(
	group: str,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> None:
	try:
		await _catalog.delete_group(group, auth_user.id)
	except GroupsError as exc:
		raise to_http_error(exc) from exc
	return None
