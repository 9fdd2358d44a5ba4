"""Routes for sharing posts into a group and removing them."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from kure.groups.api._errors import to_http_error
from kure.groups.domain.exceptions import GroupsError
from kure.groups.domain.posts_service import PostIndex
from kure.groups.schemas import dto
from kure.infra.auth import AuthenticatedUser, get_current_user

router = APIRouter(tags=["groups:posts"])
_service = PostIndex()


@router.post("/{group}/posts", response_model=dto.PostResponse, status_code=201)
async def add_post_endpoint(
	group: str,
	payload: dto.PostCreateRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> dto.PostResponse:
	try:
		post = await _service.add_post(
			group,
			auth_user.id,
			payload.author,
			payload.permlink,
			title=payload.title,
			category=payload.category,
		)
	except GroupsError as exc:
		raise to_http_error(exc) from exc
	return dto.PostResponse.from_model(post)


@router.delete(
	"/{group}/posts/{author}/{permlink}",
	status_code=204,
	response_class=Response,
	response_model=None,
)
async def delete_post_endpoint(
	group: str,
	author: str,
	permlink: str,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> None:
	try:
		await _service.delete_post(group, author, permlink, auth_user.id)
	except GroupsError as exc:
		raise to_http_error(exc) from exc
	return None
