"""FastAPI routers for the groups domain."""

from __future__ import annotations

from fastapi import APIRouter

from kure.groups.api import groups, members, posts

PREFIX = "/api/groups"

router = APIRouter()

router.include_router(groups.router, prefix=PREFIX)
router.include_router(members.router, prefix=PREFIX)
router.include_router(posts.router, prefix=PREFIX)

__all__ = ["router"]
