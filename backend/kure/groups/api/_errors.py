"""Error translation helpers for the groups API."""

from __future__ import annotations

from fastapi import HTTPException

from kure.groups.domain import exceptions


def to_http_error(exc: exceptions.GroupsError) -> HTTPException:
	"""Translate domain exceptions to FastAPI HTTP errors."""
	return HTTPException(status_code=exc.status_code, detail=exc.detail)
