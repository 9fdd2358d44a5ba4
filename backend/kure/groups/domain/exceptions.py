"""Custom exceptions for group services."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import status

if TYPE_CHECKING:  # pragma: no cover
	from kure.groups.domain.models import Membership

if hasattr(status, "HTTP_422_UNPROCESSABLE_CONTENT"):
	_HTTP_422 = status.HTTP_422_UNPROCESSABLE_CONTENT
else:  # pragma: no cover - older Starlette builds
	_HTTP_422 = status.HTTP_422_UNPROCESSABLE_ENTITY


class GroupsError(Exception):
	"""Base class for group related errors."""

	status_code: int = status.HTTP_400_BAD_REQUEST
	detail: str = "groups_error"

	def __init__(self, detail: str | None = None) -> None:
		super().__init__(detail or self.detail)
		if detail:
			self.detail = detail


class ValidationError(GroupsError):
	"""Raised for malformed input such as a bad group name."""

	status_code = _HTTP_422
	detail = "validation_error"


class ConflictError(GroupsError):
	"""Raised for duplicates and lost compare-and-swap races."""

	status_code = status.HTTP_409_CONFLICT
	detail = "conflict"


class LimitExceededError(GroupsError):
	"""Raised when a user already owns the maximum number of groups."""

	status_code = status.HTTP_403_FORBIDDEN
	detail = "limit_exceeded"


class PermissionDeniedError(GroupsError):
	"""Raised when the caller's role does not meet the required threshold."""

	status_code = status.HTTP_403_FORBIDDEN
	detail = "permission_denied"


class NotFoundError(GroupsError):
	"""Thrown when a group, membership or post is missing."""

	status_code = status.HTTP_404_NOT_FOUND
	detail = "not_found"


class AlreadyMemberError(ConflictError):
	"""Raised when an access request finds an existing membership."""

	detail = "already_member"

	def __init__(self, membership: "Membership", detail: str | None = None) -> None:
		super().__init__(detail)
		self.membership = membership


class InternalError(GroupsError):
	"""Backing store failure; ``operation`` names the sub-operation that failed."""

	status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
	detail = "internal_error"

	def __init__(self, operation: str, detail: str | None = None) -> None:
		super().__init__(detail)
		self.operation = operation

	def __str__(self) -> str:
		return f"{self.detail} ({self.operation})"
