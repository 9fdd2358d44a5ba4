"""Tunable limits and policy knobs for community groups."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator, model_validator


class GroupsConfig(BaseModel):
	"""Policy configuration passed into the role model and the group catalog."""

	max_owned_groups: int = Field(default=4, ge=1)
	name_min_length: int = Field(default=4, ge=1)
	name_max_length: int = Field(default=17, ge=1)
	name_pattern: str = r"^[A-Za-z0-9 _-]+$"
	case_insensitive_names: bool = True
	default_approved_role: str = "member"
	default_page_size: int = Field(default=20, ge=1)
	max_page_size: int = Field(default=50, ge=1)
	# Path segment the HTTP layer reads as "not logged in".
	anonymous_user: str = "x"
	overview_group_limit: int = Field(default=20, ge=1)
	overview_post_limit: int = Field(default=5, ge=0)

	@field_validator("default_approved_role")
	@classmethod
	def _approved_role_grantable(cls, value: str) -> str:
		lowered = value.strip().lower()
		if lowered not in {"member", "moderator"}:
			raise ValueError("default_approved_role must be 'member' or 'moderator'")
		return lowered

	@model_validator(mode="after")
	def _limits_within_page_size(self) -> "GroupsConfig":
		for field in ("default_page_size", "overview_group_limit", "overview_post_limit"):
			if getattr(self, field) > self.max_page_size:
				raise ValueError(f"{field} must not exceed max_page_size ({self.max_page_size})")
		if self.name_min_length > self.name_max_length:
			raise ValueError("name_min_length must not exceed name_max_length")
		return self
