"""HTTP surface tests for the groups routes, backed by the in-memory repository."""

from __future__ import annotations

import pytest


def _as(user: str) -> dict[str, str]:
	return {"X-User-Id": user}


async def _seed(api_client) -> None:
	response = await api_client.post("/api/groups", json={"name": "Devs"}, headers=_as("olga"))
	assert response.status_code == 201
	response = await api_client.post("/api/groups/devs/requests", headers=_as("pete"))
	assert response.status_code == 201


@pytest.mark.asyncio
async def test_create_group_returns_group(api_client):
	response = await api_client.post("/api/groups", json={"name": "Hive Devs"}, headers=_as("olga"))

	assert response.status_code == 201
	body = response.json()
	assert body["name"] == "hive devs"
	assert body["display"] == "Hive Devs"
	assert body["owner"] == "olga"
	assert body["user_count"] == 1


@pytest.mark.asyncio
async def test_create_group_requires_identity(api_client):
	response = await api_client.post("/api/groups", json={"name": "Hive Devs"})

	assert response.status_code == 401
	assert response.json()["detail"] == "authentication_required"


@pytest.mark.asyncio
async def test_invalid_name_maps_to_422(api_client):
	response = await api_client.post("/api/groups", json={"name": "no"}, headers=_as("olga"))

	assert response.status_code == 422
	assert response.json()["detail"] == "group_name_too_short"


@pytest.mark.asyncio
async def test_duplicate_name_maps_to_409(api_client):
	await api_client.post("/api/groups", json={"name": "Devs"}, headers=_as("olga"))

	response = await api_client.post("/api/groups", json={"name": "devs"}, headers=_as("mona"))

	assert response.status_code == 409
	assert response.json()["detail"] == "group_name_taken"


@pytest.mark.asyncio
async def test_repeat_request_maps_to_409(api_client):
	await _seed(api_client)

	response = await api_client.post("/api/groups/devs/requests", headers=_as("pete"))

	assert response.status_code == 409
	assert response.json()["detail"] == "already_member"


@pytest.mark.asyncio
async def test_group_detail_for_anonymous_omits_viewer_role(api_client):
	await _seed(api_client)

	response = await api_client.get("/api/groups/devs/x")

	assert response.status_code == 200
	body = response.json()
	assert "viewer_role" not in body
	assert [member["user"] for member in body["members"]] == ["olga"]
	assert [member["user"] for member in body["pending"]] == ["pete"]


@pytest.mark.asyncio
async def test_group_detail_reports_viewer_role(api_client):
	await _seed(api_client)

	pending = await api_client.get("/api/groups/devs/pete")
	stranger = await api_client.get("/api/groups/devs/stranger")

	assert pending.json()["viewer_role"] == "pending"
	assert stranger.json()["viewer_role"] is None


@pytest.mark.asyncio
async def test_group_detail_missing_group(api_client):
	response = await api_client.get("/api/groups/ghost/x")

	assert response.status_code == 404


@pytest.mark.asyncio
async def test_approve_then_post_then_delete(api_client):
	await _seed(api_client)

	approved = await api_client.post("/api/groups/devs/pending/pete/approve", headers=_as("olga"))
	assert approved.status_code == 200
	assert approved.json()["role"] == "member"

	posted = await api_client.post(
		"/api/groups/devs/posts",
		json={"author": "pete", "permlink": "hello", "title": "Hello"},
		headers=_as("pete"),
	)
	assert posted.status_code == 201
	assert posted.json()["added_by"] == "pete"

	detail = (await api_client.get("/api/groups/devs/pete")).json()
	assert [post["permlink"] for post in detail["posts"]] == ["hello"]
	assert detail["viewer_role"] == "member"

	removed = await api_client.delete("/api/groups/devs/posts/pete/hello", headers=_as("pete"))
	assert removed.status_code == 204


@pytest.mark.asyncio
async def test_pending_user_cannot_post(api_client):
	await _seed(api_client)

	response = await api_client.post(
		"/api/groups/devs/posts",
		json={"author": "pete", "permlink": "hello"},
		headers=_as("pete"),
	)

	assert response.status_code == 403
	assert response.json()["detail"] == "membership_required"


@pytest.mark.asyncio
async def test_grant_and_revoke(api_client):
	await _seed(api_client)

	granted = await api_client.put(
		"/api/groups/devs/members/pete",
		json={"role": "moderator"},
		headers=_as("olga"),
	)
	assert granted.status_code == 200
	assert granted.json()["access"] == 1

	revoked = await api_client.delete("/api/groups/devs/members/pete", headers=_as("olga"))
	assert revoked.status_code == 204

	detail = (await api_client.get("/api/groups/devs/x")).json()
	assert [member["user"] for member in detail["members"]] == ["olga"]
	assert detail["pending"] == []


@pytest.mark.asyncio
async def test_grant_owner_role_is_rejected_by_schema(api_client):
	await _seed(api_client)

	response = await api_client.put(
		"/api/groups/devs/members/pete",
		json={"role": "owner"},
		headers=_as("olga"),
	)

	assert response.status_code == 422


@pytest.mark.asyncio
async def test_owner_cannot_leave(api_client):
	await _seed(api_client)

	response = await api_client.delete("/api/groups/devs/members/olga", headers=_as("olga"))

	assert response.status_code == 403
	assert response.json()["detail"] == "owner_cannot_leave"


@pytest.mark.asyncio
async def test_delete_group_by_owner_only(api_client):
	await _seed(api_client)

	forbidden = await api_client.delete("/api/groups/devs", headers=_as("pete"))
	assert forbidden.status_code == 403

	deleted = await api_client.delete("/api/groups/devs", headers=_as("olga"))
	assert deleted.status_code == 204
	assert (await api_client.get("/api/groups/devs/x")).status_code == 404


@pytest.mark.asyncio
async def test_user_groups_listing(api_client):
	await _seed(api_client)
	await api_client.post("/api/groups/devs/pending/pete/approve", headers=_as("olga"))

	owned = await api_client.get("/api/groups/user/olga/owned")
	joined = await api_client.get("/api/groups/user/pete/joined")
	invalid = await api_client.get("/api/groups/user/pete/everything")

	assert [(group["name"], group["role"]) for group in owned.json()["groups"]] == [("devs", "owner")]
	assert [(group["name"], group["role"]) for group in joined.json()["groups"]] == [("devs", "member")]
	assert invalid.status_code == 422


@pytest.mark.asyncio
async def test_community_overview(api_client):
	await _seed(api_client)
	await api_client.post("/api/groups", json={"name": "Other"}, headers=_as("mona"))

	anonymous = await api_client.get("/api/groups/list/x")
	member = await api_client.get("/api/groups/list/pete")

	assert anonymous.status_code == 200
	assert {entry["group"]["name"] for entry in anonymous.json()["groups_activity"]} == {"devs", "other"}
	assert [entry["group"]["name"] for entry in anonymous.json()["groups_created"]] == ["other", "devs"]
	assert member.json()["groups_activity"] == []


@pytest.mark.asyncio
async def test_store_failure_maps_to_500(api_client, memory_repo):
	await _seed(api_client)
	memory_repo.failures["post.list"] = RuntimeError("connection reset")

	response = await api_client.get("/api/groups/devs/x")

	assert response.status_code == 500
	assert response.json()["detail"] == "internal_error"


@pytest.mark.asyncio
async def test_liveness_and_request_id(api_client):
	response = await api_client.get("/health/live", headers={"X-Request-Id": "req-1"})

	assert response.status_code == 200
	assert response.headers["X-Request-Id"] == "req-1"
