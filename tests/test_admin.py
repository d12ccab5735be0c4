"""Tests for admin builder moderation and stats."""
from tests.conftest import all_ratings, auth_headers


async def test_stats(client, admin_user, homeowner, builder):
    await client.post(
        "/v1/reviews",
        json={"builder_id": str(builder.id), "values": all_ratings(4), "overall_comment": "ok"},
        headers=auth_headers(homeowner),
    )
    resp = await client.get("/v1/admin/stats", headers=auth_headers(admin_user))
    assert resp.status_code == 200
    assert resp.json() == {"total_builders": 1, "total_reviews": 1, "total_users": 2}


async def test_admin_endpoints_reject_homeowners(client, homeowner, builder):
    headers = auth_headers(homeowner)
    assert (await client.get("/v1/admin/stats", headers=headers)).status_code == 403
    assert (await client.post("/v1/admin/builders", json={"name": "X"}, headers=headers)).status_code == 403
    resp = await client.patch(f"/v1/admin/builders/{builder.id}", json={"is_published": False}, headers=headers)
    assert resp.status_code == 403


async def test_create_builder_starts_without_rating(client, admin_user):
    resp = await client.post(
        "/v1/admin/builders",
        json={"name": "Fresh Frame Co", "location": "Boise, ID", "average_rating": 5, "total_reviews": 100},
        headers=auth_headers(admin_user),
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["name"] == "Fresh Frame Co"
    assert data["average_rating"] is None
    assert data["total_reviews"] == 0


async def test_moderation_flags(client, admin_user, builder):
    resp = await client.patch(
        f"/v1/admin/builders/{builder.id}",
        json={"is_published": False, "is_featured": True},
        headers=auth_headers(admin_user),
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["is_published"] is False
    assert data["is_featured"] is True
    assert data["is_verified"] is True

    resp = await client.get("/v1/builders")
    assert resp.json()["data"] == []

    resp = await client.get("/v1/admin/builders", headers=auth_headers(admin_user))
    assert [b["name"] for b in resp.json()["data"]] == ["Oakridge Homes"]


async def test_moderation_ignores_rating_fields(client, admin_user, builder):
    resp = await client.patch(
        f"/v1/admin/builders/{builder.id}",
        json={"average_rating": 5, "total_reviews": 10},
        headers=auth_headers(admin_user),
    )
    assert resp.status_code == 400

    resp = await client.get(f"/v1/builders/{builder.id}")
    assert resp.json()["builder"]["average_rating"] is None


async def test_moderate_missing_builder(client, admin_user):
    resp = await client.patch(
        "/v1/admin/builders/00000000-0000-0000-0000-000000000000",
        json={"is_verified": True},
        headers=auth_headers(admin_user),
    )
    assert resp.status_code == 404
