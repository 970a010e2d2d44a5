"""Tests for the groups and targets endpoints."""

import pytest
from httpx import AsyncClient

from phishnet.schemas.group import GroupCreate, TargetCreate


@pytest.mark.asyncio
async def test_groups_require_session(client: AsyncClient):
    response = await client.get("/api/groups")
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_create_and_list_groups(authed_client: AsyncClient):
    response = await authed_client.post(
        "/api/groups", json={"name": "Finance", "description": "Accounts payable"}
    )
    assert response.status_code == 201
    group = response.json()
    assert group["name"] == "Finance"
    assert "organizationId" in group
    assert "createdAt" in group

    for i in range(3):
        r = await authed_client.post(
            f"/api/groups/{group['id']}/targets",
            json={"firstName": "T", "lastName": str(i), "email": f"t{i}@example.com"},
        )
        assert r.status_code == 201

    response = await authed_client.get("/api/groups")
    assert response.status_code == 200
    groups = response.json()
    assert len(groups) == 1
    assert groups[0]["targetCount"] == 3


@pytest.mark.asyncio
async def test_mutation_requires_csrf_header(authed_client: AsyncClient):
    response = await authed_client.post(
        "/api/groups",
        json={"name": "Finance"},
        headers={"X-Requested-With": ""},
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_create_group_validation_error(authed_client: AsyncClient):
    response = await authed_client.post("/api/groups", json={"name": ""})
    assert response.status_code == 400
    body = response.json()
    assert body["detail"] == "Validation error"
    assert body["errors"]


@pytest.mark.asyncio
async def test_update_group(authed_client: AsyncClient, store, test_org):
    group = store.create_group(test_org.id, GroupCreate(name="Old", description="keep"))

    response = await authed_client.put(f"/api/groups/{group.id}", json={"name": "New"})
    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "New"
    assert body["description"] == "keep"

    response = await authed_client.put(f"/api/groups/{group.id}", json={"description": None})
    assert response.json()["description"] is None


@pytest.mark.asyncio
async def test_delete_group_cascades_targets(authed_client: AsyncClient, store, test_org):
    group = store.create_group(test_org.id, GroupCreate(name="Temp"))
    target = store.create_target(
        test_org.id, group.id, TargetCreate(first_name="A", last_name="B", email="a@b.com")
    )

    response = await authed_client.delete(f"/api/groups/{group.id}")
    assert response.status_code == 204
    assert store.get_target(target.id) is None

    response = await authed_client.get(f"/api/groups/{group.id}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_missing_group_is_404(authed_client: AsyncClient):
    response = await authed_client.delete("/api/groups/999")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_group_used_by_campaign_is_409(
    authed_client: AsyncClient, store, campaign_refs
):
    r = await authed_client.post("/api/campaigns", json=campaign_refs.payload())
    assert r.status_code == 201

    response = await authed_client.delete(f"/api/groups/{campaign_refs.group_id}")
    assert response.status_code == 409
    assert store.get_group(campaign_refs.group_id) is not None


@pytest.mark.asyncio
async def test_foreign_group_is_403(authed_client: AsyncClient, store, other_org):
    foreign = store.create_group(other_org.id, GroupCreate(name="Theirs"))

    assert (await authed_client.get(f"/api/groups/{foreign.id}")).status_code == 403
    assert (await authed_client.put(f"/api/groups/{foreign.id}", json={"name": "x"})).status_code == 403
    assert (await authed_client.delete(f"/api/groups/{foreign.id}")).status_code == 403
    assert (await authed_client.get(f"/api/groups/{foreign.id}/targets")).status_code == 403
    response = await authed_client.post(
        f"/api/groups/{foreign.id}/targets",
        json={"firstName": "A", "lastName": "B", "email": "a@b.com"},
    )
    assert response.status_code == 403
    assert store.list_targets(foreign.id) == []

    # Not listed either
    assert (await authed_client.get("/api/groups")).json() == []


@pytest.mark.asyncio
async def test_target_crud(authed_client: AsyncClient, store, test_org):
    group = store.create_group(test_org.id, GroupCreate(name="Sales"))
    created = (await authed_client.post(
        f"/api/groups/{group.id}/targets",
        json={"firstName": " Ann ", "lastName": "Lee", "email": "ann@example.com", "position": ""},
    )).json()
    assert created["firstName"] == "Ann"
    assert created["position"] is None
    assert created["groupId"] == group.id

    url = f"/api/groups/{group.id}/targets/{created['id']}"
    response = await authed_client.put(url, json={"position": "Manager"})
    assert response.status_code == 200
    assert response.json()["position"] == "Manager"

    listed = (await authed_client.get(f"/api/groups/{group.id}/targets")).json()
    assert [t["email"] for t in listed] == ["ann@example.com"]

    assert (await authed_client.delete(url)).status_code == 204
    assert (await authed_client.get(url)).status_code == 404


@pytest.mark.asyncio
async def test_target_update_normalizes_like_create(authed_client: AsyncClient, store, test_org):
    group = store.create_group(test_org.id, GroupCreate(name="Ops"))
    target = store.create_target(
        test_org.id,
        group.id,
        TargetCreate(first_name="Bob", last_name="Ray", email="bob@example.com", position="Clerk"),
    )
    url = f"/api/groups/{group.id}/targets/{target.id}"

    response = await authed_client.put(
        url, json={"firstName": "  Robert  ", "email": " rob@example.com ", "position": "   "}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["firstName"] == "Robert"
    assert body["email"] == "rob@example.com"
    assert body["position"] is None
    assert body["lastName"] == "Ray"

    blank = await authed_client.put(url, json={"lastName": "   "})
    assert blank.status_code == 400
    assert store.get_target(target.id).last_name == "Ray"


@pytest.mark.asyncio
async def test_target_from_other_group_is_404(authed_client: AsyncClient, store, test_org):
    first = store.create_group(test_org.id, GroupCreate(name="One"))
    second = store.create_group(test_org.id, GroupCreate(name="Two"))
    target = store.create_target(
        test_org.id, first.id, TargetCreate(first_name="A", last_name="B", email="a@b.com")
    )

    response = await authed_client.get(f"/api/groups/{second.id}/targets/{target.id}")
    assert response.status_code == 404
