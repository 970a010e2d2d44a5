"""
Tests for SMTP profiles, email templates, landing pages and the users list.
"""

import pytest
from httpx import AsyncClient

from conftest import make_client, make_user


SMTP_PROFILE = {
    "name": "Corporate Relay",
    "host": "smtp.acme.com",
    "port": 587,
    "username": "mailer",
    "password": "relay-pass",
    "fromName": "IT Helpdesk",
    "fromEmail": "helpdesk@acme.com",
}

EMAIL_TEMPLATE = {
    "name": "Shared Document",
    "subject": "A document was shared with you",
    "htmlContent": "<p>Open <a href='{{url}}'>the document</a></p>",
    "textContent": "Open the document: {{url}}",
    "senderName": "OneDrive",
    "senderEmail": "no-reply@acme.com",
}

LANDING_PAGE = {
    "name": "Training Page",
    "description": "You clicked a simulated phishing link",
    "htmlContent": "<h1>This was a test</h1>",
    "redirectUrl": "https://acme.com/security",
    "pageType": "educational",
}


# =============================================================================
# SMTP Profiles
# =============================================================================

@pytest.mark.asyncio
async def test_smtp_profile_password_is_write_only(authed_client: AsyncClient, store):
    response = await authed_client.post("/api/smtp-profiles", json=SMTP_PROFILE)

    assert response.status_code == 201
    profile = response.json()
    assert "password" not in profile
    assert profile["fromEmail"] == "helpdesk@acme.com"
    assert store.get_smtp_profile(profile["id"]).password == "relay-pass"

    listed = (await authed_client.get("/api/smtp-profiles")).json()
    assert all("password" not in p for p in listed)
    fetched = (await authed_client.get(f"/api/smtp-profiles/{profile['id']}")).json()
    assert "password" not in fetched


@pytest.mark.asyncio
async def test_smtp_profile_update_keeps_password(authed_client: AsyncClient, store):
    profile = (await authed_client.post("/api/smtp-profiles", json=SMTP_PROFILE)).json()
    url = f"/api/smtp-profiles/{profile['id']}"

    response = await authed_client.put(url, json={"port": 465, "password": None})
    assert response.status_code == 200
    assert response.json()["port"] == 465
    assert store.get_smtp_profile(profile["id"]).password == "relay-pass"

    await authed_client.put(url, json={"password": "rotated"})
    assert store.get_smtp_profile(profile["id"]).password == "rotated"


@pytest.mark.asyncio
@pytest.mark.parametrize("override", [{"port": 0}, {"port": 70000}, {"fromEmail": "nope"}, {"host": ""}])
async def test_smtp_profile_validation_is_400(authed_client: AsyncClient, override):
    response = await authed_client.post("/api/smtp-profiles", json={**SMTP_PROFILE, **override})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_smtp_profile_in_use_cannot_be_deleted(authed_client: AsyncClient, campaign_refs):
    await authed_client.post("/api/campaigns", json=campaign_refs.payload())

    response = await authed_client.delete(f"/api/smtp-profiles/{campaign_refs.smtp_profile_id}")

    assert response.status_code == 409
    assert (await authed_client.get(f"/api/smtp-profiles/{campaign_refs.smtp_profile_id}")).status_code == 200


# =============================================================================
# Email Templates
# =============================================================================

@pytest.mark.asyncio
async def test_email_template_crud(authed_client: AsyncClient, test_user):
    created = await authed_client.post("/api/email-templates", json=EMAIL_TEMPLATE)
    assert created.status_code == 201
    template = created.json()
    assert template["createdById"] == test_user.id
    url = f"/api/email-templates/{template['id']}"

    response = await authed_client.put(url, json={"subject": "Action required", "textContent": None})
    assert response.status_code == 200
    assert response.json()["subject"] == "Action required"
    assert response.json()["textContent"] is None
    assert response.json()["htmlContent"] == EMAIL_TEMPLATE["htmlContent"]

    listed = (await authed_client.get("/api/email-templates")).json()
    assert [t["id"] for t in listed] == [template["id"]]

    assert (await authed_client.delete(url)).status_code == 204
    assert (await authed_client.get(url)).status_code == 404
    assert (await authed_client.delete(url)).status_code == 404


@pytest.mark.asyncio
async def test_email_template_in_use_cannot_be_deleted(authed_client: AsyncClient, campaign_refs):
    await authed_client.post("/api/campaigns", json=campaign_refs.payload())

    response = await authed_client.delete(f"/api/email-templates/{campaign_refs.email_template_id}")
    assert response.status_code == 409


# =============================================================================
# Landing Pages
# =============================================================================

@pytest.mark.asyncio
async def test_landing_page_crud(authed_client: AsyncClient):
    created = await authed_client.post("/api/landing-pages", json=LANDING_PAGE)
    assert created.status_code == 201
    page = created.json()
    assert page["pageType"] == "educational"
    url = f"/api/landing-pages/{page['id']}"

    response = await authed_client.put(url, json={"pageType": "form", "redirectUrl": None})
    assert response.status_code == 200
    assert response.json()["pageType"] == "form"
    assert response.json()["redirectUrl"] is None
    assert response.json()["description"] == LANDING_PAGE["description"]

    assert (await authed_client.delete(url)).status_code == 204
    assert (await authed_client.get(url)).status_code == 404


@pytest.mark.asyncio
async def test_landing_page_invalid_type_is_400(authed_client: AsyncClient):
    response = await authed_client.post(
        "/api/landing-pages", json={**LANDING_PAGE, "pageType": "popup"}
    )

    assert response.status_code == 400
    assert response.json()["errors"][0]["loc"][-1] == "pageType"


@pytest.mark.asyncio
async def test_landing_page_in_use_cannot_be_deleted(authed_client: AsyncClient, campaign_refs):
    await authed_client.post("/api/campaigns", json=campaign_refs.payload())

    response = await authed_client.delete(f"/api/landing-pages/{campaign_refs.landing_page_id}")
    assert response.status_code == 409


# =============================================================================
# Tenant Isolation
# =============================================================================

@pytest.mark.asyncio
@pytest.mark.parametrize(
    "collection, ref_attr",
    [
        ("smtp-profiles", "smtp_profile_id"),
        ("email-templates", "email_template_id"),
        ("landing-pages", "landing_page_id"),
    ],
)
async def test_foreign_resources_are_403(authed_client: AsyncClient, other_refs, collection, ref_attr):
    url = f"/api/{collection}/{getattr(other_refs, ref_attr)}"

    assert (await authed_client.get(url)).status_code == 403
    assert (await authed_client.put(url, json={"name": "Mine now"})).status_code == 403
    assert (await authed_client.delete(url)).status_code == 403
    assert (await authed_client.get(f"/api/{collection}")).json() == []


# =============================================================================
# Users
# =============================================================================

@pytest.mark.asyncio
async def test_list_users_hides_passwords(authed_client: AsyncClient, store, test_org, test_user, other_user):
    make_user(store, test_org, "colleague@test.com")

    response = await authed_client.get("/api/users")

    assert response.status_code == 200
    users = response.json()
    assert [u["email"] for u in users] == ["test@test.com", "colleague@test.com"]
    assert all("password" not in u and "tokenVersion" not in u for u in users)


# =============================================================================
# Error Handling
# =============================================================================

@pytest.mark.asyncio
async def test_unexpected_error_is_generic_500(app, store, test_auth, monkeypatch):
    def broken(org_id):
        raise RuntimeError("connection reset")

    monkeypatch.setattr(store, "list_users", broken)

    async with make_client(app, test_auth, raise_app_exceptions=False) as c:
        response = await c.get("/api/users")

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}
