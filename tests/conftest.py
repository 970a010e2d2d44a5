"""
Test configuration and fixtures.

Provides:
- A fresh store per test, run against both backends (memory and SQLite)
- Organizations, users and campaign building blocks created through the store
- HTTPX AsyncClient with session cookie and CSRF header
"""
import os
from dataclasses import dataclass
from typing import AsyncGenerator, Generator

# Must be set before phishnet modules read settings
os.environ["TESTING"] = "1"
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["SENTRY_DSN"] = ""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from phishnet.core.deps import COOKIE_NAME
from phishnet.core.security import create_session_token, hash_password
from phishnet.main import create_app
from phishnet.schemas.auth import OrganizationCreate, OrganizationRead, UserCreate, UserRecord
from phishnet.schemas.email_template import EmailTemplateCreate
from phishnet.schemas.group import GroupCreate, TargetCreate
from phishnet.schemas.landing_page import LandingPageCreate
from phishnet.schemas.smtp_profile import SmtpProfileCreate
from phishnet.storage import DatabaseStorage, MemStorage, Storage

TEST_PASSWORD = "password123"
# bcrypt is slow on purpose; hash once per session
TEST_PASSWORD_HASH = hash_password(TEST_PASSWORD)

CSRF_HEADERS = {"X-Requested-With": "XMLHttpRequest"}


# =============================================================================
# Store Fixtures
# =============================================================================

@pytest.fixture(params=["memory", "database"])
def store(request) -> Generator[Storage, None, None]:
    """
    Fresh store for each test.

    Parametrized so every test using it runs against both backends, which
    must behave identically.
    """
    if request.param == "memory":
        backend = MemStorage()
    else:
        backend = DatabaseStorage(database_url="sqlite://", create_tables=True)
    yield backend
    backend.close()


@pytest.fixture
def app(store: Storage) -> FastAPI:
    return create_app(store=store)


# =============================================================================
# Entity Factories
# =============================================================================

def make_org(store: Storage, name: str) -> OrganizationRead:
    return store.create_organization(OrganizationCreate(name=name))


def make_user(store: Storage, org: OrganizationRead, email: str, is_admin: bool = False) -> UserRecord:
    return store.create_user(
        org.id,
        UserCreate(
            email=email,
            password=TEST_PASSWORD_HASH,
            first_name="Test",
            last_name="User",
            is_admin=is_admin,
            organization_name=org.name,
        ),
    )


@dataclass
class CampaignRefs:
    """The four resources a campaign points at."""
    group_id: int
    smtp_profile_id: int
    email_template_id: int
    landing_page_id: int

    def payload(self, name: str = "Q3 Phishing Test", **extra) -> dict:
        return {
            "name": name,
            "targetGroupId": self.group_id,
            "smtpProfileId": self.smtp_profile_id,
            "emailTemplateId": self.email_template_id,
            "landingPageId": self.landing_page_id,
            **extra,
        }


def make_campaign_refs(store: Storage, org_id: int, user_id: int | None = None) -> CampaignRefs:
    group = store.create_group(org_id, GroupCreate(name="Finance"))
    store.create_target(
        org_id, group.id,
        TargetCreate(first_name="Ann", last_name="Lee", email="ann@example.com"),
    )
    profile = store.create_smtp_profile(
        org_id,
        SmtpProfileCreate(
            name="Relay",
            host="smtp.example.com",
            port=587,
            username="mailer",
            password="s3cret",
            from_name="IT Support",
            from_email="it@example.com",
        ),
    )
    template = store.create_email_template(
        org_id,
        user_id,
        EmailTemplateCreate(
            name="Password Reset",
            subject="Your password expires today",
            html_content="<p>Reset it <a href='{{url}}'>here</a></p>",
            sender_name="IT Support",
            sender_email="it@example.com",
        ),
    )
    page = store.create_landing_page(
        org_id,
        user_id,
        LandingPageCreate(
            name="O365 Login",
            html_content="<form></form>",
            page_type="login",
        ),
    )
    return CampaignRefs(group.id, profile.id, template.id, page.id)


# =============================================================================
# Tenant Fixtures
# =============================================================================

@pytest.fixture
def test_org(store: Storage) -> OrganizationRead:
    """Create a test organization."""
    return make_org(store, "Test Organization")


@pytest.fixture
def test_user(store: Storage, test_org: OrganizationRead) -> UserRecord:
    """Create an admin user in test_org."""
    return make_user(store, test_org, "test@test.com", is_admin=True)


@pytest.fixture
def other_org(store: Storage) -> OrganizationRead:
    """A second tenant, for isolation tests."""
    return make_org(store, "Other Organization")


@pytest.fixture
def other_user(store: Storage, other_org: OrganizationRead) -> UserRecord:
    return make_user(store, other_org, "other@other.com", is_admin=True)


@pytest.fixture
def campaign_refs(store: Storage, test_org, test_user) -> CampaignRefs:
    return make_campaign_refs(store, test_org.id, test_user.id)


@pytest.fixture
def other_refs(store: Storage, other_org, other_user) -> CampaignRefs:
    return make_campaign_refs(store, other_org.id, other_user.id)


# =============================================================================
# Auth Fixtures
# =============================================================================

@dataclass
class TestAuth:
    """Test authentication context."""
    __test__ = False

    user: UserRecord
    org: OrganizationRead
    token: str
    cookie_name: str = COOKIE_NAME


def make_auth(user: UserRecord, org: OrganizationRead) -> TestAuth:
    token = create_session_token(
        user_id=user.id,
        org_id=org.id,
        token_version=user.token_version,
    )
    return TestAuth(user=user, org=org, token=token)


@pytest.fixture
def test_auth(test_user: UserRecord, test_org: OrganizationRead) -> TestAuth:
    """Create JWT token for test user."""
    return make_auth(test_user, test_org)


# =============================================================================
# Client Fixtures
# =============================================================================

def make_client(app: FastAPI, auth: TestAuth | None = None, **kwargs) -> AsyncClient:
    cookies = {auth.cookie_name: auth.token} if auth else None
    return AsyncClient(
        transport=ASGITransport(app=app, **kwargs),
        base_url="http://test",
        cookies=cookies,
        headers=CSRF_HEADERS,
    )


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """
    Unauthenticated AsyncClient (CSRF header set) for public endpoints.
    """
    async with make_client(app) as c:
        yield c


@pytest.fixture
async def authed_client(app: FastAPI, test_auth: TestAuth) -> AsyncGenerator[AsyncClient, None]:
    """
    Authenticated AsyncClient with JWT cookie and CSRF header.
    """
    async with make_client(app, test_auth) as c:
        yield c


@pytest.fixture
async def other_client(app: FastAPI, other_user, other_org) -> AsyncGenerator[AsyncClient, None]:
    """Authenticated client for the second tenant."""
    async with make_client(app, make_auth(other_user, other_org)) as c:
        yield c
