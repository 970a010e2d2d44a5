"""Auth service - registration, credential checks and session tokens."""

import logging

import jwt

from phishnet.core.errors import (
    AuthenticationError,
    ConflictError,
    InvalidCredentialsError,
    NotFoundError,
)
from phishnet.core.security import (
    create_session_token,
    decode_session_token,
    hash_password,
    verify_password,
)
from phishnet.schemas.auth import OrganizationCreate, RegisterRequest, UserCreate, UserRecord
from phishnet.storage import Storage

logger = logging.getLogger(__name__)


def register(store: Storage, data: RegisterRequest) -> UserRecord:
    """
    Create a new organization and its first user (an admin).

    Joining an existing organization by name is not allowed; that would let
    anyone sign up into another tenant.
    """
    if store.get_organization_by_name(data.organization_name) is not None:
        raise ConflictError("Organization already exists")
    if store.get_user_by_email(data.email) is not None:
        raise ConflictError("Email already registered")

    org = store.create_organization(OrganizationCreate(name=data.organization_name))
    user = store.create_user(
        org.id,
        UserCreate(
            email=data.email,
            password=hash_password(data.password),
            first_name=data.first_name,
            last_name=data.last_name,
            is_admin=True,
            organization_name=org.name,
        ),
    )
    logger.info("Registered organization %s with admin user %s", org.id, user.id)
    return user


def authenticate(store: Storage, email: str, password: str) -> UserRecord:
    """Return the user for valid credentials; same error for unknown email and bad password."""
    user = store.get_user_by_email(email)
    if user is None or not verify_password(password, user.password):
        raise InvalidCredentialsError("Invalid email or password")
    return user


def issue_session_token(user: UserRecord) -> str:
    return create_session_token(user.id, user.organization_id, user.token_version)


def resolve_session(store: Storage, token: str | None) -> UserRecord:
    """
    Load the user behind a session token.

    Validates:
    - Token is present, signed and not expired
    - User still exists
    - Token version matches (for revocation support)
    """
    if not token:
        raise AuthenticationError("Not authenticated")
    try:
        payload = decode_session_token(token)
        user_id = int(payload["sub"])
    except (jwt.InvalidTokenError, KeyError, ValueError):
        raise AuthenticationError("Invalid session")

    user = store.get_user(user_id)
    if user is None:
        raise AuthenticationError("User not found")
    if user.token_version != payload.get("token_version"):
        raise AuthenticationError("Session revoked")
    if user.organization_id != payload.get("org_id"):
        raise AuthenticationError("Invalid session")
    return user


def revoke_sessions(store: Storage, user_id: int) -> UserRecord:
    """Invalidate every outstanding token for the user."""
    user = store.get_user(user_id)
    if user is None:
        raise NotFoundError("User not found")
    updated = store.update_user(user_id, {"token_version": user.token_version + 1})
    logger.info("Revoked sessions for user %s", user_id)
    return updated
