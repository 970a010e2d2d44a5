"""Authentication, organization and user schemas."""

from typing import Annotated

from pydantic import AfterValidator, BaseModel, EmailStr, Field

from phishnet.core.security import MAX_PASSWORD_BYTES, password_too_long
from phishnet.schemas.common import CamelModel, TimestampedRecord, OrgScopedRecord


class UserSession(BaseModel):
    """
    Session context for authenticated requests.

    Returned by the get_current_session dependency and carries everything
    needed for tenant scoping.
    """
    user_id: int
    org_id: int
    email: str
    is_admin: bool = False


# =============================================================================
# Organizations
# =============================================================================

class OrganizationCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)


class OrganizationRead(TimestampedRecord):
    name: str


# =============================================================================
# Users
# =============================================================================

class UserCreate(CamelModel):
    """Insert shape for a user; ``password`` is already hashed here."""
    email: EmailStr
    password: str = Field(..., min_length=1)
    first_name: str = Field(..., min_length=1, max_length=255)
    last_name: str = Field(..., min_length=1, max_length=255)
    is_admin: bool = False
    organization_name: str = Field(..., min_length=1, max_length=255)


class UserRead(OrgScopedRecord):
    """User response schema (never includes the password hash)."""
    email: str
    first_name: str
    last_name: str
    is_admin: bool
    organization_name: str


class UserRecord(UserRead):
    """Stored user, including credentials. Not for responses."""
    password: str
    token_version: int = 1


# =============================================================================
# Requests
# =============================================================================

def _check_password_bytes(v: str) -> str:
    if password_too_long(v):
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return v


Password = Annotated[str, AfterValidator(_check_password_bytes)]


class RegisterRequest(CamelModel):
    """Sign-up: creates the organization and its first (admin) user."""
    first_name: str = Field(..., min_length=1, max_length=255)
    last_name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: Password = Field(..., min_length=6, max_length=128)
    organization_name: str = Field(..., min_length=1, max_length=255)


class LoginRequest(CamelModel):
    email: EmailStr
    password: Password = Field(..., min_length=1, max_length=128)
