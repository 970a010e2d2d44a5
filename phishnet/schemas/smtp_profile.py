"""SMTP profile schemas."""

from pydantic import EmailStr, Field

from phishnet.schemas.common import CamelModel, OrgScopedRecord


class SmtpProfileCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    host: str = Field(..., min_length=1, max_length=255)
    port: int = Field(..., ge=1, le=65535)
    username: str = Field(..., max_length=255)
    password: str = Field(..., max_length=255)
    from_name: str = Field(..., min_length=1, max_length=255)
    from_email: EmailStr


class SmtpProfileUpdate(CamelModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    host: str | None = Field(None, min_length=1, max_length=255)
    port: int | None = Field(None, ge=1, le=65535)
    username: str | None = Field(None, max_length=255)
    password: str | None = Field(None, max_length=255)
    from_name: str | None = Field(None, min_length=1, max_length=255)
    from_email: EmailStr | None = None


class SmtpProfileRead(OrgScopedRecord):
    """SMTP profile response schema. The password is write-only."""
    name: str
    host: str
    port: int
    username: str
    from_name: str
    from_email: str


class SmtpProfileRecord(SmtpProfileRead):
    """Stored SMTP profile, including credentials. Not for responses."""
    password: str
