"""Pydantic schemas for phishing email templates."""

from pydantic import EmailStr, Field

from phishnet.schemas.common import CamelModel, OrgScopedRecord


class EmailTemplateCreate(CamelModel):
    """Create a new email template."""
    name: str = Field(..., min_length=1, max_length=255)
    subject: str = Field(..., min_length=1, max_length=998)
    html_content: str = Field(..., min_length=1)
    text_content: str | None = None
    sender_name: str = Field(..., min_length=1, max_length=255)
    sender_email: EmailStr


class EmailTemplateUpdate(CamelModel):
    """Update an email template."""
    name: str | None = Field(None, min_length=1, max_length=255)
    subject: str | None = Field(None, min_length=1, max_length=998)
    html_content: str | None = Field(None, min_length=1)
    text_content: str | None = None
    sender_name: str | None = Field(None, min_length=1, max_length=255)
    sender_email: EmailStr | None = None


class EmailTemplateRead(OrgScopedRecord):
    """Email template response schema."""
    name: str
    subject: str
    html_content: str
    text_content: str | None = None
    sender_name: str
    sender_email: str
    created_by_id: int | None = None
