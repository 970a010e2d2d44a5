"""Landing page schemas."""

from pydantic import Field

from phishnet.db.enums import LandingPageType
from phishnet.schemas.common import CamelModel, OrgScopedRecord


class LandingPageCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    html_content: str = Field(..., min_length=1)
    redirect_url: str | None = Field(None, max_length=2048)
    page_type: LandingPageType
    thumbnail: str | None = None


class LandingPageUpdate(CamelModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    html_content: str | None = Field(None, min_length=1)
    redirect_url: str | None = Field(None, max_length=2048)
    page_type: LandingPageType | None = None
    thumbnail: str | None = None


class LandingPageRead(OrgScopedRecord):
    name: str
    description: str | None = None
    html_content: str
    redirect_url: str | None = None
    page_type: LandingPageType
    thumbnail: str | None = None
    created_by_id: int | None = None
