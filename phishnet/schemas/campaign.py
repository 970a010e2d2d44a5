"""Campaign schemas for request/response validation."""

from datetime import datetime
from typing import Any

from pydantic import Field, field_validator

from phishnet.db.enums import CampaignStatus
from phishnet.schemas.common import CamelModel, OrgScopedRecord
from phishnet.utils.datetime_parsing import parse_optional_datetime


# =============================================================================
# Campaign CRUD
# =============================================================================

class CampaignCreate(CamelModel):
    """Create a new campaign (always starts as Draft)."""
    name: str = Field(..., min_length=1, max_length=255)
    target_group_id: int
    smtp_profile_id: int
    email_template_id: int
    landing_page_id: int
    scheduled_at: datetime | None = None
    end_date: datetime | None = None

    @field_validator("scheduled_at", "end_date", mode="before")
    @classmethod
    def parse_dates(cls, v):
        return parse_optional_datetime(v)


class CampaignUpdate(CamelModel):
    """Partial campaign update. Changed references are re-checked for ownership."""
    name: str | None = Field(None, min_length=1, max_length=255)
    status: CampaignStatus | None = None
    target_group_id: int | None = None
    smtp_profile_id: int | None = None
    email_template_id: int | None = None
    landing_page_id: int | None = None
    scheduled_at: datetime | None = None
    end_date: datetime | None = None

    @field_validator("scheduled_at", "end_date", mode="before")
    @classmethod
    def parse_dates(cls, v):
        return parse_optional_datetime(v)


class CampaignRead(OrgScopedRecord):
    """Campaign response."""
    name: str
    status: CampaignStatus
    target_group_id: int
    smtp_profile_id: int
    email_template_id: int
    landing_page_id: int
    scheduled_at: datetime | None = None
    end_date: datetime | None = None
    created_by_id: int | None = None


class CampaignListItem(CampaignRead):
    """Campaign as listed, with group name and result stats."""
    target_group: str = "Unknown"
    total_targets: int = 0
    sent_count: int = 0
    open_rate: int = 0
    click_rate: int = 0


class RecentCampaign(CamelModel):
    """Dashboard 'recent campaigns' row."""
    id: int
    name: str
    status: CampaignStatus
    open_rate: int = 0
    click_rate: int = 0
    created_at: datetime


# =============================================================================
# Campaign Results
# =============================================================================

class CampaignResultCreate(CamelModel):
    campaign_id: int
    target_id: int
    sent: bool = False
    sent_at: datetime | None = None
    opened: bool = False
    opened_at: datetime | None = None
    clicked: bool = False
    clicked_at: datetime | None = None
    submitted: bool = False
    submitted_at: datetime | None = None
    submitted_data: dict[str, Any] | None = None


class CampaignResultUpdate(CamelModel):
    sent: bool | None = None
    sent_at: datetime | None = None
    opened: bool | None = None
    opened_at: datetime | None = None
    clicked: bool | None = None
    clicked_at: datetime | None = None
    submitted: bool | None = None
    submitted_at: datetime | None = None
    submitted_data: dict[str, Any] | None = None


class CampaignResultRead(OrgScopedRecord):
    campaign_id: int
    target_id: int
    sent: bool
    sent_at: datetime | None = None
    opened: bool
    opened_at: datetime | None = None
    clicked: bool
    clicked_at: datetime | None = None
    submitted: bool
    submitted_at: datetime | None = None
    submitted_data: dict[str, Any] | None = None
