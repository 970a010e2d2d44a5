"""Enum definitions for application constants."""

from enum import Enum


class CampaignStatus(str, Enum):
    """Lifecycle status of a phishing campaign."""

    DRAFT = "Draft"
    SCHEDULED = "Scheduled"
    ACTIVE = "Active"
    COMPLETED = "Completed"

    @classmethod
    def has_value(cls, value: str) -> bool:
        """Check if value is a valid status."""
        return value in cls._value2member_map_


class LandingPageType(str, Enum):
    """Kind of page a target lands on after clicking."""

    LOGIN = "login"
    FORM = "form"
    EDUCATIONAL = "educational"


class CampaignReference(str, Enum):
    """Resources a campaign points at (delete-restricted)."""

    TARGET_GROUP = "target group"
    SMTP_PROFILE = "SMTP profile"
    EMAIL_TEMPLATE = "email template"
    LANDING_PAGE = "landing page"


DEFAULT_CAMPAIGN_STATUS = CampaignStatus.DRAFT
