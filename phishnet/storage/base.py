"""Entity store contract shared by the in-memory and database backends."""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone

from phishnet.core.errors import AccessDeniedError, NotFoundError, ResourceInUseError
from phishnet.db.enums import CampaignReference
from phishnet.schemas.auth import OrganizationCreate, OrganizationRead, UserCreate, UserRecord
from phishnet.schemas.campaign import (
    CampaignCreate,
    CampaignRead,
    CampaignResultCreate,
    CampaignResultRead,
)
from phishnet.schemas.email_template import EmailTemplateCreate, EmailTemplateRead
from phishnet.schemas.group import GroupCreate, GroupRead, GroupWithTargetCount, TargetCreate, TargetRead
from phishnet.schemas.landing_page import LandingPageCreate, LandingPageRead
from phishnet.schemas.smtp_profile import SmtpProfileCreate, SmtpProfileRecord


# Campaign column holding each kind of delete-restricted reference
REFERENCE_FIELDS = {
    CampaignReference.TARGET_GROUP: "target_group_id",
    CampaignReference.SMTP_PROFILE: "smtp_profile_id",
    CampaignReference.EMAIL_TEMPLATE: "email_template_id",
    CampaignReference.LANDING_PAGE: "landing_page_id",
}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def next_timestamp(previous: datetime | None = None) -> datetime:
    """
    Current UTC time, strictly later than ``previous``.

    Two writes can land in the same clock tick; updated_at must still advance.
    """
    now = utcnow()
    if previous is not None and now <= previous:
        now = previous + timedelta(microseconds=1)
    return now


class Storage(ABC):
    """
    Organization-scoped CRUD for every entity.

    Conventions shared by all implementations:
    - ``get_*`` returns None when the row does not exist.
    - ``update_*`` merges the given fields, re-stamps ``updated_at`` and
      returns None when the row does not exist.
    - ``delete_*`` returns False when the row does not exist, cascades to
      owned rows, and raises ResourceInUseError for rows a campaign points at.
    - ``list_*`` is ordered by id (insertion order).
    """

    # -------------------------------------------------------------------------
    # Organizations
    # -------------------------------------------------------------------------

    @abstractmethod
    def get_organization(self, organization_id: int) -> OrganizationRead | None: ...

    @abstractmethod
    def get_organization_by_name(self, name: str) -> OrganizationRead | None: ...

    @abstractmethod
    def create_organization(self, data: OrganizationCreate) -> OrganizationRead: ...

    @abstractmethod
    def delete_organization(self, organization_id: int) -> bool:
        """Delete the organization and everything scoped to it."""

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    @abstractmethod
    def get_user(self, user_id: int) -> UserRecord | None: ...

    @abstractmethod
    def get_user_by_email(self, email: str) -> UserRecord | None:
        """Case-insensitive lookup."""

    @abstractmethod
    def create_user(self, organization_id: int, data: UserCreate) -> UserRecord: ...

    @abstractmethod
    def update_user(self, user_id: int, changes: dict) -> UserRecord | None: ...

    @abstractmethod
    def delete_user(self, user_id: int) -> bool:
        """Delete the user; content they created keeps existing with no creator."""

    @abstractmethod
    def list_users(self, organization_id: int) -> list[UserRecord]: ...

    @abstractmethod
    def count_users(self, organization_id: int) -> int: ...

    # -------------------------------------------------------------------------
    # Groups & Targets
    # -------------------------------------------------------------------------

    @abstractmethod
    def get_group(self, group_id: int) -> GroupRead | None: ...

    @abstractmethod
    def create_group(self, organization_id: int, data: GroupCreate) -> GroupRead: ...

    @abstractmethod
    def update_group(self, group_id: int, changes: dict) -> GroupRead | None: ...

    @abstractmethod
    def delete_group(self, group_id: int) -> bool: ...

    @abstractmethod
    def list_groups(self, organization_id: int) -> list[GroupWithTargetCount]: ...

    @abstractmethod
    def get_target(self, target_id: int) -> TargetRead | None: ...

    @abstractmethod
    def create_target(self, organization_id: int, group_id: int, data: TargetCreate) -> TargetRead: ...

    @abstractmethod
    def update_target(self, target_id: int, changes: dict) -> TargetRead | None: ...

    @abstractmethod
    def delete_target(self, target_id: int) -> bool: ...

    @abstractmethod
    def list_targets(self, group_id: int) -> list[TargetRead]: ...

    # -------------------------------------------------------------------------
    # SMTP Profiles
    # -------------------------------------------------------------------------

    @abstractmethod
    def get_smtp_profile(self, profile_id: int) -> SmtpProfileRecord | None: ...

    @abstractmethod
    def create_smtp_profile(self, organization_id: int, data: SmtpProfileCreate) -> SmtpProfileRecord: ...

    @abstractmethod
    def update_smtp_profile(self, profile_id: int, changes: dict) -> SmtpProfileRecord | None: ...

    @abstractmethod
    def delete_smtp_profile(self, profile_id: int) -> bool: ...

    @abstractmethod
    def list_smtp_profiles(self, organization_id: int) -> list[SmtpProfileRecord]: ...

    # -------------------------------------------------------------------------
    # Email Templates
    # -------------------------------------------------------------------------

    @abstractmethod
    def get_email_template(self, template_id: int) -> EmailTemplateRead | None: ...

    @abstractmethod
    def create_email_template(
        self, organization_id: int, user_id: int | None, data: EmailTemplateCreate
    ) -> EmailTemplateRead: ...

    @abstractmethod
    def update_email_template(self, template_id: int, changes: dict) -> EmailTemplateRead | None: ...

    @abstractmethod
    def delete_email_template(self, template_id: int) -> bool: ...

    @abstractmethod
    def list_email_templates(self, organization_id: int) -> list[EmailTemplateRead]: ...

    # -------------------------------------------------------------------------
    # Landing Pages
    # -------------------------------------------------------------------------

    @abstractmethod
    def get_landing_page(self, page_id: int) -> LandingPageRead | None: ...

    @abstractmethod
    def create_landing_page(
        self, organization_id: int, user_id: int | None, data: LandingPageCreate
    ) -> LandingPageRead: ...

    @abstractmethod
    def update_landing_page(self, page_id: int, changes: dict) -> LandingPageRead | None: ...

    @abstractmethod
    def delete_landing_page(self, page_id: int) -> bool: ...

    @abstractmethod
    def list_landing_pages(self, organization_id: int) -> list[LandingPageRead]: ...

    # -------------------------------------------------------------------------
    # Campaigns & Results
    # -------------------------------------------------------------------------

    @abstractmethod
    def get_campaign(self, campaign_id: int) -> CampaignRead | None: ...

    @abstractmethod
    def create_campaign(
        self, organization_id: int, user_id: int | None, data: CampaignCreate
    ) -> CampaignRead:
        """Persist a campaign in Draft status. References are not checked here."""

    @abstractmethod
    def update_campaign(self, campaign_id: int, changes: dict) -> CampaignRead | None: ...

    @abstractmethod
    def delete_campaign(self, campaign_id: int) -> bool: ...

    @abstractmethod
    def list_campaigns(self, organization_id: int) -> list[CampaignRead]: ...

    @abstractmethod
    def count_active_campaigns(self, organization_id: int) -> int: ...

    @abstractmethod
    def campaigns_referencing(self, kind: CampaignReference, ref_id: int) -> list[CampaignRead]: ...

    @abstractmethod
    def get_campaign_result(self, result_id: int) -> CampaignResultRead | None: ...

    @abstractmethod
    def create_campaign_result(
        self, organization_id: int, data: CampaignResultCreate
    ) -> CampaignResultRead: ...

    @abstractmethod
    def update_campaign_result(self, result_id: int, changes: dict) -> CampaignResultRead | None: ...

    @abstractmethod
    def list_campaign_results(self, campaign_id: int) -> list[CampaignResultRead]: ...

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Release backend resources. Safe to call more than once."""

    # -------------------------------------------------------------------------
    # Shared helpers
    # -------------------------------------------------------------------------

    def _ensure_unreferenced(self, kind: CampaignReference, ref_id: int) -> None:
        """Raise ResourceInUseError if any campaign points at the resource."""
        campaigns = self.campaigns_referencing(kind, ref_id)
        if campaigns:
            names = ", ".join(c.name for c in campaigns)
            raise ResourceInUseError(
                f"Cannot delete {kind.value}: used by campaign(s) {names}"
            )

    def _check_result_refs(self, organization_id: int, data: CampaignResultCreate) -> None:
        """Campaign and target must exist and belong to the result's organization."""
        campaign = self.get_campaign(data.campaign_id)
        if campaign is None:
            raise NotFoundError("Campaign not found")
        target = self.get_target(data.target_id)
        if target is None:
            raise NotFoundError("Target not found")
        if campaign.organization_id != organization_id or target.organization_id != organization_id:
            raise AccessDeniedError("Campaign or target belongs to another organization")
