"""Campaign service - composition, tenant checks and result stats."""

import logging

from phishnet.core.errors import AccessDeniedError, NotFoundError
from phishnet.db.enums import CampaignReference
from phishnet.schemas.campaign import (
    CampaignCreate,
    CampaignListItem,
    CampaignRead,
    CampaignResultRead,
    CampaignUpdate,
    RecentCampaign,
)
from phishnet.schemas.common import changed_fields
from phishnet.services.access import require_owned
from phishnet.storage import Storage

logger = logging.getLogger(__name__)

RECENT_CAMPAIGNS_LIMIT = 5

# Checked in this order; the error names the first failure
REFERENCE_CHECKS = (
    (CampaignReference.TARGET_GROUP, "target_group_id", "get_group"),
    (CampaignReference.SMTP_PROFILE, "smtp_profile_id", "get_smtp_profile"),
    (CampaignReference.EMAIL_TEMPLATE, "email_template_id", "get_email_template"),
    (CampaignReference.LANDING_PAGE, "landing_page_id", "get_landing_page"),
)


# =============================================================================
# Reference Checks
# =============================================================================

def find_invalid_references(store: Storage, org_id: int, refs: dict) -> list[CampaignReference]:
    """
    Return every reference in ``refs`` that is missing or owned by another org.

    Only the reference fields present in ``refs`` are checked.
    """
    invalid = []
    for kind, field, getter in REFERENCE_CHECKS:
        if field not in refs:
            continue
        record = getattr(store, getter)(refs[field])
        if record is None or record.organization_id != org_id:
            invalid.append(kind)
    return invalid


def check_references(store: Storage, org_id: int, refs: dict) -> None:
    """
    Raise AccessDeniedError if any referenced resource is not usable by the org.

    All references are checked before raising, so the error lists every
    invalid one.
    """
    invalid = find_invalid_references(store, org_id, refs)
    if invalid:
        logger.warning(
            "Rejected campaign references for org %s: %s",
            org_id, ", ".join(kind.value for kind in invalid),
        )
        raise AccessDeniedError(
            f"Access denied: Invalid {invalid[0].value}",
            invalid=[kind.value for kind in invalid],
        )


# =============================================================================
# Campaign CRUD
# =============================================================================

def get_campaign(store: Storage, org_id: int, campaign_id: int) -> CampaignRead:
    return require_owned(store.get_campaign(campaign_id), org_id, "Campaign")


def create_campaign(
    store: Storage,
    org_id: int,
    user_id: int,
    data: CampaignCreate,
) -> CampaignRead:
    """Create a Draft campaign after checking all four references."""
    check_references(store, org_id, data.model_dump())
    campaign = store.create_campaign(org_id, user_id, data)
    logger.info("Created campaign %s in org %s", campaign.id, org_id)
    return campaign


def update_campaign(
    store: Storage,
    org_id: int,
    campaign_id: int,
    data: CampaignUpdate,
) -> CampaignRead:
    """Update a campaign; changed references are re-checked like on create."""
    get_campaign(store, org_id, campaign_id)
    changes = changed_fields(data, clearable=("scheduled_at", "end_date"))
    check_references(store, org_id, changes)
    return store.update_campaign(campaign_id, changes)


def delete_campaign(store: Storage, org_id: int, campaign_id: int) -> None:
    """Delete a campaign and its results."""
    get_campaign(store, org_id, campaign_id)
    if not store.delete_campaign(campaign_id):
        raise NotFoundError("Campaign not found")
    logger.info("Deleted campaign %s in org %s", campaign_id, org_id)


def list_campaign_results(store: Storage, org_id: int, campaign_id: int) -> list[CampaignResultRead]:
    get_campaign(store, org_id, campaign_id)
    return store.list_campaign_results(campaign_id)


# =============================================================================
# Listing & Stats
# =============================================================================

def _percent(part: int, whole: int) -> int:
    return round(part * 100 / whole) if whole else 0


def campaign_stats(store: Storage, campaign_id: int) -> dict:
    """Sent count plus open/click rates (percent of sent) from stored results."""
    results = store.list_campaign_results(campaign_id)
    sent = sum(1 for r in results if r.sent)
    opened = sum(1 for r in results if r.opened)
    clicked = sum(1 for r in results if r.clicked)
    return {
        "sent_count": sent,
        "open_rate": _percent(opened, sent),
        "click_rate": _percent(clicked, sent),
    }


def list_campaigns(store: Storage, org_id: int) -> list[CampaignListItem]:
    """List campaigns with group name, target count and result stats."""
    items = []
    for campaign in store.list_campaigns(org_id):
        group = store.get_group(campaign.target_group_id)
        if group is not None and group.organization_id == org_id:
            group_name = group.name
            total_targets = len(store.list_targets(group.id))
        else:
            group_name = "Unknown"
            total_targets = 0
        items.append(CampaignListItem(
            **campaign.model_dump(),
            target_group=group_name,
            total_targets=total_targets,
            **campaign_stats(store, campaign.id),
        ))
    return items


def recent_campaigns(
    store: Storage,
    org_id: int,
    limit: int = RECENT_CAMPAIGNS_LIMIT,
) -> list[RecentCampaign]:
    """Most recently created campaigns, newest first."""
    campaigns = sorted(
        store.list_campaigns(org_id),
        key=lambda c: (c.created_at, c.id),
        reverse=True,
    )[:limit]
    recent = []
    for campaign in campaigns:
        stats = campaign_stats(store, campaign.id)
        recent.append(RecentCampaign(
            id=campaign.id,
            name=campaign.name,
            status=campaign.status,
            open_rate=stats["open_rate"],
            click_rate=stats["click_rate"],
            created_at=campaign.created_at,
        ))
    return recent
