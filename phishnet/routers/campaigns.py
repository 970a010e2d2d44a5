"""Campaigns router - campaign composition, listing and results."""

from fastapi import APIRouter, Depends, Response, status

from phishnet.core.deps import get_current_session, get_store, require_csrf_header
from phishnet.schemas.auth import UserSession
from phishnet.schemas.campaign import (
    CampaignCreate,
    CampaignListItem,
    CampaignRead,
    CampaignResultRead,
    CampaignUpdate,
    RecentCampaign,
)
from phishnet.services import campaign_service
from phishnet.storage import Storage

router = APIRouter(prefix="/campaigns", tags=["Campaigns"])


@router.get("", response_model=list[CampaignListItem])
def list_campaigns(
    session: UserSession = Depends(get_current_session),
    store: Storage = Depends(get_store),
):
    """List campaigns with target group name and result stats."""
    return campaign_service.list_campaigns(store, session.org_id)


# Declared before /{campaign_id} so "recent" is not parsed as an id
@router.get("/recent", response_model=list[RecentCampaign])
def recent_campaigns(
    session: UserSession = Depends(get_current_session),
    store: Storage = Depends(get_store),
):
    """Five most recently created campaigns."""
    return campaign_service.recent_campaigns(store, session.org_id)


@router.post(
    "",
    response_model=CampaignRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_csrf_header)],
)
def create_campaign(
    data: CampaignCreate,
    session: UserSession = Depends(get_current_session),
    store: Storage = Depends(get_store),
):
    """
    Create a Draft campaign.

    The group, SMTP profile, template and landing page must all belong to
    the caller's organization (403 otherwise, nothing is written).
    """
    return campaign_service.create_campaign(store, session.org_id, session.user_id, data)


@router.get("/{campaign_id}", response_model=CampaignRead)
def get_campaign(
    campaign_id: int,
    session: UserSession = Depends(get_current_session),
    store: Storage = Depends(get_store),
):
    return campaign_service.get_campaign(store, session.org_id, campaign_id)


@router.put(
    "/{campaign_id}",
    response_model=CampaignRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_campaign(
    campaign_id: int,
    data: CampaignUpdate,
    session: UserSession = Depends(get_current_session),
    store: Storage = Depends(get_store),
):
    return campaign_service.update_campaign(store, session.org_id, campaign_id, data)


@router.delete(
    "/{campaign_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_csrf_header)],
)
def delete_campaign(
    campaign_id: int,
    session: UserSession = Depends(get_current_session),
    store: Storage = Depends(get_store),
):
    """Delete a campaign and its results."""
    campaign_service.delete_campaign(store, session.org_id, campaign_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{campaign_id}/results", response_model=list[CampaignResultRead])
def list_results(
    campaign_id: int,
    session: UserSession = Depends(get_current_session),
    store: Storage = Depends(get_store),
):
    return campaign_service.list_campaign_results(store, session.org_id, campaign_id)
