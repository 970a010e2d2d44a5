"""SMTP profiles router - CRUD for org sending profiles. Passwords are write-only."""

from fastapi import APIRouter, Depends, Response, status

from phishnet.core.deps import get_org_scope, get_store, require_csrf_header
from phishnet.schemas.smtp_profile import SmtpProfileCreate, SmtpProfileRead, SmtpProfileUpdate
from phishnet.services import smtp_profile_service
from phishnet.storage import Storage

router = APIRouter(prefix="/smtp-profiles", tags=["SMTP Profiles"])


@router.get("", response_model=list[SmtpProfileRead])
def list_profiles(
    org_id: int = Depends(get_org_scope),
    store: Storage = Depends(get_store),
):
    return smtp_profile_service.list_profiles(store, org_id)


@router.post(
    "",
    response_model=SmtpProfileRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_csrf_header)],
)
def create_profile(
    data: SmtpProfileCreate,
    org_id: int = Depends(get_org_scope),
    store: Storage = Depends(get_store),
):
    return smtp_profile_service.create_profile(store, org_id, data)


@router.get("/{profile_id}", response_model=SmtpProfileRead)
def get_profile(
    profile_id: int,
    org_id: int = Depends(get_org_scope),
    store: Storage = Depends(get_store),
):
    return smtp_profile_service.get_profile(store, org_id, profile_id)


@router.put(
    "/{profile_id}",
    response_model=SmtpProfileRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_profile(
    profile_id: int,
    data: SmtpProfileUpdate,
    org_id: int = Depends(get_org_scope),
    store: Storage = Depends(get_store),
):
    return smtp_profile_service.update_profile(store, org_id, profile_id, data)


@router.delete(
    "/{profile_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_csrf_header)],
)
def delete_profile(
    profile_id: int,
    org_id: int = Depends(get_org_scope),
    store: Storage = Depends(get_store),
):
    smtp_profile_service.delete_profile(store, org_id, profile_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
