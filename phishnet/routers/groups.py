"""Groups router - recipient groups, their targets and CSV import."""

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile, status

from phishnet.core.config import settings
from phishnet.core.deps import get_org_scope, get_store, require_csrf_header
from phishnet.schemas.group import (
    GroupCreate,
    GroupRead,
    GroupUpdate,
    GroupWithTargetCount,
    ImportResult,
    TargetCreate,
    TargetRead,
    TargetUpdate,
)
from phishnet.services import group_service, import_service
from phishnet.storage import Storage

router = APIRouter(prefix="/groups", tags=["Groups"])


# =============================================================================
# Groups
# =============================================================================

@router.get("", response_model=list[GroupWithTargetCount])
def list_groups(
    org_id: int = Depends(get_org_scope),
    store: Storage = Depends(get_store),
):
    """List groups for the organization, each with its target count."""
    return group_service.list_groups(store, org_id)


@router.post(
    "",
    response_model=GroupRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_csrf_header)],
)
def create_group(
    data: GroupCreate,
    org_id: int = Depends(get_org_scope),
    store: Storage = Depends(get_store),
):
    return group_service.create_group(store, org_id, data)


@router.get("/{group_id}", response_model=GroupRead)
def get_group(
    group_id: int,
    org_id: int = Depends(get_org_scope),
    store: Storage = Depends(get_store),
):
    return group_service.get_group(store, org_id, group_id)


@router.put("/{group_id}", response_model=GroupRead, dependencies=[Depends(require_csrf_header)])
def update_group(
    group_id: int,
    data: GroupUpdate,
    org_id: int = Depends(get_org_scope),
    store: Storage = Depends(get_store),
):
    return group_service.update_group(store, org_id, group_id, data)


@router.delete(
    "/{group_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_csrf_header)],
)
def delete_group(
    group_id: int,
    org_id: int = Depends(get_org_scope),
    store: Storage = Depends(get_store),
):
    """Delete a group and its targets. 409 if a campaign uses the group."""
    group_service.delete_group(store, org_id, group_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =============================================================================
# Targets
# =============================================================================

@router.get("/{group_id}/targets", response_model=list[TargetRead])
def list_targets(
    group_id: int,
    org_id: int = Depends(get_org_scope),
    store: Storage = Depends(get_store),
):
    return group_service.list_targets(store, org_id, group_id)


@router.post(
    "/{group_id}/targets",
    response_model=TargetRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_csrf_header)],
)
def create_target(
    group_id: int,
    data: TargetCreate,
    org_id: int = Depends(get_org_scope),
    store: Storage = Depends(get_store),
):
    return group_service.create_target(store, org_id, group_id, data)


@router.get("/{group_id}/targets/{target_id}", response_model=TargetRead)
def get_target(
    group_id: int,
    target_id: int,
    org_id: int = Depends(get_org_scope),
    store: Storage = Depends(get_store),
):
    return group_service.get_target(store, org_id, group_id, target_id)


@router.put(
    "/{group_id}/targets/{target_id}",
    response_model=TargetRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_target(
    group_id: int,
    target_id: int,
    data: TargetUpdate,
    org_id: int = Depends(get_org_scope),
    store: Storage = Depends(get_store),
):
    return group_service.update_target(store, org_id, group_id, target_id, data)


@router.delete(
    "/{group_id}/targets/{target_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_csrf_header)],
)
def delete_target(
    group_id: int,
    target_id: int,
    org_id: int = Depends(get_org_scope),
    store: Storage = Depends(get_store),
):
    group_service.delete_target(store, org_id, group_id, target_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =============================================================================
# Import
# =============================================================================

@router.post(
    "/{group_id}/import",
    response_model=ImportResult,
    response_model_exclude_none=True,
    dependencies=[Depends(require_csrf_header)],
)
async def import_targets(
    group_id: int,
    file: UploadFile = File(...),
    org_id: int = Depends(get_org_scope),
    store: Storage = Depends(get_store),
):
    """
    Bulk-create targets from a CSV upload (multipart field ``file``).

    Rows that fail validation are reported and skipped; the rest import.
    A malformed file is rejected as a whole with 400.
    """
    content = await file.read()
    if len(content) > settings.MAX_IMPORT_BYTES:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File exceeds {settings.MAX_IMPORT_BYTES} bytes",
        )
    return import_service.import_targets(store, org_id, group_id, content)
