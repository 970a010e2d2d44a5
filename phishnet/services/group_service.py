"""Group service - recipient groups and their targets."""

import logging

from phishnet.core.errors import NotFoundError
from phishnet.schemas.common import changed_fields
from phishnet.schemas.group import (
    GroupCreate,
    GroupRead,
    GroupUpdate,
    GroupWithTargetCount,
    TargetCreate,
    TargetRead,
    TargetUpdate,
)
from phishnet.services.access import require_owned
from phishnet.storage import Storage

logger = logging.getLogger(__name__)


# =============================================================================
# Groups
# =============================================================================

def list_groups(store: Storage, org_id: int) -> list[GroupWithTargetCount]:
    return store.list_groups(org_id)


def get_group(store: Storage, org_id: int, group_id: int) -> GroupRead:
    return require_owned(store.get_group(group_id), org_id, "Group")


def create_group(store: Storage, org_id: int, data: GroupCreate) -> GroupRead:
    group = store.create_group(org_id, data)
    logger.info("Created group %s in org %s", group.id, org_id)
    return group


def update_group(store: Storage, org_id: int, group_id: int, data: GroupUpdate) -> GroupRead:
    get_group(store, org_id, group_id)
    return store.update_group(group_id, changed_fields(data, clearable=("description",)))


def delete_group(store: Storage, org_id: int, group_id: int) -> None:
    """Delete a group and its targets. Fails if a campaign still uses it."""
    get_group(store, org_id, group_id)
    if not store.delete_group(group_id):
        raise NotFoundError("Group not found")
    logger.info("Deleted group %s in org %s", group_id, org_id)


# =============================================================================
# Targets
# =============================================================================

def list_targets(store: Storage, org_id: int, group_id: int) -> list[TargetRead]:
    get_group(store, org_id, group_id)
    return store.list_targets(group_id)


def create_target(store: Storage, org_id: int, group_id: int, data: TargetCreate) -> TargetRead:
    get_group(store, org_id, group_id)
    return store.create_target(org_id, group_id, data)


def get_target(store: Storage, org_id: int, group_id: int, target_id: int) -> TargetRead:
    get_group(store, org_id, group_id)
    target = require_owned(store.get_target(target_id), org_id, "Target")
    if target.group_id != group_id:
        raise NotFoundError("Target not found")
    return target


def update_target(
    store: Storage, org_id: int, group_id: int, target_id: int, data: TargetUpdate
) -> TargetRead:
    get_target(store, org_id, group_id, target_id)
    return store.update_target(target_id, changed_fields(data, clearable=("position",)))


def delete_target(store: Storage, org_id: int, group_id: int, target_id: int) -> None:
    get_target(store, org_id, group_id, target_id)
    store.delete_target(target_id)
