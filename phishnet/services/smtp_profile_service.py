"""SMTP profile service - outbound mail server settings per organization."""

import logging

from phishnet.core.errors import NotFoundError
from phishnet.schemas.common import changed_fields
from phishnet.schemas.smtp_profile import SmtpProfileCreate, SmtpProfileRecord, SmtpProfileUpdate
from phishnet.services.access import require_owned
from phishnet.storage import Storage

logger = logging.getLogger(__name__)


def list_profiles(store: Storage, org_id: int) -> list[SmtpProfileRecord]:
    return store.list_smtp_profiles(org_id)


def get_profile(store: Storage, org_id: int, profile_id: int) -> SmtpProfileRecord:
    return require_owned(store.get_smtp_profile(profile_id), org_id, "SMTP profile")


def create_profile(store: Storage, org_id: int, data: SmtpProfileCreate) -> SmtpProfileRecord:
    profile = store.create_smtp_profile(org_id, data)
    logger.info("Created SMTP profile %s in org %s", profile.id, org_id)
    return profile


def update_profile(
    store: Storage, org_id: int, profile_id: int, data: SmtpProfileUpdate
) -> SmtpProfileRecord:
    """Update a profile. An omitted or null password keeps the stored one."""
    get_profile(store, org_id, profile_id)
    return store.update_smtp_profile(profile_id, changed_fields(data))


def delete_profile(store: Storage, org_id: int, profile_id: int) -> None:
    get_profile(store, org_id, profile_id)
    if not store.delete_smtp_profile(profile_id):
        raise NotFoundError("SMTP profile not found")
    logger.info("Deleted SMTP profile %s in org %s", profile_id, org_id)
