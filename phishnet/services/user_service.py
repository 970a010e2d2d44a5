"""User service - platform users of an organization."""

from phishnet.schemas.auth import UserRecord
from phishnet.storage import Storage


def list_users(store: Storage, org_id: int) -> list[UserRecord]:
    """Users in the organization, in creation order."""
    return store.list_users(org_id)
