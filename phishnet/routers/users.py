"""Users router - platform users of the caller's organization."""

from fastapi import APIRouter, Depends

from phishnet.core.deps import get_org_scope, get_store
from phishnet.schemas.auth import UserRead
from phishnet.services import user_service
from phishnet.storage import Storage

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=list[UserRead])
def list_users(
    org_id: int = Depends(get_org_scope),
    store: Storage = Depends(get_store),
):
    """List users in the organization. Passwords are never returned."""
    return user_service.list_users(store, org_id)
