"""Landing pages router."""

from fastapi import APIRouter, Depends, Response, status

from phishnet.core.deps import get_current_session, get_store, require_csrf_header
from phishnet.schemas.auth import UserSession
from phishnet.schemas.landing_page import LandingPageCreate, LandingPageRead, LandingPageUpdate
from phishnet.services import landing_page_service
from phishnet.storage import Storage

router = APIRouter(prefix="/landing-pages", tags=["Landing Pages"])


@router.get("", response_model=list[LandingPageRead])
def list_pages(
    session: UserSession = Depends(get_current_session),
    store: Storage = Depends(get_store),
):
    return landing_page_service.list_pages(store, session.org_id)


@router.post(
    "",
    response_model=LandingPageRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_csrf_header)],
)
def create_page(
    data: LandingPageCreate,
    session: UserSession = Depends(get_current_session),
    store: Storage = Depends(get_store),
):
    return landing_page_service.create_page(store, session.org_id, session.user_id, data)


@router.get("/{page_id}", response_model=LandingPageRead)
def get_page(
    page_id: int,
    session: UserSession = Depends(get_current_session),
    store: Storage = Depends(get_store),
):
    return landing_page_service.get_page(store, session.org_id, page_id)


@router.put(
    "/{page_id}",
    response_model=LandingPageRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_page(
    page_id: int,
    data: LandingPageUpdate,
    session: UserSession = Depends(get_current_session),
    store: Storage = Depends(get_store),
):
    return landing_page_service.update_page(store, session.org_id, page_id, data)


@router.delete(
    "/{page_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_csrf_header)],
)
def delete_page(
    page_id: int,
    session: UserSession = Depends(get_current_session),
    store: Storage = Depends(get_store),
):
    landing_page_service.delete_page(store, session.org_id, page_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
