"""Landing page service."""

import logging

from phishnet.core.errors import NotFoundError
from phishnet.schemas.common import changed_fields
from phishnet.schemas.landing_page import LandingPageCreate, LandingPageRead, LandingPageUpdate
from phishnet.services.access import require_owned
from phishnet.storage import Storage

logger = logging.getLogger(__name__)

CLEARABLE_FIELDS = ("description", "redirect_url", "thumbnail")


def list_pages(store: Storage, org_id: int) -> list[LandingPageRead]:
    return store.list_landing_pages(org_id)


def get_page(store: Storage, org_id: int, page_id: int) -> LandingPageRead:
    return require_owned(store.get_landing_page(page_id), org_id, "Landing page")


def create_page(
    store: Storage, org_id: int, user_id: int, data: LandingPageCreate
) -> LandingPageRead:
    page = store.create_landing_page(org_id, user_id, data)
    logger.info("Created landing page %s in org %s", page.id, org_id)
    return page


def update_page(
    store: Storage, org_id: int, page_id: int, data: LandingPageUpdate
) -> LandingPageRead:
    get_page(store, org_id, page_id)
    return store.update_landing_page(page_id, changed_fields(data, clearable=CLEARABLE_FIELDS))


def delete_page(store: Storage, org_id: int, page_id: int) -> None:
    get_page(store, org_id, page_id)
    if not store.delete_landing_page(page_id):
        raise NotFoundError("Landing page not found")
    logger.info("Deleted landing page %s in org %s", page_id, org_id)
