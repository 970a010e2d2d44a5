"""Email template service - phishing email content per organization."""

import logging

from phishnet.core.errors import NotFoundError
from phishnet.schemas.common import changed_fields
from phishnet.schemas.email_template import (
    EmailTemplateCreate,
    EmailTemplateRead,
    EmailTemplateUpdate,
)
from phishnet.services.access import require_owned
from phishnet.storage import Storage

logger = logging.getLogger(__name__)


def list_templates(store: Storage, org_id: int) -> list[EmailTemplateRead]:
    return store.list_email_templates(org_id)


def get_template(store: Storage, org_id: int, template_id: int) -> EmailTemplateRead:
    return require_owned(store.get_email_template(template_id), org_id, "Email template")


def create_template(
    store: Storage, org_id: int, user_id: int, data: EmailTemplateCreate
) -> EmailTemplateRead:
    template = store.create_email_template(org_id, user_id, data)
    logger.info("Created email template %s in org %s", template.id, org_id)
    return template


def update_template(
    store: Storage, org_id: int, template_id: int, data: EmailTemplateUpdate
) -> EmailTemplateRead:
    get_template(store, org_id, template_id)
    return store.update_email_template(
        template_id, changed_fields(data, clearable=("text_content",))
    )


def delete_template(store: Storage, org_id: int, template_id: int) -> None:
    """Delete a template. Fails if a campaign still uses it."""
    get_template(store, org_id, template_id)
    if not store.delete_email_template(template_id):
        raise NotFoundError("Email template not found")
    logger.info("Deleted email template %s in org %s", template_id, org_id)
