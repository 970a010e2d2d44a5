"""Email templates router - CRUD for org email templates."""

from fastapi import APIRouter, Depends, Response, status

from phishnet.core.deps import get_current_session, get_store, require_csrf_header
from phishnet.schemas.auth import UserSession
from phishnet.schemas.email_template import (
    EmailTemplateCreate,
    EmailTemplateRead,
    EmailTemplateUpdate,
)
from phishnet.services import email_template_service
from phishnet.storage import Storage

router = APIRouter(prefix="/email-templates", tags=["Email Templates"])


@router.get("", response_model=list[EmailTemplateRead])
def list_templates(
    session: UserSession = Depends(get_current_session),
    store: Storage = Depends(get_store),
):
    """List email templates for the organization."""
    return email_template_service.list_templates(store, session.org_id)


@router.post(
    "",
    response_model=EmailTemplateRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_csrf_header)],
)
def create_template(
    data: EmailTemplateCreate,
    session: UserSession = Depends(get_current_session),
    store: Storage = Depends(get_store),
):
    """Create a new email template owned by the current user."""
    return email_template_service.create_template(store, session.org_id, session.user_id, data)


@router.get("/{template_id}", response_model=EmailTemplateRead)
def get_template(
    template_id: int,
    session: UserSession = Depends(get_current_session),
    store: Storage = Depends(get_store),
):
    """Get an email template by ID."""
    return email_template_service.get_template(store, session.org_id, template_id)


@router.put(
    "/{template_id}",
    response_model=EmailTemplateRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_template(
    template_id: int,
    data: EmailTemplateUpdate,
    session: UserSession = Depends(get_current_session),
    store: Storage = Depends(get_store),
):
    """Update an email template."""
    return email_template_service.update_template(store, session.org_id, template_id, data)


@router.delete(
    "/{template_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_csrf_header)],
)
def delete_template(
    template_id: int,
    session: UserSession = Depends(get_current_session),
    store: Storage = Depends(get_store),
):
    """Delete an email template. 409 if a campaign uses it."""
    email_template_service.delete_template(store, session.org_id, template_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
