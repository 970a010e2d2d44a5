"""Tenant ownership checks shared by the services."""

from phishnet.core.errors import AccessDeniedError, NotFoundError


def require_owned(record, organization_id: int, entity: str):
    """
    Return ``record`` if it belongs to the organization.

    Raises:
        NotFoundError: record is None
        AccessDeniedError: record belongs to another organization
    """
    if record is None:
        raise NotFoundError(f"{entity} not found")
    if record.organization_id != organization_id:
        raise AccessDeniedError()
    return record
